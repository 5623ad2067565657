"""
Вычислитель выражений-предикатов.

Проходит по дереву выражения и вычисляет его значение в контексте
конфигурации сборки.
"""

from __future__ import annotations

from typing import Sequence, Union, cast

from ..config.context import AttributeResolver
from ..errors import TypeMismatch, UnknownFunction
from ..types import AttributeValue
from .model import (
    AndExpression,
    Expression,
    ExpressionType,
    FunctionCall,
    FunctionName,
    Identifier,
    NotExpression,
    OrExpression,
    StringLiteral,
)

# Значение аргумента функции: строка, множество строк или булево
ArgumentValue = Union[AttributeValue, bool]


def _kind(value: ArgumentValue) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, frozenset):
        return "set"
    return "string"


class ConditionEvaluator:
    """
    Вычислитель выражений.

    Принимает дерево выражения и контекст конфигурации, возвращает булево
    значение. Вычисление чистое и не имеет побочных эффектов.
    """

    def __init__(self, context: AttributeResolver):
        """
        Args:
            context: Контекст, разрешающий пути вида cfg.feature
        """
        self.context = context

    def evaluate(self, expression: Expression) -> bool:
        """
        Вычисляет значение выражения как условия.

        Raises:
            UnknownFunction: Вызов неизвестной функции
            UnknownAttribute: Путь отсутствует в контексте
            TypeMismatch: Значение не того вида (например, литерал вместо условия)
        """
        expr_type = expression.get_type()

        if expr_type == ExpressionType.CALL:
            return self._evaluate_call(cast(FunctionCall, expression))
        elif expr_type == ExpressionType.NOT:
            return self._evaluate_not(cast(NotExpression, expression))
        elif expr_type == ExpressionType.AND:
            return self._evaluate_and(cast(AndExpression, expression))
        elif expr_type == ExpressionType.OR:
            return self._evaluate_or(cast(OrExpression, expression))
        elif expr_type == ExpressionType.IDENTIFIER:
            # Разрешаем путь, чтобы опечатка дала UnknownAttribute, а не TypeMismatch
            value = self.context.resolve(cast(Identifier, expression).path)
            raise TypeMismatch(
                f"'{expression}' is a {_kind(value)} attribute, not a condition; "
                f"use contains() or eq()"
            )
        elif expr_type == ExpressionType.STRING:
            raise TypeMismatch(f"String literal {expression} cannot be used as a condition")
        else:
            raise TypeMismatch(f"Unsupported expression type: {expr_type}")

    def _evaluate_not(self, expression: NotExpression) -> bool:
        return not self.evaluate(expression.operand)

    def _evaluate_and(self, expression: AndExpression) -> bool:
        """
        Вычисляет логическое И: left and right

        Короткое вычисление: правый операнд не вычисляется при ложном левом.
        """
        if not self.evaluate(expression.left):
            return False
        return self.evaluate(expression.right)

    def _evaluate_or(self, expression: OrExpression) -> bool:
        """
        Вычисляет логическое ИЛИ: left or right

        Короткое вычисление: правый операнд не вычисляется при истинном левом.
        """
        if self.evaluate(expression.left):
            return True
        return self.evaluate(expression.right)

    # ---- Функции ----

    def _evaluate_call(self, call: FunctionCall) -> bool:
        function = FunctionName.lookup(call.name)
        if function is None:
            raise UnknownFunction(call.name)

        args = [self._evaluate_argument(arg) for arg in call.arguments]

        if function == FunctionName.CONTAINS:
            return self._call_contains(call, args)
        elif function == FunctionName.EQ:
            return self._call_eq(call, args)
        raise UnknownFunction(call.name)

    def _evaluate_argument(self, expression: Expression) -> ArgumentValue:
        """Вычисляет аргумент функции в значение (строка, множество или булево)."""
        expr_type = expression.get_type()
        if expr_type == ExpressionType.STRING:
            return cast(StringLiteral, expression).value
        if expr_type == ExpressionType.IDENTIFIER:
            return self.context.resolve(cast(Identifier, expression).path)
        return self.evaluate(expression)

    @staticmethod
    def _check_arity(call: FunctionCall, args: Sequence[ArgumentValue], expected: int) -> None:
        if len(args) != expected:
            raise TypeMismatch(
                f"{call.name}() expects {expected} arguments, got {len(args)}"
            )

    def _call_contains(self, call: FunctionCall, args: Sequence[ArgumentValue]) -> bool:
        """
        contains(<множество>, <строка>)

        Истинно, если строка входит в многозначный атрибут.
        """
        self._check_arity(call, args, 2)
        haystack, needle = args
        if not isinstance(haystack, frozenset):
            raise TypeMismatch(
                f"contains() expects a set attribute as first argument, "
                f"got {_kind(haystack)} '{call.arguments[0]}'"
            )
        if not isinstance(needle, str):
            raise TypeMismatch(
                f"contains() expects a string as second argument, got {_kind(needle)}"
            )
        return needle in haystack

    def _call_eq(self, call: FunctionCall, args: Sequence[ArgumentValue]) -> bool:
        """
        eq(<скаляр>, <строка>)

        Истинно, если строковые значения совпадают.
        """
        self._check_arity(call, args, 2)
        for arg, value in zip(call.arguments, args):
            if not isinstance(value, str):
                raise TypeMismatch(
                    f"eq() expects string arguments, got {_kind(value)} '{arg}'"
                )
        return args[0] == args[1]


def evaluate_expression_string(expression_str: str, context: AttributeResolver) -> bool:
    """
    Удобная функция для вычисления выражения из строки.

    Raises:
        ExpressionSyntaxError: При ошибке разбора
        EvaluationError: При ошибке вычисления
    """
    from .parser import ExpressionParser

    parser = ExpressionParser()
    ast = parser.parse(expression_str)

    evaluator = ConditionEvaluator(context)
    return evaluator.evaluate(ast)


__all__ = ["ConditionEvaluator", "evaluate_expression_string"]
