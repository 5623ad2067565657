"""
Парсер выражений-предикатов с рекурсивным спуском.

Строит дерево выражения из последовательности токенов.
Поддерживает приоритеты операторов и группировку в скобках.

Грамматика:
expression → or_expr
or_expr    → and_expr ("or" and_expr)*
and_expr   → not_expr ("and" not_expr)*
not_expr   → "not" not_expr | primary
primary    → "(" expression ")" | STRING | path [ "(" arguments ")" ]
path       → IDENTIFIER ("." IDENTIFIER)*
arguments  → ε | expression ("," expression)*
"""

from __future__ import annotations

from typing import List

from ..errors import ExpressionSyntaxError
from .lexer import ExpressionLexer, Token
from .model import (
    AndExpression,
    Expression,
    FunctionCall,
    Identifier,
    NotExpression,
    OrExpression,
    StringLiteral,
)


class ExpressionParser:
    """
    Парсер выражений с рекурсивным спуском.

    Преобразует список токенов в дерево выражения, соблюдая приоритеты
    операторов: not связывает сильнее and, а and сильнее or.
    """

    def __init__(self):
        self.lexer = ExpressionLexer()
        self._tokens: List[Token] = []
        self._position = 0

    def parse(self, expression_str: str) -> Expression:
        """
        Парсит строку выражения в дерево.

        Args:
            expression_str: Содержимое директивы if/elif

        Returns:
            Корневой узел дерева

        Raises:
            ExpressionSyntaxError: При синтаксической ошибке (со смещением в строке)
        """
        self._tokens = self.lexer.tokenize(expression_str)
        self._position = 0

        if self._is_at_end():
            raise ExpressionSyntaxError("Empty expression", self._current_position())

        result = self._parse_expression()

        if not self._is_at_end():
            current = self._current_token()
            raise ExpressionSyntaxError(f"Unexpected token '{current.value}'", current.position)

        return result

    def _parse_expression(self) -> Expression:
        """Парсит полное выражение (начальный символ грамматики)."""
        return self._parse_or_expression()

    def _parse_or_expression(self) -> Expression:
        """Парсит выражение с оператором or (низший приоритет)."""
        left = self._parse_and_expression()

        while True:
            op = self._current_token()
            if not self._match_keyword("or"):
                break
            right = self._parse_and_expression()
            left = OrExpression(left=left, right=right, position=op.position)

        return left

    def _parse_and_expression(self) -> Expression:
        """Парсит выражение с оператором and (средний приоритет)."""
        left = self._parse_not_expression()

        while True:
            op = self._current_token()
            if not self._match_keyword("and"):
                break
            right = self._parse_not_expression()
            left = AndExpression(left=left, right=right, position=op.position)

        return left

    def _parse_not_expression(self) -> Expression:
        """Парсит выражение с оператором not (высокий приоритет)."""
        op = self._current_token()
        if self._match_keyword("not"):
            operand = self._parse_not_expression()  # Правая ассоциативность для not
            return NotExpression(operand=operand, position=op.position)

        return self._parse_primary()

    def _parse_primary(self) -> Expression:
        """Парсит первичное выражение: группу, литерал, путь или вызов."""
        current = self._current_token()

        if self._match_symbol("("):
            expr = self._parse_expression()
            if not self._match_symbol(")"):
                raise ExpressionSyntaxError(
                    "Expected ')' after grouped expression", self._current_position()
                )
            return expr

        if current.type == 'STRING':
            self._advance()
            return StringLiteral(value=current.value, position=current.position)

        if current.type == 'IDENTIFIER':
            return self._parse_path_or_call()

        if current.type == 'EOF':
            raise ExpressionSyntaxError("Unexpected end of expression", current.position)
        raise ExpressionSyntaxError(f"Unexpected token '{current.value}'", current.position)

    def _parse_path_or_call(self) -> Expression:
        """Парсит путь cfg.feature или вызов функции name(...)."""
        first = self._advance()
        path = [first.value]

        while self._match_symbol("."):
            segment = self._consume_identifier("Expected identifier after '.'")
            path.append(segment.value)

        if self._match_symbol("("):
            if len(path) > 1:
                raise ExpressionSyntaxError(
                    f"'{'.'.join(path)}' is not a function name", first.position
                )
            arguments = self._parse_arguments()
            return FunctionCall(name=first.value, arguments=tuple(arguments), position=first.position)

        return Identifier(path=tuple(path), position=first.position)

    def _parse_arguments(self) -> List[Expression]:
        """Парсит аргументы вызова после '(' вплоть до ')'."""
        arguments: List[Expression] = []

        if self._match_symbol(")"):
            return arguments

        while True:
            arguments.append(self._parse_expression())
            if self._match_symbol(","):
                continue
            if self._match_symbol(")"):
                return arguments
            current = self._current_token()
            if current.type == 'EOF':
                raise ExpressionSyntaxError("Expected ')' to close argument list", current.position)
            raise ExpressionSyntaxError(
                f"Expected ',' or ')' in argument list, got '{current.value}'", current.position
            )

    # Вспомогательные методы для работы с токенами

    def _current_token(self) -> Token:
        """Возвращает текущий токен без продвижения позиции."""
        return self._tokens[min(self._position, len(self._tokens) - 1)]

    def _current_position(self) -> int:
        return self._current_token().position

    def _is_at_end(self) -> bool:
        return self._current_token().type == 'EOF'

    def _advance(self) -> Token:
        """Продвигает позицию и возвращает предыдущий токен."""
        token = self._current_token()
        if not self._is_at_end():
            self._position += 1
        return token

    def _match_keyword(self, keyword: str) -> bool:
        current = self._current_token()
        if current.type == 'KEYWORD' and current.value == keyword:
            self._advance()
            return True
        return False

    def _match_symbol(self, symbol: str) -> bool:
        current = self._current_token()
        if current.type == 'SYMBOL' and current.value == symbol:
            self._advance()
            return True
        return False

    def _consume_identifier(self, error_message: str) -> Token:
        current = self._current_token()
        if current.type == 'IDENTIFIER':
            return self._advance()
        raise ExpressionSyntaxError(error_message, current.position)


def parse_expression(expression_str: str) -> Expression:
    """Удобная функция для разбора одного выражения."""
    return ExpressionParser().parse(expression_str)


__all__ = ["ExpressionParser", "parse_expression"]
