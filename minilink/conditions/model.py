"""
Модели данных для выражений-предикатов.

Содержит классы для представления узлов дерева выражения внутри
директив `{% if ... %}` / `{% elif ... %}`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


class ExpressionType(Enum):
    """Типы узлов выражения."""
    CALL = "call"
    STRING = "string"
    IDENTIFIER = "identifier"
    AND = "and"
    OR = "or"
    NOT = "not"


class FunctionName(Enum):
    """
    Фиксированный набор функций языка предикатов.

    Новая функция требует нового элемента перечисления и новой ветки
    в ConditionEvaluator, а не регистрации плагина.
    """
    CONTAINS = "contains"  # contains(cfg.feature, "alloc")
    EQ = "eq"              # eq(cfg.target_arch, "arm")

    @classmethod
    def lookup(cls, name: str):
        for member in cls:
            if member.value == name:
                return member
        return None


@dataclass(frozen=True)
class Expression(ABC):
    """Базовый абстрактный класс для всех узлов выражения."""

    @abstractmethod
    def get_type(self) -> ExpressionType:
        """Возвращает тип узла."""
        pass

    def __str__(self) -> str:
        return self._to_string()

    @abstractmethod
    def _to_string(self) -> str:
        pass


@dataclass(frozen=True)
class StringLiteral(Expression):
    """Строковый литерал в кавычках: "alloc"."""
    value: str
    position: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.STRING

    def _to_string(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'


@dataclass(frozen=True)
class Identifier(Expression):
    """
    Точечный путь в контекст конфигурации: cfg.feature

    Разрешается вычислителем через AttributeResolver.
    """
    path: Tuple[str, ...]
    position: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.IDENTIFIER

    @property
    def dotted(self) -> str:
        return ".".join(self.path)

    def _to_string(self) -> str:
        return self.dotted


@dataclass(frozen=True)
class FunctionCall(Expression):
    """
    Вызов функции: name(arg, arg, ...)

    Имя не проверяется при разборе: неизвестная функция обнаруживается при вычислении.
    """
    name: str
    arguments: Tuple[Expression, ...] = ()
    position: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.CALL

    def _to_string(self) -> str:
        args = ", ".join(str(arg) for arg in self.arguments)
        return f"{self.name}({args})"


@dataclass(frozen=True)
class NotExpression(Expression):
    """Отрицание: not operand"""
    operand: Expression
    position: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.NOT

    def _to_string(self) -> str:
        return f"not {_wrap(self.operand, self)}"


@dataclass(frozen=True)
class AndExpression(Expression):
    """Логическое И: left and right"""
    left: Expression
    right: Expression
    position: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.AND

    def _to_string(self) -> str:
        return f"{_wrap(self.left, self)} and {_wrap(self.right, self)}"


@dataclass(frozen=True)
class OrExpression(Expression):
    """Логическое ИЛИ: left or right"""
    left: Expression
    right: Expression
    position: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.OR

    def _to_string(self) -> str:
        return f"{_wrap(self.left, self)} or {_wrap(self.right, self)}"


# Приоритеты для обратного форматирования со скобками
_PRECEDENCE = {
    ExpressionType.OR: 1,
    ExpressionType.AND: 2,
    ExpressionType.NOT: 3,
}


def _wrap(child: Expression, parent: Expression) -> str:
    child_prec = _PRECEDENCE.get(child.get_type(), 4)
    if child_prec < _PRECEDENCE[parent.get_type()]:
        return f"({child})"
    return str(child)


__all__ = [
    "Expression",
    "ExpressionType",
    "FunctionName",
    "StringLiteral",
    "Identifier",
    "FunctionCall",
    "NotExpression",
    "AndExpression",
    "OrExpression",
]
