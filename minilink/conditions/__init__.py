"""
Язык предикатов для директив `{% if %}` / `{% elif %}`.

Лексер, парсер с рекурсивным спуском и вычислитель выражений вида
`contains(cfg.feature, "alloc") and not eq(cfg.target_os, "none")`.
"""

from .evaluator import ConditionEvaluator, evaluate_expression_string
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
from .parser import ExpressionParser, parse_expression

__all__ = [
    "ConditionEvaluator",
    "evaluate_expression_string",
    "ExpressionParser",
    "parse_expression",
    "Expression",
    "ExpressionType",
    "FunctionName",
    "FunctionCall",
    "StringLiteral",
    "Identifier",
    "AndExpression",
    "OrExpression",
    "NotExpression",
]
