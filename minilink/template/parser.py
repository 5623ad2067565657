"""
Парсер структуры документа.

Преобразует поток токенов лексера в дерево документа, проверяя
парность if/endif и корректность вложенности elif/else.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..conditions.model import Expression
from ..conditions.parser import ExpressionParser
from ..errors import (
    DuplicateElse,
    ElseIfAfterElse,
    ExpressionSyntaxError,
    UnmatchedDirective,
    UnterminatedConditional,
)
from ..location import SourceLocation
from ..types import RenderOptions
from .lexer import TemplateLexer
from .nodes import Branch, ConditionalNode, Document, TemplateNode, TextNode
from .tokens import DirectiveKind, DirectiveToken, TextToken

logger = logging.getLogger(__name__)


@dataclass
class _Frame:
    """Незавершённый условный блок на стеке парсера."""
    location: SourceLocation
    condition: Optional[Expression]  # условие текущей ветки; None внутри else
    condition_location: SourceLocation
    body: List[TemplateNode] = field(default_factory=list)
    branches: List[Branch] = field(default_factory=list)
    in_else: bool = False

    def close_branch(self) -> None:
        """Закрывает активную if/elif ветку и переносит её в branches."""
        if self.condition is not None:
            self.branches.append(Branch(
                condition=self.condition,
                body=tuple(self.body),
                location=self.condition_location,
            ))
        self.condition = None
        self.body = []

    def finish(self) -> ConditionalNode:
        if self.in_else:
            else_body = tuple(self.body)
        else:
            self.close_branch()
            else_body = None
        return ConditionalNode(
            branches=tuple(self.branches),
            else_body=else_body,
            location=self.location,
        )


def _append_text(target: List[TemplateNode], text: str) -> None:
    """Добавляет литерал, склеивая его с предыдущим литералом."""
    if target and isinstance(target[-1], TextNode):
        target[-1] = TextNode(text=target[-1].text + text)
    else:
        target.append(TextNode(text=text))


class TemplateParser:
    """
    Парсер шаблона на основе стека незавершённых условных блоков.

    Условия директив разбираются в выражения сразу при встрече директивы,
    так что синтаксические ошибки выражений обнаруживаются ещё до рендера.
    """

    def __init__(self, text: str, options: Optional[RenderOptions] = None):
        """
        Args:
            text: Исходный текст шаблона
            options: Настройки управления пробелами (передаются лексеру)
        """
        self.text = text
        self.lexer = TemplateLexer(text, options)
        self.expression_parser = ExpressionParser()

    def parse(self) -> Document:
        """
        Парсит шаблон в документ.

        Raises:
            MalformedDirective: Лексическая ошибка в маркерах
            ExpressionSyntaxError: Ошибка в условии директивы
            UnterminatedConditional: if без endif
            UnmatchedDirective: elif/else/endif вне блока if
            DuplicateElse: повторный else
            ElseIfAfterElse: elif после else
        """
        root: List[TemplateNode] = []
        stack: List[_Frame] = []

        for token in self.lexer:
            target = stack[-1].body if stack else root

            if isinstance(token, TextToken):
                _append_text(target, token.text)
                continue

            kind = token.kind
            location = self._locate(token.position)

            if kind == DirectiveKind.IF:
                stack.append(_Frame(
                    location=location,
                    condition=self._parse_condition(token),
                    condition_location=location,
                ))

            elif kind == DirectiveKind.ELIF:
                frame = self._current_frame(stack, token)
                if frame.in_else:
                    raise ElseIfAfterElse("'elif' after 'else' in the same block", location)
                frame.close_branch()
                frame.condition = self._parse_condition(token)
                frame.condition_location = location

            elif kind == DirectiveKind.ELSE:
                frame = self._current_frame(stack, token)
                if frame.in_else:
                    raise DuplicateElse("Duplicate 'else' in the same block", location)
                frame.close_branch()
                frame.in_else = True

            elif kind == DirectiveKind.ENDIF:
                frame = self._current_frame(stack, token)
                stack.pop()
                node = frame.finish()
                (stack[-1].body if stack else root).append(node)

        if stack:
            raise UnterminatedConditional("'if' without matching 'endif'", stack[-1].location)

        document = tuple(root)
        logger.debug("Parsed template into %d top-level nodes", len(document))
        return document

    def _current_frame(self, stack: List[_Frame], token: DirectiveToken) -> _Frame:
        if not stack:
            raise UnmatchedDirective(
                f"'{token.kind.value}' without matching 'if'", self._locate(token.position)
            )
        return stack[-1]

    def _parse_condition(self, token: DirectiveToken) -> Expression:
        """Разбирает условие директивы, привязывая ошибки к месту в шаблоне."""
        try:
            return self.expression_parser.parse(token.payload)
        except ExpressionSyntaxError as e:
            e.attach_location(self._locate(token.payload_position + e.payload_position))
            raise

    def _locate(self, position: int) -> SourceLocation:
        return self.lexer.index.locate(position)


def parse_template(text: str, options: Optional[RenderOptions] = None) -> Document:
    """
    Удобная функция для разбора шаблона в документ.

    Args:
        text: Исходный текст шаблона
        options: Настройки управления пробелами

    Returns:
        Дерево документа
    """
    return TemplateParser(text, options).parse()


__all__ = ["TemplateParser", "parse_template"]
