"""
Рендерер документа.

Обходит дерево документа в глубину, выбирает выжившие ветки условных
блоков и склеивает литеральный текст в итоговую строку.
"""

from __future__ import annotations

import logging
from typing import List

from ..conditions.evaluator import ConditionEvaluator
from ..config.context import AttributeResolver
from ..errors import EvaluationError
from .nodes import Branch, ConditionalNode, Document, TemplateNode, TextNode

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """
    Рендерер документа в контексте конфигурации.

    Вычисление ленивое: условия веток после первой истинной и всё внутри
    невыбранных веток не вычисляются, поэтому неизвестные атрибуты в мёртвых
    ветках не приводят к ошибке.
    """

    def __init__(self, context: AttributeResolver):
        """
        Args:
            context: Контекст конфигурации для вычисления условий
        """
        self.context = context
        self.evaluator = ConditionEvaluator(context)

    def render(self, document: Document) -> str:
        """
        Рендерит документ в строку.

        Raises:
            EvaluationError: При ошибке вычисления условия (с позицией директивы)
        """
        parts: List[str] = []
        self._render_into(document, parts)
        return "".join(parts)

    def _render_into(self, document: Document, parts: List[str]) -> None:
        for node in document:
            self._render_node(node, parts)

    def _render_node(self, node: TemplateNode, parts: List[str]) -> None:
        if isinstance(node, TextNode):
            parts.append(node.text)
        elif isinstance(node, ConditionalNode):
            self._render_conditional(node, parts)
        else:
            raise TypeError(f"Unknown node type: {type(node).__name__}")

    def _render_conditional(self, node: ConditionalNode, parts: List[str]) -> None:
        """Рендерит тело первой истинной ветки, иначе else-ветку."""
        for branch in node.branches:
            if self._evaluate_branch(branch):
                logger.debug("Branch '%s' at %s selected", branch.condition, branch.location)
                self._render_into(branch.body, parts)
                return

        if node.else_body is not None:
            logger.debug("Else branch of block at %s selected", node.location)
            self._render_into(node.else_body, parts)

    def _evaluate_branch(self, branch: Branch) -> bool:
        try:
            return self.evaluator.evaluate(branch.condition)
        except EvaluationError as e:
            e.attach_location(branch.location)
            raise


def render_document(document: Document, context: AttributeResolver) -> str:
    """Удобная функция для рендера готового документа."""
    return TemplateRenderer(context).render(document)


__all__ = ["TemplateRenderer", "render_document"]
