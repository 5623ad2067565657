"""
Узлы дерева документа.

Документ представляет упорядоченную последовательность узлов: литерального текста
и условных блоков с ветками. Дерево строится снизу вверх при разборе
и после этого не изменяется.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from ..conditions.model import Expression
from ..location import SourceLocation


@dataclass(frozen=True)
class TemplateNode:
    """Базовый класс для всех узлов документа."""
    pass


# Документ: кортеж узлов
Document = Tuple[TemplateNode, ...]


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """
    Литеральный текст шаблона.

    Выводится в результат как есть.
    """
    text: str


@dataclass(frozen=True)
class Branch:
    """
    Ветка условного блока: условие и вложенный документ.

    location указывает на директиву if/elif, открывшую ветку.
    """
    condition: Expression
    body: Document
    location: SourceLocation


@dataclass(frozen=True)
class ConditionalNode(TemplateNode):
    """
    Условный блок {% if %}...{% elif %}...{% else %}...{% endif %}.

    Ветки проверяются по порядку; в вывод попадает тело первой истинной
    ветки, иначе else_body (если есть), иначе ничего.
    """
    branches: Tuple[Branch, ...]
    else_body: Optional[Document] = None
    location: Optional[SourceLocation] = None  # позиция открывающего if


def iter_conditions(document: Document) -> Iterator[Branch]:
    """Обходит все ветки документа в глубину (для отладки и проверок)."""
    for node in document:
        if isinstance(node, ConditionalNode):
            for branch in node.branches:
                yield branch
                yield from iter_conditions(branch.body)
            if node.else_body:
                yield from iter_conditions(node.else_body)


def format_document_tree(document: Document, indent: int = 0) -> str:
    """Форматирует документ как дерево для отладки."""
    lines: List[str] = []
    prefix = "  " * indent

    for node in document:
        if isinstance(node, TextNode):
            # Показываем только начало текста для читабельности
            preview = repr(node.text[:50] + "..." if len(node.text) > 50 else node.text)
            lines.append(f"{prefix}Text({preview})")
        elif isinstance(node, ConditionalNode):
            for i, branch in enumerate(node.branches):
                keyword = "if" if i == 0 else "elif"
                lines.append(f"{prefix}{keyword} {branch.condition}  @{branch.location}")
                if branch.body:
                    lines.append(format_document_tree(branch.body, indent + 1))
            if node.else_body is not None:
                lines.append(f"{prefix}else")
                if node.else_body:
                    lines.append(format_document_tree(node.else_body, indent + 1))
            lines.append(f"{prefix}endif")
        else:
            lines.append(f"{prefix}{type(node).__name__}")

    return "\n".join(lines)


__all__ = [
    "TemplateNode",
    "Document",
    "TextNode",
    "Branch",
    "ConditionalNode",
    "iter_conditions",
    "format_document_tree",
]
