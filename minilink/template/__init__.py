"""
Пакет для обработки шаблонов с условными директивами.

Лексер, парсер документа и рендерер для директив
`{% if %}`/`{% elif %}`/`{% else %}`/`{% endif %}`.
"""

from .lexer import TemplateLexer
from .nodes import Branch, ConditionalNode, Document, TextNode, format_document_tree
from .parser import TemplateParser, parse_template
from .renderer import TemplateRenderer, render_document
from .tokens import DirectiveKind, DirectiveToken, TextToken

__all__ = [
    # Основные функции
    "parse_template",
    "render_document",

    # Классы конвейера
    "TemplateLexer",
    "TemplateParser",
    "TemplateRenderer",

    # Узлы и токены (для тестирования и отладки)
    "Document",
    "TextNode",
    "ConditionalNode",
    "Branch",
    "DirectiveKind",
    "DirectiveToken",
    "TextToken",
    "format_document_tree",
]
