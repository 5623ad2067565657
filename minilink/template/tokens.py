"""
Лексические типы шаблонизатора.

Определяет виды директив и токены, которые лексер выдаёт парсеру документа.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Union

# Маркеры директив и комментариев
DIRECTIVE_OPEN = "{%"
DIRECTIVE_CLOSE = "%}"
COMMENT_OPEN = "{#"
COMMENT_CLOSE = "#}"


class DirectiveKind(enum.Enum):
    """Закрытый набор директив шаблона."""
    IF = "if"
    ELIF = "elif"
    ELSE = "else"
    ENDIF = "endif"

    @property
    def takes_payload(self) -> bool:
        return self in (DirectiveKind.IF, DirectiveKind.ELIF)

    @classmethod
    def from_keyword(cls, keyword: str) -> Optional["DirectiveKind"]:
        for kind in cls:
            if kind.value == keyword:
                return kind
        return None


@dataclass(frozen=True)
class TextToken:
    """Литеральный фрагмент текста между директивами."""
    text: str
    position: int  # Позиция начала в исходном тексте


@dataclass(frozen=True)
class DirectiveToken:
    """
    Директива `{% kind payload %}`.

    payload содержит сырой текст условия (пустой для else/endif), payload_position
    задаёт его смещение в исходном тексте, чтобы ошибки выражения указывали на
    точное место в шаблоне.
    """
    kind: DirectiveKind
    payload: str
    position: int          # Позиция '{%'
    end: int               # Позиция сразу после '%}'
    payload_position: int  # Позиция начала payload

    def __repr__(self) -> str:
        return f"DirectiveToken({self.kind.value}, {self.payload.strip()!r}, pos={self.position})"


TemplateToken = Union[TextToken, DirectiveToken]

__all__ = [
    "DIRECTIVE_OPEN",
    "DIRECTIVE_CLOSE",
    "COMMENT_OPEN",
    "COMMENT_CLOSE",
    "DirectiveKind",
    "TextToken",
    "DirectiveToken",
    "TemplateToken",
]
