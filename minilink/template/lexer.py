"""
Лексический анализатор шаблонов.

Разбивает текст шаблона на литеральные фрагменты и директивы `{% ... %}`.
Комментарии `{# ... #}` выбрасываются. Текст вне маркеров сохраняется
без изменений, если не включены trim_blocks/lstrip_blocks.
"""

from __future__ import annotations

import re
from typing import Iterator, Optional

from ..errors import MalformedDirective
from ..location import LineIndex
from ..types import DEFAULT_OPTIONS, RenderOptions
from .tokens import (
    COMMENT_CLOSE,
    COMMENT_OPEN,
    DIRECTIVE_CLOSE,
    DirectiveKind,
    DirectiveToken,
    TemplateToken,
    TextToken,
)


class TemplateLexer:
    """
    Лексер шаблона.

    Итерирование по лексеру лениво выдаёт токены; каждый новый вызов iter()
    начинает разбор заново, поэтому последовательность можно перезапускать.
    """

    # Начало директивы или комментария
    MARKER_PATTERN = re.compile(r"\{[%#]")

    # Ключевое слово в начале директивы
    KEYWORD_PATTERN = re.compile(r"\s*([A-Za-z_][A-Za-z0-9_]*)")

    def __init__(self, text: str, options: Optional[RenderOptions] = None):
        """
        Args:
            text: Исходный текст шаблона
            options: Настройки управления пробелами
        """
        self.text = text
        self.length = len(text)
        self.options = options or DEFAULT_OPTIONS
        self.index = LineIndex(text)

    def __iter__(self) -> Iterator[TemplateToken]:
        return self._scan()

    def _scan(self) -> Iterator[TemplateToken]:
        text = self.text
        pos = 0

        while pos < self.length:
            match = self.MARKER_PATTERN.search(text, pos)
            if match is None:
                yield TextToken(text=text[pos:], position=pos)
                return

            marker_pos = match.start()
            text_end = self._lstrip_boundary(pos, marker_pos)
            if text_end > pos:
                yield TextToken(text=text[pos:text_end], position=pos)

            if match.group(0) == COMMENT_OPEN:
                end = self._scan_comment(marker_pos)
            else:
                directive = self._scan_directive(marker_pos)
                end = directive.end
                yield directive

            pos = self._trim_boundary(end)

    def _scan_comment(self, start: int) -> int:
        """Находит конец комментария; возвращает позицию после '#}'."""
        close = self.text.find(COMMENT_CLOSE, start + len(COMMENT_OPEN))
        if close == -1:
            raise MalformedDirective("Unterminated comment", self.index.locate(start))
        return close + len(COMMENT_CLOSE)

    def _find_directive_close(self, start: int) -> int:
        """
        Ищет '%}' для директивы, начинающейся в start.

        Строковые литералы пропускаются, так что '%}' внутри кавычек
        не закрывает директиву.
        """
        text = self.text
        i = start + 2
        quote = None
        while i < self.length:
            ch = text[i]
            if quote:
                if ch == "\\":
                    i += 2
                    continue
                if ch == quote:
                    quote = None
            elif ch in ("\"", "'"):
                quote = ch
            elif text.startswith(DIRECTIVE_CLOSE, i):
                return i
            i += 1
        return -1

    def _scan_directive(self, start: int) -> DirectiveToken:
        close = self._find_directive_close(start)
        if close == -1:
            raise MalformedDirective("Unterminated directive", self.index.locate(start))

        inner_start = start + 2
        keyword_match = self.KEYWORD_PATTERN.match(self.text, inner_start, close)
        if keyword_match is None:
            raise MalformedDirective("Expected directive keyword", self.index.locate(start))

        keyword = keyword_match.group(1)
        kind = DirectiveKind.from_keyword(keyword)
        if kind is None:
            raise MalformedDirective(f"Unknown directive '{keyword}'", self.index.locate(start))

        payload_position = keyword_match.end()
        payload = self.text[payload_position:close]
        if not kind.takes_payload and payload.strip():
            raise MalformedDirective(
                f"'{kind.value}' does not take a condition", self.index.locate(start)
            )

        return DirectiveToken(
            kind=kind,
            payload=payload,
            position=start,
            end=close + len(DIRECTIVE_CLOSE),
            payload_position=payload_position,
        )

    def _lstrip_boundary(self, text_start: int, marker_pos: int) -> int:
        """
        Конец литерала перед маркером с учётом lstrip_blocks.

        Отступ срезается, только если маркер стоит первым на строке и
        между началом строки и маркером лишь пробелы и табуляции.
        """
        if not self.options.lstrip_blocks:
            return marker_pos
        line_start = self.text.rfind("\n", 0, marker_pos) + 1
        if line_start < text_start:
            return marker_pos
        indent = self.text[line_start:marker_pos]
        if indent.strip(" \t"):
            return marker_pos
        return line_start

    def _trim_boundary(self, end: int) -> int:
        """Позиция продолжения после маркера с учётом trim_blocks."""
        if not self.options.trim_blocks:
            return end
        if self.text.startswith("\r\n", end):
            return end + 2
        if self.text.startswith("\n", end):
            return end + 1
        return end


__all__ = ["TemplateLexer"]
