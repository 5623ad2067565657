"""
Позиционная информация в исходном тексте шаблона.

Смещения считаются в символах декодированного текста; строки и колонки
нумеруются с 1.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class SourceLocation:
    """Точка в шаблоне: смещение плюс строка/колонка для диагностики."""
    position: int
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class LineIndex:
    """
    Индекс начал строк для быстрого перевода смещения в строку/колонку.
    """

    def __init__(self, text: str):
        self._line_starts: List[int] = [0]
        for i, ch in enumerate(text):
            if ch == "\n":
                self._line_starts.append(i + 1)

    def locate(self, position: int) -> SourceLocation:
        line_no = bisect_right(self._line_starts, position)
        column = position - self._line_starts[line_no - 1] + 1
        return SourceLocation(position=position, line=line_no, column=column)


def locate(text: str, position: int) -> SourceLocation:
    """Разовый перевод смещения в SourceLocation (без кэширования индекса)."""
    return LineIndex(text).locate(position)


__all__ = ["SourceLocation", "LineIndex", "locate"]
