"""
Лексер для разбора выражений-предикатов.

Выполняет токенизацию содержимого директивы, разбивая его на значимые элементы:
- Ключевые слова (and, or, not)
- Идентификаторы (имена функций и сегменты путей cfg.feature)
- Строковые литералы в одинарных или двойных кавычках
- Символы (скобки, запятая, точка)
- Пробелы (игнорируются)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List

from ..errors import ExpressionSyntaxError


@dataclass
class Token:
    """
    Токен выражения.

    Attributes:
        type: Тип токена (KEYWORD, IDENTIFIER, STRING, SYMBOL, EOF)
        value: Значение токена (для STRING уже раскодированная строка)
        position: Позиция в исходном тексте выражения
    """
    type: str
    value: str
    position: int

    def __repr__(self):
        return f"Token({self.type}, '{self.value}', pos={self.position})"


_ESCAPES = {
    "\\": "\\",
    '"': '"',
    "'": "'",
    "n": "\n",
    "t": "\t",
}


def _unescape(body: str, position: int) -> str:
    """Раскрывает escape-последовательности строкового литерала."""
    out: List[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\":
            nxt = body[i + 1]
            if nxt not in _ESCAPES:
                # +1 за открывающую кавычку
                raise ExpressionSyntaxError(f"Unknown escape sequence '\\{nxt}'", position + 1 + i)
            out.append(_ESCAPES[nxt])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


class ExpressionLexer:
    """
    Лексер для разбиения выражения на токены.

    Поддерживаемые токены:
    - KEYWORD: and, or, not
    - IDENTIFIER: имена функций и сегменты путей
    - STRING: "..." или '...'
    - SYMBOL: ( ) , .
    - EOF: конец строки
    """

    # Спецификация токенов: (regex_pattern, token_type, ignore_flag)
    TOKEN_SPECS = [
        # Пробелы и переводы строк (игнорируем)
        (r'\s+', 'WHITESPACE', True),

        # Строковые литералы с экранированием
        (r'"(?:[^"\\]|\\.)*"', 'STRING', False),
        (r"'(?:[^'\\]|\\.)*'", 'STRING', False),

        # Открывающая кавычка без пары
        (r'["\']', 'UNTERMINATED', False),

        # Символы
        (r'\(', 'SYMBOL', False),
        (r'\)', 'SYMBOL', False),
        (r',', 'SYMBOL', False),
        (r'\.', 'SYMBOL', False),

        # Идентификаторы; ключевые слова определяем после захвата
        (r'[A-Za-z_][A-Za-z0-9_]*', 'IDENTIFIER', False),

        # Неизвестный символ (ошибка)
        (r'.', 'UNKNOWN', False),
    ]

    KEYWORDS = {'and', 'or', 'not'}

    def __init__(self):
        self._compiled_patterns = [
            (re.compile(pattern, re.DOTALL), token_type, ignore)
            for pattern, token_type, ignore in self.TOKEN_SPECS
        ]

    def tokenize(self, text: str) -> List[Token]:
        """
        Разбивает выражение на токены.

        Args:
            text: Содержимое директивы

        Returns:
            Список токенов, включая EOF в конце

        Raises:
            ExpressionSyntaxError: При неизвестном символе или незакрытой строке
        """
        return list(self.tokenize_stream(text))

    def tokenize_stream(self, text: str) -> Iterator[Token]:
        """Генератор для ленивой токенизации."""
        position = 0

        while position < len(text):
            for pattern, token_type, ignore in self._compiled_patterns:
                match = pattern.match(text, position)
                if not match:
                    continue

                value = match.group(0)
                if not ignore:
                    if token_type == 'UNKNOWN':
                        raise ExpressionSyntaxError(f"Unexpected character '{value}'", position)
                    if token_type == 'UNTERMINATED':
                        raise ExpressionSyntaxError("Unterminated string literal", position)

                    if token_type == 'STRING':
                        value = _unescape(value[1:-1], position)
                    elif token_type == 'IDENTIFIER' and value in self.KEYWORDS:
                        token_type = 'KEYWORD'

                    yield Token(type=token_type, value=value, position=position)

                position = match.end()
                break

        yield Token(type='EOF', value='', position=position)


__all__ = ["Token", "ExpressionLexer"]
