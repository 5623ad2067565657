"""
Тесты для лексера шаблонов.
"""

import pytest

from minilink.errors import MalformedDirective
from minilink.template.lexer import TemplateLexer
from minilink.template.tokens import DirectiveKind, DirectiveToken, TextToken
from minilink.types import RenderOptions


def _tokens(text, options=None):
    return list(TemplateLexer(text, options))


def _shape(tokens):
    """Компактное представление токенов для сравнения."""
    out = []
    for t in tokens:
        if isinstance(t, TextToken):
            out.append(("text", t.text))
        else:
            out.append((t.kind.value, t.payload.strip()))
    return out


class TestTemplateLexer:

    def test_plain_text(self):
        tokens = _tokens("MEMORY {\n  FLASH : ORIGIN = 0\n}\n")
        assert tokens == [TextToken(text="MEMORY {\n  FLASH : ORIGIN = 0\n}\n", position=0)]

    def test_empty_text(self):
        assert _tokens("") == []

    def test_directives(self):
        tokens = _tokens('A{% if contains(cfg.feature, "x") %}B{% elif f() %}C{% else %}D{% endif %}E')
        assert _shape(tokens) == [
            ("text", "A"),
            ("if", 'contains(cfg.feature, "x")'),
            ("text", "B"),
            ("elif", "f()"),
            ("text", "C"),
            ("else", ""),
            ("text", "D"),
            ("endif", ""),
            ("text", "E"),
        ]

    def test_directive_positions(self):
        text = 'ab{% if f() %}'
        (text_token, directive) = _tokens(text)
        assert isinstance(directive, DirectiveToken)
        assert directive.position == 2
        assert directive.end == len(text)
        assert text[directive.payload_position:].startswith(" f()")

    def test_whitespace_preserved(self):
        text = "  a\n\t{% if f() %}\n  b  \n{% endif %}\n\n"
        tokens = _tokens(text)
        assert _shape(tokens) == [
            ("text", "  a\n\t"),
            ("if", "f()"),
            ("text", "\n  b  \n"),
            ("endif", ""),
            ("text", "\n\n"),
        ]

    def test_directive_without_spaces(self):
        tokens = _tokens("{%if f()%}x{%endif%}")
        assert _shape(tokens) == [("if", "f()"), ("text", "x"), ("endif", "")]

    def test_close_marker_inside_string(self):
        tokens = _tokens('{% if eq(cfg.a, "%}") %}x{% endif %}')
        assert _shape(tokens)[0] == ("if", 'eq(cfg.a, "%}")')

    def test_stray_close_marker_is_text(self):
        tokens = _tokens("50%} done")
        assert _shape(tokens) == [("text", "50%} done")]

    def test_comments_are_dropped(self):
        tokens = _tokens("a{# note {% if %} #}b")
        assert _shape(tokens) == [("text", "a"), ("text", "b")]

    def test_unterminated_directive(self):
        with pytest.raises(MalformedDirective, match="Unterminated directive") as exc:
            _tokens("line1\nab{% if f() ")
        assert exc.value.position == 8
        assert exc.value.line == 2
        assert exc.value.column == 3

    def test_unterminated_string_makes_directive_unterminated(self):
        with pytest.raises(MalformedDirective, match="Unterminated directive"):
            _tokens('{% if eq(cfg.a, "x) %}')

    def test_unterminated_comment(self):
        with pytest.raises(MalformedDirective, match="Unterminated comment") as exc:
            _tokens("ok {# never closed")
        assert exc.value.position == 3

    def test_unknown_directive(self):
        with pytest.raises(MalformedDirective, match="Unknown directive 'for'"):
            _tokens("{% for x in y %}")

    def test_empty_directive(self):
        with pytest.raises(MalformedDirective, match="Expected directive keyword"):
            _tokens("{%  %}")

    def test_else_with_payload(self):
        with pytest.raises(MalformedDirective, match="'else' does not take a condition"):
            _tokens("{% else f() %}")

    def test_endif_with_payload(self):
        with pytest.raises(MalformedDirective, match="'endif' does not take a condition"):
            _tokens("{% endif x %}")

    def test_lexer_is_restartable(self):
        lexer = TemplateLexer("a{% if f() %}b{% endif %}")
        first = list(lexer)
        second = list(lexer)
        assert first == second
        assert len(first) == 4

    def test_lexer_is_lazy(self):
        # Ошибка во второй директиве не мешает получить первые токены
        lexer = TemplateLexer("a{% if f() %}b{% bogus")
        stream = iter(lexer)
        assert isinstance(next(stream), TextToken)
        assert next(stream).kind == DirectiveKind.IF
        assert next(stream).text == "b"
        with pytest.raises(MalformedDirective):
            next(stream)


class TestWhitespaceControl:

    def test_trim_blocks(self):
        options = RenderOptions(trim_blocks=True)
        tokens = _tokens("a\n{% if f() %}\nb\n{% endif %}\nc", options)
        assert _shape(tokens) == [
            ("text", "a\n"),
            ("if", "f()"),
            ("text", "b\n"),
            ("endif", ""),
            ("text", "c"),
        ]

    def test_trim_blocks_crlf(self):
        options = RenderOptions(trim_blocks=True)
        tokens = _tokens("{% if f() %}\r\nb", options)
        assert _shape(tokens) == [("if", "f()"), ("text", "b")]

    def test_trim_blocks_only_one_newline(self):
        options = RenderOptions(trim_blocks=True)
        tokens = _tokens("{% endif %}\n\nx", options)
        assert _shape(tokens) == [("endif", ""), ("text", "\nx")]

    def test_lstrip_blocks(self):
        options = RenderOptions(lstrip_blocks=True)
        tokens = _tokens("a\n  \t{% if f() %}b", options)
        assert _shape(tokens) == [("text", "a\n"), ("if", "f()"), ("text", "b")]

    def test_lstrip_blocks_ignores_directive_after_text(self):
        options = RenderOptions(lstrip_blocks=True)
        tokens = _tokens("x  {% if f() %}", options)
        assert _shape(tokens) == [("text", "x  "), ("if", "f()")]

    def test_lstrip_blocks_second_directive_on_line(self):
        options = RenderOptions(lstrip_blocks=True)
        tokens = _tokens("{% if f() %}  {% endif %}", options)
        assert _shape(tokens) == [("if", "f()"), ("text", "  "), ("endif", "")]

    def test_lstrip_and_trim_together(self):
        options = RenderOptions(trim_blocks=True, lstrip_blocks=True)
        tokens = _tokens("A\n\t{% if f() %}\n\tB\n\t{% endif %}\nC", options)
        assert _shape(tokens) == [
            ("text", "A\n"),
            ("if", "f()"),
            ("text", "\tB\n"),
            ("endif", ""),
            ("text", "C"),
        ]

    def test_comment_with_whitespace_control(self):
        options = RenderOptions(trim_blocks=True, lstrip_blocks=True)
        tokens = _tokens("a\n  {# c #}\nb", options)
        assert _shape(tokens) == [("text", "a\n"), ("text", "b")]
