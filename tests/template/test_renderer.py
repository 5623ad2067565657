"""
Тесты для рендерера документа.

Проверяют выбор веток, сохранение литерального текста, ленивое
вычисление условий в мёртвых ветках и привязку ошибок к директивам.
"""

import textwrap

import pytest

from minilink.config.context import ConfigContext
from minilink.errors import TypeMismatch, UnknownAttribute, UnknownFunction
from minilink.template.parser import parse_template
from minilink.template.renderer import TemplateRenderer, render_document
from minilink.types import RenderOptions


def render(text: str, ctx: ConfigContext, options: RenderOptions = None) -> str:
    return TemplateRenderer(ctx).render(parse_template(text, options))


class TestBranchSelection:

    def test_identity_without_directives(self, features_ctx, empty_features_ctx):
        """Шаблон без директив выводится без изменений"""
        samples = [
            "",
            "plain",
            "MEMORY\n{\n  FLASH : ORIGIN = 0x0, LENGTH = 256K\n}\n",
            "  leading and trailing  \r\n\t\n",
            "braces { } % # and 100%} literal",
        ]
        for text in samples:
            assert render(text, features_ctx) == text
            assert render(text, empty_features_ctx) == text

    def test_example_if_true(self):
        ctx = ConfigContext.from_mapping({"feature": ["x"]})
        assert render('A{% if contains(cfg.feature, "x") %}B{% endif %}C', ctx) == "ABC"

    def test_example_if_false(self):
        ctx = ConfigContext.from_mapping({"feature": []})
        assert render('A{% if contains(cfg.feature, "x") %}B{% endif %}C', ctx) == "AC"

    def test_example_else(self, empty_features_ctx):
        text = '{% if contains(cfg.feature, "x") %}B{% else %}D{% endif %}'
        assert render(text, empty_features_ctx) == "D"

    def test_true_branch_excludes_else(self):
        ctx = ConfigContext.from_mapping({"feature": ["x"]})
        text = '{% if contains(cfg.feature, "x") %}B{% else %}D{% endif %}'
        assert render(text, ctx) == "B"

    def test_first_true_branch_wins(self, features_ctx):
        text = (
            '{% if eq(cfg.target_arch, "x86") %}1'
            '{% elif contains(cfg.feature, "alloc") %}2'
            '{% elif eq(cfg.target_arch, "arm") %}3'
            '{% else %}4{% endif %}'
        )
        assert render(text, features_ctx) == "2"

    def test_no_branch_and_no_else_emits_nothing(self, features_ctx):
        text = 'a{% if eq(cfg.target_arch, "x86") %}b{% elif eq(cfg.panic, "unwind") %}c{% endif %}d'
        assert render(text, features_ctx) == "ad"

    def test_nested(self, features_ctx):
        text = (
            '{% if contains(cfg.feature, "alloc") %}'
            '[{% if contains(cfg.feature, "defmt") %}defmt{% else %}plain{% endif %}]'
            '{% endif %}'
        )
        assert render(text, features_ctx) == "[defmt]"

    def test_whitespace_around_directives_preserved(self, features_ctx):
        text = 'a\n  {% if contains(cfg.feature, "alloc") %}\n  b\n  {% endif %}\nc'
        assert render(text, features_ctx) == "a\n  \n  b\n  \nc"

    def test_comments_removed(self, features_ctx):
        assert render("a{# hidden #}b", features_ctx) == "ab"


class TestLazyEvaluation:
    """Условия в невыбранных ветках не вычисляются."""

    def test_outer_false_skips_inner_unknown_attribute(self, empty_features_ctx):
        text = (
            '{% if contains(cfg.feature, "x") %}'
            '{% if eq(cfg.does_not_exist, "y") %}z{% endif %}'
            '{% endif %}ok'
        )
        assert render(text, empty_features_ctx) == "ok"

    def test_elif_after_true_branch_not_evaluated(self, features_ctx):
        text = '{% if contains(cfg.feature, "alloc") %}a{% elif nosuch() %}b{% endif %}'
        assert render(text, features_ctx) == "a"

    def test_inner_of_else_skipped_when_if_true(self, features_ctx):
        text = (
            '{% if eq(cfg.target_arch, "arm") %}arm'
            '{% else %}{% if eq(cfg.missing, "x") %}?{% endif %}{% endif %}'
        )
        assert render(text, features_ctx) == "arm"

    def test_reached_branch_with_unknown_attribute_fails(self, empty_features_ctx):
        text = '{% if contains(cfg.feature, "x") %}a{% elif eq(cfg.target, "arm") %}b{% endif %}'
        with pytest.raises(UnknownAttribute) as exc:
            render(text, empty_features_ctx)
        assert exc.value.path == "cfg.target"


class TestEvaluationErrors:

    def test_unknown_attribute_example(self):
        ctx = ConfigContext.from_mapping({"feature": ["x"]})
        with pytest.raises(UnknownAttribute) as exc:
            render('{% if eq(cfg.target, "arm") %}x{% endif %}', ctx)
        assert exc.value.path == "cfg.target"

    def test_error_carries_directive_location(self, features_ctx):
        text = 'line one\nline two {% if bogus(cfg.feature) %}x{% endif %}'
        with pytest.raises(UnknownFunction) as exc:
            render(text, features_ctx)
        err = exc.value
        assert err.line == 2
        assert err.column == 10
        assert err.position == text.index("{%")
        assert str(err).endswith("at 2:10")

    def test_elif_error_points_to_elif(self, features_ctx):
        text = '{% if eq(cfg.target_arch, "x") %}\n{% elif contains(cfg.target_arch, "a") %}{% endif %}'
        with pytest.raises(TypeMismatch) as exc:
            render(text, features_ctx)
        assert exc.value.line == 2
        assert exc.value.column == 1


class TestRendererProperties:

    def test_idempotent(self, features_ctx):
        doc = parse_template('x{% if contains(cfg.feature, "alloc") %}y{% else %}z{% endif %}')
        renderer = TemplateRenderer(features_ctx)
        assert renderer.render(doc) == renderer.render(doc)

    def test_same_document_different_contexts(self, features_ctx, empty_features_ctx):
        doc = parse_template('{% if contains(cfg.feature, "alloc") %}heap{% else %}no heap{% endif %}')
        assert render_document(doc, features_ctx) == "heap"
        assert render_document(doc, empty_features_ctx) == "no heap"
        assert render_document(doc, features_ctx) == "heap"

    def test_linker_script_with_whitespace_control(self, linker_template, empty_features_ctx, features_ctx):
        options = RenderOptions(trim_blocks=True, lstrip_blocks=True)

        expected_test = textwrap.dedent("""\
            SECTIONS {
            \t.test : {
            \t\t__test = .;
            \t}
            }""")
        assert render(linker_template, empty_features_ctx, options) == expected_test

        expected_heap = textwrap.dedent("""\
            SECTIONS {
            \t.heap : {
            \t\t__heap_start = .;
            \t}
            }""")
        assert render(linker_template, features_ctx, options) == expected_heap
