"""
Тесты фасада движка: слияние хелперов и компиляция из исходника.
"""

import logging

import pytest

from kxt.errors import TemplateSyntaxError, UnknownHelperError
from kxt.template import BUILTIN_HELPERS, CompiledTemplate, TemplateEngine, compile_template, merge_helpers


class TestMergeHelpers:

    def test_copy_of_builtins(self):
        merged = merge_helpers()

        assert merged == dict(BUILTIN_HELPERS)
        merged["extra"] = lambda context, options: ""
        assert "extra" not in BUILTIN_HELPERS

    def test_custom_helpers_win(self):
        custom = lambda context, options, value=None: "mine"  # noqa: E731

        merged = merge_helpers({"each": custom, "shout": custom})

        assert merged["each"] is custom
        assert merged["shout"] is custom
        assert merged["if"] is BUILTIN_HELPERS["if"]

    def test_override_is_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="kxt.template.engine"):
            merge_helpers({"with": lambda context, options, value=None: ""})

        assert "overrides built-in helper" in caplog.text


class TestCompileTemplate:

    def test_returns_compiled_template(self):
        template = compile_template("greeting.html", "Hi {{name}}")

        assert isinstance(template, CompiledTemplate)
        assert template.template_id == "greeting.html"
        assert template({"name": "Amy"}) == "Hi Amy"

    def test_syntax_error_carries_template_id(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            compile_template("broken.html", "{{#if x}}open")

        assert exc_info.value.template_id == "broken.html"
        assert "broken.html" in str(exc_info.value)

    def test_missing_helper_is_reported_before_render(self):
        with pytest.raises(UnknownHelperError):
            compile_template("t", "{{#if x}}{{format_date d}}{{/if}}")


class TestTemplateEngine:

    def test_engine_keeps_custom_helpers(self):
        engine = TemplateEngine({"shout": lambda context, options, value: value.upper()})

        first = engine.compile_template("a", "{{shout a}}")
        second = engine.compile_template("b", "{{#each items}}{{shout this}}{{/each}}")

        assert first({"a": "x"}) == "X"
        assert second({"items": ["a", "b"]}) == "AB"

    def test_engine_passes_partials_and_depth(self):
        engine = TemplateEngine(max_partial_depth=2)
        holder = []
        partials = {"loop": lambda context: holder[0](context)}
        holder.append(engine.compile_template("loop", "{{> loop}}", partials))

        with pytest.raises(Exception, match="deeper than 2 levels"):
            holder[0]({})

    def test_engine_copies_helper_map(self):
        helpers = {"shout": lambda context, options, value: value.upper()}
        engine = TemplateEngine(helpers)
        helpers.clear()

        assert engine.compile_template("a", "{{shout a}}")({"a": "x"}) == "X"
