"""
Тесты для лексического анализатора движка шаблонов.

Проверяет корректную токенизацию всех элементов шаблонов:
- обычный текст
- выражения {{ ... }}, {{{ ... }}}, {{& ... }}
- блоки {{#...}}, {{else}}, {{/...}}
- партиалы {{> ...}}
- комментарии {{! ... }} и {{!-- ... --}}
"""

import dataclasses

import pytest

from kxt.errors import TemplateSyntaxError
from kxt.template.lexer import TemplateLexer, tokenize
from kxt.template.tokens import TokenType


class TestTemplateLexer:
    """Тесты для базовой функциональности лексера."""

    def test_empty_template(self):
        """Пустой шаблон не даёт токенов."""
        assert tokenize("t", "") == []

    def test_plain_text(self):
        """Обычный текст должен токенизироваться как TEXT."""
        text = "Hello, world!"
        tokens = TemplateLexer("t", text).tokenize()

        assert len(tokens) == 1
        assert tokens[0].type == TokenType.TEXT
        assert tokens[0].value == text
        assert tokens[0].template_id == "t"
        assert tokens[0].position == 0
        assert tokens[0].line == 1
        assert tokens[0].column == 1

    def test_single_braces_are_text(self):
        """Одиночные фигурные скобки - обычный текст."""
        tokens = tokenize("t", "function() { return {a: 1}; }")

        assert [t.type for t in tokens] == [TokenType.TEXT]

    def test_expression_between_text(self):
        """Выражение между фрагментами текста."""
        tokens = tokenize("t", "Hi {{ name }}!")

        assert [t.type for t in tokens] == [TokenType.TEXT, TokenType.EXPRESSION, TokenType.TEXT]
        assert tokens[0].value == "Hi "
        assert tokens[1].value == "name"
        assert tokens[1].raw is False
        assert tokens[1].position == 3
        assert tokens[1].column == 4
        assert tokens[2].value == "!"

    def test_raw_expressions(self):
        """Тройные скобки и & отключают экранирование."""
        triple = tokenize("t", "{{{ html }}}")
        ampersand = tokenize("t", "{{& html}}")

        for tokens in (triple, ampersand):
            assert len(tokens) == 1
            assert tokens[0].type == TokenType.EXPRESSION
            assert tokens[0].value == "html"
            assert tokens[0].raw is True

    def test_block_tokens(self):
        """Открытие, else и закрытие блока."""
        tokens = tokenize("t", "{{#each items}}x{{else}}y{{/each}}")

        expected = [
            (TokenType.BLOCK_OPEN, "each items"),
            (TokenType.TEXT, "x"),
            (TokenType.BLOCK_INVERSE, "else"),
            (TokenType.TEXT, "y"),
            (TokenType.BLOCK_CLOSE, "each"),
        ]
        assert [(t.type, t.value) for t in tokens] == expected

    def test_else_with_spaces(self):
        """{{ else }} с пробелами - тоже маркер inverse-секции."""
        tokens = tokenize("t", "{{ else }}")

        assert tokens[0].type == TokenType.BLOCK_INVERSE

    def test_partial_token(self):
        """Ссылка на партиал с путём контекста."""
        tokens = tokenize("t", "{{> cards/card.html user.profile}}")

        assert tokens[0].type == TokenType.PARTIAL
        assert tokens[0].value == "cards/card.html user.profile"

    def test_short_comment(self):
        """Короткий комментарий, в том числе с апострофом."""
        tokens = tokenize("t", "{{! don't render me }}")

        assert len(tokens) == 1
        assert tokens[0].type == TokenType.COMMENT
        assert tokens[0].value == "don't render me"

    def test_long_comment_may_contain_closing_braces(self):
        """Длинный комментарий может содержать }}."""
        tokens = tokenize("t", "a{{!-- {{name}} --}}b")

        assert [t.type for t in tokens] == [TokenType.TEXT, TokenType.COMMENT, TokenType.TEXT]
        assert tokens[1].value == "{{name}}"
        assert tokens[2].value == "b"

    def test_closing_braces_inside_string_literal(self):
        """}} внутри строкового литерала не закрывает тег."""
        tokens = tokenize("t", '{{shout "a}}b"}}!')

        assert tokens[0].type == TokenType.EXPRESSION
        assert tokens[0].value == 'shout "a}}b"'
        assert tokens[1].value == "!"

    def test_apostrophe_inside_word_is_not_a_quote(self):
        """Апостроф внутри имени не открывает строковый литерал."""
        tokens = tokenize("t", "{{> it's.html}} and {{title}}")

        assert [t.type for t in tokens] == [TokenType.PARTIAL, TokenType.TEXT, TokenType.EXPRESSION]
        assert tokens[0].value == "it's.html"
        assert tokens[2].value == "title"

    def test_quote_after_sigil_or_equals_opens_literal(self):
        """Кавычка после сигила, пробела или '=' начинает литерал."""
        tokens = tokenize("t", """{{>"a}}b.html"}}{{link text='x}}y'}}""")

        assert tokens[0].value == '"a}}b.html"'
        assert tokens[1].value == "link text='x}}y'"

    def test_multiline_positions(self):
        """Строки и колонки считаются с 1, позиция - смещение с 0."""
        tokens = tokenize("t", "line 1\nab {{x}}\n{{#if y}}")

        expression = tokens[1]
        assert expression.line == 2
        assert expression.column == 4
        assert expression.position == 10

        block = tokens[3]
        assert block.type == TokenType.BLOCK_OPEN
        assert block.line == 3
        assert block.column == 1

    def test_tokens_are_immutable(self):
        """Токены неизменяемы."""
        token = tokenize("t", "{{x}}")[0]

        with pytest.raises(dataclasses.FrozenInstanceError):
            token.value = "y"


class TestLexerErrors:
    """Ошибки лексического анализа."""

    def test_unterminated_expression(self):
        """Незакрытый тег - ошибка в позиции открытия."""
        with pytest.raises(TemplateSyntaxError) as exc_info:
            tokenize("page.html", "Hello {{name")

        err = exc_info.value
        assert err.template_id == "page.html"
        assert err.line == 1
        assert err.column == 7
        assert err.position == 6
        assert "page.html" in str(err)

    def test_unterminated_raw_expression(self):
        """{{{ без }}} - ошибка."""
        with pytest.raises(TemplateSyntaxError):
            tokenize("t", "{{{name}}")

    def test_unterminated_long_comment(self):
        with pytest.raises(TemplateSyntaxError):
            tokenize("t", "{{!-- never closed }}")

    def test_tag_opened_inside_unterminated_tag(self):
        """Новый тег внутри незакрытого - ошибка в позиции первого."""
        with pytest.raises(TemplateSyntaxError) as exc_info:
            tokenize("t", "{{a {{b}}")

        assert exc_info.value.column == 1

    @pytest.mark.parametrize("source", ["{{}}", "{{  }}", "{{#}}", "{{/}}", "{{>}}", "{{{ }}}"])
    def test_empty_tags(self, source):
        """Пустые теги запрещены."""
        with pytest.raises(TemplateSyntaxError, match="Empty tag"):
            tokenize("t", source)
