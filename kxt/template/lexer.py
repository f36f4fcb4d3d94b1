"""
Лексический анализатор шаблонов.

Разбивает исходный текст шаблона на плоскую последовательность токенов:
текст вне тегов и теги {{ ... }} различных видов.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .tokens import Token, TokenType
from ..errors import TemplateSyntaxError

OPEN = "{{"
CLOSE = "}}"
RAW_OPEN = "{{{"
RAW_CLOSE = "}}}"
LONG_COMMENT_OPEN = "{{!--"
LONG_COMMENT_CLOSE = "--}}"

# Сигилы тегов с двойными фигурными скобками
_SIGILS = {
    "#": TokenType.BLOCK_OPEN,
    "/": TokenType.BLOCK_CLOSE,
    ">": TokenType.PARTIAL,
    "!": TokenType.COMMENT,
}

_INVERSE_KEYWORD = "else"


class TemplateLexer:
    """
    Лексический анализатор шаблонов.

    Распознаёт:
    - обычный текст
    - выражения {{ path }}, {{{ path }}} и {{& path }}
    - блоки {{#name ...}}, {{else}}, {{/name}}
    - партиалы {{> name}}
    - комментарии {{! ... }} и {{!-- ... --}}
    """

    def __init__(self, template_id: Optional[str], text: str):
        self.template_id = template_id
        self.text = text
        self.position = 0
        self.line = 1
        self.column = 1
        self.length = len(text)

    def tokenize(self) -> List[Token]:
        """
        Токенизирует весь исходный текст и возвращает список токенов.

        Raises:
            TemplateSyntaxError: При незакрытом или пустом теге
        """
        tokens: List[Token] = []

        while self.position < self.length:
            tag_start = self.text.find(OPEN, self.position)
            if tag_start == -1:
                tokens.append(self._make_text(self.length))
                break

            if tag_start > self.position:
                tokens.append(self._make_text(tag_start))

            token = self._read_tag()
            tokens.append(token)

        return tokens

    def _make_text(self, end: int) -> Token:
        """Создаёт TEXT токен от текущей позиции до end."""
        value = self.text[self.position:end]
        token = Token(TokenType.TEXT, value, self.template_id, self.position, self.line, self.column)
        self._advance(len(value))
        return token

    def _read_tag(self) -> Token:
        """Читает тег, начинающийся в текущей позиции."""
        start_pos = self.position
        start_line = self.line
        start_column = self.column

        if self.text.startswith(LONG_COMMENT_OPEN, start_pos):
            body_start = start_pos + len(LONG_COMMENT_OPEN)
            end = self.text.find(LONG_COMMENT_CLOSE, body_start)
            close = LONG_COMMENT_CLOSE
            if end != -1:
                token_type, value, raw = TokenType.COMMENT, self.text[body_start:end].strip(), False
        elif self.text.startswith(RAW_OPEN, start_pos):
            body_start = start_pos + len(RAW_OPEN)
            end = self._find_tag_end(body_start, RAW_CLOSE)
            close = RAW_CLOSE
            if end != -1:
                token_type, value, raw = TokenType.EXPRESSION, self.text[body_start:end].strip(), True
        else:
            body_start = start_pos + len(OPEN)
            close = CLOSE
            if self._is_short_comment(body_start):
                end = self.text.find(CLOSE, body_start)
            else:
                end = self._find_tag_end(body_start, CLOSE)
            if end != -1:
                token_type, value, raw = self._classify(self.text[body_start:end])

        if end == -1:
            raise TemplateSyntaxError(
                f"Unterminated tag, expected '{close}'",
                self.template_id, start_line, start_column, start_pos
            )

        if not value and token_type != TokenType.COMMENT:
            raise TemplateSyntaxError(
                "Empty tag", self.template_id, start_line, start_column, start_pos
            )

        self._advance(end + len(close) - start_pos)
        return Token(token_type, value, self.template_id, start_pos, start_line, start_column, raw)

    def _classify(self, body: str) -> Tuple[TokenType, str, bool]:
        """Определяет тип тега по его телу (без разделителей)."""
        stripped = body.strip()
        if not stripped:
            return TokenType.EXPRESSION, "", False

        if stripped == _INVERSE_KEYWORD:
            return TokenType.BLOCK_INVERSE, stripped, False

        sigil = stripped[0]
        if sigil == "&":
            return TokenType.EXPRESSION, stripped[1:].strip(), True

        token_type = _SIGILS.get(sigil)
        if token_type is None:
            return TokenType.EXPRESSION, stripped, False

        return token_type, stripped[1:].strip(), False

    def _is_short_comment(self, pos: int) -> bool:
        """Проверяет, начинается ли тело тега с '!' (после пробелов)."""
        while pos < self.length and self.text[pos] in " \t\r\n":
            pos += 1
        return pos < self.length and self.text[pos] == "!"

    def _find_tag_end(self, pos: int, close: str) -> int:
        """
        Находит позицию закрывающего разделителя, пропуская строковые
        литералы в кавычках. Возвращает -1, если тег не закрыт.

        Кавычка открывает литерал только в начале слова (после начала тега, сигила,
        пробела или '='); апостроф внутри слова - обычный символ.
        """
        body_start = pos
        quote: Optional[str] = None
        while pos < self.length:
            char = self.text[pos]
            if quote:
                if char == "\\":
                    pos += 2
                    continue
                if char == quote:
                    quote = None
            elif char in "\"'" and self._at_word_start(pos, body_start):
                quote = char
            elif self.text.startswith(close, pos):
                return pos
            elif self.text.startswith(OPEN, pos):
                # Новый тег внутри незакрытого - предыдущий не завершён
                return -1
            pos += 1
        return -1

    def _at_word_start(self, pos: int, body_start: int) -> bool:
        if pos == body_start:
            return True
        previous = self.text[pos - 1]
        return previous.isspace() or previous in "=&#>"

    def _advance(self, count: int) -> None:
        """
        Перемещает позицию на указанное количество символов,
        обновляя номера строк и колонок.
        """
        for _ in range(count):
            if self.position < self.length:
                if self.text[self.position] == '\n':
                    self.line += 1
                    self.column = 1
                else:
                    self.column += 1
                self.position += 1


def tokenize(template_id: Optional[str], source: str) -> List[Token]:
    """
    Удобная функция для токенизации шаблона.

    Args:
        template_id: Идентификатор шаблона для диагностики
        source: Исходный текст шаблона

    Returns:
        Список токенов

    Raises:
        TemplateSyntaxError: При ошибке лексического анализа
    """
    return TemplateLexer(template_id, source).tokenize()


__all__ = ["TemplateLexer", "tokenize"]
