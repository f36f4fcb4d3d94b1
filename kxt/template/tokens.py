"""
Лексические типы.

Определяет типы токенов шаблона и сам токен с позиционной информацией.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class TokenType(enum.Enum):
    """Типы токенов в шаблоне."""

    # Обычный текст вне тегов
    TEXT = "TEXT"

    # {{ path }}, {{{ path }}}, {{& path }}
    EXPRESSION = "EXPRESSION"

    # {{#name args}}
    BLOCK_OPEN = "BLOCK_OPEN"
    # {{else}}
    BLOCK_INVERSE = "BLOCK_INVERSE"
    # {{/name}}
    BLOCK_CLOSE = "BLOCK_CLOSE"

    # {{> name [path]}}
    PARTIAL = "PARTIAL"

    # {{! ... }}, {{!-- ... --}}
    COMMENT = "COMMENT"


@dataclass(frozen=True)
class Token:
    """
    Токен с позиционной информацией для точной диагностики ошибок.

    Для тегов value содержит тело тега без разделителей и сигила
    (например, "each items" для {{#each items}}).
    """
    type: TokenType
    value: str
    template_id: Optional[str]
    position: int        # Позиция в исходном тексте
    line: int            # Номер строки (начиная с 1)
    column: int          # Номер колонки (начиная с 1)
    raw: bool = False    # Только для EXPRESSION: экранирование отключено

    def __repr__(self) -> str:
        raw = ", raw" if self.raw else ""
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column}{raw})"


__all__ = ["TokenType", "Token"]
