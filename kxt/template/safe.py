"""
Строковое представление значений и HTML-экранирование.
"""

from __future__ import annotations

import html
from typing import Any


class SafeString(str):
    """
    Строка, которая выводится без HTML-экранирования.

    Хелперы возвращают SafeString, когда результат должен содержать
    готовую разметку.
    """

    def __repr__(self) -> str:
        return f"SafeString({str.__repr__(self)})"


def to_display_string(value: Any) -> str:
    """Приводит значение контекста к строке для вывода."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(to_display_string(item) for item in value)
    return str(value)


def escape_html(value: Any) -> str:
    """Экранирует &, <, >, " и ' (SafeString возвращается как есть)."""
    if isinstance(value, SafeString):
        return value
    return html.escape(to_display_string(value), quote=True)


__all__ = ["SafeString", "to_display_string", "escape_html"]
