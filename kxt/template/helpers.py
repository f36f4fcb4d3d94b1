"""
Встроенные хелперы шаблонов.

Все хелперы следуют единому протоколу helper(context, options, *args)
и не имеют особого статуса в компиляторе: пользователь может заменить
любой из них своей реализацией с тем же именем.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from .compiler import HelperOptions
from .safe import SafeString, to_display_string


def each_helper(context: Any, options: HelperOptions, items: Any = None) -> str:
    """
    Рендерит основную секцию для каждого элемента последовательности.

    Элемент становится контекстом секции, а @index, @first, @last
    (и @key для словарей) доступны как данные фрейма.
    Пустая коллекция или не-коллекция рендерит inverse-секцию.
    """
    if isinstance(items, Mapping):
        entries = list(items.items())
    elif items is None or isinstance(items, (str, bytes)) or not isinstance(items, Iterable):
        return options.render_inverse(context)
    else:
        entries = list(enumerate(items))

    if not entries:
        return options.render_inverse(context)

    last = len(entries) - 1
    parts = []
    for index, (key, value) in enumerate(entries):
        data = {"index": index, "key": key, "first": index == 0, "last": index == last}
        parts.append(options.render_primary(value, data))
    return "".join(parts)


def if_helper(context: Any, options: HelperOptions, value: Any = None) -> str:
    """Истинное значение - основная секция, ложное (или пустая коллекция) - inverse."""
    if _is_truthy(value):
        return options.render_primary(context)
    return options.render_inverse(context)


def unless_helper(context: Any, options: HelperOptions, value: Any = None) -> str:
    """Точное дополнение if."""
    if _is_truthy(value):
        return options.render_inverse(context)
    return options.render_primary(context)


def if_equal_helper(context: Any, options: HelperOptions, left: Any = None, right: Any = None) -> str:
    """Строгое сравнение двух аргументов."""
    if strict_equal(left, right):
        return options.render_primary(context)
    return options.render_inverse(context)


def with_helper(context: Any, options: HelperOptions, value: Any = None) -> str:
    """
    Меняет контекст основной секции.

    Словарь накладывается на внешний контекст-словарь на один уровень
    (ключи аргумента побеждают); любое другое значение заменяет контекст.
    """
    if not _is_truthy(value):
        return options.render_inverse(context)

    if isinstance(value, Mapping) and isinstance(context, Mapping):
        scope = dict(context)
        scope.update(value)
        return options.render_primary(scope)

    return options.render_primary(value)


def unescape_helper(context: Any, options: HelperOptions, value: Any = None) -> SafeString:
    """Возвращает значение как есть, в обход HTML-экранирования."""
    return SafeString(to_display_string(value))


def plus_one_helper(context: Any, options: HelperOptions, value: Any = None) -> str:
    """Число (или числовая строка) плюс один; для остального - пустая строка."""
    number = _to_number(value)
    if number is None:
        return ""
    return to_display_string(number + 1)


def strict_equal(left: Any, right: Any) -> bool:
    """Равенство без приведения типов: True не равно 1, "4" не равно 4."""
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def _is_truthy(value: Any) -> bool:
    return bool(value)


def _to_number(value: Any):
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        # nan/inf не считаются числами для шаблонов
        return number if number == number and abs(number) != float("inf") else None
    return None


BUILTIN_HELPERS = MappingProxyType({
    "each": each_helper,
    "if": if_helper,
    "unless": unless_helper,
    "ifEqual": if_equal_helper,
    "with": with_helper,
    "unescape": unescape_helper,
    "plusOne": plus_one_helper,
})


__all__ = [
    "BUILTIN_HELPERS",
    "each_helper",
    "if_helper",
    "unless_helper",
    "if_equal_helper",
    "with_helper",
    "unescape_helper",
    "plus_one_helper",
    "strict_equal",
]
