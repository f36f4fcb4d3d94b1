"""
Разбор и вычисление путей в контексте рендеринга.

Путь - это цепочка сегментов через точку или в квадратных скобках:
user.name, items.[0], items[0], map.[key with spaces], this, @index, @root.title.
Отсутствующие промежуточные сегменты дают None, а не ошибку.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, Optional, Tuple

from .nodes import PathExpression

_SEGMENT_RE = re.compile(r"\[([^\]]*)\]|([^.\[\]\s]+)")

_THIS = ("this", ".")


def parse_path(text: str) -> PathExpression:
    """
    Разбирает текстовое представление пути.

    Raises:
        ValueError: Если путь синтаксически некорректен
    """
    data = text.startswith("@")
    body = text[1:] if data else text

    if not body:
        raise ValueError(f"Invalid path: {text!r}")

    if not data and body in _THIS:
        return PathExpression(original=text, segments=())

    segments = _split_segments(body, text)

    if not data and segments[0] == "this":
        segments = segments[1:]

    return PathExpression(original=text, segments=segments, data=data)


def _split_segments(body: str, original: str) -> Tuple[str, ...]:
    segments = []
    pos = 0
    length = len(body)

    while pos < length:
        match = _SEGMENT_RE.match(body, pos)
        if not match:
            raise ValueError(f"Invalid path: {original!r}")

        bracketed, plain = match.group(1), match.group(2)
        segments.append(bracketed if bracketed is not None else plain)
        pos = match.end()

        if pos < length:
            if body[pos] == ".":
                pos += 1
                if pos == length:
                    raise ValueError(f"Invalid path (trailing dot): {original!r}")
            elif body[pos] != "[":
                raise ValueError(f"Invalid path: {original!r}")

    return tuple(segments)


def resolve_path(context: Any, path: PathExpression, data: Optional[Mapping] = None) -> Any:
    """
    Вычисляет путь относительно контекста (или данных фрейма для @-путей).
    """
    if path.data:
        if not path.segments or data is None:
            return None
        value = data.get(path.segments[0])
        rest = path.segments[1:]
    else:
        value = context
        rest = path.segments

    for segment in rest:
        if value is None:
            return None
        value = get_segment(value, segment)

    return value


def get_segment(obj: Any, segment: str) -> Any:
    """Извлекает один сегмент из словаря, последовательности или объекта."""
    if isinstance(obj, Mapping):
        value = obj.get(segment)
        if value is None and _is_index(segment):
            value = obj.get(int(segment))
        return value

    if isinstance(obj, Sequence) and not isinstance(obj, (str, bytes)):
        if segment == "length":
            return len(obj)
        if _is_index(segment):
            index = int(segment)
            return obj[index] if 0 <= index < len(obj) else None
        return None

    if isinstance(obj, (str, bytes)) or segment.startswith("_"):
        return None

    return getattr(obj, segment, None)


def _is_index(segment: str) -> bool:
    return segment.isdigit()


__all__ = ["parse_path", "resolve_path", "get_segment"]
