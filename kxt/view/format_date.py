"""
Хелпер format_date для шаблонов страниц.

Использование: {{format_date post.published format="DATE_MONTH_DATE" zone="Europe/Berlin"}}

Форматы: ISO, ISO_DATE, DATE_MONTH_DATE, пресеты DATE_*, TIME_*, DATETIME_*
(вывод в стиле en_US) или шаблон strftime. По умолчанию DATETIME_SHORT.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..template.compiler import HelperOptions
from ..template.safe import to_display_string

DEFAULT_FORMAT = "DATETIME_SHORT"

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def format_date(context: Any, options: HelperOptions, value: Any = None) -> str:
    """
    Форматирует дату.

    Принимает datetime, date, миллисекунды с эпохи (UTC) или строку ISO-8601.
    Пустое значение (None или "") даёт пустую строку.
    Именованные аргументы: format и zone (имя часового пояса IANA).
    """
    if value is None or value == "":
        return ""

    fmt = options.hash.get("format") or DEFAULT_FORMAT
    zone = options.hash.get("zone")

    dt = _to_datetime(value)
    if dt is None:
        return f"Invalid date {to_display_string(value)!r}"

    if zone:
        try:
            tz = ZoneInfo(str(zone))
        except (ZoneInfoNotFoundError, ValueError):
            return f"Invalid zone {zone!r}"
        dt = dt.astimezone(tz) if dt.tzinfo else dt.replace(tzinfo=tz)

    return _format(dt, str(fmt))


def _to_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


# ======= Составные части пресетов =======

def _short_month(dt: datetime) -> str:
    return _MONTHS[dt.month - 1][:3]


def _numeric_date(dt: datetime) -> str:
    return f"{dt.month}/{dt.day}/{dt.year}"


def _med_date(dt: datetime) -> str:
    return f"{_short_month(dt)} {dt.day}, {dt.year}"


def _med_weekday_date(dt: datetime) -> str:
    return f"{_WEEKDAYS[dt.weekday()][:3]}, {_med_date(dt)}"


def _full_date(dt: datetime) -> str:
    return f"{_MONTHS[dt.month - 1]} {dt.day}, {dt.year}"


def _huge_date(dt: datetime) -> str:
    return f"{_WEEKDAYS[dt.weekday()]}, {_full_date(dt)}"


def _time_12(dt: datetime, seconds: bool = False) -> str:
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    tail = f":{dt.second:02d}" if seconds else ""
    return f"{hour}:{dt.minute:02d}{tail} {meridiem}"


def _time_24(dt: datetime, seconds: bool = False) -> str:
    tail = f":{dt.second:02d}" if seconds else ""
    return f"{dt.hour:02d}:{dt.minute:02d}{tail}"


def _short_zone(dt: datetime) -> str:
    return dt.tzname() or ""


def _long_zone(dt: datetime) -> str:
    # zoneinfo не знает локализованных имён поясов, используем ключ IANA
    key = getattr(dt.tzinfo, "key", None)
    return key or _short_zone(dt)


def _zoned(text: str, zone: str) -> str:
    return f"{text} {zone}" if zone else text


_PRESETS: Dict[str, Callable[[datetime], str]] = {
    "DATE_SHORT": _numeric_date,
    "DATE_MED": _med_date,
    "DATE_MED_WITH_WEEKDAY": _med_weekday_date,
    "DATE_FULL": _full_date,
    "DATE_HUGE": _huge_date,
    "TIME_SIMPLE": _time_12,
    "TIME_WITH_SECONDS": lambda dt: _time_12(dt, True),
    "TIME_WITH_SHORT_OFFSET": lambda dt: _zoned(_time_12(dt, True), _short_zone(dt)),
    "TIME_WITH_LONG_OFFSET": lambda dt: _zoned(_time_12(dt, True), _long_zone(dt)),
    "TIME_24_SIMPLE": _time_24,
    "TIME_24_WITH_SECONDS": lambda dt: _time_24(dt, True),
    "TIME_24_WITH_SHORT_OFFSET": lambda dt: _zoned(_time_24(dt, True), _short_zone(dt)),
    "TIME_24_WITH_LONG_OFFSET": lambda dt: _zoned(_time_24(dt, True), _long_zone(dt)),
    "DATETIME_SHORT": lambda dt: f"{_numeric_date(dt)}, {_time_12(dt)}",
    "DATETIME_MED": lambda dt: f"{_med_date(dt)}, {_time_12(dt)}",
    "DATETIME_MED_WITH_WEEKDAY": lambda dt: f"{_med_weekday_date(dt)}, {_time_12(dt)}",
    "DATETIME_FULL": lambda dt: _zoned(f"{_full_date(dt)} at {_time_12(dt)}", _short_zone(dt)),
    "DATETIME_HUGE": lambda dt: _zoned(f"{_huge_date(dt)} at {_time_12(dt)}", _long_zone(dt)),
    "DATETIME_SHORT_WITH_SECONDS": lambda dt: f"{_numeric_date(dt)}, {_time_12(dt, True)}",
    "DATETIME_MED_WITH_SECONDS": lambda dt: f"{_med_date(dt)}, {_time_12(dt, True)}",
    "DATETIME_FULL_WITH_SECONDS": lambda dt: _zoned(f"{_full_date(dt)} at {_time_12(dt, True)}", _short_zone(dt)),
    "DATETIME_HUGE_WITH_SECONDS": lambda dt: _zoned(f"{_huge_date(dt)} at {_time_12(dt, True)}", _long_zone(dt)),
}


def _format(dt: datetime, fmt: str) -> str:
    if fmt == "ISO":
        return dt.isoformat()
    if fmt == "ISO_DATE":
        return dt.date().isoformat()
    if fmt == "DATE_MONTH_DATE":
        return f"{_short_month(dt)} {dt.day}"

    preset = _PRESETS.get(fmt)
    if preset is not None:
        return preset(dt)
    if "%" in fmt:
        return dt.strftime(fmt)

    return _PRESETS[DEFAULT_FORMAT](dt)


__all__ = ["format_date"]
