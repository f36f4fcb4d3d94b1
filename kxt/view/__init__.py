"""
Слой представлений: файловое хранилище шаблонов и движок шаблонов страниц.
"""

from __future__ import annotations

from .format_date import format_date
from .page_engine import PageTemplateEngine, PartialSlot
from .store import HelperFile, SourceFile, TemplateStore

__all__ = [
    "PageTemplateEngine",
    "PartialSlot",
    "TemplateStore",
    "SourceFile",
    "HelperFile",
    "format_date",
]
