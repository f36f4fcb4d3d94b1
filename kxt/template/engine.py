"""
Фасад движка шаблонов.

Объединяет токенизацию, построение дерева и компиляцию в один вызов
и выполняет слияние встроенных хелперов с пользовательскими.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from .compiler import (
    DEFAULT_MAX_PARTIAL_DEPTH, CompiledTemplate, Helper, HelperMap, PartialMap,
    create_render_function,
)
from .helpers import BUILTIN_HELPERS
from .lexer import tokenize
from .parser import build_syntax_tree

logger = logging.getLogger(__name__)


def merge_helpers(custom_helpers: Optional[HelperMap] = None) -> Dict[str, Helper]:
    """
    Копирует встроенные хелперы и накладывает поверх пользовательские.

    Пользовательский хелпер с тем же именем безусловно заменяет встроенный,
    включая управляющие (if, each, ...). Общий реестр не изменяется.
    """
    merged: Dict[str, Helper] = dict(BUILTIN_HELPERS)
    if custom_helpers:
        for name, helper in custom_helpers.items():
            if name in merged:
                logger.debug(f"Custom helper '{name}' overrides built-in helper")
            merged[name] = helper
    return merged


def compile_template(
    template_id: Optional[str],
    source: str,
    custom_helpers: Optional[HelperMap] = None,
    partials: Optional[PartialMap] = None,
    max_partial_depth: int = DEFAULT_MAX_PARTIAL_DEPTH,
) -> CompiledTemplate:
    """
    Компилирует исходный текст шаблона в функцию рендеринга.

    Args:
        template_id: Идентификатор шаблона (используется в сообщениях об ошибках)
        source: Исходный текст шаблона
        custom_helpers: Пользовательские хелперы, переопределяющие встроенные
        partials: Карта скомпилированных партиалов
        max_partial_depth: Предельная глубина вложенности партиалов

    Returns:
        Скомпилированный шаблон

    Raises:
        TemplateSyntaxError: Некорректный тег или нарушение вложенности блоков
        UnknownHelperError: Хелпер не найден
        UnknownPartialError: Партиал не найден
    """
    helpers = merge_helpers(custom_helpers)

    tokens = tokenize(template_id, source)
    tree = build_syntax_tree(template_id, tokens)
    logger.debug(f"Parsed template '{template_id}' -> {len(tokens)} tokens, {len(tree)} root nodes")

    return create_render_function(template_id, helpers, partials or {}, tree, max_partial_depth)


class TemplateEngine:
    """
    Компилятор шаблонов с фиксированным набором пользовательских хелперов.
    """

    def __init__(self, custom_helpers: Optional[HelperMap] = None,
                 max_partial_depth: int = DEFAULT_MAX_PARTIAL_DEPTH):
        self.custom_helpers: Dict[str, Helper] = dict(custom_helpers or {})
        self.max_partial_depth = max_partial_depth

    def compile_template(self, template_id: Optional[str], source: str,
                         partials: Optional[PartialMap] = None) -> CompiledTemplate:
        return compile_template(
            template_id, source, self.custom_helpers, partials, self.max_partial_depth
        )


__all__ = ["merge_helpers", "compile_template", "TemplateEngine"]
