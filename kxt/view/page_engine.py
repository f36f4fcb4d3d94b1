"""
Движок шаблонов страниц.

Загружает партиалы и хелперы через TemplateStore и компилирует
шаблоны страниц с уже зарегистрированными хелперами format_date и plus_one.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .format_date import format_date
from .store import TemplateStore
from ..config.model import EngineConfig
from ..errors import RenderError
from ..template.compiler import DEFAULT_MAX_PARTIAL_DEPTH, CompiledTemplate, Helper, RenderFrame
from ..template.engine import compile_template
from ..template.helpers import BUILTIN_HELPERS, plus_one_helper

logger = logging.getLogger(__name__)


class PartialSlot(CompiledTemplate):
    """
    Именованное место для партиала, которое заполняется после компиляции.

    Все слоты регистрируются до компиляции первого партиала, поэтому
    партиалы могут ссылаться друг на друга и на себя.
    """

    __slots__ = ("_target",)

    def __init__(self, name: str):
        super().__init__(name, self._render_target)
        self._target: Optional[CompiledTemplate] = None

    def bind(self, template: CompiledTemplate) -> None:
        self._target = template

    def _render_target(self, context: Any, frame: RenderFrame) -> str:
        if self._target is None:
            raise RenderError(f"Partial '{self.template_id}' is not compiled yet", self.template_id,
                              partial_name=self.template_id)
        return self._target.render(context, frame)

    def __repr__(self) -> str:
        return f"PartialSlot({self.template_id!r})"


class PageTemplateEngine:
    """
    Компилятор шаблонов страниц поверх файлового хранилища.
    """

    def __init__(self, store: TemplateStore, max_partial_depth: int = DEFAULT_MAX_PARTIAL_DEPTH):
        self.store = store
        self.max_partial_depth = max_partial_depth

        self.helpers: Dict[str, Helper] = dict(BUILTIN_HELPERS)
        self.helpers["format_date"] = format_date
        self.helpers["plus_one"] = plus_one_helper

        self.partials: Dict[str, PartialSlot] = {}

    @classmethod
    def from_config(cls, root: Path, config: EngineConfig) -> "PageTemplateEngine":
        return cls(TemplateStore.from_config(root, config), config.max_partial_depth)

    def load_helpers(self) -> None:
        """Регистрирует хелперы из каталога хелперов (перекрывая одноимённые)."""
        for helper_file in self.store.load_helper_files():
            self.helpers[helper_file.name] = helper_file.helper

    def load_partials(self) -> None:
        """
        Загружает и компилирует все партиалы, заменяя ранее загруженные.
        """
        files = self.store.load_partial_files()
        slots = {source_file.filename: PartialSlot(source_file.filename) for source_file in files}

        for source_file in files:
            template = compile_template(
                source_file.filename, source_file.source, self.helpers, slots, self.max_partial_depth
            )
            slots[source_file.filename].bind(template)

        self.partials = slots
        logger.debug(f"Compiled {len(slots)} partials")

    def compile_template(self, template_id: str, source: str, include_partials: bool = True) -> CompiledTemplate:
        """
        Компилирует шаблон с текущими хелперами.

        При include_partials=False партиалы недоступны: любой {{> name}}
        в таком шаблоне - ошибка компиляции.
        """
        partials = self.partials if include_partials else {}
        return compile_template(template_id, source, self.helpers, partials, self.max_partial_depth)

    def create_metadata_template(self, template_id: str, source: str) -> CompiledTemplate:
        """Компилирует шаблон метаданных страницы (заголовок, описание) без партиалов."""
        return self.compile_template(template_id, source, include_partials=False)

    def get_template(self, template_id: str) -> CompiledTemplate:
        """Читает шаблон страницы из хранилища и компилирует его."""
        source_file = self.store.get_base_template(template_id)
        return self.compile_template(source_file.filename, source_file.source)


__all__ = ["PartialSlot", "PageTemplateEngine"]
