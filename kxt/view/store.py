"""
Файловое хранилище шаблонов.

Читает базовые шаблоны страниц, рекурсивно обходит каталог партиалов
и загружает хелперы из Python-модулей каталога хелперов.
"""

from __future__ import annotations

import importlib.util
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..config.model import EngineConfig
from ..errors import TemplateNotFoundError, TemplateStoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceFile:
    """Исходный текст шаблона и его имя (путь относительно каталога, через '/')."""
    filename: str
    source: str


@dataclass(frozen=True)
class HelperFile:
    """Хелпер, загруженный из модуля: модуль обязан определить name и helper."""
    name: str
    helper: Callable[..., object]


class TemplateStore:
    """
    Доступ к шаблонам, партиалам и хелперам на диске.
    """

    def __init__(self, templates_directory: Path, partials_directory: Path, helpers_directory: Path):
        self.templates_directory = Path(templates_directory)
        self.partials_directory = Path(partials_directory)
        self.helpers_directory = Path(helpers_directory)

    @classmethod
    def from_config(cls, root: Path, config: EngineConfig) -> "TemplateStore":
        return cls(config.templates_dir(root), config.partials_dir(root), config.helpers_dir(root))

    def get_base_template(self, template_id: str) -> SourceFile:
        """
        Читает шаблон страницы по идентификатору вида "blog/post.html".

        Raises:
            TemplateNotFoundError: Файл шаблона не существует
            TemplateStoreError: Некорректный идентификатор или ошибка чтения
        """
        parts = _split_id(template_id)
        filepath = self.templates_directory.joinpath(*parts)

        if not filepath.is_file():
            raise TemplateNotFoundError(template_id, str(filepath))

        try:
            source = filepath.read_text(encoding="utf-8")
        except OSError as e:
            raise TemplateStoreError(f"Unable to read template file {filepath}", e) from e

        return SourceFile(filename=template_id, source=source)

    def load_partial_files(self) -> List[SourceFile]:
        """
        Рекурсивно читает все файлы каталога партиалов.

        Имя партиала - путь файла относительно каталога через '/',
        например "cards/card.html". Отсутствующий каталог - пустой список.
        """
        if not self.partials_directory.is_dir():
            logger.debug(f"Partials directory {self.partials_directory} does not exist")
            return []

        files: List[SourceFile] = []
        self._walk_partials(self.partials_directory, [], files)
        logger.debug(f"Loaded {len(files)} partial files from {self.partials_directory}")
        return files

    def _walk_partials(self, directory: Path, parts: Sequence[str], files: List[SourceFile]) -> None:
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            raise TemplateStoreError(f"Unable to read partials directory {directory}", e) from e

        for entry in entries:
            if entry.is_dir():
                self._walk_partials(entry, [*parts, entry.name], files)
            elif entry.is_file():
                try:
                    source = entry.read_text(encoding="utf-8")
                except OSError as e:
                    raise TemplateStoreError(f"Unable to read partial file {entry}", e) from e
                files.append(SourceFile(filename="/".join([*parts, entry.name]), source=source))

    def load_helper_files(self) -> List[HelperFile]:
        """
        Импортирует хелперы из *.py файлов каталога хелперов.

        Raises:
            TemplateStoreError: Модуль не импортируется или не определяет name/helper
        """
        if not self.helpers_directory.is_dir():
            logger.debug(f"Helpers directory {self.helpers_directory} does not exist")
            return []

        try:
            entries = sorted(p for p in self.helpers_directory.iterdir() if p.is_file())
        except OSError as e:
            raise TemplateStoreError(f"Unable to read helpers directory {self.helpers_directory}", e) from e

        files: List[HelperFile] = []
        for filepath in entries:
            if filepath.name.startswith("_"):
                continue
            if filepath.suffix != ".py":
                logger.warning(f"Skipping non-Python file in helpers directory: {filepath.name}")
                continue
            files.append(self._load_helper(filepath))

        return files

    def _load_helper(self, filepath: Path) -> HelperFile:
        try:
            spec = importlib.util.spec_from_file_location(f"kxt_helpers.{filepath.stem}", filepath)
            if spec is None or spec.loader is None:
                raise ImportError(f"no loader for {filepath}")
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
        except Exception as e:
            raise TemplateStoreError(f"Unable to load template helper from {filepath}", e) from e

        name: Optional[str] = getattr(module, "name", None)
        helper = getattr(module, "helper", None)

        if not isinstance(name, str) or not name:
            raise TemplateStoreError(f"A template helper file must define a name string ({filepath})")
        if not callable(helper):
            raise TemplateStoreError(f"A template helper file must define a helper function ({filepath})")

        logger.debug(f"Loaded helper '{name}' from {filepath}")
        return HelperFile(name=name, helper=helper)


def _split_id(template_id: str) -> List[str]:
    # Пустые части убирают ведущие и завершающие слеши
    parts = [part for part in template_id.split("/") if part]
    if not parts or any(part in (".", "..") for part in parts):
        raise TemplateStoreError(f"Invalid template id: {template_id!r}")
    return parts


__all__ = ["SourceFile", "HelperFile", "TemplateStore"]
