"""
Билдер тестовых проектов шаблонов: kxt.yaml, templates/, partials/, helpers/.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from .file_utils import write


@dataclass
class TemplateProject:
    """Описание тестового проекта (пути относительно корня)."""
    root: Path
    templates: Dict[str, str] = field(default_factory=dict)
    partials: Dict[str, str] = field(default_factory=dict)
    helpers: Dict[str, str] = field(default_factory=dict)
    config: Optional[str] = None

    def build(self) -> Path:
        if self.config is not None:
            write(self.root / "kxt.yaml", textwrap.dedent(self.config).strip() + "\n")
        for name, source in self.templates.items():
            write(self.root / "templates" / name, source)
        for name, source in self.partials.items():
            write(self.root / "partials" / name, source)
        for name, source in self.helpers.items():
            write(self.root / "helpers" / name, textwrap.dedent(source).lstrip())
        return self.root


def create_project(
    root: Path,
    templates: Optional[Dict[str, str]] = None,
    partials: Optional[Dict[str, str]] = None,
    helpers: Optional[Dict[str, str]] = None,
    config: Optional[str] = None,
) -> Path:
    """Создаёт проект шаблонов в указанном каталоге и возвращает корень."""
    return TemplateProject(
        root=root,
        templates=dict(templates or {}),
        partials=dict(partials or {}),
        helpers=dict(helpers or {}),
        config=config,
    ).build()


__all__ = ["TemplateProject", "create_project"]
