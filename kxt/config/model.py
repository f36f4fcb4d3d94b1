"""
Модель конфигурации движка шаблонов (kxt.yaml).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from .paths import TEMPLATES_DIR, PARTIALS_DIR, HELPERS_DIR
from ..errors import ConfigError
from ..template.compiler import DEFAULT_MAX_PARTIAL_DEPTH

_KNOWN_KEYS = {"templates", "partials", "helpers", "max_partial_depth"}


@dataclass(frozen=True)
class EngineConfig:
    """
    Расположение шаблонов, партиалов и хелперов относительно корня проекта
    и ограничения рендеринга.
    """
    templates: str = TEMPLATES_DIR
    partials: str = PARTIALS_DIR
    helpers: str = HELPERS_DIR
    max_partial_depth: int = DEFAULT_MAX_PARTIAL_DEPTH

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: str = "kxt.yaml") -> "EngineConfig":
        """Создание экземпляра из словаря (из YAML) с проверкой типов."""
        unknown = set(data) - _KNOWN_KEYS
        if unknown:
            raise ConfigError(f"{source}: unknown keys: {', '.join(sorted(unknown))}")

        values: Dict[str, Any] = {}
        for key in ("templates", "partials", "helpers"):
            if key in data:
                value = data[key]
                if not isinstance(value, str) or not value.strip():
                    raise ConfigError(f"{source}: '{key}' must be a non-empty string")
                values[key] = value

        if "max_partial_depth" in data:
            depth = data["max_partial_depth"]
            if isinstance(depth, bool) or not isinstance(depth, int) or depth < 1:
                raise ConfigError(f"{source}: 'max_partial_depth' must be a positive integer")
            values["max_partial_depth"] = depth

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в словарь для YAML."""
        return {
            "templates": self.templates,
            "partials": self.partials,
            "helpers": self.helpers,
            "max_partial_depth": self.max_partial_depth,
        }

    def templates_dir(self, root: Path) -> Path:
        return (root / self.templates).resolve()

    def partials_dir(self, root: Path) -> Path:
        return (root / self.partials).resolve()

    def helpers_dir(self, root: Path) -> Path:
        return (root / self.helpers).resolve()


DEFAULT_CONFIG = EngineConfig()


__all__ = ["EngineConfig", "DEFAULT_CONFIG"]
