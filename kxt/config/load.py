from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .model import EngineConfig, DEFAULT_CONFIG
from .paths import config_path
from ..errors import ConfigError

logger = logging.getLogger(__name__)

_yaml = YAML(typ="safe")


def _read_yaml_map(path: Path) -> dict:
    """Reads a YAML file and returns a mapping (empty for an empty file)."""
    try:
        raw = _yaml.load(path.read_text(encoding="utf-8")) or {}
    except YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"YAML must be a mapping: {path}")
    return raw


def load_config(root: Path, path: Optional[Path] = None) -> EngineConfig:
    """
    Load engine configuration.

    Args:
        root: Project root path
        path: Explicit config file; defaults to <root>/kxt.yaml

    Returns:
        EngineConfig (defaults when the default config file is absent)
    """
    cfg_file = path if path is not None else config_path(root)
    if not cfg_file.is_file():
        if path is not None:
            raise ConfigError(f"Config file not found: {cfg_file}")
        logger.debug(f"No config at {cfg_file}, using defaults")
        return DEFAULT_CONFIG

    config = EngineConfig.from_dict(_read_yaml_map(cfg_file), source=str(cfg_file))
    logger.debug(f"Loaded config from {cfg_file}: {config.to_dict()}")
    return config


__all__ = ["load_config"]
