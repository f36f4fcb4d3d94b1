from __future__ import annotations

from pathlib import Path

# Single source of truth for the project layout.
CONFIG_FILE = "kxt.yaml"
TEMPLATES_DIR = "templates"
PARTIALS_DIR = "partials"
HELPERS_DIR = "helpers"


def config_path(root: Path) -> Path:
    """Path to the configuration file <root>/kxt.yaml."""
    return (root / CONFIG_FILE).resolve()


__all__ = ["CONFIG_FILE", "TEMPLATES_DIR", "PARTIALS_DIR", "HELPERS_DIR", "config_path"]
