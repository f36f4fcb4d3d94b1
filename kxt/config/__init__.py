"""
Configuration loading for kixx-templates.
"""

from __future__ import annotations

from .load import load_config
from .model import EngineConfig, DEFAULT_CONFIG

__all__ = ["EngineConfig", "DEFAULT_CONFIG", "load_config"]
