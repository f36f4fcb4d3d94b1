"""
Unified test infrastructure for kixx-templates.

This package contains common utilities and helpers
used across all tests to avoid code duplication.

Modules:
- file_utils: Utilities for creating files and directories
- project_builders: Builders for template projects on disk
- cli_utils: Running the kxt CLI in a subprocess
"""

from .file_utils import write
from .project_builders import TemplateProject, create_project
from .cli_utils import run_cli

__all__ = [
    "write",
    "TemplateProject",
    "create_project",
    "run_cli",
]
