"""
Движок шаблонов: токенизатор, построитель дерева и компилятор функций рендеринга.
"""

from __future__ import annotations

from .compiler import (
    DEFAULT_MAX_PARTIAL_DEPTH,
    CompiledTemplate,
    HelperOptions,
    RenderFrame,
    create_render_function,
)
from .engine import TemplateEngine, compile_template, merge_helpers
from .helpers import BUILTIN_HELPERS
from .lexer import tokenize
from .parser import build_syntax_tree
from .safe import SafeString, escape_html
from .tokens import Token, TokenType

__all__ = [
    "DEFAULT_MAX_PARTIAL_DEPTH",
    "BUILTIN_HELPERS",
    "CompiledTemplate",
    "HelperOptions",
    "RenderFrame",
    "SafeString",
    "TemplateEngine",
    "Token",
    "TokenType",
    "build_syntax_tree",
    "compile_template",
    "create_render_function",
    "escape_html",
    "merge_helpers",
    "tokenize",
]
