"""
kixx-templates: компилятор шаблонов с блочными хелперами и партиалами.
"""

from __future__ import annotations

from .errors import (
    KxtUserError,
    TemplateError,
    TemplateSyntaxError,
    UnknownHelperError,
    UnknownPartialError,
    RenderError,
)
from .template import (
    BUILTIN_HELPERS,
    CompiledTemplate,
    HelperOptions,
    SafeString,
    TemplateEngine,
    build_syntax_tree,
    compile_template,
    create_render_function,
    tokenize,
)

__all__ = [
    "BUILTIN_HELPERS",
    "CompiledTemplate",
    "HelperOptions",
    "SafeString",
    "TemplateEngine",
    "build_syntax_tree",
    "compile_template",
    "create_render_function",
    "tokenize",
    "KxtUserError",
    "TemplateError",
    "TemplateSyntaxError",
    "UnknownHelperError",
    "UnknownPartialError",
    "RenderError",
]
