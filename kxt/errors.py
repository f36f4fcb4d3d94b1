"""
Exception hierarchy for kixx-templates.

All expected errors that should be displayed to the user
as clean messages (without stack traces) inherit from KxtUserError.

Programming errors and bugs should NOT inherit from KxtUserError;
they will propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Optional


class KxtUserError(Exception):
    """
    Base class for all user-facing errors in kixx-templates.

    These errors indicate problems that the user can fix:
    malformed templates, unknown helpers or partials, bad config, etc.
    """
    pass


class TemplateError(KxtUserError):
    """Base class for errors tied to a particular template."""

    def __init__(self, message: str, template_id: Optional[str] = None):
        self.template_id = template_id
        self.message = message
        where = f" in template '{template_id}'" if template_id else ""
        super().__init__(f"{message}{where}")


class TemplateSyntaxError(TemplateError):
    """Malformed tag, mismatched or unterminated block."""

    def __init__(self, message: str, template_id: Optional[str], line: int, column: int, position: int = -1):
        self.line = line
        self.column = column
        self.position = position
        super().__init__(f"{message} at {line}:{column}", template_id)


class UnknownHelperError(TemplateError):
    """A helper name that is not present in the merged helper map."""

    def __init__(self, helper_name: str, template_id: Optional[str], line: int = 0, column: int = 0):
        self.helper_name = helper_name
        self.line = line
        self.column = column
        super().__init__(f"Unknown helper '{helper_name}' at {line}:{column}", template_id)


class UnknownPartialError(TemplateError):
    """A partial name that is not present in the partial map."""

    def __init__(self, partial_name: str, template_id: Optional[str], line: int = 0, column: int = 0):
        self.partial_name = partial_name
        self.line = line
        self.column = column
        super().__init__(f"Unknown partial '{partial_name}' at {line}:{column}", template_id)


class RenderError(TemplateError):
    """
    Failure at render time: an exception raised by a helper implementation
    or a partial nesting violation.

    The causing exception is kept in `cause` and is also chained via
    `raise ... from`, so the root cause is always reachable.
    """

    def __init__(
        self,
        message: str,
        template_id: Optional[str] = None,
        *,
        helper_name: Optional[str] = None,
        partial_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.helper_name = helper_name
        self.partial_name = partial_name
        self.cause = cause
        super().__init__(message, template_id)


class TemplateStoreError(KxtUserError):
    """Problems reading templates, partials or helper modules from disk."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class TemplateNotFoundError(TemplateStoreError):
    """Requested base template does not exist."""

    def __init__(self, template_id: str, path: str):
        super().__init__(f"Template not found: {template_id} ({path})")
        self.template_id = template_id
        self.path = path


class ConfigError(KxtUserError):
    """Invalid kxt.yaml configuration."""
    pass


__all__ = [
    "KxtUserError",
    "TemplateError",
    "TemplateSyntaxError",
    "UnknownHelperError",
    "UnknownPartialError",
    "RenderError",
    "TemplateStoreError",
    "TemplateNotFoundError",
    "ConfigError",
]
