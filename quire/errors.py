"""Error types raised by Quire.

Three kinds of failure are distinguished:
- ConfigurationError: the site cannot be constructed at all.
- SetupError: data, locales or collections failed to load for a build pass.
- PageRenderError: a single page failed to render; contained per page.
"""

from __future__ import annotations

from pathlib import Path

import yaml


class QuireError(Exception):
    """Base class for all Quire errors."""


class ConfigurationError(QuireError):
    """Invalid input folder, unknown engine or missing engine dependency."""


class SetupError(QuireError):
    """Error while loading data, locales or collections.

    Attributes:
        source_path: File that failed to load, when known.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        message: str,
        source_path: Path | None = None,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.original_error = original_error
        prefix = f"{source_path}: " if source_path else ""
        super().__init__(f"{prefix}{message}")


class PageRenderError(QuireError):
    """Error while rendering a single page.

    Attributes:
        source_path: Path to the page that failed.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")

    @classmethod
    def from_exception(cls, source_path: Path, exc: Exception) -> PageRenderError:
        """Wrap an arbitrary exception raised while rendering a page."""
        return cls(source_path, format_error_message(exc), exc)


def format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    error_msg = str(exc)

    # Handle common Jinja2/template errors
    if error_type == "TemplateSyntaxError":
        lineno = getattr(exc, "lineno", None)
        message = getattr(exc, "message", None) or error_msg
        return f"Template syntax error on line {lineno}: {message}"
    if error_type in ("TemplateNotFound", "TemplatesNotFound"):
        return f"Template not found: {error_msg}"
    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if isinstance(exc, yaml.YAMLError):
        return f"Invalid front matter: {error_msg}"
    if error_type == "TypeError":
        return f"Type error: {error_msg}"
    if error_type == "AttributeError":
        return f"Attribute error: {error_msg}"

    return f"{error_type}: {error_msg}"
