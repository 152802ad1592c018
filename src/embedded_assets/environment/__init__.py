"""Rendering configuration, template functions and the error hierarchy.

Public API:
    Environment: Page rendering configuration over an AssetFS
    DEFAULT_FUNCS: Functions available to every template

Exceptions:
    TemplateError: Base class for everything below
    TemplateNotFoundError / AssetNotFoundError: Unresolvable path
    TemplateSyntaxError / MissingTemplateError: Parse-time failures
    TemplateRuntimeError / UndefinedError: Execution-time failures

"""

from embedded_assets.environment.exceptions import (
    AssetNotFoundError,
    ErrorCode,
    MissingTemplateError,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
    build_source_snippet,
)
from embedded_assets.environment.core import Environment
from embedded_assets.environment.funcs import DEFAULT_FUNCS

__all__ = [
    "DEFAULT_FUNCS",
    "AssetNotFoundError",
    "Environment",
    "ErrorCode",
    "MissingTemplateError",
    "SourceSnippet",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "UndefinedError",
    "build_source_snippet",
]
