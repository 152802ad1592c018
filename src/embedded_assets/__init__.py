"""Embedded Assets: templates bundled with the package, rendered as pages.

Static templates ship inside the package and are served through a
read-only virtual filesystem, so nothing has to exist on disk beside the
program. Pages are rendered by composing a base layout with a page
template that defines the layout's blocks.

Quickstart:
    >>> from embedded_assets import load_assets, render_page
    >>> render_page(load_assets(), "about")  # writes the page to stdout

Custom assets:
    >>> from embedded_assets import AssetFS, Environment
    >>> assets = AssetFS({
    ...     "base.tmpl": '<h1>{{template "title" .}}</h1>{{.Body}}',
    ...     "pages/post.tmpl": '{{define "title"}}Post{{end}}',
    ... })
    >>> Environment(assets).render_page_to_string("post", {"Body": "<b>hi</b>"})
    '<h1>Post</h1>&lt;b&gt;hi&lt;/b&gt;'

Architecture:
    AssetFS → parse_set → Lexer → Parser → TemplateSet → Executor → sink

Template language:
    {{define "n"}}…{{end}}, {{template "n" .}}, {{block "n" .}}…{{end}},
    {{if}}/{{else if}}/{{else}}, {{range}}, {{with}}, {{.Field}}, {{$}},
    pipelines and the built-in functions html, len, not, and, or, eq, ne,
    print and index.

Strict Mode:
    A field that cannot be resolved raises UndefinedError; a {{template}}
    call naming an undefined template fails at parse time with
    MissingTemplateError.

Thread-Safety:
    AssetFS and TemplateSet are immutable once built. Per-render state lives
    in a ContextVar, so concurrent renders do not interfere.

"""

from embedded_assets._types import Token, TokenType
from embedded_assets.assets import ZERO_TIME, Asset, AssetFile, AssetFS, AssetInfo
from embedded_assets.environment import (
    DEFAULT_FUNCS,
    AssetNotFoundError,
    Environment,
    ErrorCode,
    MissingTemplateError,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
)
from embedded_assets.render import render_page, render_page_to_string
from embedded_assets.render_context import RenderContext, get_render_context, render_context
from embedded_assets.static import load_assets
from embedded_assets.template import Markup, TemplateSet
from embedded_assets.utils.html import html_escape

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_FUNCS",
    "ZERO_TIME",
    "Asset",
    "AssetFS",
    "AssetFile",
    "AssetInfo",
    "AssetNotFoundError",
    "Environment",
    "ErrorCode",
    "Markup",
    "MissingTemplateError",
    "RenderContext",
    "SourceSnippet",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSet",
    "TemplateSyntaxError",
    "Token",
    "TokenType",
    "UndefinedError",
    "__version__",
    "get_render_context",
    "html_escape",
    "load_assets",
    "render_context",
    "render_page",
    "render_page_to_string",
]
