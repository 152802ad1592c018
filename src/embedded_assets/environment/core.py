"""Environment: rendering configuration for pages built from an AssetFS.

A page is rendered by composing a base layout with one page template:
both are parsed into a fresh TemplateSet (the layout first, so it is the
entry template) and the layout executes, calling into the blocks the page
defines. The Environment carries the knobs for that composition.

Definition sets are built per call and never cached.

Example:
    >>> from embedded_assets import AssetFS, Environment
    >>> assets = AssetFS({
    ...     "base.tmpl": '<h1>{{template "title" .}}</h1>',
    ...     "pages/about.tmpl": '{{define "title"}}About{{end}}',
    ... })
    >>> Environment(assets).render_page_to_string("about")
    '<h1>About</h1>'

"""

from __future__ import annotations

import io
import logging
import sys
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from embedded_assets.render_context import DEFAULT_MAX_DEPTH

if TYPE_CHECKING:
    from embedded_assets.assets import AssetFS
    from embedded_assets.template import TemplateSet, Writer

logger = logging.getLogger(__name__)


class Environment:
    """Configuration for rendering pages out of one asset set.

    Attributes:
        assets: The AssetFS templates are read from
        autoescape: HTML-escape printed values that are not Markup
        base_template: Asset path of the layout every page is composed with
        page_pattern: ``str.format`` pattern mapping a page name to its path
        funcs: Extra template functions, merged over the built-ins
        max_depth: Maximum {{template}} call depth

    Methods:
        page_paths(name): Asset paths composed for page ``name``
        parse_page(name): Parse those paths into a TemplateSet
        render_page(name, context, sink): Stream the page to ``sink``
        render_page_to_string(name, context): Render the page to a string
    """

    __slots__ = ("assets", "autoescape", "base_template", "funcs", "max_depth", "page_pattern")

    def __init__(
        self,
        assets: AssetFS,
        *,
        autoescape: bool = True,
        base_template: str = "base.tmpl",
        page_pattern: str = "pages/{name}.tmpl",
        funcs: Mapping[str, Callable[..., Any]] | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        if "{name}" not in page_pattern:
            raise ValueError(f"page_pattern must contain '{{name}}', got {page_pattern!r}")
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")

        self.assets = assets
        self.autoescape = autoescape
        self.base_template = base_template
        self.page_pattern = page_pattern
        self.funcs: dict[str, Callable[..., Any]] = dict(funcs or {})
        self.max_depth = max_depth

    def __repr__(self) -> str:
        return (
            f"<Environment base={self.base_template!r} pages={self.page_pattern!r} "
            f"autoescape={self.autoescape}>"
        )

    def page_paths(self, page_name: str) -> list[str]:
        """Asset paths for ``page_name``, layout first."""
        return [self.base_template, self.page_pattern.format(name=page_name)]

    def parse_page(self, page_name: str) -> TemplateSet:
        """Parse the layout and the page into a fresh definition set.

        Raises:
            TemplateNotFoundError: the layout or the page asset is missing
            TemplateSyntaxError: either asset has invalid syntax, or a
                {{template}} call names a template neither defines
        """
        return self.assets.parse_set(
            *self.page_paths(page_name),
            autoescape=self.autoescape,
            funcs=self.funcs,
            max_depth=self.max_depth,
        )

    def render_page(
        self,
        page_name: str,
        context: Any = None,
        sink: Writer | None = None,
    ) -> None:
        """Render page ``page_name`` against ``context``, writing to ``sink``.

        Output is written piece by piece as execution produces it. If
        execution fails part-way, what was already written stays written.

        Args:
            page_name: Page name, substituted into ``page_pattern``
            context: Data the layout executes against (dot and ``$``)
            sink: Text writer; defaults to ``sys.stdout``

        Raises:
            TemplateNotFoundError: a composed asset is missing
            TemplateSyntaxError: parsing or reference resolution failed
            TemplateRuntimeError: execution failed, including sink errors
        """
        if sink is None:
            sink = sys.stdout
        template_set = self.parse_page(page_name)
        logger.debug(f"Rendering page {page_name!r} ({len(template_set)} template(s))")
        template_set.execute(sink, context)

    def render_page_to_string(self, page_name: str, context: Any = None) -> str:
        """Render page ``page_name`` and return the output."""
        buf = io.StringIO()
        self.render_page(page_name, context, buf)
        return buf.getvalue()
