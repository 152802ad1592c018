"""Template Definition Set: parsed templates composed from several assets.

A TemplateSet is the union of every template parsed into it: each asset's
top-level body (named after the asset's base name) plus every {{define}}
and {{block}} it declares. Composition happens here, at parse time:

- The first asset parsed becomes the entry template run by ``execute()``.
- A later definition replaces an earlier one of the same name, which is
  how a page overrides a layout's {{block}} default.
- A definition whose body is only whitespace never replaces an existing
  one, so a page's blank top level does not erase anything.

Execution never changes the set; concurrent ``execute()`` calls on one set
are safe because per-render state lives in a RenderContext.

Example:
    >>> ts = TemplateSet()
    >>> ts.parse('<title>{{template "title"}}</title>', "base.tmpl")
    >>> ts.parse('{{define "title"}}About{{end}}', "about.tmpl")
    >>> ts.render()
    '<title>About</title>'

"""

from __future__ import annotations

import io
import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from typing import Any

from embedded_assets.environment.exceptions import MissingTemplateError, TemplateRuntimeError
from embedded_assets.environment.funcs import DEFAULT_FUNCS
from embedded_assets.nodes import Block, If, Range, Template, TemplateCall, With
from embedded_assets.nodes.base import Node
from embedded_assets.nodes.structure import is_blank
from embedded_assets.parser import parse
from embedded_assets.render_context import DEFAULT_MAX_DEPTH, render_context
from embedded_assets.template.executor import Executor, Writer

logger = logging.getLogger(__name__)


class TemplateSet:
    """Named templates ready for execution.

    Attributes:
        entry: Name of the template ``execute()`` runs (first asset parsed)
        autoescape: HTML-escape printed values that are not Markup

    Methods:
        parse(source, name, filename): Add one asset's templates
        check_references(): Fail if any {{template}} call is unresolved
        execute(sink, data): Run the entry template, streaming to ``sink``
        execute_template(sink, name, data): Run a named template
        render(data): Run the entry template into a string
    """

    __slots__ = ("_entry", "_funcs", "_max_depth", "_sources", "_templates", "autoescape")

    def __init__(
        self,
        *,
        autoescape: bool = True,
        funcs: Mapping[str, Callable[..., Any]] | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.autoescape = autoescape
        self._funcs: dict[str, Callable[..., Any]] = {**DEFAULT_FUNCS, **(funcs or {})}
        self._max_depth = max_depth
        self._templates: dict[str, Template] = {}
        self._sources: dict[str, str] = {}
        self._entry: str | None = None

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def __repr__(self) -> str:
        return f"<TemplateSet entry={self._entry!r} templates={sorted(self._templates)!r}>"

    @property
    def entry(self) -> str | None:
        return self._entry

    def names(self) -> list[str]:
        """Sorted names of all templates in the set."""
        return sorted(self._templates)

    def get(self, name: str) -> Template | None:
        return self._templates.get(name)

    def parse(self, source: str, name: str, filename: str | None = None) -> None:
        """Parse one asset into the set.

        Args:
            source: Template source text
            name: Name for the asset's top-level template (its base name)
            filename: Asset path, used in error messages (defaults to ``name``)

        Raises:
            TemplateSyntaxError: ``source`` is not valid template syntax
        """
        filename = filename or name
        result = parse(source, name=name, filename=filename, funcs=self._funcs)
        self._sources[filename] = source

        self._add(result.tree)
        for template in result.definitions.values():
            self._add(template)

        if self._entry is None:
            self._entry = name
        logger.debug(
            f"Parsed {filename}: {len(result.definitions)} definition(s), "
            f"{len(self._templates)} template(s) in set"
        )

    def _add(self, template: Template) -> None:
        if template.name in self._templates and is_blank(template.body):
            return
        self._templates[template.name] = template

    def check_references(self) -> None:
        """Verify every {{template "x"}} call names a template in the set.

        Bodies of {{block}} defaults are checked only while the default is
        still the registered definition, since an overridden default never
        runs.

        Raises:
            MissingTemplateError: for the first unresolved call
        """
        for template in self._templates.values():
            for call in _template_calls(template.body):
                if call.name not in self._templates:
                    raise MissingTemplateError(
                        call.name,
                        template.name,
                        lineno=call.lineno,
                        filename=template.filename,
                        source=self._sources.get(template.filename or ""),
                        col_offset=call.col_offset,
                    )

    def execute(self, sink: Writer, data: Any = None) -> None:
        """Execute the entry template against ``data``, writing to ``sink``.

        Raises:
            TemplateRuntimeError: execution failed (UndefinedError for
                unresolved fields); output written so far stays written
        """
        if self._entry is None:
            raise TemplateRuntimeError("Template set is empty; parse an asset first")
        self.execute_template(sink, self._entry, data)

    def execute_template(self, sink: Writer, name: str, data: Any = None) -> None:
        """Execute template ``name`` against ``data``, writing to ``sink``."""
        logger.debug(f"Executing template {name!r}")
        with render_context(self._max_depth) as ctx:
            executor = Executor(
                self._templates,
                self._sources,
                sink,
                self._funcs,
                ctx,
                autoescape=self.autoescape,
            )
            executor.execute(name, data)

    def render(self, data: Any = None, name: str | None = None) -> str:
        """Execute into a string. ``name`` defaults to the entry template."""
        buf = io.StringIO()
        if name is None:
            self.execute(buf, data)
        else:
            self.execute_template(buf, name, data)
        return buf.getvalue()


def _template_calls(nodes: Sequence[Node]) -> Iterator[TemplateCall]:
    for node in nodes:
        match node:
            case TemplateCall():
                yield node
            case If() | Range() | With():
                yield from _template_calls(node.body)
                yield from _template_calls(node.else_)
            case Block():
                # The block's body is registered as its own template
                continue
