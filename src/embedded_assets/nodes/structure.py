"""Template structure nodes for the template AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from embedded_assets.nodes.base import Node
from embedded_assets.nodes.expressions import Pipeline
from embedded_assets.nodes.output import Data


@dataclass(frozen=True, slots=True)
class Template(Node):
    """A named template: a file's top-level body or a {{define}} body.

    ``filename`` is the asset path the template was parsed from, used to
    attach source snippets to errors.
    """

    name: str
    body: Sequence[Node]
    filename: str | None = None


@dataclass(frozen=True, slots=True)
class TemplateCall(Node):
    """Execute a named template: {{template "name" pipeline}}"""

    name: str
    pipeline: Pipeline | None = None


@dataclass(frozen=True, slots=True)
class Block(Node):
    """Define and execute in place: {{block "name" pipeline}}default{{end}}

    The body is registered as template ``name`` at parse time. Execution
    looks the name up in the definition set, so a later {{define}} of the
    same name replaces the default.
    """

    name: str
    pipeline: Pipeline
    body: Sequence[Node]


def is_blank(body: Sequence[Node]) -> bool:
    """True if ``body`` holds nothing but whitespace text."""
    return all(isinstance(node, Data) and not node.value.strip() for node in body)
