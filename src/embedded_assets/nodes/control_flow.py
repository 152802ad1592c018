"""Control flow nodes for the template AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from embedded_assets.nodes.base import Node
from embedded_assets.nodes.expressions import Pipeline


@dataclass(frozen=True, slots=True)
class If(Node):
    """Conditional: {{if p}}...{{else if q}}...{{else}}...{{end}}

    ``{{else if}}`` chains are represented as a nested If in ``else_``.
    """

    test: Pipeline
    body: Sequence[Node]
    else_: Sequence[Node] = ()


@dataclass(frozen=True, slots=True)
class Range(Node):
    """Iteration: {{range p}}...{{else}}...{{end}}

    The body runs with dot set to each element; ``else_`` runs when the
    value has no elements.
    """

    pipeline: Pipeline
    body: Sequence[Node]
    else_: Sequence[Node] = ()


@dataclass(frozen=True, slots=True)
class With(Node):
    """Rebind dot: {{with p}}...{{else}}...{{end}}"""

    pipeline: Pipeline
    body: Sequence[Node]
    else_: Sequence[Node] = ()
