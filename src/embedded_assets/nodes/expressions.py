"""Expression nodes for the template AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from embedded_assets.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Expr(Node):
    """Base class for expressions."""


@dataclass(frozen=True, slots=True)
class Const(Expr):
    """Literal value: string, number, true, false, nil."""

    value: str | int | float | bool | None


@dataclass(frozen=True, slots=True)
class Dot(Expr):
    """The current data value: {{.}}"""


@dataclass(frozen=True, slots=True)
class Root(Expr):
    """The data passed to the executing template: {{$}}"""


@dataclass(frozen=True, slots=True)
class Field(Expr):
    """Field chain on a receiver: {{.Page.Title}} or {{$.Title}}"""

    receiver: Expr
    names: Sequence[str]


@dataclass(frozen=True, slots=True)
class Call(Expr):
    """Function call: {{len .Items}}

    In a pipeline stage the previous stage's value is passed as the final
    argument.
    """

    func: str
    args: Sequence[Expr]


@dataclass(frozen=True, slots=True)
class Pipeline(Expr):
    """Chained commands: {{.Title | html}}"""

    stages: Sequence[Expr]
