"""Output nodes for the template AST."""

from __future__ import annotations

from dataclasses import dataclass

from embedded_assets.nodes.base import Node
from embedded_assets.nodes.expressions import Pipeline


@dataclass(frozen=True, slots=True)
class Output(Node):
    """Print action: {{pipeline}}"""

    pipeline: Pipeline


@dataclass(frozen=True, slots=True)
class Data(Node):
    """Raw text between actions."""

    value: str
