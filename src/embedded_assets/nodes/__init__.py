"""Immutable AST nodes produced by the parser.

Node Categories:
- Output: Data, Output
- Structure: Template, TemplateCall, Block
- Control flow: If, Range, With
- Expressions: Const, Dot, Root, Field, Call, Pipeline

"""

from embedded_assets.nodes.base import Node
from embedded_assets.nodes.control_flow import If, Range, With
from embedded_assets.nodes.expressions import Call, Const, Dot, Expr, Field, Pipeline, Root
from embedded_assets.nodes.output import Data, Output
from embedded_assets.nodes.structure import Block, Template, TemplateCall

__all__ = [
    "Block",
    "Call",
    "Const",
    "Data",
    "Dot",
    "Expr",
    "Field",
    "If",
    "Node",
    "Output",
    "Pipeline",
    "Range",
    "Root",
    "Template",
    "TemplateCall",
    "With",
]
