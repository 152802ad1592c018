"""Parser mixins for block-level actions."""

from embedded_assets.parser.blocks.control_flow import ControlFlowBlockParsingMixin
from embedded_assets.parser.blocks.core import BlockStackMixin, TokenNavigationMixin
from embedded_assets.parser.blocks.template_structure import TemplateStructureBlockParsingMixin

__all__ = [
    "BlockStackMixin",
    "ControlFlowBlockParsingMixin",
    "TemplateStructureBlockParsingMixin",
    "TokenNavigationMixin",
]
