"""Parser for the template action language."""

from embedded_assets.parser.core import ParseResult, Parser, parse
from embedded_assets.parser.errors import ParseError

__all__ = ["ParseError", "ParseResult", "Parser", "parse"]
