"""Parser for the template action language.

Builds an immutable tree from the lexer's token stream. One parse handles
one asset: the result holds the asset's top-level template plus every
template it declares with {{define}} or {{block}}.

Example:
    >>> result = parse('{{define "title"}}About{{end}}', name="about.tmpl")
    >>> sorted(result.definitions)
    ['title']

"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from embedded_assets._types import Token, TokenType
from embedded_assets.lexer import tokenize
from embedded_assets.nodes import Data, Output, Template
from embedded_assets.nodes.base import Node
from embedded_assets.parser.blocks import (
    ControlFlowBlockParsingMixin,
    TemplateStructureBlockParsingMixin,
)
from embedded_assets.parser.expressions import ExpressionParsingMixin


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Output of parsing one asset.

    Attributes:
        tree: The asset's top-level body, named after the asset
        definitions: Templates declared by {{define}} and {{block}},
            in declaration order
    """

    tree: Template
    definitions: Mapping[str, Template]


class Parser(
    TemplateStructureBlockParsingMixin,
    ControlFlowBlockParsingMixin,
    ExpressionParsingMixin,
):
    """Recursive-descent parser over a token list.

    Not thread-safe; create one per source.
    """

    def __init__(
        self,
        tokens: Sequence[Token],
        name: str,
        filename: str | None = None,
        source: str | None = None,
        funcs: Iterable[str] = (),
    ):
        self._tokens = tokens
        self._pos = 0
        self._name = name
        self._filename = filename
        self._source = source
        self._funcs = frozenset(funcs)
        self._block_stack: list[tuple[str, Token]] = []
        self._definitions: dict[str, Template] = {}

    def parse(self) -> ParseResult:
        body = self._parse_body()

        if self._current.type != TokenType.EOF:
            stray = self._peek()
            raise self._error(
                f"Unexpected {{{{{stray.value}}}}} with no open action",
                stray,
                suggestion="Remove it, or open the {{if}}/{{range}}/{{with}} it should close",
            )

        tree = Template(
            lineno=1,
            col_offset=0,
            name=self._name,
            body=tuple(body),
            filename=self._filename,
        )
        return ParseResult(tree=tree, definitions=dict(self._definitions))

    def _parse_body(self) -> list[Node]:
        """Parse nodes until EOF or an {{end}}/{{else}} action."""
        nodes: list[Node] = []
        while True:
            token = self._current
            if token.type == TokenType.EOF:
                return nodes
            if token.type == TokenType.DATA:
                self._advance()
                nodes.append(
                    Data(lineno=token.lineno, col_offset=token.col_offset, value=token.value)
                )
                continue
            if self._at_keyword("end", "else"):
                return nodes

            node = self._parse_action()
            if node is not None:
                nodes.append(node)

    def _parse_action(self) -> Node | None:
        begin = self._expect(TokenType.ACTION_BEGIN)
        keyword = self._current.value if self._current.type == TokenType.NAME else None

        match keyword:
            case "define":
                self._parse_define()
                return None
            case "template":
                return self._parse_template_call()
            case "block":
                return self._parse_block_tag()
            case "if":
                return self._parse_if()
            case "range":
                return self._parse_range()
            case "with":
                return self._parse_with()

        pipeline = self._parse_pipeline()
        self._expect(TokenType.ACTION_END)
        return Output(lineno=begin.lineno, col_offset=begin.col_offset, pipeline=pipeline)


def parse(
    source: str,
    name: str,
    filename: str | None = None,
    funcs: Iterable[str] = (),
) -> ParseResult:
    """Tokenize and parse ``source`` in one step."""
    tokens = tokenize(source, name=name, filename=filename)
    return Parser(tokens, name, filename=filename, source=source, funcs=funcs).parse()
