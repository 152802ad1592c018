"""Control flow block parsing.

Provides mixin for parsing {{if}}, {{range}} and {{with}}.
"""

from __future__ import annotations

from embedded_assets._types import Token, TokenType
from embedded_assets.nodes import If, Pipeline, Range, With
from embedded_assets.nodes.base import Node
from embedded_assets.parser.blocks.core import BlockStackMixin


class ControlFlowBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing control flow actions.

    Required Host Attributes:
        - All from BlockStackMixin
        - _parse_body: method
        - _parse_pipeline: method
    """

    def _parse_if(self) -> If:
        """Parse {{if p}}...{{else if q}}...{{else}}...{{end}}."""
        start = self._advance()  # consume 'if'
        self._push_block("if", start)
        test = self._parse_pipeline()
        self._expect(TokenType.ACTION_END)
        node = self._parse_if_rest(start, test)
        self._pop_block()
        return node

    def _parse_if_rest(self, start: Token, test: Pipeline) -> If:
        body = tuple(self._parse_body())
        else_: tuple[Node, ...] = ()

        if self._at_keyword("else"):
            self._advance()  # consume '{{'
            self._advance()  # consume 'else'
            if self._current.type == TokenType.NAME and self._current.value == "if":
                # {{else if}} shares the outer {{end}}
                nested_start = self._advance()
                nested_test = self._parse_pipeline()
                self._expect(TokenType.ACTION_END)
                else_ = (self._parse_if_rest(nested_start, nested_test),)
                return If(
                    lineno=start.lineno,
                    col_offset=start.col_offset,
                    test=test,
                    body=body,
                    else_=else_,
                )
            self._expect(TokenType.ACTION_END)
            else_ = tuple(self._parse_body())

        self._consume_end_tag("if")
        return If(
            lineno=start.lineno,
            col_offset=start.col_offset,
            test=test,
            body=body,
            else_=else_,
        )

    def _parse_range(self) -> Range:
        """Parse {{range p}}...{{else}}...{{end}}."""
        start = self._advance()  # consume 'range'
        pipeline, body, else_ = self._parse_scoped_block("range", start)
        return Range(
            lineno=start.lineno,
            col_offset=start.col_offset,
            pipeline=pipeline,
            body=body,
            else_=else_,
        )

    def _parse_with(self) -> With:
        """Parse {{with p}}...{{else}}...{{end}}."""
        start = self._advance()  # consume 'with'
        pipeline, body, else_ = self._parse_scoped_block("with", start)
        return With(
            lineno=start.lineno,
            col_offset=start.col_offset,
            pipeline=pipeline,
            body=body,
            else_=else_,
        )

    def _parse_scoped_block(
        self, kind: str, start: Token
    ) -> tuple[Pipeline, tuple[Node, ...], tuple[Node, ...]]:
        self._push_block(kind, start)
        pipeline = self._parse_pipeline()
        self._expect(TokenType.ACTION_END)

        body = tuple(self._parse_body())
        else_: tuple[Node, ...] = ()
        if self._at_keyword("else"):
            self._advance()  # consume '{{'
            self._advance()  # consume 'else'
            self._expect(TokenType.ACTION_END)
            else_ = tuple(self._parse_body())

        self._consume_end_tag(kind)
        self._pop_block()
        return pipeline, body, else_
