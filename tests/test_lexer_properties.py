"""Property-based tests for the lexer.

Invariants that must hold for all inputs:

- Plain text round-trips through tokenization unchanged
- Field actions produce balanced delimiter tokens
- Comments never reach the token stream
- Arbitrary input raises nothing but TemplateSyntaxError
"""

from __future__ import annotations

from hypothesis import given, settings

from embedded_assets._types import TokenType
from embedded_assets.environment.exceptions import TemplateSyntaxError
from embedded_assets.lexer import tokenize

from .strategies import (
    action_soup,
    arbitrary_template_source,
    comment_action,
    field_action,
    plain_text,
    template_fragment,
)


class TestLexerProperties:
    """Property-based lexer invariants."""

    @given(source=plain_text)
    @settings(max_examples=200)
    def test_plain_text_roundtrip(self, source: str) -> None:
        """Text without delimiters is one DATA token holding the input."""
        tokens = tokenize(source)
        assert [t.type for t in tokens] == [TokenType.DATA, TokenType.EOF]
        assert tokens[0].value == source

    @given(source=field_action)
    @settings(max_examples=200)
    def test_field_action_is_balanced(self, source: str) -> None:
        tokens = tokenize(source)
        assert [t.type for t in tokens] == [
            TokenType.ACTION_BEGIN,
            TokenType.FIELD,
            TokenType.ACTION_END,
            TokenType.EOF,
        ]
        assert "." + tokens[1].value == source[2:-2]

    @given(source=comment_action)
    def test_comment_produces_no_tokens(self, source: str) -> None:
        assert [t.type for t in tokenize(source)] == [TokenType.EOF]

    @given(source=template_fragment)
    @settings(max_examples=200)
    def test_fragment_delimiters_balanced(self, source: str) -> None:
        depth = 0
        for token in tokenize(source):
            if token.type == TokenType.ACTION_BEGIN:
                depth += 1
            elif token.type == TokenType.ACTION_END:
                depth -= 1
            assert depth in (0, 1)
        assert depth == 0

    @given(source=template_fragment)
    @settings(max_examples=200)
    def test_positions_are_monotonic(self, source: str) -> None:
        positions = [(t.lineno, t.col_offset) for t in tokenize(source)]
        assert positions == sorted(positions)

    @given(source=arbitrary_template_source)
    @settings(max_examples=300)
    def test_no_unhandled_crash(self, source: str) -> None:
        """The lexer may reject input, but only with TemplateSyntaxError."""
        try:
            tokenize(source)
        except TemplateSyntaxError:
            pass

    @given(source=action_soup)
    @settings(max_examples=300)
    def test_action_soup_no_unhandled_crash(self, source: str) -> None:
        try:
            tokens = tokenize(source)
        except TemplateSyntaxError:
            return
        assert tokens[-1].type == TokenType.EOF
