"""Token navigation and block-stack handling shared by the parser mixins."""

from __future__ import annotations

from collections.abc import Sequence

from embedded_assets._types import Token, TokenType
from embedded_assets.environment.exceptions import ErrorCode
from embedded_assets.parser.errors import ParseError

_TOKEN_DESCRIPTIONS = {
    TokenType.ACTION_BEGIN: "'{{'",
    TokenType.ACTION_END: "'}}'",
    TokenType.PIPE: "'|'",
    TokenType.LPAREN: "'('",
    TokenType.RPAREN: "')'",
    TokenType.DOT: "'.'",
    TokenType.EOF: "end of template",
    TokenType.DATA: "text",
}


def describe(token: Token) -> str:
    """Human-readable token description for error messages."""
    if token.type in _TOKEN_DESCRIPTIONS:
        return _TOKEN_DESCRIPTIONS[token.type]
    if token.type == TokenType.STRING:
        return f"string {token.value!r}"
    if token.type == TokenType.FIELD:
        return f"field '.{token.value}'"
    return f"'{token.value}'"


class TokenNavigationMixin:
    """Cursor over the token list.

    Required Host Attributes:
        - _tokens: Sequence[Token]
        - _pos: int
        - _name, _filename, _source: for error messages
    """

    _tokens: Sequence[Token]
    _pos: int
    _name: str | None
    _filename: str | None
    _source: str | None

    @property
    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _peek(self, offset: int = 1) -> Token:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.type != TokenType.EOF:
            self._pos += 1
        return token

    def _match(self, *types: TokenType) -> bool:
        return self._current.type in types

    def _expect(self, type_: TokenType, message: str | None = None) -> Token:
        if self._current.type != type_:
            raise self._error(
                message
                or f"Expected {_TOKEN_DESCRIPTIONS.get(type_, type_.value)}, "
                f"got {describe(self._current)}"
            )
        return self._advance()

    def _error(
        self,
        message: str,
        token: Token | None = None,
        suggestion: str | None = None,
        code: ErrorCode = ErrorCode.UNEXPECTED_TOKEN,
    ) -> ParseError:
        return ParseError(
            message,
            token or self._current,
            source=self._source,
            filename=self._filename,
            suggestion=suggestion,
            name=self._name,
            code=code,
        )


class BlockStackMixin(TokenNavigationMixin):
    """Tracks open {{if}}/{{range}}/{{with}}/{{define}}/{{block}} actions.

    The stack gives unclosed-block errors the position of the opening
    action instead of the end of the file.
    """

    _block_stack: list[tuple[str, Token]]

    def _push_block(self, kind: str, token: Token) -> None:
        self._block_stack.append((kind, token))

    def _pop_block(self) -> None:
        self._block_stack.pop()

    def _at_keyword(self, *keywords: str) -> bool:
        """True if the cursor is at ``{{`` followed by one of ``keywords``."""
        if self._current.type != TokenType.ACTION_BEGIN:
            return False
        following = self._peek()
        return following.type == TokenType.NAME and following.value in keywords

    def _consume_end_tag(self, kind: str) -> None:
        """Consume ``{{end}}`` closing the innermost ``kind`` block."""
        if self._current.type == TokenType.EOF:
            _, opener = self._block_stack[-1]
            raise self._error(
                f"Unclosed {{{{{kind}}}}} opened at line {opener.lineno}",
                opener,
                suggestion=f"Add {{{{end}}}} to close the {{{{{kind}}}}} action",
                code=ErrorCode.UNCLOSED_BLOCK,
            )

        if not self._at_keyword("end"):
            raise self._error(
                f"Expected {{{{end}}}} to close {{{{{kind}}}}}, got {describe(self._peek())}",
                self._peek(),
                code=ErrorCode.UNCLOSED_BLOCK,
            )
        self._advance()  # consume '{{'
        self._advance()  # consume 'end'
        self._expect(TokenType.ACTION_END)
