"""Lexer for the template action language.

Splits template source into DATA tokens (literal text) and actions
delimited by ``{{`` and ``}}``. Inside an action the lexer produces operand
and punctuation tokens; the parser decides what they mean.

Delimiters:
    ``{{ ... }}``        action
    ``{{- ... -}}``      action that trims whitespace on the marked side
    ``{{/* ... */}}``    comment (dropped, may span lines)

The trim marker must be separated from the action body by whitespace
(``{{- .X}}``), so ``{{-3}}`` still prints the number -3.

Example:
    >>> [t.type.name for t in tokenize('{{define "title"}}About{{end}}')]
    ['ACTION_BEGIN', 'NAME', 'STRING', 'ACTION_END', 'DATA',
     'ACTION_BEGIN', 'NAME', 'ACTION_END', 'EOF']

"""

from __future__ import annotations

import ast
import re
from collections.abc import Iterator

from embedded_assets._types import Token, TokenType
from embedded_assets.environment.exceptions import ErrorCode, TemplateSyntaxError

ACTION_OPEN = "{{"
ACTION_CLOSE = "}}"
COMMENT_OPEN = "/*"
COMMENT_CLOSE = "*/"

_TRIM_CHARS = " \t\r\n"

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_FIELD_CHAIN_RE = re.compile(r"(?:\.[A-Za-z_][A-Za-z0-9_]*)+")
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][-+]?\d+)?")

_PUNCTUATION = {
    "|": TokenType.PIPE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
}


class LexerError(TemplateSyntaxError):
    """Tokenization error with source position."""


class Lexer:
    """Tokenizer for one template source.

    Thread-Safety:
        Each Lexer instance holds its own cursor; create one per source.
    """

    __slots__ = ("_filename", "_name", "_pos", "_source")

    def __init__(self, source: str, name: str | None = None, filename: str | None = None):
        self._source = source
        self._name = name
        self._filename = filename
        self._pos = 0

    def tokenize(self) -> Iterator[Token]:
        """Yield tokens for the whole source, ending with EOF."""
        source = self._source
        trim_next = False

        while True:
            start = source.find(ACTION_OPEN, self._pos)
            text = source[self._pos :] if start < 0 else source[self._pos : start]
            text_pos = self._pos

            if trim_next:
                stripped = text.lstrip(_TRIM_CHARS)
                text_pos += len(text) - len(stripped)
                text = stripped
                trim_next = False

            if start < 0:
                if text:
                    yield self._token(TokenType.DATA, text, text_pos)
                break

            inner = start + len(ACTION_OPEN)
            trim_left = source.startswith("-", inner) and source[inner + 1 : inner + 2] in (
                " ", "\t", "\r", "\n",
            )
            if trim_left:
                text = text.rstrip(_TRIM_CHARS)
                inner += 2

            if text:
                yield self._token(TokenType.DATA, text, text_pos)

            if source.startswith(COMMENT_OPEN, inner):
                trim_next = self._skip_comment(start, inner)
                continue

            yield self._token(TokenType.ACTION_BEGIN, ACTION_OPEN, start)
            self._pos = inner
            trim_next = yield from self._lex_action(start)

        yield self._token(TokenType.EOF, "", len(source))

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _lex_action(self, action_start: int) -> Iterator[Token]:
        """Lex tokens inside an action. Returns True if the close trims."""
        source = self._source
        length = len(source)

        while True:
            ws_start = self._pos
            while self._pos < length and source[self._pos] in _TRIM_CHARS:
                self._pos += 1
            had_space = self._pos > ws_start

            if self._pos >= length:
                raise self._error(
                    "Unclosed action",
                    action_start,
                    code=ErrorCode.UNCLOSED_ACTION,
                    suggestion="Close the action with '}}'",
                )

            if had_space and source.startswith("-" + ACTION_CLOSE, self._pos):
                yield self._token(TokenType.ACTION_END, ACTION_CLOSE, self._pos + 1)
                self._pos += 1 + len(ACTION_CLOSE)
                return True

            if source.startswith(ACTION_CLOSE, self._pos):
                yield self._token(TokenType.ACTION_END, ACTION_CLOSE, self._pos)
                self._pos += len(ACTION_CLOSE)
                return False

            yield self._lex_operand()

    def _lex_operand(self) -> Token:
        source = self._source
        pos = self._pos
        char = source[pos]

        if char == '"':
            return self._lex_string(pos)

        if char == "`":
            end = source.find("`", pos + 1)
            if end < 0:
                raise self._error(
                    "Unterminated raw string", pos, code=ErrorCode.UNTERMINATED_STRING
                )
            self._pos = end + 1
            return self._token(TokenType.STRING, source[pos + 1 : end], pos)

        if char == ".":
            match = _FIELD_CHAIN_RE.match(source, pos)
            if match:
                self._pos = match.end()
                return self._token(TokenType.FIELD, match.group()[1:], pos)
            number = _NUMBER_RE.match(source, pos)
            if number:
                self._pos = number.end()
                return self._token(TokenType.NUMBER, number.group(), pos)
            self._pos += 1
            return self._token(TokenType.DOT, ".", pos)

        if char == "$":
            end = pos + 1
            ident = _IDENT_RE.match(source, end)
            if ident:
                end = ident.end()
            chain = _FIELD_CHAIN_RE.match(source, end)
            if chain:
                end = chain.end()
            self._pos = end
            return self._token(TokenType.VARIABLE, source[pos:end], pos)

        number = _NUMBER_RE.match(source, pos)
        if number and (char.isdigit() or char in "+-"):
            self._pos = number.end()
            return self._token(TokenType.NUMBER, number.group(), pos)

        ident = _IDENT_RE.match(source, pos)
        if ident:
            self._pos = ident.end()
            return self._token(TokenType.NAME, ident.group(), pos)

        if char in _PUNCTUATION:
            self._pos += 1
            return self._token(_PUNCTUATION[char], char, pos)

        raise self._error(
            f"Unexpected character {char!r} in action",
            pos,
            code=ErrorCode.UNEXPECTED_CHARACTER,
        )

    def _lex_string(self, pos: int) -> Token:
        source = self._source
        end = pos + 1
        while end < len(source):
            char = source[end]
            if char == "\\":
                if source[end + 1 : end + 2] in ("", "\n"):
                    break
                end += 2
                continue
            if char == "\n":
                break
            if char == '"':
                literal = source[pos : end + 1]
                try:
                    value = ast.literal_eval(literal)
                except (SyntaxError, ValueError):
                    raise self._error(
                        f"Invalid escape in string literal {literal}",
                        pos,
                        code=ErrorCode.UNTERMINATED_STRING,
                    ) from None
                self._pos = end + 1
                return self._token(TokenType.STRING, value, pos)
            end += 1

        raise self._error(
            "Unterminated string literal",
            pos,
            code=ErrorCode.UNTERMINATED_STRING,
            suggestion='Close the string with " on the same line, or use a `raw string`',
        )

    def _skip_comment(self, action_start: int, comment_start: int) -> bool:
        """Skip ``/* ... */`` and its closing delimiter. Returns trim flag."""
        source = self._source
        end = source.find(COMMENT_CLOSE, comment_start + len(COMMENT_OPEN))
        if end < 0:
            raise self._error(
                "Unclosed comment", action_start, code=ErrorCode.UNCLOSED_COMMENT
            )
        end += len(COMMENT_CLOSE)

        trim = False
        if source.startswith(" -" + ACTION_CLOSE, end):
            trim = True
            end += 2
        if not source.startswith(ACTION_CLOSE, end):
            raise self._error(
                "Comment must be followed directly by '}}'",
                end,
                code=ErrorCode.UNCLOSED_COMMENT,
            )
        self._pos = end + len(ACTION_CLOSE)
        return trim

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    def _location(self, pos: int) -> tuple[int, int]:
        lineno = self._source.count("\n", 0, pos) + 1
        col_offset = pos - (self._source.rfind("\n", 0, pos) + 1)
        return lineno, col_offset

    def _token(self, type_: TokenType, value: str, pos: int) -> Token:
        lineno, col_offset = self._location(pos)
        return Token(type_, value, lineno, col_offset)

    def _error(
        self,
        message: str,
        pos: int,
        *,
        code: ErrorCode,
        suggestion: str | None = None,
    ) -> LexerError:
        lineno, col_offset = self._location(pos)
        return LexerError(
            message,
            lineno=lineno,
            name=self._name,
            filename=self._filename,
            source=self._source,
            col_offset=col_offset,
            code=code,
            suggestion=suggestion,
        )


def tokenize(source: str, name: str | None = None, filename: str | None = None) -> list[Token]:
    """Tokenize ``source`` into a list ending with an EOF token."""
    return list(Lexer(source, name, filename).tokenize())
