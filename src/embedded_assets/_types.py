"""Token types shared by the lexer and parser."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """Kinds of token produced by the lexer.

    Text outside actions becomes DATA. Everything between ``{{`` and ``}}``
    is split into the operand and punctuation kinds below. Comments never
    reach the token stream.
    """

    DATA = "data"
    ACTION_BEGIN = "action_begin"
    ACTION_END = "action_end"

    NAME = "name"  # identifiers and keywords: define, if, len, true
    FIELD = "field"  # .Title or .Page.Title (chain kept in one token)
    DOT = "dot"  # .
    VARIABLE = "variable"  # $ or $.Title
    STRING = "string"
    NUMBER = "number"

    PIPE = "pipe"
    LPAREN = "lparen"
    RPAREN = "rparen"

    EOF = "eof"


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexed token with its source position.

    Attributes:
        type: Token kind
        value: Decoded value (string literals are unquoted)
        lineno: 1-based line number
        col_offset: 0-based column offset
    """

    type: TokenType
    value: str
    lineno: int
    col_offset: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.lineno}:{self.col_offset})"
