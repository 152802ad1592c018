"""Pipeline and operand parsing.

Grammar:
    pipeline := command ('|' call)*
    command  := NAME operand* | operand
    operand  := '.' | FIELD | VARIABLE | STRING | NUMBER
              | 'true' | 'false' | 'nil' | NAME | '(' pipeline ')'

A bare NAME is a function call. In an operand position it is called with
no arguments; in a later pipeline stage the previous value is appended as
its final argument.
"""

from __future__ import annotations

import re
from difflib import get_close_matches

from embedded_assets._types import Token, TokenType
from embedded_assets.environment.exceptions import ErrorCode
from embedded_assets.nodes import Call, Const, Dot, Expr, Field, Pipeline, Root
from embedded_assets.parser.blocks.core import TokenNavigationMixin, describe

KEYWORDS = frozenset({"block", "define", "else", "end", "if", "range", "template", "with"})

LITERALS: dict[str, bool | None] = {"true": True, "false": False, "nil": None}

_INT_RE = re.compile(r"[-+]?\d+")

_COMMAND_END = (TokenType.ACTION_END, TokenType.RPAREN, TokenType.PIPE, TokenType.EOF)


class ExpressionParsingMixin(TokenNavigationMixin):
    """Mixin for parsing pipelines.

    Required Host Attributes:
        - All from TokenNavigationMixin
        - _funcs: frozenset[str] of callable function names
    """

    _funcs: frozenset[str]

    def _parse_pipeline(self) -> Pipeline:
        start = self._current
        stages: list[Expr] = [self._parse_command()]

        while self._match(TokenType.PIPE):
            self._advance()  # consume '|'
            stage_token = self._current
            stage = self._parse_command()
            if not isinstance(stage, Call):
                raise self._error(
                    f"Cannot pipe into {describe(stage_token)}",
                    stage_token,
                    suggestion="Each stage after '|' must be a function, e.g. {{.Title | html}}",
                )
            stages.append(stage)

        return Pipeline(lineno=start.lineno, col_offset=start.col_offset, stages=tuple(stages))

    def _parse_command(self) -> Expr:
        token = self._current
        if token.type in _COMMAND_END:
            raise self._error(f"Missing value before {describe(token)}")

        if token.type == TokenType.NAME and token.value not in LITERALS:
            if token.value in KEYWORDS:
                raise self._error(f"Unexpected keyword '{token.value}' in pipeline")
            self._advance()
            self._check_function(token)
            args: list[Expr] = []
            while not self._match(*_COMMAND_END):
                args.append(self._parse_operand())
            return Call(
                lineno=token.lineno,
                col_offset=token.col_offset,
                func=token.value,
                args=tuple(args),
            )

        operand = self._parse_operand()
        if not self._match(*_COMMAND_END):
            raise self._error(
                f"Unexpected {describe(self._current)} after {describe(token)}",
                suggestion="Only functions take arguments; did you forget a '|'?",
            )
        return operand

    def _parse_operand(self) -> Expr:
        token = self._advance()
        lineno, col = token.lineno, token.col_offset

        match token.type:
            case TokenType.DOT:
                return Dot(lineno=lineno, col_offset=col)
            case TokenType.FIELD:
                return Field(
                    lineno=lineno,
                    col_offset=col,
                    receiver=Dot(lineno=lineno, col_offset=col),
                    names=tuple(token.value.split(".")),
                )
            case TokenType.VARIABLE:
                return self._parse_variable(token)
            case TokenType.STRING:
                return Const(lineno=lineno, col_offset=col, value=token.value)
            case TokenType.NUMBER:
                value: int | float = (
                    int(token.value) if _INT_RE.fullmatch(token.value) else float(token.value)
                )
                return Const(lineno=lineno, col_offset=col, value=value)
            case TokenType.LPAREN:
                pipeline = self._parse_pipeline()
                self._expect(TokenType.RPAREN)
                return pipeline
            case TokenType.NAME if token.value in LITERALS:
                return Const(lineno=lineno, col_offset=col, value=LITERALS[token.value])
            case TokenType.NAME if token.value not in KEYWORDS:
                self._check_function(token)
                return Call(lineno=lineno, col_offset=col, func=token.value, args=())

        raise self._error(f"Unexpected {describe(token)} in pipeline", token)

    def _parse_variable(self, token: Token) -> Expr:
        name, _, chain = token.value.partition(".")
        if name != "$":
            raise self._error(
                f"Variable '{name}' is not supported",
                token,
                suggestion="Use $ for the template's data, or . for the current value",
            )
        root = Root(lineno=token.lineno, col_offset=token.col_offset)
        if not chain:
            return root
        return Field(
            lineno=token.lineno,
            col_offset=token.col_offset,
            receiver=root,
            names=tuple(chain.split(".")),
        )

    def _check_function(self, token: Token) -> None:
        if token.value in self._funcs:
            return
        suggestion = None
        matches = get_close_matches(token.value, self._funcs, n=1, cutoff=0.6)
        if matches:
            suggestion = f"Did you mean '{matches[0]}'?"
        raise self._error(
            f'Function "{token.value}" not defined',
            token,
            suggestion=suggestion,
            code=ErrorCode.UNKNOWN_FUNCTION,
        )
