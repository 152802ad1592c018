"""Parser error handling.

Provides ParseError, a TemplateSyntaxError positioned at a token.
"""

from __future__ import annotations

from embedded_assets._types import Token
from embedded_assets.environment.exceptions import ErrorCode, TemplateSyntaxError


class ParseError(TemplateSyntaxError):
    """Parser error positioned at the offending token.

    Displays the source line with a caret under the token, matching the
    lexer's format.
    """

    def __init__(
        self,
        message: str,
        token: Token,
        source: str | None = None,
        filename: str | None = None,
        suggestion: str | None = None,
        *,
        name: str | None = None,
        code: ErrorCode = ErrorCode.UNEXPECTED_TOKEN,
    ):
        self.token = token
        super().__init__(
            message,
            lineno=token.lineno,
            name=name,
            filename=filename,
            source=source,
            col_offset=token.col_offset,
            code=code,
            suggestion=suggestion,
        )
