"""HTML escaping for interpolated template values.

Values printed by ``{{pipeline}}`` are escaped unless they are ``Markup``
(or anything else implementing ``__html__``). Quotes are written as numeric
entities so the output is safe inside attribute values with either quote.
"""

from __future__ import annotations

from typing import Any

# Single-pass escaping via str.translate()
_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&#34;",
        "'": "&#39;",
        "\x00": "\ufffd",
    }
)


class Markup(str):
    """A string that is already safe to emit as HTML.

    Example:
        >>> html_escape(Markup("<b>ok</b>"))
        Markup('<b>ok</b>')
    """

    __slots__ = ()

    def __html__(self) -> Markup:
        return self

    def __repr__(self) -> str:
        return f"Markup({str.__repr__(self)})"


def html_escape(value: Any) -> Markup:
    """Escape ``value`` for HTML text and attribute contexts."""
    if hasattr(value, "__html__"):
        return Markup(value.__html__())
    return Markup(str(value).translate(_ESCAPE_TABLE))
