"""Built-in functions callable from templates.

Functions are invoked by name inside actions, with space-separated
arguments or as pipeline stages:

    {{len .Items}}
    {{.Title | html}}
    {{if and .Published (not .Draft)}}...{{end}}

An Environment can add to or override these through its ``funcs``
argument. Function names are checked at parse time, so a typo fails before
anything renders.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from embedded_assets.utils.html import Markup, html_escape
from embedded_assets.utils.values import format_value, is_true


def html(*args: Any) -> Markup:
    """Escape the printed form of ``args`` and mark the result safe."""
    return html_escape(print_(*args))


def and_(first: Any, *rest: Any) -> Any:
    """Return the first empty argument, or the last argument."""
    for value in (first, *rest):
        if not is_true(value):
            return value
    return value


def or_(first: Any, *rest: Any) -> Any:
    """Return the first non-empty argument, or the last argument."""
    for value in (first, *rest):
        if is_true(value):
            return value
    return value


def not_(value: Any) -> bool:
    return not is_true(value)


def eq(first: Any, *others: Any) -> bool:
    """True if ``first`` equals any of ``others``."""
    if not others:
        raise TypeError("eq needs at least two arguments")
    return any(first == other for other in others)


def ne(first: Any, second: Any) -> bool:
    return first != second


def print_(*args: Any) -> str:
    """Concatenate the printed forms of ``args``.

    A space separates two adjacent operands when neither is a string.
    """
    parts: list[str] = []
    previous_is_str = True
    for index, value in enumerate(args):
        is_str = isinstance(value, str)
        if index and not is_str and not previous_is_str:
            parts.append(" ")
        parts.append(format_value(value))
        previous_is_str = is_str
    return "".join(parts)


def index(item: Any, *keys: Any) -> Any:
    """Subscript ``item`` by each key in turn: {{index .Rows 0 "Name"}}"""
    for key in keys:
        item = item[key]
    return item


def length(value: Any) -> int:
    return len(value)


DEFAULT_FUNCS: Mapping[str, Callable[..., Any]] = {
    "and": and_,
    "eq": eq,
    "html": html,
    "index": index,
    "len": length,
    "ne": ne,
    "not": not_,
    "or": or_,
    "print": print_,
}
