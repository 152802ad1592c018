"""ANSI styling for diagnostics printed by the command.

Styling is decided once at import: on when stderr is a TTY, off when
``NO_COLOR`` is set, and forced on by ``FORCE_COLOR`` (which wins over
``NO_COLOR``). Every helper returns plain text when styling is off, so
exception messages stay readable in logs and captured output.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Literal

Style = Literal["bold", "dim", "red", "green", "yellow", "cyan", "bright_red", "bright_green"]

_CODES: dict[str, str] = {
    "bold": "1",
    "dim": "2",
    "red": "31",
    "green": "32",
    "yellow": "33",
    "cyan": "36",
    "bright_red": "91",
    "bright_green": "92",
}
_RESET = "\033[0m"

_ANSI_SEQUENCE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def _should_use_colors() -> bool:
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stderr.isatty()


_USE_COLORS = _should_use_colors()


def colorize(text: str, *styles: Style) -> str:
    """Wrap ``text`` in the escape sequences for ``styles``."""
    if not (_USE_COLORS and styles):
        return text
    prefix = "".join(f"\033[{_CODES[style]}m" for style in styles if style in _CODES)
    return f"{prefix}{text}{_RESET}" if prefix else text


def strip_colors(text: str) -> str:
    return _ANSI_SEQUENCE.sub("", text)


def error_code(text: str) -> str:
    return colorize(text, "bright_red", "bold")


def location(text: str) -> str:
    return colorize(text, "cyan")


def error_line(text: str) -> str:
    return colorize(text, "bright_red")


def hint(text: str) -> str:
    return colorize(text, "green")


def suggestion(text: str) -> str:
    """Style a "Did you mean" candidate."""
    return colorize(text, "bright_green", "bold")


def dim_text(text: str) -> str:
    return colorize(text, "dim")


def format_error_header(code: str | None, message: str) -> str:
    """``EA-RUN-001: message``, or just ``message`` without a code."""
    return f"{error_code(code)}: {message}" if code else message


def format_source_line(lineno: int, content: str, is_error: bool = False) -> str:
    """One numbered snippet line; the failing line is marked with ``>``."""
    gutter = colorize(f"{'>' if is_error else ' '}{lineno:>3}", "yellow")
    body = error_line(content) if is_error else dim_text(content)
    return f"{gutter} | {body}"
