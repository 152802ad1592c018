"""Truthiness and printing rules for template values."""

from __future__ import annotations

from typing import Any


def is_true(value: Any) -> bool:
    """Template truthiness: false, 0, nil and empty collections are empty.

    Objects defining ``__bool__`` or ``__len__`` decide for themselves.
    """
    return value is not None and bool(value)


def format_value(value: Any) -> str:
    """Printed form of a value, matching the template language's literals."""
    if value is None:
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    # Whole floats print without a fraction, up to the exponent cutoff.
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)
