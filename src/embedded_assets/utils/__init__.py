"""Shared utilities."""

from embedded_assets.utils.html import Markup, html_escape

__all__ = ["Markup", "html_escape"]
