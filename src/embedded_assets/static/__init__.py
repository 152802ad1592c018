"""Templates bundled with the package.

``base.tmpl`` is the layout; ``pages/*.tmpl`` define the blocks it calls.
The files ship as package data and are loaded once, on first use.
"""

from __future__ import annotations

from functools import cache

from embedded_assets.assets import AssetFS


@cache
def load_assets() -> AssetFS:
    """The bundled asset set (base.tmpl, pages/home.tmpl, pages/about.tmpl)."""
    return AssetFS.from_package(__name__)
