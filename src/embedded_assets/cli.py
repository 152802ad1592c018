"""Command-line entry point: ``embedded-assets`` / ``python -m embedded_assets``.

Renders the bundled ``home`` and ``about`` pages, then shows the raw
``pages/about.tmpl`` asset with its modification time and MD5 digest.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import TextIO

from embedded_assets.assets import AssetFS
from embedded_assets.environment import Environment, TemplateError
from embedded_assets.static import load_assets

logger = logging.getLogger(__name__)

PAGES = ("home", "about")
RAW_ASSET = "pages/about.tmpl"


def format_mod_time(when: datetime) -> str:
    """``0001-01-01 00:00:00 +0000 UTC`` style timestamp."""
    return f"{when.year:04d}-{when:%m-%d %H:%M:%S %z %Z}"


def run(assets: AssetFS, out: TextIO) -> None:
    """Write the demo output for ``assets`` to ``out``.

    Raises:
        TemplateError: any asset lookup, parse or render failure
    """
    env = Environment(assets)
    for page in PAGES:
        env.render_page(page, None, out)
        out.write("\n\n")

    with assets.open(RAW_ASSET) as f:
        content = f.read()
        info = f.stat()
    out.write(content.decode("utf-8") + "\n")
    out.write(format_mod_time(info.mod_time) + "\n")
    out.write(assets.digest(RAW_ASSET) + "\n")


def main(argv: list[str] | None = None) -> int:
    """Run the demo against the bundled assets; return the exit status."""
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    if argv:
        print(f"usage: embedded-assets (takes no arguments, got {' '.join(argv)})", file=sys.stderr)
        return 2

    try:
        run(load_assets(), sys.stdout)
    except TemplateError as e:
        logger.debug(f"Render failed: {type(e).__name__}", exc_info=True)
        print(e.format_compact(), file=sys.stderr)
        return 1
    return 0
