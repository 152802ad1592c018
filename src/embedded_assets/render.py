"""Page rendering with the default configuration.

``render_page`` composes ``base.tmpl`` with ``pages/<name>.tmpl`` from an
asset set and streams the result to a sink. Use an Environment directly to
change the layout path, the page pattern, escaping or the function set.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from embedded_assets.environment import Environment

if TYPE_CHECKING:
    from embedded_assets.assets import AssetFS
    from embedded_assets.template import Writer


def render_page(
    assets: AssetFS,
    page_name: str,
    context: Any = None,
    sink: Writer | None = None,
) -> None:
    """Render page ``page_name`` from ``assets`` to ``sink`` (stdout by default).

    Raises:
        TemplateNotFoundError: ``base.tmpl`` or the page asset is missing
        TemplateSyntaxError: invalid syntax or an unresolved {{template}} call
        TemplateRuntimeError: execution failed, including sink write errors
    """
    Environment(assets).render_page(page_name, context, sink)


def render_page_to_string(assets: AssetFS, page_name: str, context: Any = None) -> str:
    return Environment(assets).render_page_to_string(page_name, context)
