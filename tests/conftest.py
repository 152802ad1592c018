"""Pytest configuration and fixtures for embedded_assets tests."""

import pytest

from embedded_assets import AssetFS, Environment, TemplateSet, load_assets
from embedded_assets.environment import terminal

LAYOUT = """\
<html>
<head><title>{{template "title" .}}</title></head>
<body>
{{- template "content" .}}
{{- block "footer" .}}<footer>default footer</footer>{{end}}
</body>
</html>
"""


@pytest.fixture
def site_assets() -> AssetFS:
    """A small asset set shaped like the bundled one."""
    return AssetFS(
        {
            "base.tmpl": LAYOUT,
            "pages/home.tmpl": (
                '{{define "title"}}Home{{end}}\n'
                '{{define "content"}}<p>Welcome home</p>{{end}}\n'
            ),
            "pages/about.tmpl": (
                '{{define "title"}}About{{end}}\n'
                '{{define "content"}}<p>About us</p>{{end}}\n'
                '{{define "footer"}}<footer>about footer</footer>{{end}}\n'
            ),
            "pages/profile.tmpl": (
                '{{define "title"}}{{.Title}}{{end}}\n'
                '{{define "content"}}<p>{{.Name}}</p>{{end}}\n'
            ),
            "pages/broken.tmpl": '{{define "title"}}Broken{{end}}\n',
        }
    )


@pytest.fixture
def env(site_assets: AssetFS) -> Environment:
    """Environment over ``site_assets`` with default settings."""
    return Environment(site_assets)


@pytest.fixture
def bundled() -> AssetFS:
    """The asset set shipped with the package."""
    return load_assets()


@pytest.fixture
def render():
    """Render a single template source against data."""

    def _render(source: str, data=None, **kwargs) -> str:
        template_set = TemplateSet(**kwargs)
        template_set.parse(source, "test.tmpl")
        template_set.check_references()
        return template_set.render(data)

    return _render


def assert_contains(result: str, *expected_parts: str) -> None:
    """Assert the rendered result contains all expected parts.

    Args:
        result: The actual rendering result.
        expected_parts: Strings that should all be present in the result.
    """
    for part in expected_parts:
        assert part in result, (
            f"Rendered output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {result!r}"
        )


@pytest.fixture(autouse=True, scope="session")
def plain_terminal():
    """Keep diagnostics free of ANSI codes regardless of FORCE_COLOR."""
    saved = terminal._USE_COLORS
    terminal._USE_COLORS = False
    yield
    terminal._USE_COLORS = saved
