"""Embedded site -- render the pages bundled with the package.

The layout and pages ship as package data; nothing is read from the
working directory. The raw about page is shown with its metadata.

Run:
    python app.py
"""

from embedded_assets import Environment, load_assets
from embedded_assets.cli import format_mod_time

assets = load_assets()
env = Environment(assets)

pages = {name: env.render_page_to_string(name) for name in ("home", "about")}

with assets.open("pages/about.tmpl") as f:
    about_source = f.read().decode("utf-8")
    about_info = f.stat()

about_digest = assets.digest("pages/about.tmpl")


def main() -> None:
    for output in pages.values():
        print(output)
    print(about_source)
    print(format_mod_time(about_info.mod_time))
    print(about_digest)


if __name__ == "__main__":
    main()
