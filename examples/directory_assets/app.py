"""Directory assets -- snapshot a template directory, then render.

Templates are read once from disk into an AssetFS; later changes on disk
do not affect it. A page that forgets a block the layout needs fails at
parse time, before any output.

Run:
    python app.py
"""

import tempfile
from pathlib import Path

from embedded_assets import AssetFS, Environment, MissingTemplateError

with tempfile.TemporaryDirectory() as tmp:
    root = Path(tmp)
    (root / "pages").mkdir()
    (root / "base.tmpl").write_text(
        '<h1>{{template "title" .}}</h1>\n{{template "content" .}}\n'
    )
    (root / "pages" / "report.tmpl").write_text(
        '{{define "title"}}Report{{end}}'
        '{{define "content"}}{{range .Rows}}{{.Name}}: {{.Total}}\n{{end}}{{end}}'
    )
    (root / "pages" / "draft.tmpl").write_text('{{define "title"}}Draft{{end}}')
    (root / "notes.txt").write_text("not a template")

    assets = AssetFS.from_directory(root)

env = Environment(assets)

report = env.render_page_to_string(
    "report",
    {"Rows": [{"Name": "north", "Total": 12}, {"Name": "south", "Total": 7}]},
)

try:
    env.render_page_to_string("draft")
except MissingTemplateError as e:
    draft_error = e
else:
    draft_error = None


def main() -> None:
    print(assets.list_assets())
    print(report)
    if draft_error is not None:
        print(draft_error.format_compact())


if __name__ == "__main__":
    main()
