"""Dict assets -- an in-memory asset set with a context.

Assets from a dictionary, no package data needed. Use case: tests,
generated templates, single-file apps.

Run:
    python app.py
"""

from embedded_assets import AssetFS, Environment

assets = AssetFS(
    {
        "base.tmpl": """\
<!DOCTYPE html>
<html>
<head><title>{{template "title" .}}</title></head>
<body>
    <nav>
    {{- range .NavItems}}
        <a href="{{.URL}}">{{.Label}}</a>
    {{- end}}
    </nav>
    <main>{{template "content" .}}</main>
</body>
</html>
""",
        "pages/post.tmpl": """\
{{define "title"}}{{.Title}}{{end}}
{{define "content"}}
    <h1>{{.Heading}}</h1>
    {{with .Tags}}<p>Tags: {{range .}}[{{.}}]{{end}}</p>{{end}}
    <p>{{.Message}}</p>
{{end}}
""",
    }
)

env = Environment(assets)

output = env.render_page_to_string(
    "post",
    {
        "Title": "Dict Assets Demo",
        "NavItems": [
            {"URL": "/", "Label": "Home"},
            {"URL": "/about", "Label": "About"},
        ],
        "Heading": "In-Memory Assets",
        "Tags": ["templates", "embedded"],
        "Message": "No filesystem required. Assets come from a <dict>.",
    },
)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
