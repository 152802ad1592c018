"""Tests for the error hierarchy and diagnostic formatting."""

from __future__ import annotations

import pytest

from embedded_assets.environment import terminal
from embedded_assets.environment.exceptions import (
    AssetNotFoundError,
    ErrorCode,
    MissingTemplateError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
    build_source_snippet,
    format_template_stack,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        ("error", "parent"),
        [
            (TemplateNotFoundError, TemplateError),
            (AssetNotFoundError, TemplateNotFoundError),
            (TemplateSyntaxError, TemplateError),
            (MissingTemplateError, TemplateSyntaxError),
            (TemplateRuntimeError, TemplateError),
            (UndefinedError, TemplateRuntimeError),
        ],
    )
    def test_subclass(self, error: type, parent: type) -> None:
        assert issubclass(error, parent)


class TestErrorCodes:
    def test_codes_are_unique(self) -> None:
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))

    @pytest.mark.parametrize(
        ("code", "category"),
        [
            (ErrorCode.UNCLOSED_ACTION, "lexer"),
            (ErrorCode.UNKNOWN_FUNCTION, "parser"),
            (ErrorCode.UNDEFINED_FIELD, "runtime"),
            (ErrorCode.ASSET_NOT_FOUND, "asset"),
        ],
    )
    def test_category(self, code: ErrorCode, category: str) -> None:
        assert code.category == category

    def test_default_codes(self) -> None:
        assert AssetNotFoundError("x").code == ErrorCode.ASSET_NOT_FOUND
        assert TemplateSyntaxError("bad").code == ErrorCode.SYNTAX_ERROR
        assert MissingTemplateError("a", "b").code == ErrorCode.MISSING_TEMPLATE
        assert TemplateRuntimeError("boom").code == ErrorCode.RUNTIME_ERROR
        assert UndefinedError("X").code == ErrorCode.UNDEFINED_FIELD


class TestAssetNotFoundError:
    def test_default_message(self) -> None:
        err = AssetNotFoundError("pages/x.tmpl")
        assert str(err) == "Asset 'pages/x.tmpl' not found"
        assert err.path == "pages/x.tmpl"

    def test_format_compact_adds_code(self) -> None:
        assert AssetNotFoundError("a").format_compact() == "EA-AST-001: Asset 'a' not found"


class TestSyntaxErrorFormat:
    def test_message_with_snippet(self) -> None:
        err = TemplateSyntaxError(
            "Unclosed action",
            lineno=2,
            filename="pages/about.tmpl",
            source="one\n{{ .X\nthree",
            col_offset=0,
            suggestion="Close the action with '}}'",
        )
        text = str(err)
        assert text.startswith("Syntax Error: Unclosed action\n  --> pages/about.tmpl:2:0")
        assert "  2 | {{ .X" in text
        assert "   | ^" in text
        assert "Suggestion: Close the action" in text

    def test_location_falls_back_to_name(self) -> None:
        assert TemplateSyntaxError("x", lineno=3, name="about.tmpl").location == "about.tmpl:3"
        assert TemplateSyntaxError("x").location == "<template>"

    def test_line_out_of_range_has_no_snippet(self) -> None:
        err = TemplateSyntaxError("x", lineno=9, source="one line")
        assert " | " not in str(err)

    def test_format_compact(self) -> None:
        err = MissingTemplateError(
            "content", "base.tmpl", lineno=1, filename="base.tmpl", source='{{template "content"}}'
        )
        compact = err.format_compact()
        assert compact.startswith('EA-PAR-005: Template "content" is referenced by "base.tmpl"')
        assert "--> base.tmpl:1" in compact
        assert "Hint:" in compact


class TestRuntimeErrorFormat:
    def test_message_parts(self) -> None:
        err = TemplateRuntimeError(
            "Error calling len: boom",
            expression="len .Count",
            values={"args": (3,)},
            template_name="base.tmpl",
            lineno=9,
            suggestion="Pass a list",
            template_stack=[("outer.tmpl", 2)],
        )
        text = str(err)
        assert text.startswith("Runtime Error: Error calling len: boom")
        assert "Location: base.tmpl:9" in text
        assert "Expression: len .Count" in text
        assert "args = (3,) (tuple)" in text
        assert "outer.tmpl:2" in text
        assert "Suggestion: Pass a list" in text

    def test_long_values_truncated(self) -> None:
        err = TemplateRuntimeError("x", values={"v": "a" * 200})
        line = next(part for part in str(err).splitlines() if "v = " in part)
        assert "..." in line
        assert len(line) < 120

    def test_format_compact(self) -> None:
        err = UndefinedError("Title", "base.tmpl", 4)
        compact = err.format_compact()
        assert compact.startswith("EA-RUN-001: Undefined field 'Title' (context is nil)")
        assert "Location: base.tmpl:4" in compact


class TestUndefinedError:
    def test_nil_receiver(self) -> None:
        assert "(context is nil)" in str(UndefinedError("Title"))

    def test_suggestion_from_available_names(self) -> None:
        err = UndefinedError("Tilte", available_names=frozenset({"Title", "Name"}), receiver={})
        assert "Did you mean 'Title'?" in str(err)

    def test_no_close_match(self) -> None:
        err = UndefinedError("Zzz", available_names=frozenset({"Title"}), receiver={})
        assert "Did you mean" not in str(err)
        assert "context is nil" not in str(err)


class TestSnippets:
    def test_build_source_snippet(self) -> None:
        source = "\n".join(f"line {i}" for i in range(1, 11))
        snippet = build_source_snippet(source, 5)
        assert [n for n, _ in snippet.lines] == [3, 4, 5, 6, 7]
        assert snippet.error_line == 5

    def test_snippet_at_start(self) -> None:
        snippet = build_source_snippet("a\nb\nc", 1, context_lines=1)
        assert snippet.lines == ((1, "a"), (2, "b"))

    def test_format_marks_error_line(self) -> None:
        formatted = build_source_snippet("a\nb\nc", 2, column=1).format()
        assert ">  2 | b" in formatted
        assert "^" in formatted

    def test_format_template_stack(self) -> None:
        assert format_template_stack([]) == ""
        text = format_template_stack([("base.tmpl", 7), ("title", 1)])
        assert text.splitlines() == ["Template stack:", "  • base.tmpl:7", "  • title:1"]


class TestTerminal:
    """Color handling; the session fixture turns colors off."""

    def test_plain_when_disabled(self) -> None:
        assert terminal.colorize("Error", "red") == "Error"

    def test_colors_when_enabled(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.error_code("EA-RUN-001")
        assert "\033[91m" in result
        assert terminal.strip_colors(result) == "EA-RUN-001"

    def test_header_without_code(self) -> None:
        assert terminal.format_error_header(None, "message") == "message"

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("FORCE_COLOR", raising=False)
        monkeypatch.setenv("NO_COLOR", "1")
        assert terminal._should_use_colors() is False

    def test_force_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        monkeypatch.setenv("FORCE_COLOR", "1")
        assert terminal._should_use_colors() is True
