"""Tests for AssetFS, the read-only virtual filesystem."""

from __future__ import annotations

import hashlib
from datetime import UTC, datetime
from pathlib import Path

import pytest
from hypothesis import given

from embedded_assets import ZERO_TIME, AssetFS, AssetInfo
from embedded_assets.assets import ASSET_MODE, valid_path
from embedded_assets.environment.exceptions import (
    AssetNotFoundError,
    ErrorCode,
    MissingTemplateError,
    TemplateError,
    TemplateNotFoundError,
    TemplateSyntaxError,
)

from .strategies import asset_content, asset_path


@pytest.fixture
def assets() -> AssetFS:
    return AssetFS(
        {
            "base.tmpl": '<h1>{{template "title" .}}</h1>',
            "pages/home.tmpl": '{{define "title"}}Home{{end}}',
            "pages/about.tmpl": b'{{define "title"}}About{{end}}',
            "pages/legal/terms.tmpl": "terms",
        }
    )


class TestConstruction:
    """Building an AssetFS."""

    def test_str_values_are_utf8(self) -> None:
        assert AssetFS({"a.tmpl": "café"}).read_file("a.tmpl") == "café".encode()

    def test_bytes_values_kept(self) -> None:
        assert AssetFS({"a.bin": b"\x00\xff"}).read_file("a.bin") == b"\x00\xff"

    def test_empty(self) -> None:
        empty = AssetFS({})
        assert len(empty) == 0
        assert empty.list_assets() == []

    @pytest.mark.parametrize("path", ["/abs.tmpl", "a//b", "a/", "./a", "a/../b", ".", ""])
    def test_invalid_path_rejected(self, path: str) -> None:
        with pytest.raises(ValueError, match="Invalid asset path"):
            AssetFS({path: "x"})

    def test_path_cannot_be_file_and_directory(self) -> None:
        with pytest.raises(ValueError, match="also used as a directory"):
            AssetFS({"pages": "x", "pages/home.tmpl": "y"})

    def test_source_mapping_is_copied(self) -> None:
        source = {"a.tmpl": "one"}
        assets = AssetFS(source)
        source["a.tmpl"] = "two"
        source["b.tmpl"] = "new"
        assert assets.read_file("a.tmpl") == b"one"
        assert "b.tmpl" not in assets


class TestCollection:
    """Listing and membership."""

    def test_list_assets_sorted(self, assets: AssetFS) -> None:
        assert assets.list_assets() == [
            "base.tmpl",
            "pages/about.tmpl",
            "pages/home.tmpl",
            "pages/legal/terms.tmpl",
        ]

    def test_iter_len_contains(self, assets: AssetFS) -> None:
        assert list(assets) == assets.list_assets()
        assert len(assets) == 4
        assert "pages/home.tmpl" in assets
        assert "pages" not in assets

    def test_repr(self, assets: AssetFS) -> None:
        assert repr(assets) == "<AssetFS 4 asset(s)>"


class TestOpen:
    """open() and AssetFile handles."""

    def test_read_all(self, assets: AssetFS) -> None:
        with assets.open("pages/about.tmpl") as f:
            assert f.read() == b'{{define "title"}}About{{end}}'
            assert f.read() == b""

    def test_partial_reads(self, assets: AssetFS) -> None:
        with assets.open("pages/legal/terms.tmpl") as f:
            assert f.read(2) == b"te"
            assert f.read(10) == b"rms"
            assert f.read(1) == b""

    def test_handles_are_independent(self, assets: AssetFS) -> None:
        first = assets.open("pages/legal/terms.tmpl")
        second = assets.open("pages/legal/terms.tmpl")
        first.read(3)
        assert second.read() == b"terms"

    def test_name(self, assets: AssetFS) -> None:
        assert assets.open("base.tmpl").name == "base.tmpl"

    def test_read_after_close(self, assets: AssetFS) -> None:
        f = assets.open("base.tmpl")
        f.close()
        assert f.closed
        with pytest.raises(ValueError, match="closed"):
            f.read()

    def test_context_manager_closes(self, assets: AssetFS) -> None:
        with assets.open("base.tmpl") as f:
            pass
        assert f.closed
        with pytest.raises(ValueError):
            f.stat()

    def test_stat_from_handle(self, assets: AssetFS) -> None:
        with assets.open("pages/home.tmpl") as f:
            info = f.stat()
        assert info.name == "home.tmpl"
        assert info.mod_time == ZERO_TIME


class TestNotFound:
    """Lookups outside the set raise AssetNotFoundError."""

    def test_missing(self, assets: AssetFS) -> None:
        with pytest.raises(AssetNotFoundError) as exc_info:
            assets.open("pages/missing.tmpl")
        assert exc_info.value.path == "pages/missing.tmpl"

    def test_hierarchy(self) -> None:
        assert issubclass(AssetNotFoundError, TemplateNotFoundError)
        assert issubclass(AssetNotFoundError, TemplateError)

    def test_did_you_mean(self, assets: AssetFS) -> None:
        with pytest.raises(AssetNotFoundError, match="Did you mean 'pages/home.tmpl'"):
            assets.open("pages/hom.tmpl")

    def test_lists_available_when_nothing_close(self, assets: AssetFS) -> None:
        with pytest.raises(AssetNotFoundError, match="Available: base.tmpl"):
            assets.open("zzzzzzzz")

    @pytest.mark.parametrize(
        "path", ["/base.tmpl", "pages/../base.tmpl", "./base.tmpl", "pages//home.tmpl", ""]
    )
    def test_invalid_paths(self, assets: AssetFS, path: str) -> None:
        with pytest.raises(AssetNotFoundError, match="Invalid asset path"):
            assets.open(path)

    @pytest.mark.parametrize("path", ["pages", "pages/legal", "."])
    def test_directories_cannot_be_opened(self, assets: AssetFS, path: str) -> None:
        with pytest.raises(AssetNotFoundError, match="is a directory"):
            assets.open(path)

    @pytest.mark.parametrize("method", ["read_file", "stat", "digest"])
    def test_every_lookup_raises(self, assets: AssetFS, method: str) -> None:
        with pytest.raises(AssetNotFoundError):
            getattr(assets, method)("pages/missing.tmpl")


class TestStat:
    """Asset metadata."""

    def test_info(self, assets: AssetFS) -> None:
        info = assets.stat("pages/about.tmpl")
        assert info == AssetInfo(name="about.tmpl", size=30)
        assert info.mode == ASSET_MODE == 0o444
        assert info.is_dir is False

    def test_mod_time_is_zero_time(self, assets: AssetFS) -> None:
        for path in assets:
            assert assets.stat(path).mod_time == ZERO_TIME

    def test_zero_time(self) -> None:
        assert ZERO_TIME == datetime(1, 1, 1, tzinfo=UTC)
        assert str(ZERO_TIME) == "0001-01-01 00:00:00+00:00"

    def test_stat_is_stable(self, assets: AssetFS) -> None:
        assert assets.stat("base.tmpl") == assets.stat("base.tmpl")


class TestDigest:
    """Content digests."""

    def test_md5_default(self, assets: AssetFS) -> None:
        expected = hashlib.md5(b'{{define "title"}}About{{end}}').hexdigest()
        assert assets.digest("pages/about.tmpl") == expected

    def test_other_algorithm(self, assets: AssetFS) -> None:
        expected = hashlib.sha256(b"terms").hexdigest()
        assert assets.digest("pages/legal/terms.tmpl", "sha256") == expected

    def test_unknown_algorithm(self, assets: AssetFS) -> None:
        with pytest.raises(ValueError):
            assets.digest("base.tmpl", "nope")


class TestGlob:
    """Shell-style matching per path element."""

    def test_star_within_directory(self, assets: AssetFS) -> None:
        assert assets.glob("pages/*.tmpl") == ["pages/about.tmpl", "pages/home.tmpl"]

    def test_star_does_not_cross_slash(self, assets: AssetFS) -> None:
        assert assets.glob("*.tmpl") == ["base.tmpl"]
        assert assets.glob("pages/*") == ["pages/about.tmpl", "pages/home.tmpl"]

    def test_nested(self, assets: AssetFS) -> None:
        assert assets.glob("*/*/*.tmpl") == ["pages/legal/terms.tmpl"]

    def test_character_class(self, assets: AssetFS) -> None:
        assert assets.glob("pages/[ah]?*.tmpl") == ["pages/about.tmpl", "pages/home.tmpl"]

    def test_literal_path(self, assets: AssetFS) -> None:
        assert assets.glob("base.tmpl") == ["base.tmpl"]

    def test_no_match(self, assets: AssetFS) -> None:
        assert assets.glob("*.html") == []

    def test_invalid_pattern(self, assets: AssetFS) -> None:
        assert assets.glob("/pages/*") == []


class TestParseSet:
    """Parsing assets into a TemplateSet."""

    def test_names_are_base_names(self, assets: AssetFS) -> None:
        template_set = assets.parse_set("base.tmpl", "pages/about.tmpl")
        assert template_set.entry == "base.tmpl"
        assert "about.tmpl" in template_set
        assert template_set.render() == "<h1>About</h1>"

    def test_argument_order_decides_overrides(self, assets: AssetFS) -> None:
        template_set = assets.parse_set("base.tmpl", "pages/about.tmpl", "pages/home.tmpl")
        assert template_set.render() == "<h1>Home</h1>"

    def test_glob_patterns(self, assets: AssetFS) -> None:
        # about.tmpl then home.tmpl (sorted), so home's title wins
        template_set = assets.parse_set("base.tmpl", "pages/*.tmpl")
        assert template_set.render() == "<h1>Home</h1>"

    def test_missing_path(self, assets: AssetFS) -> None:
        with pytest.raises(AssetNotFoundError) as exc_info:
            assets.parse_set("base.tmpl", "pages/missing.tmpl")
        assert exc_info.value.path == "pages/missing.tmpl"

    def test_pattern_without_matches(self, assets: AssetFS) -> None:
        with pytest.raises(AssetNotFoundError, match="matches no assets"):
            assets.parse_set("base.tmpl", "pages/*.html")

    def test_requires_a_pattern(self, assets: AssetFS) -> None:
        with pytest.raises(ValueError):
            assets.parse_set()

    def test_syntax_error_names_asset_path(self) -> None:
        broken = AssetFS({"base.tmpl": "ok", "pages/bad.tmpl": "line\n{{if .X}}"})
        with pytest.raises(TemplateSyntaxError) as exc_info:
            broken.parse_set("base.tmpl", "pages/bad.tmpl")
        err = exc_info.value
        assert err.filename == "pages/bad.tmpl"
        assert err.lineno == 2
        assert "pages/bad.tmpl:2" in str(err)

    def test_non_utf8_asset_is_syntax_error(self) -> None:
        broken = AssetFS({"base.tmpl": b"<p>ok</p>\n<p>\xff\xfe</p>"})
        with pytest.raises(TemplateSyntaxError) as exc_info:
            broken.parse_set("base.tmpl")
        err = exc_info.value
        assert isinstance(err.__cause__, UnicodeDecodeError)
        assert err.filename == "base.tmpl"
        assert err.lineno == 2
        assert err.code == ErrorCode.SYNTAX_ERROR
        assert "not valid UTF-8" in err.format_compact()

    def test_missing_reference_fails_fast(self, assets: AssetFS) -> None:
        with pytest.raises(MissingTemplateError) as exc_info:
            assets.parse_set("base.tmpl")
        err = exc_info.value
        assert err.template == "title"
        assert err.referenced_from == "base.tmpl"

    def test_reference_check_can_be_skipped(self, assets: AssetFS) -> None:
        template_set = assets.parse_set("base.tmpl", check_references=False)
        assert template_set.entry == "base.tmpl"

    def test_options_reach_the_set(self) -> None:
        raw = AssetFS({"t.tmpl": "{{.X | twice}}"})
        template_set = raw.parse_set(
            "t.tmpl", autoescape=False, funcs={"twice": lambda s: s * 2}
        )
        assert template_set.render({"X": "<"}) == "<<"


class TestFromDirectory:
    """Snapshotting a directory tree."""

    def test_loads_matching_files(self, tmp_path: Path) -> None:
        (tmp_path / "pages").mkdir()
        (tmp_path / "base.tmpl").write_text("base")
        (tmp_path / "pages" / "home.tmpl").write_text("home")
        (tmp_path / "notes.txt").write_text("skip")
        (tmp_path / ".hidden").mkdir()
        (tmp_path / ".hidden" / "x.tmpl").write_text("skip")

        assets = AssetFS.from_directory(tmp_path)
        assert assets.list_assets() == ["base.tmpl", "pages/home.tmpl"]
        assert assets.read_file("pages/home.tmpl") == b"home"

    def test_custom_patterns(self, tmp_path: Path) -> None:
        (tmp_path / "a.html").write_text("a")
        (tmp_path / "b.tmpl").write_text("b")
        assets = AssetFS.from_directory(tmp_path, patterns=("*.html", "*.tmpl"))
        assert assets.list_assets() == ["a.html", "b.tmpl"]

    def test_snapshot_is_fixed(self, tmp_path: Path) -> None:
        (tmp_path / "a.tmpl").write_text("before")
        assets = AssetFS.from_directory(tmp_path)
        (tmp_path / "a.tmpl").write_text("after")
        (tmp_path / "b.tmpl").write_text("new")
        assert assets.read_file("a.tmpl") == b"before"
        assert "b.tmpl" not in assets

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(NotADirectoryError):
            AssetFS.from_directory(tmp_path / "nope")

    def test_no_matches_warns(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        (tmp_path / "notes.txt").write_text("skip")
        with caplog.at_level("WARNING", logger="embedded_assets.assets"):
            assets = AssetFS.from_directory(tmp_path)
        assert len(assets) == 0
        assert "match *.tmpl" in caplog.text


class TestFromPackage:
    """Snapshotting package data."""

    def test_bundled_package(self) -> None:
        assets = AssetFS.from_package("embedded_assets.static")
        assert assets.list_assets() == ["base.tmpl", "pages/about.tmpl", "pages/home.tmpl"]

    def test_subdir(self) -> None:
        assets = AssetFS.from_package("embedded_assets.static", subdir="pages")
        assert assets.list_assets() == ["about.tmpl", "home.tmpl"]

    def test_unknown_package(self) -> None:
        with pytest.raises(ModuleNotFoundError):
            AssetFS.from_package("embedded_assets_missing_package")


class TestValidPath:
    @pytest.mark.parametrize("path", [".", "a", "a/b", "a.b/c-d_e.tmpl", "..a"])
    def test_valid(self, path: str) -> None:
        assert valid_path(path)

    @pytest.mark.parametrize("path", ["", "/", "/a", "a/", "a//b", "./a", "a/.", "a/..", "a\\b"])
    def test_invalid(self, path: str) -> None:
        assert not valid_path(path)


class TestAssetProperties:
    """Invariants for arbitrary content."""

    @given(path=asset_path, content=asset_content)
    def test_digest_is_deterministic(self, path: str, content: bytes) -> None:
        first = AssetFS({path: content})
        second = AssetFS({path: content})
        expected = hashlib.md5(content).hexdigest()
        assert first.digest(path) == first.digest(path) == second.digest(path) == expected

    @given(path=asset_path, content=asset_content)
    def test_read_returns_content(self, path: str, content: bytes) -> None:
        assets = AssetFS({path: content})
        with assets.open(path) as f:
            assert f.read() == content
        info = assets.stat(path)
        assert info.size == len(content)
        assert info.mod_time == ZERO_TIME
