"""Read-only virtual filesystem over a fixed set of embedded assets.

An AssetFS holds named byte blobs (templates, mostly) that ship inside the
package, so nothing has to exist on disk beside the program at run time.
Paths are slash-separated and relative (``base.tmpl``, ``pages/about.tmpl``);
directories exist only implicitly as path prefixes.

Constructors:
- ``AssetFS(mapping)``: from an in-memory ``{path: str | bytes}`` mapping
  (tests, generated assets)
- ``AssetFS.from_directory(path)``: snapshot a directory tree
- ``AssetFS.from_package(package)``: snapshot package data through
  ``importlib.resources`` (the bundled assets)

Every constructor copies the content, so the set is fixed from then on.

Metadata:
Embedded assets have no filesystem timestamp. ``stat()`` reports
``ZERO_TIME`` (year 1, midnight UTC) for every asset. This is the contract,
not a missing feature: callers must not expect a real modification time.

Thread-Safety:
AssetFS is immutable after construction; any number of threads may open,
read and parse from it concurrently. Each AssetFile handle has its own read
offset and should stay with one reader.

Example:
    >>> assets = AssetFS({"pages/about.tmpl": '{{define "title"}}About{{end}}'})
    >>> with assets.open("pages/about.tmpl") as f:
    ...     f.read()
    b'{{define "title"}}About{{end}}'
    >>> assets.stat("pages/about.tmpl").mod_time
    datetime.datetime(1, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)

"""

from __future__ import annotations

import fnmatch
import hashlib
import importlib.resources
import logging
import posixpath
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from difflib import get_close_matches
from pathlib import Path
from types import MappingProxyType
from typing import Any

from embedded_assets.environment.exceptions import (
    AssetNotFoundError,
    ErrorCode,
    TemplateSyntaxError,
)
from embedded_assets.render_context import DEFAULT_MAX_DEPTH
from embedded_assets.template import TemplateSet

logger = logging.getLogger(__name__)

#: Modification time reported for every embedded asset.
ZERO_TIME = datetime(1, 1, 1, tzinfo=UTC)

#: Permission bits reported for every embedded asset (read-only).
ASSET_MODE = 0o444

DEFAULT_PATTERNS = ("*.tmpl",)

_GLOB_CHARS = frozenset("*?[")


def valid_path(path: str) -> bool:
    """True if ``path`` is a clean, relative, slash-separated asset path.

    ``.`` (the root) is valid. Otherwise there may be no leading or
    trailing slash, no empty elements, and no ``.`` or ``..`` elements.
    """
    if path == ".":
        return True
    if not path or "\\" in path:
        return False
    return all(part not in ("", ".", "..") for part in path.split("/"))


@dataclass(frozen=True, slots=True)
class Asset:
    """An immutable named blob of embedded content."""

    path: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def mod_time(self) -> datetime:
        return ZERO_TIME


@dataclass(frozen=True, slots=True)
class AssetInfo:
    """Result of ``stat()`` on an asset.

    Attributes:
        name: Base name of the asset (``about.tmpl``)
        size: Content length in bytes
        mode: Permission bits, always read-only
        mod_time: Always ``ZERO_TIME``
        is_dir: Always False; directories are never opened
    """

    name: str
    size: int
    mode: int = ASSET_MODE
    mod_time: datetime = ZERO_TIME
    is_dir: bool = False


class AssetFile:
    """Open handle on one asset.

    Reads are served from the asset's immutable content; the handle only
    tracks its own offset. Usable as a context manager.
    """

    __slots__ = ("_asset", "_closed", "_offset")

    def __init__(self, asset: Asset):
        self._asset = asset
        self._offset = 0
        self._closed = False

    def __enter__(self) -> AssetFile:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"offset={self._offset}"
        return f"<AssetFile {self._asset.path!r} {state}>"

    @property
    def name(self) -> str:
        return self._asset.path

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes, or everything left when ``size`` < 0.

        Returns ``b""`` at end of content.
        """
        self._check_open()
        content = self._asset.content
        if size is None or size < 0:
            end = len(content)
        else:
            end = min(len(content), self._offset + size)
        data = content[self._offset : end]
        self._offset = end
        return data

    def stat(self) -> AssetInfo:
        self._check_open()
        return _info(self._asset)

    def close(self) -> None:
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError(f"I/O operation on closed asset {self._asset.path!r}")


def _info(asset: Asset) -> AssetInfo:
    return AssetInfo(name=posixpath.basename(asset.path), size=asset.size)


def _decode(asset: Asset) -> str:
    """Template source of ``asset``; non-UTF-8 content is a syntax error."""
    try:
        return asset.content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise TemplateSyntaxError(
            f"Asset is not valid UTF-8 (byte 0x{asset.content[e.start]:02x} at offset {e.start})",
            lineno=asset.content.count(b"\n", 0, e.start) + 1,
            name=posixpath.basename(asset.path),
            filename=asset.path,
            code=ErrorCode.SYNTAX_ERROR,
            suggestion="Save the template as UTF-8",
        ) from e


class AssetFS:
    """Read-only virtual filesystem of embedded assets.

    Attributes:
        _assets: Read-only mapping of path to Asset

    Methods:
        open(path): Return an AssetFile handle
        read_file(path): Return an asset's bytes
        stat(path): Return an asset's AssetInfo
        digest(path): Return the hex digest of an asset's bytes
        glob(pattern): Return sorted paths matching a shell pattern
        parse_set(*patterns): Parse matching assets into one TemplateSet

    Raises:
        AssetNotFoundError: from every lookup of a path outside the set
    """

    __slots__ = ("_assets",)

    def __init__(self, mapping: Mapping[str, str | bytes]):
        assets: dict[str, Asset] = {}
        for path, content in mapping.items():
            if not valid_path(path) or path == ".":
                raise ValueError(f"Invalid asset path {path!r}")
            if isinstance(content, str):
                content = content.encode("utf-8")
            assets[path] = Asset(path=path, content=bytes(content))

        for path in assets:
            parent = posixpath.dirname(path)
            while parent:
                if parent in assets:
                    raise ValueError(f"Asset path {parent!r} is also used as a directory")
                parent = posixpath.dirname(parent)

        self._assets: Mapping[str, Asset] = MappingProxyType(dict(sorted(assets.items())))

    @classmethod
    def from_directory(
        cls,
        path: str | Path,
        patterns: Iterable[str] = DEFAULT_PATTERNS,
    ) -> AssetFS:
        """Snapshot files under ``path`` whose base names match ``patterns``.

        Hidden files and directories (leading ``.``) are skipped.
        """
        root = Path(path)
        if not root.is_dir():
            raise NotADirectoryError(f"Asset directory not found: {root}")

        patterns = tuple(patterns)
        mapping: dict[str, bytes] = {}
        for file in root.rglob("*"):
            rel = file.relative_to(root)
            if any(part.startswith(".") for part in rel.parts) or not file.is_file():
                continue
            if _matches_any(file.name, patterns):
                mapping[rel.as_posix()] = file.read_bytes()

        if not mapping:
            logger.warning(f"No files under {root} match {', '.join(patterns)}")
        logger.debug(f"Loaded {len(mapping)} asset(s) from {root}")
        return cls(mapping)

    @classmethod
    def from_package(
        cls,
        package: str,
        subdir: str = "",
        patterns: Iterable[str] = DEFAULT_PATTERNS,
    ) -> AssetFS:
        """Snapshot package data through ``importlib.resources``.

        Works the same for packages installed as directories or zip files.

        Args:
            package: Dotted package name (e.g. ``"embedded_assets.static"``)
            subdir: Directory inside the package holding the assets
            patterns: Shell patterns matched against base names

        Raises:
            ModuleNotFoundError: ``package`` is not importable
        """
        root = importlib.resources.files(package)
        for part in subdir.split("/"):
            if part:
                root = root.joinpath(part)

        patterns = tuple(patterns)
        mapping: dict[str, bytes] = {}
        for rel, resource in _walk(root, ""):
            if _matches_any(posixpath.basename(rel), patterns):
                mapping[rel] = resource.read_bytes()

        logger.debug(f"Loaded {len(mapping)} asset(s) from package {package}/{subdir}")
        return cls(mapping)

    # ------------------------------------------------------------------
    # Collection protocol
    # ------------------------------------------------------------------

    def __contains__(self, path: object) -> bool:
        return path in self._assets

    def __iter__(self) -> Iterator[str]:
        return iter(self._assets)

    def __len__(self) -> int:
        return len(self._assets)

    def __repr__(self) -> str:
        return f"<AssetFS {len(self._assets)} asset(s)>"

    def list_assets(self) -> list[str]:
        """Sorted list of every asset path."""
        return list(self._assets)

    # ------------------------------------------------------------------
    # File access
    # ------------------------------------------------------------------

    def open(self, path: str) -> AssetFile:
        """Open ``path`` for reading.

        Raises:
            AssetNotFoundError: ``path`` is invalid, a directory, or not in the set
        """
        return AssetFile(self._lookup(path))

    def read_file(self, path: str) -> bytes:
        return self._lookup(path).content

    def stat(self, path: str) -> AssetInfo:
        return _info(self._lookup(path))

    def digest(self, path: str, algorithm: str = "md5") -> str:
        """Hex digest of the asset's bytes (``md5`` by default).

        Content never changes after construction, so the digest of a path is
        the same on every call and across processes.
        """
        data = self._lookup(path).content
        return hashlib.new(algorithm, data, usedforsecurity=False).hexdigest()

    def glob(self, pattern: str) -> list[str]:
        """Sorted asset paths matching ``pattern``.

        ``*``, ``?`` and ``[...]`` match within one path element; they never
        match ``/``. Invalid patterns match nothing.
        """
        if not valid_path(pattern):
            return []
        parts = pattern.split("/")
        return [
            path
            for path in self._assets
            if _match_parts(path.split("/"), parts)
        ]

    def _lookup(self, path: str) -> Asset:
        asset = self._assets.get(path)
        if asset is not None:
            return asset

        if not valid_path(path):
            raise AssetNotFoundError(path, f"Invalid asset path '{path}'")

        prefix = "" if path == "." else path + "/"
        if any(p.startswith(prefix) for p in self._assets):
            raise AssetNotFoundError(path, f"'{path}' is a directory, not an asset")

        message = f"Asset '{path}' not found"
        matches = get_close_matches(path, list(self._assets), n=1, cutoff=0.6)
        if matches:
            message += f". Did you mean '{matches[0]}'?"
        elif self._assets:
            available = list(self._assets)
            message += f". Available: {', '.join(available[:10])}"
            if len(available) > 10:
                message += f" ... ({len(available)} total)"
        raise AssetNotFoundError(path, message)

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def parse_set(
        self,
        *patterns: str,
        autoescape: bool = True,
        funcs: Mapping[str, Callable[..., Any]] | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        check_references: bool = True,
    ) -> TemplateSet:
        """Parse the assets named by ``patterns`` into one TemplateSet.

        Each pattern is an asset path or a glob pattern. Assets are parsed in
        pattern order (glob matches in sorted order); each asset's top-level
        template is named by its base name, and the first one is the set's
        entry template.

        Raises:
            AssetNotFoundError: a pattern matches no asset
            TemplateSyntaxError: an asset is not valid template syntax; the
                error's ``filename`` is the asset path
            MissingTemplateError: a {{template}} call names a template no
                asset defines (skipped when ``check_references`` is False)
        """
        if not patterns:
            raise ValueError("parse_set() needs at least one path or pattern")

        template_set = TemplateSet(autoescape=autoescape, funcs=funcs, max_depth=max_depth)
        for pattern in patterns:
            if _GLOB_CHARS.isdisjoint(pattern):
                paths = [self._lookup(pattern).path]
            else:
                paths = self.glob(pattern)
                if not paths:
                    raise AssetNotFoundError(pattern, f"Pattern '{pattern}' matches no assets")

            for path in paths:
                source = _decode(self._assets[path])
                template_set.parse(source, name=posixpath.basename(path), filename=path)

        if check_references:
            template_set.check_references()
        return template_set


def _matches_any(name: str, patterns: tuple[str, ...]) -> bool:
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in patterns)


def _match_parts(path_parts: list[str], pattern_parts: list[str]) -> bool:
    if len(path_parts) != len(pattern_parts):
        return False
    return all(
        fnmatch.fnmatchcase(part, pattern)
        for part, pattern in zip(path_parts, pattern_parts, strict=True)
    )


def _walk(
    traversable: importlib.resources.abc.Traversable, prefix: str
) -> Iterator[tuple[str, importlib.resources.abc.Traversable]]:
    """Recursively walk a traversable, yielding (relative path, file)."""
    for item in traversable.iterdir():
        if item.name.startswith((".", "__")):
            continue
        rel = f"{prefix}/{item.name}" if prefix else item.name
        if item.is_file():
            yield rel, item
        elif item.is_dir():
            yield from _walk(item, rel)
