"""Exceptions for embedded asset lookup and template rendering.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError       # Template or asset path could not be resolved
│   └── AssetNotFoundError      # Path is not part of the embedded asset set
├── TemplateSyntaxError         # Parse-time error (lexer, parser, references)
│   └── MissingTemplateError    # {{template "x"}} names an undefined template
└── TemplateRuntimeError        # Execution-time error with template location
    └── UndefinedError          # Field reference that cannot be resolved

Error Messages:
All exceptions carry a searchable ErrorCode and expose ``format_compact()``
for terminal display. Syntax and runtime errors include the template
location and a source snippet when the source is known:

    ```
    EA-RUN-001: Undefined field 'Title' in base.tmpl:4
       |
     4 | <title>{{.Title}}</title>
       |
      Hint: pass a context that defines 'Title', or guard with {{with .Title}}
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from embedded_assets.environment import terminal

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes.

    Format: EA-{CATEGORY}-{NUMBER}
    Categories: LEX (lexer), PAR (parser), RUN (runtime), AST (asset lookup)
    """

    # Lexer errors (EA-LEX-xxx)
    UNCLOSED_ACTION = "EA-LEX-001"
    UNCLOSED_COMMENT = "EA-LEX-002"
    UNTERMINATED_STRING = "EA-LEX-003"
    UNEXPECTED_CHARACTER = "EA-LEX-004"

    # Parser errors (EA-PAR-xxx)
    UNEXPECTED_TOKEN = "EA-PAR-001"
    UNCLOSED_BLOCK = "EA-PAR-002"
    UNKNOWN_FUNCTION = "EA-PAR-003"
    DUPLICATE_DEFINITION = "EA-PAR-004"
    MISSING_TEMPLATE = "EA-PAR-005"

    # Runtime errors (EA-RUN-xxx)
    UNDEFINED_FIELD = "EA-RUN-001"
    FUNCTION_ERROR = "EA-RUN-002"
    TEMPLATE_DEPTH = "EA-RUN-003"
    RUNTIME_ERROR = "EA-RUN-004"
    WRITE_ERROR = "EA-RUN-005"

    # Asset errors (EA-AST-xxx)
    ASSET_NOT_FOUND = "EA-AST-001"
    SYNTAX_ERROR = "EA-AST-002"

    @property
    def category(self) -> str:
        """Error category (e.g., 'runtime', 'lexer', 'parser', 'asset')."""
        prefix = self.value.split("-")[1]
        return {
            "LEX": "lexer",
            "PAR": "parser",
            "RUN": "runtime",
            "AST": "asset",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


def format_template_stack(stack: list[tuple[str, int]] | None) -> str:
    """Render the {{template}} calls that led to an error, outermost first.

    Example:
        >>> print(format_template_stack([("base.tmpl", 7)]))
        Template stack:
          • base.tmpl:7
    """
    if not stack:
        return ""
    entries = [f"  • {terminal.location(f'{name}:{line}')}" for name, line in stack]
    return "\n".join([terminal.dim_text("Template stack:"), *entries])


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """A few numbered lines of an asset around a failing line.

    Attributes:
        lines: (line number, text) pairs, in order
        error_line: 1-based number of the failing line
        column: Column for a ``^`` marker under the failing line, if known
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        rule = terminal.dim_text("   |")
        out = [rule]
        out.extend(
            terminal.format_source_line(n, text, is_error=n == self.error_line)
            for n, text in self.lines
        )
        if self.column is not None:
            out.append(f"{rule} {terminal.error_line(' ' * self.column + '^')}")
        out.append(rule)
        return "\n".join(out)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Cut ``context_lines`` lines either side of ``error_line`` out of ``source``."""
    source_lines = source.splitlines()
    first = max(1, error_line - context_lines)
    last = min(len(source_lines), error_line + context_lines)
    window = tuple((n, source_lines[n - 1]) for n in range(first, last + 1))
    return SourceSnippet(lines=window, error_line=error_line, column=column)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TemplateError(Exception):
    """Base exception for all asset and template errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a short diagnostic without traceback noise."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = terminal.format_error_header(self.code.value, header)
        return header


class TemplateNotFoundError(TemplateError):
    """A template or asset path could not be resolved."""

    code: ErrorCode | None = ErrorCode.ASSET_NOT_FOUND


class AssetNotFoundError(TemplateNotFoundError):
    """Path is not part of the embedded asset set.

    Raised by ``AssetFS.open()`` and everything built on it, including
    ``parse_set()`` patterns that match no asset.

    Example:
        >>> assets.open("pages/missing.tmpl")
        AssetNotFoundError: Asset 'pages/missing.tmpl' not found. Did you mean 'pages/home.tmpl'?
    """

    def __init__(self, path: str, message: str | None = None):
        self.path = path
        super().__init__(message or f"Asset '{path}' not found")


class TemplateSyntaxError(TemplateError):
    """Parse-time error in template source.

    Raised by the lexer and parser when syntax is invalid, and by
    ``AssetFS.parse_set()`` when a definition set is incomplete. Carries the
    offending asset path in ``filename``.

    When ``source`` and ``lineno`` are provided, the message includes a
    snippet of the offending line. If ``col_offset`` is also given, a caret
    (``^``) points at the exact column.
    """

    code: ErrorCode | None = ErrorCode.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        *,
        code: ErrorCode | None = None,
        suggestion: str | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.filename = filename
        self.source = source
        self.col_offset = col_offset
        self.suggestion = suggestion
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    @property
    def location(self) -> str:
        location = self.filename or self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
            if self.col_offset is not None:
                location += f":{self.col_offset}"
        return location

    def _snippet_lines(self) -> list[str]:
        if not (self.source and self.lineno):
            return []
        lines = self.source.splitlines()
        if not 0 < self.lineno <= len(lines):
            return []
        snippet = ["   |", f"{self.lineno:>3} | {lines[self.lineno - 1]}"]
        if self.col_offset is not None:
            snippet.append(f"   | {' ' * self.col_offset}^")
        return snippet

    def _format_message(self) -> str:
        parts = [f"Syntax Error: {self.message}", f"  --> {self.location}"]
        parts.extend(self._snippet_lines())
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "\n".join(parts)

    def format_compact(self) -> str:
        """Format syntax error as structured terminal diagnostic."""
        code = self.code.value if self.code else None
        parts = [terminal.format_error_header(code, self.message)]
        parts.append(f"  --> {terminal.location(self.location)}")
        snippet = self._snippet_lines()
        if snippet:
            parts.extend(snippet)
            parts.append("   |")
        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")
        return "\n".join(parts)


class MissingTemplateError(TemplateSyntaxError):
    """A ``{{template "name"}}`` call names a template no parsed asset defines.

    Raised by ``AssetFS.parse_set()`` after all assets are parsed, so a page
    that forgets to define a block the base layout requires fails before
    any output is written.

    Attributes:
        template: The missing template name
        referenced_from: Name of the template containing the call
    """

    code: ErrorCode | None = ErrorCode.MISSING_TEMPLATE

    def __init__(
        self,
        template: str,
        referenced_from: str,
        *,
        lineno: int | None = None,
        filename: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
    ):
        self.template = template
        self.referenced_from = referenced_from
        super().__init__(
            f'Template "{template}" is referenced by "{referenced_from}" but never defined',
            lineno=lineno,
            name=referenced_from,
            filename=filename,
            source=source,
            col_offset=col_offset,
            suggestion=(
                f'Add {{{{define "{template}"}}}}...{{{{end}}}} to the page, '
                f'or give the layout a default with {{{{block "{template}" .}}}}...{{{{end}}}}'
            ),
        )


class TemplateRuntimeError(TemplateError):
    """Render-time error with debugging context.

    Raised while executing a definition set: a function call fails, a value
    cannot be iterated, {{template}} calls recurse too deeply, or the output
    sink rejects a write.

    Output Format:
        ```
        Runtime Error: Error calling len: object of type 'int' has no len()
          Location: base.tmpl:9
          Values:
            args = (3,) (tuple)
        ```

    Attributes:
        message: What went wrong, without location
        expression: Source text of the failing action, when known
        values: Operands involved, shown by repr in the message
        template_name: Template executing when the error was raised
        lineno: Line of the failing action within its asset
        suggestion: How to fix it
        template_stack: (template, line) of each enclosing {{template}} call
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        values: dict[str, Any] | None = None,
        template_name: str | None = None,
        lineno: int | None = None,
        suggestion: str | None = None,
        source_snippet: SourceSnippet | None = None,
        template_stack: list[tuple[str, int]] | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.expression = expression
        self.values = values or {}
        self.template_name = template_name
        self.lineno = lineno
        self.suggestion = suggestion
        self.source_snippet = source_snippet
        self.template_stack = template_stack or []
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _location(self) -> str:
        loc = self.template_name or "<template>"
        if self.lineno:
            loc += f":{self.lineno}"
        return loc

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]

        if self.template_name or self.lineno:
            parts.append(f"  Location: {terminal.location(self._location())}")

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        if self.template_stack:
            parts.append("")
            parts.append(format_template_stack(self.template_stack))

        if self.expression:
            parts.append(f"  Expression: {self.expression}")

        if self.values:
            parts.append("  Values:")
            for name, value in self.values.items():
                value_repr = repr(value)
                if len(value_repr) > 80:
                    value_repr = value_repr[:77] + "..."
                parts.append(f"    {name} = {value_repr} ({type(value).__name__})")

        if self.suggestion:
            parts.append(f"\n  {terminal.hint('Suggestion:')} {self.suggestion}")

        return "\n".join(parts)

    def format_compact(self) -> str:
        """Format runtime error as structured terminal diagnostic."""
        parts = [terminal.format_error_header(self.code.value if self.code else None, self.message)]
        parts.append(f"  Location: {terminal.location(self._location())}")

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        if self.template_stack:
            parts.append("")
            parts.append(format_template_stack(self.template_stack))

        if self.expression:
            parts.append(f"  Expression: {self.expression}")

        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")

        return "\n".join(parts)


class UndefinedError(TemplateRuntimeError):
    """Raised when a field reference cannot be resolved.

    Field lookups are strict: ``{{.Title}}`` against a nil context, a
    mapping without a ``Title`` key, or an object without a ``Title``
    attribute fails instead of printing an empty string.

    If ``available_names`` is provided, a "Did you mean?" suggestion is
    included when a close match is found.

    Example:
        >>> render_page(assets, "profile", context=None)
        UndefinedError: Runtime Error: Undefined field 'Title' (context is nil)
    """

    code: ErrorCode | None = ErrorCode.UNDEFINED_FIELD

    def __init__(
        self,
        name: str,
        template: str | None = None,
        lineno: int | None = None,
        available_names: frozenset[str] | None = None,
        source_snippet: SourceSnippet | None = None,
        template_stack: list[tuple[str, int]] | None = None,
        *,
        receiver: Any = None,
    ):
        self.name = name
        self._available_names = available_names
        self._receiver_is_nil = receiver is None

        message = f"Undefined field '{name}'"
        if self._receiver_is_nil:
            message += " (context is nil)"
        elif available_names:
            from difflib import get_close_matches

            matches = get_close_matches(name, available_names, n=1, cutoff=0.6)
            if matches:
                message += f". Did you mean '{terminal.suggestion(matches[0])}'?"

        super().__init__(
            message,
            template_name=template,
            lineno=lineno,
            source_snippet=source_snippet,
            template_stack=template_stack,
            suggestion=(
                f"pass a context that defines '{name}', or guard with {{{{with .{name}}}}}"
            ),
        )
