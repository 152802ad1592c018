"""Tree-walking executor for parsed templates.

One Executor is created per render call. It writes each produced piece of
text to the sink as soon as it is produced, so output streams even for
large pages, and a failure part-way leaves whatever was already written.

Dot and root:
    ``.`` is the current value (rebound by {{range}} and {{with}}), ``$``
    is the value the current template was called with. Both are passed
    down explicitly; nothing is stored on the user's data.

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

from embedded_assets.environment.exceptions import ErrorCode, TemplateError
from embedded_assets.nodes import (
    Block,
    Call,
    Const,
    Data,
    Dot,
    Expr,
    Field,
    If,
    Output,
    Pipeline,
    Range,
    Root,
    Template,
    TemplateCall,
    With,
)
from embedded_assets.nodes.base import Node
from embedded_assets.render_context import RenderContext
from embedded_assets.template.helpers import lookup_field, range_values, runtime_error
from embedded_assets.utils.html import html_escape
from embedded_assets.utils.values import format_value, is_true

logger = logging.getLogger(__name__)


class Writer(Protocol):
    """Anything with a text ``write()``: sys.stdout, io.StringIO, open files."""

    def write(self, text: str, /) -> object: ...


class Executor:
    """Executes templates from one definition set against a sink."""

    __slots__ = ("_autoescape", "_ctx", "_funcs", "_sink", "_sources", "_templates")

    def __init__(
        self,
        templates: Mapping[str, Template],
        sources: Mapping[str, str],
        sink: Writer,
        funcs: Mapping[str, Callable[..., Any]],
        ctx: RenderContext,
        autoescape: bool = True,
    ):
        self._templates = templates
        self._sources = sources
        self._sink = sink
        self._funcs = funcs
        self._ctx = ctx
        self._autoescape = autoescape

    def execute(self, name: str, data: Any) -> None:
        """Execute template ``name`` with ``data`` as both dot and ``$``."""
        template = self._templates.get(name)
        if template is None:
            raise runtime_error(
                f'No such template "{name}"',
                suggestion=f"Define it with {{{{define \"{name}\"}}}}...{{{{end}}}}",
            )

        source = self._sources.get(template.filename) if template.filename else None
        with self._ctx.enter(name, template.filename, source):
            try:
                self._walk(template.body, data, data)
            except TemplateError:
                raise
            except Exception as e:
                raise runtime_error(f"{type(e).__name__}: {e}") from e

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _walk(self, nodes: Sequence[Node], dot: Any, root: Any) -> None:
        ctx = self._ctx
        for node in nodes:
            ctx.line = node.lineno
            match node:
                case Data():
                    self._write(node.value)
                case Output():
                    self._write(self._print(self._eval(node.pipeline, dot, root)))
                case TemplateCall():
                    value = self._eval(node.pipeline, dot, root) if node.pipeline else None
                    self.execute(node.name, value)
                case Block():
                    self.execute(node.name, self._eval(node.pipeline, dot, root))
                case If():
                    test = self._eval(node.test, dot, root)
                    self._walk(node.body if is_true(test) else node.else_, dot, root)
                case Range():
                    self._range(node, dot, root)
                case With():
                    value = self._eval(node.pipeline, dot, root)
                    if is_true(value):
                        self._walk(node.body, value, root)
                    else:
                        self._walk(node.else_, dot, root)
                case _:
                    raise runtime_error(f"Cannot execute {type(node).__name__} node")

    def _range(self, node: Range, dot: Any, root: Any) -> None:
        empty = True
        for item in range_values(self._eval(node.pipeline, dot, root)):
            empty = False
            self._walk(node.body, item, root)
        if empty:
            self._walk(node.else_, dot, root)

    def _print(self, value: Any) -> str:
        if hasattr(value, "__html__"):
            return value.__html__()
        text = format_value(value)
        return html_escape(text) if self._autoescape else text

    def _write(self, text: str) -> None:
        if not text:
            return
        try:
            self._sink.write(text)
        except (OSError, ValueError) as e:
            raise runtime_error(
                f"Error writing output: {e}",
                code=ErrorCode.WRITE_ERROR,
            ) from e

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _eval(self, expr: Expr, dot: Any, root: Any) -> Any:
        match expr:
            case Pipeline():
                value = self._eval(expr.stages[0], dot, root)
                for stage in expr.stages[1:]:
                    # parser guarantees every later stage is a Call
                    value = self._call(stage, dot, root, piped=(value,))  # type: ignore[arg-type]
                return value
            case Call():
                return self._call(expr, dot, root)
            case Field():
                value = self._eval(expr.receiver, dot, root)
                for name in expr.names:
                    value = lookup_field(value, name)
                return value
            case Dot():
                return dot
            case Root():
                return root
            case Const():
                return expr.value
        raise runtime_error(f"Cannot evaluate {type(expr).__name__} expression")

    def _call(self, call: Call, dot: Any, root: Any, piped: tuple[Any, ...] = ()) -> Any:
        func = self._funcs.get(call.func)
        if func is None:
            raise runtime_error(f'Function "{call.func}" not defined')

        args = [self._eval(arg, dot, root) for arg in call.args]
        args.extend(piped)
        try:
            return func(*args)
        except TemplateError:
            raise
        except Exception as e:
            logger.debug(f"Function {call.func!r} failed: {e}")
            raise runtime_error(
                f"Error calling {call.func}: {e}",
                values={"args": tuple(args)},
                code=ErrorCode.FUNCTION_ERROR,
            ) from e
