"""RenderContext: per-render state kept out of the user's data.

Execution tracks which template and line it is in so that errors raised
deep inside a field lookup or function call can say where they happened.
That state lives in a ContextVar rather than on the definition set, so one
set (or one AssetFS) can serve concurrent renders on different threads.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field

# Deep enough for any real layout/page composition while catching a
# template that calls itself.
DEFAULT_MAX_DEPTH = 100


@dataclass
class RenderContext:
    """Per-render state isolated from user data.

    Thread Safety:
        ContextVars are per thread and per async task. Each one
        has its own RenderContext instance.

    Attributes:
        template_name: Current template name for error messages
        filename: Asset path of the current template
        source: Source of the current asset (for error snippets)
        line: Current line number (updated as nodes execute)
        depth: Current {{template}} call depth
        max_depth: Maximum allowed call depth
        template_stack: Stack of (template_name, line) for error traces
    """

    template_name: str | None = None
    filename: str | None = None
    source: str | None = None
    line: int = 0
    depth: int = 0
    max_depth: int = DEFAULT_MAX_DEPTH
    template_stack: list[tuple[str, int]] = field(default_factory=list)

    def check_depth(self, template_name: str) -> None:
        """Raise TemplateRuntimeError if another call would exceed max_depth."""
        if self.depth >= self.max_depth:
            from embedded_assets.environment.exceptions import ErrorCode, TemplateRuntimeError

            raise TemplateRuntimeError(
                f"Maximum template call depth exceeded ({self.max_depth}) "
                f"when executing '{template_name}'",
                template_name=self.template_name,
                lineno=self.line or None,
                template_stack=list(self.template_stack),
                suggestion="Check for templates that call themselves: A → B → A",
                code=ErrorCode.TEMPLATE_DEPTH,
            )

    @contextmanager
    def enter(
        self,
        template_name: str,
        filename: str | None,
        source: str | None,
    ) -> Iterator[RenderContext]:
        """Switch to ``template_name`` for the duration of a {{template}} call.

        The caller's location is pushed onto ``template_stack`` and restored
        on exit.
        """
        self.check_depth(template_name)
        saved = (self.template_name, self.filename, self.source, self.line)
        if self.template_name and self.line > 0:
            self.template_stack.append((self.template_name, self.line))
            pushed = True
        else:
            pushed = False

        self.template_name = template_name
        self.filename = filename
        self.source = source
        self.line = 0
        self.depth += 1
        try:
            yield self
        finally:
            self.depth -= 1
            self.template_name, self.filename, self.source, self.line = saved
            if pushed:
                self.template_stack.pop()


# Module-level ContextVar
_render_context: ContextVar[RenderContext | None] = ContextVar(
    "render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Get current render context (None if not in render)."""
    return _render_context.get()


@contextmanager
def render_context(max_depth: int = DEFAULT_MAX_DEPTH) -> Iterator[RenderContext]:
    """Context manager for render-scoped state.

    Creates a new RenderContext and sets it as the current context for
    the duration of the with block, restoring the previous one on exit.

    Example:
        with render_context() as ctx:
            executor.execute("base.tmpl", data)
            # ctx.line is updated as nodes execute
    """
    ctx = RenderContext(max_depth=max_depth)
    token = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)
