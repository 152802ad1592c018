"""Pure runtime helpers used by the executor.

None of them hold state: location information for error messages comes
from the current RenderContext.

Thread-Safety:
All functions are stateless and safe for concurrent use.

"""

from __future__ import annotations

import inspect
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from embedded_assets.environment.exceptions import (
    SourceSnippet,
    TemplateRuntimeError,
    UndefinedError,
    build_source_snippet,
)
from embedded_assets.render_context import get_render_context


def current_location() -> tuple[str | None, int | None, SourceSnippet | None, list[tuple[str, int]]]:
    """Template name, line, snippet and call stack of the executing node."""
    render_ctx = get_render_context()
    if render_ctx is None:
        return None, None, None, []
    lineno = render_ctx.line or None
    source = render_ctx.source
    snippet = build_source_snippet(source, lineno) if source and lineno else None
    return render_ctx.template_name, lineno, snippet, list(render_ctx.template_stack)


def runtime_error(message: str, **kwargs: Any) -> TemplateRuntimeError:
    """Build a TemplateRuntimeError located at the executing node."""
    template_name, lineno, snippet, stack = current_location()
    return TemplateRuntimeError(
        message,
        template_name=template_name,
        lineno=lineno,
        source_snippet=snippet,
        template_stack=stack,
        **kwargs,
    )


def lookup_field(obj: Any, name: str) -> Any:
    """Resolve ``.name`` on ``obj`` in strict mode.

    Mappings are looked up by key, anything else by public attribute.
    A method found this way is called with no arguments, so
    ``{{.Page.Summary}}`` works for a ``Summary()`` method.

    Raises:
        UndefinedError: ``obj`` is None, or has no such key/attribute.
    """
    if obj is not None:
        if isinstance(obj, Mapping):
            if name in obj:
                return obj[name]
            available = frozenset(str(key) for key in obj)
        else:
            if not name.startswith("_"):
                try:
                    value = getattr(obj, name)
                except AttributeError:
                    pass
                else:
                    if inspect.ismethod(value):
                        return value()
                    return value
            available = frozenset(attr for attr in dir(obj) if not attr.startswith("_"))
    else:
        available = None

    template_name, lineno, snippet, stack = current_location()
    raise UndefinedError(
        name,
        template_name,
        lineno,
        available_names=available,
        source_snippet=snippet,
        template_stack=stack,
        receiver=obj,
    )


def range_values(value: Any) -> Iterator[Any]:
    """Elements visited by {{range}}.

    Mappings yield their values in sorted key order, integers count from
    zero, nil yields nothing.

    Raises:
        TemplateRuntimeError: ``value`` cannot be iterated.
    """
    if value is None:
        return iter(())
    if isinstance(value, Mapping):
        return (value[key] for key in sorted(value))
    if isinstance(value, int) and not isinstance(value, bool):
        return iter(range(value))
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise runtime_error(
            f"range can't iterate over {type(value).__name__}",
            values={"value": value},
            suggestion="Pass a list, tuple, mapping or integer to {{range}}",
        )
    return iter(value)
