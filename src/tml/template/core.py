"""tml Template: compiled component template ready for execution.

The Template wraps a compiled code object that defines one function:

    ```python
    def render(data, _escape, _include, _component, _context, _head):
        ctx, _children = _scope(data)
        buf = []
        _append = buf.append
        _append(f"<h1>{_escape(_lookup(ctx, 'title'))}</h1>\\n")
        return "".join(buf)
    ```

Calling the Template runs that routine directly. `Template.render()` is
the executor: it supplies defaults, injects children and converts stray
exceptions into `RenderError`.

Thread-Safety:
- Templates are immutable after construction
- Each call creates only local state (scope dict, buf list)
- Multiple threads can render the same template simultaneously

"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from tml.environment.exceptions import RenderError, TemplateError
from tml.template.helpers import STATIC_NAMESPACE
from tml.utils.html import html_escape

if TYPE_CHECKING:
    import types

    from tml._types import ComponentFn, Escape, HeadFn, IncludeFn


class Template:
    """Compiled template ready for rendering.

    Attributes:
        path: Component path (for error messages)
        source: Template text the routine was compiled from

    Example:
            >>> from tml.compiler import compile_template
            >>> t = compile_template("<p>{{ name }}</p>", "greeting")
            >>> t.render({"name": "<World>"})
            '<p>&lt;World&gt;</p>\\n'

    """

    __slots__ = ("_render_func", "path", "source")

    def __init__(self, code: types.CodeType, path: str, source: str | None = None):
        self.path = path
        self.source = source
        namespace = STATIC_NAMESPACE.copy()
        exec(code, namespace)
        self._render_func: Callable[..., str] = namespace["render"]

    def __call__(
        self,
        data: Mapping[str, Any],
        escape: Escape,
        include: IncludeFn,
        component: ComponentFn,
        context: Mapping[str, Any],
        head: HeadFn,
    ) -> str:
        """Run the compiled routine as-is, without error conversion."""
        return self._render_func(data, escape, include, component, context, head)

    def render(
        self,
        data: Mapping[str, Any] | None = None,
        *,
        escape: Escape = html_escape,
        include: IncludeFn | None = None,
        component: ComponentFn | None = None,
        context: Mapping[str, Any] | None = None,
        head: HeadFn | None = None,
        children: str | None = None,
    ) -> str:
        """Execute the template and return its output.

        Errors that are already `TemplateError` subclasses propagate
        unchanged; anything else is wrapped in `RenderError` with this
        template's path and line 0.
        """
        scope: dict[str, Any] = dict(data or {})
        if children is not None:
            scope["$children"] = children

        try:
            return self._render_func(
                scope,
                escape,
                include or self._unbound_include,
                component or self._unbound_component,
                context if context is not None else {},
                head or self._unbound_head,
            )
        except TemplateError:
            raise
        except Exception as e:
            message = str(e).strip() or type(e).__name__
            raise RenderError(message, self.path, 0) from e

    def _unbound_include(self, path: str, *_: Any) -> str:
        raise RenderError(f"Cannot include '{path}': template is not bound to an engine", self.path)

    def _unbound_component(self, path: str, *_: Any) -> str:
        raise RenderError(f"Cannot render component '{path}': template is not bound to an engine", self.path)

    def _unbound_head(self, _fn: Callable[[], str]) -> None:
        raise RenderError("@head requires an engine to collect head content", self.path)

    def __repr__(self) -> str:
        return f"<Template {self.path!r}>"
