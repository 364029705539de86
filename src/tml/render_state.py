"""tml RenderState: per-page render state isolated from template data.

One page render owns one `RenderState`: the recursion depth of
component/include resolution and the ceiling it is checked against. The
state lives in a ContextVar, so concurrent page renders on different
threads (or tasks) never share a counter.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field

from tml.environment.config import DEFAULT_MAX_DEPTH
from tml.environment.exceptions import ErrorCode, RenderError


@dataclass
class RenderState:
    """Per-render state for one top-level page render.

    Attributes:
        max_depth: Maximum nesting of component/include resolution
        depth: Current nesting depth
        stack: Component paths currently being rendered, outermost first
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    depth: int = 0
    stack: list[str] = field(default_factory=list)

    def chain(self, path: str) -> str:
        """Render chain leading to *path*, trimmed to the repeating cycle.

        ``a -> b -> a`` when *path* is already on the stack, otherwise the
        last few entries followed by *path*.
        """
        if path in self.stack:
            start = len(self.stack) - 1 - self.stack[::-1].index(path)
        else:
            start = max(0, len(self.stack) - 4)
        return " -> ".join([*self.stack[start:], path])

    def check_depth(self, path: str) -> None:
        """Raise if entering *path* would exceed the depth ceiling.

        Raises:
            RenderError: If depth >= max_depth
        """
        if self.depth >= self.max_depth:
            raise RenderError(
                "Maximum render depth exceeded - possible circular component reference"
                f" ({self.chain(path)})",
                path,
                0,
                code=ErrorCode.RENDER_DEPTH,
            )

    @contextmanager
    def enter(self, path: str) -> Iterator[None]:
        """Count one level of nesting for the duration of the block.

        The depth is restored on every exit path, including errors.
        """
        self.check_depth(path)
        self.depth += 1
        self.stack.append(path)
        try:
            yield
        finally:
            self.stack.pop()
            self.depth -= 1


# Module-level ContextVar
_render_state: ContextVar[RenderState | None] = ContextVar(
    "tml_render_state",
    default=None,
)


def get_render_state() -> RenderState | None:
    """Get current render state (None if not inside a page render)."""
    return _render_state.get()


@contextmanager
def render_state(max_depth: int = DEFAULT_MAX_DEPTH) -> Iterator[RenderState]:
    """Context manager for page-scoped render state.

    Creates a fresh RenderState, makes it current for the duration of the
    with block and restores the previous one on exit.

    Example:
        with render_state(max_depth=100) as state:
            html = engine.render_component("pages/home", data, {}, collector)
    """
    state = RenderState(max_depth=max_depth)
    token: Token[RenderState | None] = _render_state.set(state)
    try:
        yield state
    finally:
        _render_state.reset(token)
