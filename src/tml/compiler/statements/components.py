"""Children-capturing block compilation for tml compiler.

Provides mixin for ``@component(path[, props]) ... @end`` and
``@head ... @end``. Both compile their body into a nested function that
returns the captured output; the context is bound as a default argument,
so a ``@provide`` inside the body stays inside the body.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING

from tml.compiler.utils import append, buffer_preamble, call, const, function_def, joined, name
from tml.parser.interpolation import split_include_args

if TYPE_CHECKING:
    from tml.compiler.core import _Block
    from tml.nodes import InlineInclude


class ComponentBlockMixin:
    """Mixin for compiling ``@component`` and ``@head`` blocks.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _lineno: int
        _block_counter: int

        # From BasicStatementMixin
        def _component_path(self, raw: str, directive: str) -> str: ...
        def _scope_data(self, props: str | None) -> ast.expr: ...

        # From Compiler core
        def _emit(self, stmt: ast.stmt) -> None: ...
        def _open_block(self, block: _Block) -> None: ...
        def _directive_args(self, trimmed: str, keyword: str) -> str | None: ...

    def _capture_function(self, prefix: str) -> ast.FunctionDef:
        """Emit ``def <prefix>_N(_context=_context)`` with an empty buffer."""
        self._block_counter += 1
        fn = function_def(
            f"{prefix}_{self._block_counter}",
            ["_context"],
            buffer_preamble(),
            defaults=[name("_context")],
        )
        self._emit(fn)
        return fn

    def _directive_component(self, trimmed: str) -> bool:
        """Compile ``@component(path[, props])``.

        Generates (after the matching @end):
            def _children_N(_context=_context):
                buf = []
                _append = buf.append
                ... body ...
                return "".join(buf)
            _append(_component("path", data, _context, _children_N))
        """
        from tml.compiler.core import _Block

        args = self._directive_args(trimmed, "component")
        if args is None:
            return False
        target: InlineInclude = split_include_args(args)
        path = self._component_path(target.path, "component")
        data = self._scope_data(target.props)

        fn = self._capture_function("_children")
        invoke = append(call("_component", const(path), data, name("_context"), name(fn.name)))
        self._open_block(_Block("component", self._lineno, fn.body, after=[invoke]))
        return True

    def _directive_head(self, trimmed: str) -> bool:
        """Compile ``@head``; the captured output goes to the head callback."""
        from tml.compiler.core import _Block

        if trimmed != "@head":
            return False
        fn = self._capture_function("_head")
        invoke = ast.Expr(value=call("_head", name(fn.name)))
        self._open_block(_Block("head", self._lineno, fn.body, after=[invoke]))
        return True

    def _close_capture(self, block: _Block) -> list[ast.stmt]:
        block.body.append(joined())
        return block.after
