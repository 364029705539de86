"""Basic statement compilation for tml compiler.

Provides mixin for compiling output lines and the single-line directives
(``@include``, ``@children``, ``@provide``).

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
import re
from typing import TYPE_CHECKING

from tml.compiler.utils import append, assign, call, const, name
from tml.environment.exceptions import CompileError, ErrorCode
from tml.nodes import ChildrenPlaceholder, Escaped, InlineInclude, Raw, Text
from tml.parser.interpolation import scan_line, split_include_args

if TYPE_CHECKING:
    from tml.nodes import Segment

_PROVIDE_ARGS_RE = re.compile(r"^\s*([A-Za-z_]\w*)\s*,\s*(.+)$", re.DOTALL)


class BasicStatementMixin:
    """Mixin for compiling output lines and single-line directives.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _path: str
        _source: str | None
        _lineno: int

        # From ExpressionCompilationMixin
        def _compile_expr(self, text: str) -> ast.expr: ...

        # From Compiler core
        def _emit(self, stmt: ast.stmt) -> None: ...
        def _directive_args(self, trimmed: str, keyword: str) -> str | None: ...

    def _component_path(self, raw: str, directive: str) -> str:
        """Component paths are literal text; surrounding quotes are optional."""
        path = raw.strip()
        if len(path) >= 2 and path[0] == path[-1] and path[0] in "'\"":
            path = path[1:-1].strip()
        if not path:
            raise CompileError(
                f"@{directive} requires a component path",
                self._path,
                self._lineno,
                code=ErrorCode.INVALID_EXPRESSION,
                source=self._source,
            )
        return path

    def _scope_data(self, props: str | None) -> ast.expr:
        """Data handed to an include/component: the current scope, merged with props."""
        if props is None:
            return name("ctx")
        return call("_merge", name("ctx"), self._compile_expr(props))

    def _include_call(self, include: InlineInclude) -> ast.expr:
        """``_include("path", data, _context)``"""
        return call(
            "_include",
            const(self._component_path(include.path, "include")),
            self._scope_data(include.props),
            name("_context"),
        )

    def _compile_segment(self, segment: Segment) -> ast.expr:
        if isinstance(segment, Text):
            return const(segment.value)
        if isinstance(segment, Escaped):
            value = call("_escape", self._compile_expr(segment.expr))
        elif isinstance(segment, Raw):
            value = call("_str", self._compile_expr(segment.expr))
        elif isinstance(segment, InlineInclude):
            value = self._include_call(segment)
        elif isinstance(segment, ChildrenPlaceholder):
            value = name("_children")
        else:
            raise TypeError(f"Unknown segment: {type(segment).__name__}")
        return ast.FormattedValue(value=value, conversion=-1, format_spec=None)

    def _compile_text_line(self, line: str) -> None:
        """Compile a non-directive line into one ``_append`` call.

        Literal-only lines append a constant; lines with expressions append
        an f-string whose literal parts are merged.
        """
        parts: list[ast.expr] = []
        for part in (*map(self._compile_segment, scan_line(line)), const("\n")):
            if (
                isinstance(part, ast.Constant)
                and parts
                and isinstance(parts[-1], ast.Constant)
            ):
                parts[-1] = const(parts[-1].value + part.value)
            else:
                parts.append(part)

        if len(parts) == 1 and isinstance(parts[0], ast.Constant):
            self._emit(append(parts[0]))
        else:
            self._emit(append(ast.JoinedStr(values=parts)))

    def _compile_blank_line(self) -> None:
        self._emit(append(const("\n")))

    def _directive_include(self, trimmed: str) -> bool:
        """``@include(path[, props])`` on its own line."""
        args = self._directive_args(trimmed, "include")
        if args is None:
            return False
        self._emit(append(self._include_call(split_include_args(args))))
        return True

    def _directive_children(self, trimmed: str) -> bool:
        if trimmed != "@children":
            return False
        self._emit(append(name("_children")))
        return True

    def _directive_provide(self, trimmed: str) -> bool:
        """``@provide(key, expr)`` rebinds the context for what follows.

        Generates:
            _context = {**_context, "key": expr}
        """
        args = self._directive_args(trimmed, "provide")
        if args is None:
            return False
        match = _PROVIDE_ARGS_RE.match(args)
        if match is None:
            raise CompileError(
                "Malformed @provide: expected @provide(key, expression)",
                self._path,
                self._lineno,
                code=ErrorCode.INVALID_EXPRESSION,
                source=self._source,
            )
        key, expr = match.groups()
        extended = ast.Dict(
            keys=[None, const(key)],
            values=[name("_context"), self._compile_expr(expr)],
        )
        self._emit(assign("_context", extended))
        return True
