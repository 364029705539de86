"""Control flow statement compilation for tml compiler.

Provides mixin for compiling ``@if``/``@elseif``/``@else`` chains and
``@each`` loops.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
import re
from typing import TYPE_CHECKING

from tml.compiler.utils import assign, at_line, call, const, name, scope_item
from tml.environment.exceptions import CompileError, ErrorCode

if TYPE_CHECKING:
    from tml.compiler.core import _Block

# "item of items" or "key, value of mapping.items()"
_EACH_ARGS_RE = re.compile(
    r"^\s*([A-Za-z_]\w*(?:\s*,\s*[A-Za-z_]\w*)*)\s+of\s+(.+)$",
    re.DOTALL,
)


class ControlFlowMixin:
    """Mixin for compiling control flow directives.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _path: str
        _source: str | None
        _lineno: int
        _block_counter: int
        _blocks: list[_Block]

        # From ExpressionCompilationMixin
        def _compile_expr(self, text: str) -> ast.expr: ...

        # From Compiler core
        def _emit(self, stmt: ast.stmt) -> None: ...
        def _open_block(self, block: _Block) -> None: ...
        def _directive_args(self, trimmed: str, keyword: str) -> str | None: ...

    def _unmatched(self, directive: str) -> CompileError:
        return CompileError(
            f"{directive} without matching @if",
            self._path,
            self._lineno,
            code=ErrorCode.UNMATCHED_DIRECTIVE,
            source=self._source,
        )

    def _innermost_if(self, directive: str) -> _Block:
        if not self._blocks or self._blocks[-1].kind != "if":
            raise self._unmatched(directive)
        block = self._blocks[-1]
        if block.has_else:
            raise CompileError(
                f"{directive} after @else",
                self._path,
                self._lineno,
                code=ErrorCode.UNMATCHED_DIRECTIVE,
                source=self._source,
            )
        return block

    def _directive_if(self, trimmed: str) -> bool:
        """Compile ``@if(expr)``: opens a conditional chain."""
        from tml.compiler.core import _Block

        args = self._directive_args(trimmed, "if")
        if args is None:
            return False
        node = ast.If(test=self._compile_expr(args), body=[], orelse=[])
        self._emit(node)
        self._open_block(_Block("if", self._lineno, node.body, branches=[node]))
        return True

    def _directive_elseif(self, trimmed: str) -> bool:
        """Compile ``@elseif(expr)`` as a nested If in the previous branch's orelse."""
        args = self._directive_args(trimmed, "elseif")
        if args is None:
            return False
        block = self._innermost_if("@elseif")
        node = at_line(ast.If(test=self._compile_expr(args), body=[], orelse=[]), self._lineno)
        block.branches[-1].orelse = [node]
        block.branches.append(node)
        block.body = node.body
        return True

    def _directive_else(self, trimmed: str) -> bool:
        if trimmed != "@else":
            return False
        block = self._innermost_if("@else")
        block.has_else = True
        block.body = block.branches[-1].orelse
        return True

    def _close_if(self, block: _Block) -> list[ast.stmt]:
        for branch in block.branches:
            if not branch.body:
                branch.body = [ast.Pass()]
        return []

    def _directive_each(self, trimmed: str) -> bool:
        """Compile ``@each(item of iterable)``.

        Generates:
            _shadowed_N = _shadow(ctx, ("item",))
            _index_N = 0
            for ctx["item"] in _iterate(iterable):
                ... body ...
                _index_N += 1
            _unshadow(ctx, _shadowed_N)

        Loop targets live in the data scope only while the loop runs;
        ``_unshadow`` restores whatever they were bound to before.
        """
        from tml.compiler.core import _Block

        args = self._directive_args(trimmed, "each")
        if args is None:
            return False
        match = _EACH_ARGS_RE.match(args)
        if match is None:
            raise CompileError(
                "Malformed @each: expected @each(item of iterable)",
                self._path,
                self._lineno,
                code=ErrorCode.INVALID_EXPRESSION,
                source=self._source,
            )
        targets = [t.strip() for t in match.group(1).split(",")]
        # Compiled before the loop opens so $index refers to any outer loop
        iterable = self._compile_expr(match.group(2))

        self._block_counter += 1
        index_var = f"_index_{self._block_counter}"
        shadow_var = f"_shadowed_{self._block_counter}"

        if len(targets) == 1:
            target: ast.expr = scope_item(targets[0], ast.Store())
        else:
            target = ast.Tuple(elts=[scope_item(t, ast.Store()) for t in targets], ctx=ast.Store())

        self._emit(
            assign(
                shadow_var,
                call("_shadow", name("ctx"), ast.Tuple(elts=[const(t) for t in targets], ctx=ast.Load())),
            )
        )
        self._emit(assign(index_var, const(0)))
        loop = ast.For(target=target, iter=call("_iterate", iterable), body=[], orelse=[])
        self._emit(loop)

        self._open_block(
            _Block(
                "each",
                self._lineno,
                loop.body,
                index_var=index_var,
                after=[ast.Expr(value=call("_unshadow", name("ctx"), name(shadow_var)))],
            )
        )
        return True

    def _close_each(self, block: _Block) -> list[ast.stmt]:
        # _index_N += 1 after the body, before the next iteration
        block.body.append(
            ast.AugAssign(target=name(block.index_var or "", store=True), op=ast.Add(), value=const(1))
        )
        return block.after
