"""tml Compiler Core: main Compiler class.

The Compiler turns template text into a Python code object. It walks the
template line by line, keeps a stack of open blocks, and builds an
`ast.Module` directly; there is no intermediate template AST.

Design Principles:
1. **AST-to-AST**: Generate `ast.Module`, not source strings
2. **StringBuilder**: Output via `_append()`, join at end
3. **One pass**: Each line is either a directive, part of an inline
   script, blank, or an output line
4. **Dict dispatch**: ``@keyword`` → handler lookup

Generated module:
    ```python
    def render(data, _escape, _include, _component, _context, _head):
        ctx, _children = _scope(data)
        buf = []
        _append = buf.append
        if _lookup(ctx, "show"):
            _append("  <p>yes</p>\\n")
        return "".join(buf)
    ```

"""

from __future__ import annotations

import ast
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tml.compiler.expressions import ExpressionCompilationMixin
from tml.compiler.statements import StatementCompilationMixin
from tml.compiler.utils import assign, at_line, buffer_preamble, call, function_def, joined, name
from tml.environment.exceptions import CompileError, ErrorCode
from tml.parser.interpolation import find_closing_paren
from tml.template import Template

if TYPE_CHECKING:
    import types

    from tml.compiler.statements import ScriptBuffer

logger = logging.getLogger(__name__)

_KEYWORD_RE = re.compile(r"@(\w+)")

RENDER_PARAMS = ["data", "_escape", "_include", "_component", "_context", "_head"]


@dataclass(slots=True)
class _Block:
    """An open ``@if``/``@each``/``@component``/``@head`` block.

    Attributes:
        kind: Directive that opened the block
        lineno: Line of the opening directive
        body: Statement list that following lines compile into
        after: Statements emitted into the parent body when the block closes
        branches: If-chain nodes (``if`` blocks only)
        has_else: Whether ``@else`` has been seen (``if`` blocks only)
        index_var: Loop counter local (``each`` blocks only)
    """

    kind: str
    lineno: int
    body: list[ast.stmt]
    after: list[ast.stmt] = field(default_factory=list)
    branches: list[ast.If] = field(default_factory=list)
    has_else: bool = False
    index_var: str | None = None


class Compiler(ExpressionCompilationMixin, StatementCompilationMixin):
    """Compile tml template text to Python code objects.

    The generated code defines a single ``render`` function whose
    parameters match the compiled-routine contract: the data mapping, the
    escape function, the include/component callbacks, the context mapping
    and the head callback.

    Attributes:
        _path: Component path for error messages and ``compile()``
        _source: Template text (for error snippets)
        _lineno: 1-based line currently being compiled
        _blocks: Stack of open blocks, innermost last
        _block_counter: Counter for unique generated names
        _script: Open multi-line inline script, if any

    Directive Dispatch:
        Uses O(1) dict lookup keyed by the word after ``@``:
            ```python
            handler = self._directives.get("each")
            handled = handler("@each(item of items)")
            ```
        A handler returns False when the line only looks like its
        directive (``@include(a) and more``); the line then compiles as
        output.

    Example:
            >>> from tml.template import STATIC_NAMESPACE
            >>> code = Compiler().compile("@if(show)\\n<p>yes</p>\\n@end", "demo")
            >>> namespace = STATIC_NAMESPACE.copy()
            >>> exec(code, namespace)

    """

    __slots__ = (
        "_block_counter",
        "_blocks",
        "_directives",
        "_lineno",
        "_path",
        "_root",
        "_script",
        "_source",
    )

    def __init__(self) -> None:
        self._path = "<template>"
        self._source: str | None = None
        self._lineno = 0
        self._blocks: list[_Block] = []
        self._block_counter = 0
        self._script: ScriptBuffer | None = None
        self._root: list[ast.stmt] = []
        self._directives: dict[str, Callable[[str], bool]] = {
            "if": self._directive_if,
            "elseif": self._directive_elseif,
            "else": self._directive_else,
            "end": self._directive_end,
            "each": self._directive_each,
            "include": self._directive_include,
            "component": self._directive_component,
            "children": self._directive_children,
            "provide": self._directive_provide,
            "head": self._directive_head,
        }

    # ─────────────────────────────────────────────────────────────────────────
    # Shared plumbing for the mixins
    # ─────────────────────────────────────────────────────────────────────────

    def _emit(self, stmt: ast.stmt) -> None:
        """Append a statement to the innermost open body."""
        if getattr(stmt, "lineno", None) is None:
            at_line(stmt, self._lineno)
        target = self._blocks[-1].body if self._blocks else self._root
        target.append(stmt)

    def _open_block(self, block: _Block) -> None:
        self._blocks.append(block)

    def _directive_args(self, trimmed: str, keyword: str) -> str | None:
        """Inside of ``@keyword( ... )`` when the parens span the whole line."""
        opener = f"@{keyword}("
        if not trimmed.startswith(opener):
            return None
        close = find_closing_paren(trimmed, len(opener))
        if close != len(trimmed) - 1:
            return None
        return trimmed[len(opener) : close]

    def _directive_end(self, trimmed: str) -> bool:
        if trimmed != "@end":
            return False
        if not self._blocks:
            raise CompileError(
                "Unexpected @end without matching block",
                self._path,
                self._lineno,
                code=ErrorCode.UNMATCHED_DIRECTIVE,
                source=self._source,
            )
        block = self._blocks.pop()
        if block.kind == "if":
            after = self._close_if(block)
        elif block.kind == "each":
            after = self._close_each(block)
        else:
            after = self._close_capture(block)
        for stmt in after:
            self._emit(stmt)
        return True

    # ─────────────────────────────────────────────────────────────────────────
    # Entry point
    # ─────────────────────────────────────────────────────────────────────────

    def compile(self, template: str, path: str) -> types.CodeType:
        """Compile template text to a code object defining ``render``.

        Raises:
            CompileError: On malformed nesting or invalid expression syntax
        """
        self._path = path
        self._source = template
        self._blocks = []
        self._block_counter = 0
        self._script = None
        self._root = []

        lines = template.split("\n")
        for lineno, line in enumerate(lines, start=1):
            self._lineno = lineno
            self._compile_line(line)

        self._check_script_closed()
        if self._blocks:
            raise CompileError(
                f"Unclosed @{self._blocks[-1].kind} block - missing @end",
                path,
                len(lines),
                code=ErrorCode.UNCLOSED_BLOCK,
                source=template,
            )

        module = ast.Module(body=[self._make_render_function()], type_ignores=[])
        ast.fix_missing_locations(module)
        try:
            code = compile(module, path, "exec")
        except SyntaxError as e:
            raise CompileError(
                f"Compilation failed: {e.msg}",
                path,
                0,
                code=ErrorCode.INVALID_EXPRESSION,
                source=template,
            ) from e
        logger.debug("Compiled %s (%d lines)", path, len(lines))
        return code

    def _compile_line(self, line: str) -> None:
        if self._script is not None:
            self._feed_script_line(line)
            return

        trimmed = line.strip()
        if not trimmed:
            self._compile_blank_line()
            return

        if trimmed.startswith("@"):
            keyword = _KEYWORD_RE.match(trimmed)
            handler = self._directives.get(keyword.group(1)) if keyword else None
            if handler is not None and handler(trimmed):
                return

        if self._compile_script_line(line, trimmed):
            return

        self._compile_text_line(line)

    def _make_render_function(self) -> ast.FunctionDef:
        """Wrap the compiled body in ``def render(...)``."""
        preamble: list[ast.stmt] = [
            # ctx, _children = _scope(data)
            assign(
                ast.Tuple(elts=[name("ctx", store=True), name("_children", store=True)], ctx=ast.Store()),
                call("_scope", name("data")),
            ),
            *buffer_preamble(),
        ]
        for stmt in preamble:
            at_line(stmt, 1)
        return function_def("render", RENDER_PARAMS, [*preamble, *self._root, joined()])


def compile_template(template: str, path: str) -> Template:
    """Compile template text into a ready-to-run `Template`."""
    return Template(Compiler().compile(template, path), path, template)
