"""Inline script compilation for tml compiler.

Provides mixin for ``<% ... %>`` spans. The single-line form sits on one
trimmed line; the multi-line form opens with ``<%`` and runs until a line
ending in ``%>``. The opener is blanked out rather than removed so that
statement columns line up for dedenting:

    ```
    <% total = 0
       for item in cart:
           total += item.price %>
    ```

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tml.environment.exceptions import CompileError, ErrorCode

if TYPE_CHECKING:
    import ast

_OPEN, _CLOSE = "<%", "%>"


@dataclass(slots=True)
class ScriptBuffer:
    """Lines of a multi-line inline script collected so far."""

    lineno: int
    lines: list[str] = field(default_factory=list)


class InlineScriptMixin:
    """Mixin for compiling inline script spans.

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
        _script: ScriptBuffer | None

        # From ExpressionCompilationMixin
        def _compile_statements(self, text: str, first_line: int) -> list[ast.stmt]: ...

        # From Compiler core
        def _emit(self, stmt: ast.stmt) -> None: ...

    def _compile_script_line(self, line: str, trimmed: str) -> bool:
        """Handle a line starting with ``<%``: run it or start buffering."""
        if not trimmed.startswith(_OPEN):
            return False
        if len(trimmed) >= 4 and trimmed.endswith(_CLOSE):
            self._emit_script(trimmed[2:-2].strip(), self._lineno)
            return True
        self._script = ScriptBuffer(self._lineno, [line.replace(_OPEN, "  ", 1)])
        return True

    def _feed_script_line(self, line: str) -> None:
        """Buffer one line of an open multi-line script; close it on ``%>``."""
        assert self._script is not None
        stripped = line.rstrip()
        if not stripped.endswith(_CLOSE):
            self._script.lines.append(line)
            return
        self._script.lines.append(stripped[:-2])
        script, self._script = self._script, None
        self._emit_script(textwrap.dedent("\n".join(script.lines)), script.lineno)

    def _emit_script(self, text: str, first_line: int) -> None:
        for stmt in self._compile_statements(text, first_line):
            self._emit(stmt)

    def _check_script_closed(self) -> None:
        if self._script is not None:
            raise CompileError(
                "Unclosed <% block - missing %>",
                self._path,
                self._script.lineno,
                code=ErrorCode.UNCLOSED_SCRIPT,
                source=self._source,
            )
