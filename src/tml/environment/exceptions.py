"""Exceptions for the tml template system.

Exception Hierarchy:
TemplateError (base)
├── CompileError              # Structural template defects, expression syntax
└── RenderError               # Render-time failure with component path
    ├── PathTraversalError    # Component path escapes the views directory
    └── TemplateNotFoundError # No source behind a component path

Every structured error carries the originating component path and a line
number (0 when the failure is not attributable to a line):

    ```
    @elseif without matching @if at pages/home:7
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes for tml errors.

    Format: T-{CATEGORY}-{NUMBER}
    Categories: CMP (compile), RUN (render), TPL (template loading)
    """

    # Compile errors (T-CMP-xxx)
    UNMATCHED_DIRECTIVE = "T-CMP-001"
    UNCLOSED_BLOCK = "T-CMP-002"
    UNCLOSED_SCRIPT = "T-CMP-003"
    INVALID_EXPRESSION = "T-CMP-004"

    # Render errors (T-RUN-xxx)
    RUNTIME_ERROR = "T-RUN-001"
    RENDER_DEPTH = "T-RUN-002"
    PATH_TRAVERSAL = "T-RUN-003"
    MISSING_HEAD = "T-RUN-004"

    # Template loading errors (T-TPL-xxx)
    TEMPLATE_NOT_FOUND = "T-TPL-001"

    @property
    def category(self) -> str:
        """Error category (e.g., 'compile', 'runtime', 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "CMP": "compile",
            "RUN": "runtime",
            "TPL": "template",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int

    def format(self) -> str:
        """Format snippet with line numbers, marking the error line with ``>``."""
        parts: list[str] = ["   |"]
        for lineno, content in self.lines:
            marker = ">" if lineno == self.error_line else " "
            parts.append(f"{marker}{lineno:>3} | {content}")
        parts.append("   |")
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line)


class TemplateError(Exception):
    """Base exception for all tml template errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a one-screen diagnostic prefixed with its code."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        return header


class _LocatedError(TemplateError):
    """Error attributed to a component path and line."""

    def __init__(self, message: str, path: str, line: int = 0):
        self.message = message
        self.path = path
        self.line = line
        super().__init__(f"{message} at {path}:{line}")


class CompileError(_LocatedError):
    """Structural defect in template source or invalid expression syntax.

    When ``source`` is given and ``line`` is known, `format_compact()`
    includes a snippet of the offending lines.
    """

    code: ErrorCode | None = ErrorCode.UNMATCHED_DIRECTIVE

    def __init__(
        self,
        message: str,
        path: str,
        line: int = 0,
        *,
        code: ErrorCode | None = None,
        source: str | None = None,
    ):
        super().__init__(message, path, line)
        if code is not None:
            self.code = code
        self.source = source

    def format_compact(self) -> str:
        parts = [super().format_compact()]
        if self.source and self.line:
            parts.append(build_source_snippet(self.source, self.line).format())
        return "\n".join(parts)


class RenderError(_LocatedError):
    """Runtime failure while rendering a component."""

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        path: str,
        line: int = 0,
        *,
        code: ErrorCode | None = None,
    ):
        super().__init__(message, path, line)
        if code is not None:
            self.code = code


class PathTraversalError(RenderError):
    """A component path resolves outside the views directory."""

    code: ErrorCode | None = ErrorCode.PATH_TRAVERSAL

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f'Path traversal detected: "{name}" resolves outside of views directory',
            name,
            0,
        )


class TemplateNotFoundError(RenderError):
    """No source exists for a component path.

    Example:
        TemplateNotFoundError: Template not found: pages/missing
        (resolved to /srv/views/pages/missing.tml) at pages/missing:0
    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND

    def __init__(self, path: str, location: str | None = None):
        self.location = location
        message = f"Template not found: {path}"
        if location:
            message += f" (resolved to {location})"
        super().__init__(message, path, 0)
