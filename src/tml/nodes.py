"""Line segment nodes produced by the interpolation scanner.

A template line that is not a directive is split into an ordered sequence
of segments. Nodes are immutable for thread-safety, like the rest of the
compile pipeline.

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Segment:
    """Base class for all line segments."""


@dataclass(frozen=True, slots=True)
class Text(Segment):
    """Literal text between special spans."""

    value: str


@dataclass(frozen=True, slots=True)
class Escaped(Segment):
    """Escaped output: {{ expr }}"""

    expr: str


@dataclass(frozen=True, slots=True)
class Raw(Segment):
    """Unescaped output: {{{ expr }}}"""

    expr: str


@dataclass(frozen=True, slots=True)
class InlineInclude(Segment):
    """Inline include shorthand: @include(path[, props])"""

    path: str
    props: str | None = None


@dataclass(frozen=True, slots=True)
class ChildrenPlaceholder(Segment):
    """Inline children shorthand: @children"""
