"""Interpolation scanner for template lines.

Splits one line of template text into typed segments:

- ``{{{ expr }}}`` → `Raw`
- ``{{ expr }}`` → `Escaped`
- ``@include(path[, props])`` → `InlineInclude`
- ``@children`` → `ChildrenPlaceholder`
- everything else → `Text`

Scanning is left-to-right; at each step the earliest opener wins, and on a
tie between ``{{{`` and ``{{`` the raw form wins. ``@include`` and
``@children`` are only recognized on a word boundary (so
``user@children.com`` and ``@childrenFoo`` stay literal). An opener without
its closer turns the rest of the line into text; the scanner never raises.

Include arguments are matched with a quote-aware walker that tracks nested
parentheses and braces as well as ``'``, ``"`` and backtick strings,
including ``${...}`` interpolations inside backtick strings.

"""

from __future__ import annotations

import re
from collections.abc import Iterator

from tml.nodes import ChildrenPlaceholder, Escaped, InlineInclude, Raw, Segment, Text

_QUOTES = frozenset("'\"`")

# "@include(" without a word character before it
_INCLUDE_RE = re.compile(r"(?<!\w)@include\(")
# "@children" on both word boundaries
_CHILDREN_RE = re.compile(r"(?<!\w)@children(?!\w)")

_RAW_OPEN, _RAW_CLOSE = "{{{", "}}}"
_ESCAPED_OPEN, _ESCAPED_CLOSE = "{{", "}}"
_CHILDREN_TOKEN = "@children"


def iter_code_chars(text: str, start: int = 0) -> Iterator[tuple[int, str]]:
    """Yield ``(index, char)`` for every character outside string literals.

    String bodies and their quotes are skipped. Inside a backtick string,
    ``${...}`` interpolations are code again and their characters are yielded
    (except the ``${`` opener and matching ``}``). Backslash escapes inside
    strings skip the escaped character.
    """
    # Each frame is either a quote character (inside a string) or an int
    # brace depth (inside a ${...} interpolation of a backtick string).
    frames: list[str | int] = []
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        top = frames[-1] if frames else None

        if isinstance(top, str):
            if ch == "\\":
                i += 2
                continue
            if ch == top:
                frames.pop()
            elif top == "`" and text.startswith("${", i):
                frames.append(0)
                i += 2
                continue
            i += 1
            continue

        if ch in _QUOTES:
            frames.append(ch)
            i += 1
            continue

        if isinstance(top, int):
            if ch == "{":
                frames[-1] = top + 1
            elif ch == "}":
                if top == 0:
                    frames.pop()
                    i += 1
                    continue
                frames[-1] = top - 1

        yield i, ch
        i += 1


def find_closing_paren(text: str, start: int) -> int:
    """Find the ``)`` closing a paren opened just before *start*.

    Returns -1 when the paren is never closed.
    """
    depth = 1
    for i, ch in iter_code_chars(text, start):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
    return -1


def split_top_level(text: str) -> tuple[str, str | None]:
    """Split *text* on its first comma outside brackets and strings.

    Returns ``(head, tail)`` trimmed; *tail* is None when there is no
    top-level comma.
    """
    depth = 0
    for i, ch in iter_code_chars(text):
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif ch == "," and depth == 0:
            return text[:i].strip(), text[i + 1 :].strip()
    return text.strip(), None


def split_include_args(content: str) -> InlineInclude:
    """Parse ``path[, props]`` from the inside of an include's parentheses."""
    path, props = split_top_level(content)
    return InlineInclude(path=path, props=props or None)


def _find_bounded(pattern: re.Pattern[str], text: str) -> int:
    match = pattern.search(text)
    return match.start() if match else -1


def scan_line(text: str) -> list[Segment]:
    """Scan one template line into an ordered list of segments."""
    segments: list[Segment] = []
    remaining = text

    while remaining:
        candidates: list[tuple[int, int, str]] = []
        # Second tuple item breaks position ties: raw before escaped
        raw_pos = remaining.find(_RAW_OPEN)
        if raw_pos != -1:
            candidates.append((raw_pos, 0, "raw"))
        escaped_pos = remaining.find(_ESCAPED_OPEN)
        if escaped_pos != -1:
            candidates.append((escaped_pos, 1, "escaped"))
        include_pos = _find_bounded(_INCLUDE_RE, remaining)
        if include_pos != -1:
            candidates.append((include_pos, 2, "include"))
        children_pos = _find_bounded(_CHILDREN_RE, remaining)
        if children_pos != -1:
            candidates.append((children_pos, 3, "children"))

        if not candidates:
            segments.append(Text(remaining))
            break

        pos, _, kind = min(candidates)
        if pos > 0:
            segments.append(Text(remaining[:pos]))

        if kind == "raw":
            end = remaining.find(_RAW_CLOSE, pos + 3)
            if end == -1:
                segments.append(Text(remaining[pos:]))
                break
            segments.append(Raw(remaining[pos + 3 : end].strip()))
            remaining = remaining[end + 3 :]
        elif kind == "escaped":
            end = remaining.find(_ESCAPED_CLOSE, pos + 2)
            if end == -1:
                segments.append(Text(remaining[pos:]))
                break
            segments.append(Escaped(remaining[pos + 2 : end].strip()))
            remaining = remaining[end + 2 :]
        elif kind == "include":
            open_paren = pos + len("@include")
            close_paren = find_closing_paren(remaining, open_paren + 1)
            if close_paren == -1:
                segments.append(Text(remaining[pos:]))
                break
            segments.append(split_include_args(remaining[open_paren + 1 : close_paren]))
            remaining = remaining[close_paren + 1 :]
        else:
            segments.append(ChildrenPlaceholder())
            remaining = remaining[pos + len(_CHILDREN_TOKEN) :]

    return _merge_text(segments)


def _merge_text(segments: list[Segment]) -> list[Segment]:
    """Coalesce adjacent text segments."""
    merged: list[Segment] = []
    for segment in segments:
        if isinstance(segment, Text) and merged and isinstance(merged[-1], Text):
            merged[-1] = Text(merged[-1].value + segment.value)
        else:
            merged.append(segment)
    return merged
