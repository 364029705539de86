"""Single-file component parser.

A component source holds up to one ``<template>``, one ``<style>`` and one
``<script>`` block, in any order. Content outside the blocks is ignored and
only the first block of each kind is honored.

Example:
    >>> parsed = parse("<template><p>Hi</p></template><style>p { margin: 0; }</style>")
    >>> parsed.template
    '<p>Hi</p>'
    >>> parsed.script
    ''

"""

from __future__ import annotations

import re

from tml._types import ParsedComponent

# Non-greedy, first occurrence; compiled at module level (immutable)
_TEMPLATE_RE = re.compile(r"<template>(.*?)</template>", re.DOTALL)
_STYLE_RE = re.compile(r"<style>(.*?)</style>", re.DOTALL)
_SCRIPT_RE = re.compile(r"<script>(.*?)</script>", re.DOTALL)


def _block(pattern: re.Pattern[str], source: str) -> str:
    match = pattern.search(source)
    return match.group(1).strip() if match else ""


def parse(source: str) -> ParsedComponent:
    """Split component source into its template, style and script blocks.

    Missing blocks yield empty strings; this never raises.
    """
    return ParsedComponent(
        template=_block(_TEMPLATE_RE, source),
        style=_block(_STYLE_RE, source),
        script=_block(_SCRIPT_RE, source),
    )
