"""Component source parsing: block splitting and line interpolation scanning."""

from tml.parser.interpolation import (
    find_closing_paren,
    iter_code_chars,
    scan_line,
    split_include_args,
    split_top_level,
)
from tml.parser.sfc import parse

__all__ = [
    "find_closing_paren",
    "iter_code_chars",
    "parse",
    "scan_line",
    "split_include_args",
    "split_top_level",
]
