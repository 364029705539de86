"""Default code transformer: regex CSS/JS minification.

This is deliberately light: it strips comments and whitespace, and it
wraps scripts in an IIFE so component scripts cannot leak globals into
each other. Plug a real bundler in through the `CodeTransformer`
protocol (anything with ``css(source)`` and ``js(source)`` methods).

Example:
    >>> minify_css(".card {\\n  color: red;\\n}\\n/* unused */")
    '.card{color:red}'
    >>> wrap_in_iife("console.log(1)")
    '(function(){console.log(1)})();'

"""

from __future__ import annotations

import re

_CSS_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")
_CSS_PUNCT_RE = re.compile(r"\s*([{}:;,])\s*")
_TRAILING_WS_RE = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def minify_css(css: str) -> str:
    """Strip comments, collapse whitespace and drop redundant ``;``."""
    result = _CSS_COMMENT_RE.sub("", css)
    result = _WHITESPACE_RE.sub(" ", result)
    result = _CSS_PUNCT_RE.sub(r"\1", result)
    result = result.replace(";}", "}")
    return result.strip()


def minify_js(js: str) -> str:
    """Trim trailing whitespace per line and collapse runs of blank lines."""
    result = _TRAILING_WS_RE.sub("", js)
    result = _BLANK_RUN_RE.sub("\n\n", result)
    return result.strip()


def wrap_in_iife(js: str) -> str:
    """Isolate *js* in an immediately-invoked function; blank input stays blank."""
    if not js.strip():
        return ""
    return f"(function(){{{js}}})();"


class MinifyTransformer:
    """`CodeTransformer` built from `minify_css`, `minify_js` and `wrap_in_iife`."""

    __slots__ = ()

    def css(self, source: str) -> str:
        return minify_css(source)

    def js(self, source: str) -> str:
        return wrap_in_iife(minify_js(source))
