"""HTML escaping for template output.

Complexity: O(n) single pass using ``str.translate()``.

"""

from __future__ import annotations

from typing import Any

# One translation table shared by every render; read-only after module load
_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
    }
)


def html_escape(value: Any) -> str:
    """Escape ``& < > " '`` for safe inclusion in HTML.

    ``None`` renders as the empty string; anything else is passed through
    ``str()`` first.

    Example:
        >>> html_escape('<a href="x">Tom & Jerry\\'s</a>')
        '&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&#39;s&lt;/a&gt;'
        >>> html_escape(None)
        ''
    """
    if value is None:
        return ""
    return str(value).translate(_ESCAPE_TABLE)
