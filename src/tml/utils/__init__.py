"""Small utilities shared across the tml engine."""

from tml.utils.html import html_escape
from tml.utils.lru_cache import LRUCache

__all__ = ["LRUCache", "html_escape"]
