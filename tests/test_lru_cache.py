"""Tests for the bounded LRU cache."""

import pytest

from tml.utils import LRUCache


class TestLRUCache:
    def test_get_set(self):
        cache: LRUCache[str, int] = LRUCache(maxsize=2)
        cache.set("a", 1)
        assert cache.get("a") == 1
        assert cache.get("missing") is None
        assert "a" in cache

    def test_evicts_least_recently_used(self):
        cache: LRUCache[str, int] = LRUCache(maxsize=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert "b" not in cache
        assert "a" in cache
        assert len(cache) == 2

    def test_get_or_set(self):
        cache: LRUCache[str, int] = LRUCache()
        calls = []
        assert cache.get_or_set("k", lambda: calls.append(1) or 7) == 7
        assert cache.get_or_set("k", lambda: calls.append(1) or 8) == 7
        assert calls == [1]

    def test_clear(self):
        cache: LRUCache[str, int] = LRUCache()
        cache.set("a", 1)
        cache.clear()
        assert len(cache) == 0

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            LRUCache(maxsize=0)
