"""Bounded LRU cache used for built asset tags.

Thread-Safety:
All operations hold an internal lock; values are never mutated in place,
so concurrent readers see either the old or the new entry.

"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable, Hashable
from threading import Lock
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    """Fixed-capacity mapping that evicts the least recently used entry.

    Example:
            >>> cache: LRUCache[str, int] = LRUCache(maxsize=2)
            >>> cache.set("a", 1); cache.set("b", 2)
            >>> cache.get("a")
            1
            >>> cache.set("c", 3)  # evicts "b"
            >>> "b" in cache
            False

    """

    __slots__ = ("_data", "_lock", "maxsize")

    def __init__(self, maxsize: int = 100):
        if maxsize < 1:
            raise ValueError(f"maxsize must be positive, got {maxsize}")
        self.maxsize = maxsize
        self._data: OrderedDict[K, V] = OrderedDict()
        self._lock = Lock()

    def get(self, key: K) -> V | None:
        with self._lock:
            try:
                self._data.move_to_end(key)
            except KeyError:
                return None
            return self._data[key]

    def set(self, key: K, value: V) -> None:
        with self._lock:
            self._data[key] = value
            self._data.move_to_end(key)
            while len(self._data) > self.maxsize:
                self._data.popitem(last=False)

    def get_or_set(self, key: K, factory: Callable[[], V]) -> V:
        """Return the cached value for *key*, computing and storing it on a miss.

        The factory runs outside the lock; two racing misses both compute
        and the later write wins, which is harmless for pure factories.
        """
        cached = self.get(key)
        if cached is not None:
            return cached
        value = factory()
        self.set(key, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
