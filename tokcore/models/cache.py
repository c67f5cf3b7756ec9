"""Bounded, thread-safe LRU cache for whole-word tokenization results."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Generic, TypeVar

__all__ = ["LRUCache"]

K = TypeVar("K")
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    """
    Least-recently-used cache.

    A capacity of 0 disables the cache: ``get`` always misses and ``put``
    stores nothing.
    """

    __slots__ = ("_capacity", "_data", "_lock")

    def __init__(self, capacity: int):
        self._capacity = max(0, capacity)
        self._data: OrderedDict[K, V] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, key: K) -> V | None:
        if not self._capacity:
            return None
        with self._lock:
            value = self._data.get(key)
            if value is not None:
                self._data.move_to_end(key)
            return value

    def put(self, key: K, value: V) -> None:
        if not self._capacity:
            return
        with self._lock:
            self._data[key] = value
            self._data.move_to_end(key)
            while len(self._data) > self._capacity:
                self._data.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def resize(self, capacity: int) -> None:
        """Change capacity, evicting the oldest entries if it shrinks."""
        with self._lock:
            self._capacity = max(0, capacity)
            while len(self._data) > self._capacity:
                self._data.popitem(last=False)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data
