"""
Tests for LRUCache.
"""

import threading

import pytest

from tokcore.models import LRUCache


class TestLRUCache:
    """Tests for LRUCache."""

    def test_get_put(self):
        """Stored values are returned."""
        cache = LRUCache(2)
        cache.put("a", 1)

        assert cache.get("a") == 1
        assert cache.get("b") is None

    def test_evicts_least_recently_used(self):
        """The oldest untouched entry is evicted first."""
        cache = LRUCache(2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.get("a")
        cache.put("c", 3)

        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache

    def test_zero_capacity_disables(self):
        """A capacity of 0 stores nothing."""
        cache = LRUCache(0)
        cache.put("a", 1)

        assert cache.get("a") is None
        assert len(cache) == 0

    def test_resize_shrinks(self):
        """Shrinking evicts the oldest entries."""
        cache = LRUCache(3)
        for i, key in enumerate("abc"):
            cache.put(key, i)
        cache.resize(1)

        assert len(cache) == 1
        assert cache.get("c") == 2
        assert cache.capacity == 1

    def test_clear(self):
        """clear() empties the cache."""
        cache = LRUCache(2)
        cache.put("a", 1)
        cache.clear()

        assert len(cache) == 0

    @pytest.mark.concurrency
    def test_concurrent_puts_respect_capacity(self):
        """Concurrent writers never grow the cache past its capacity."""
        cache = LRUCache(50)

        def worker(offset):
            for i in range(500):
                cache.put(offset * 1000 + i, i)
                cache.get(offset * 1000 + i // 2)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert not any(t.is_alive() for t in threads)
        assert len(cache) <= 50
