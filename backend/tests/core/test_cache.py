"""Tests for the latest price cache."""
from unittest.mock import patch

from mtg_catalog.core.cache import MISSING, LatestPriceCache


class TestLatestPriceCache:
    def test_disabled_when_ttl_is_zero(self):
        cache = LatestPriceCache(max_size=10, ttl=0)
        cache.set("a", 1)

        assert cache.enabled is False
        assert cache.get("a") is MISSING
        assert len(cache) == 0

    def test_get_and_set(self):
        cache = LatestPriceCache(max_size=10, ttl=60)
        cache.set("a", 1)
        assert cache.get("a") == 1

    def test_none_is_a_cacheable_value(self):
        cache = LatestPriceCache(max_size=10, ttl=60)
        cache.set("a", None)
        assert cache.get("a") is None
        assert cache.get("b") is MISSING

    def test_expiry(self):
        cache = LatestPriceCache(max_size=10, ttl=60)
        with patch("mtg_catalog.core.cache.time.monotonic", return_value=1000.0):
            cache.set("a", 1)
        with patch("mtg_catalog.core.cache.time.monotonic", return_value=1061.0):
            assert cache.get("a") is MISSING

    def test_lru_eviction(self):
        cache = LatestPriceCache(max_size=2, ttl=60)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert cache.get("a") == 1
        assert cache.get("b") is MISSING
        assert cache.get("c") == 3

    def test_invalidate_and_clear(self):
        cache = LatestPriceCache(max_size=10, ttl=60)
        cache.set("a", 1)
        cache.set("b", 2)

        cache.invalidate("a")
        assert cache.get("a") is MISSING

        cache.clear()
        assert len(cache) == 0
