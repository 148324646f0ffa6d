"""
Bounded in-memory cache for latest-price lookups.

Entries expire after a TTL and are invalidated whenever a new snapshot is
recorded for the same (printing, finish) key.
"""
import time
from collections import OrderedDict
from typing import Any, Hashable, Optional

import structlog

from mtg_catalog.core.config import settings

logger = structlog.get_logger()

MISSING = object()


class LatestPriceCache:
    """
    TTL cache with LRU eviction.

    A ``ttl`` of 0 disables the cache: ``get`` always misses and ``set`` is
    a no-op. ``None`` is a cacheable value ("no price recorded"), so misses
    are signalled with the ``MISSING`` sentinel.
    """

    def __init__(self, max_size: int = 1000, ttl: int = 0):
        """
        Initialize cache.

        Args:
            max_size: Maximum number of keys held at once.
            ttl: Time-to-live in seconds; 0 disables caching.
        """
        self.max_size = max_size
        self.ttl = ttl
        self._cache: OrderedDict[Hashable, tuple[Any, float]] = OrderedDict()

    @property
    def enabled(self) -> bool:
        return self.ttl > 0

    def get(self, key: Hashable) -> Any:
        """Return the cached value, or ``MISSING`` if absent or expired."""
        if not self.enabled or key not in self._cache:
            return MISSING

        value, expiry = self._cache[key]
        if time.monotonic() > expiry:
            del self._cache[key]
            return MISSING

        self._cache.move_to_end(key)
        return value

    def set(self, key: Hashable, value: Any) -> None:
        if not self.enabled:
            return

        if key in self._cache:
            del self._cache[key]

        # Evict least recently used
        if len(self._cache) >= self.max_size:
            self._cache.popitem(last=False)

        self._cache[key] = (value, time.monotonic() + self.ttl)

    def invalidate(self, key: Hashable) -> None:
        """Drop a key; called on every snapshot write for that key."""
        if self._cache.pop(key, None) is not None:
            logger.debug("Latest price cache invalidated", key=str(key))

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)


_price_cache = LatestPriceCache(
    max_size=settings.price_cache_max_size,
    ttl=settings.price_cache_ttl_seconds,
)


def get_price_cache() -> LatestPriceCache:
    """Get the process-wide latest price cache."""
    return _price_cache
