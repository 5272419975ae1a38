"""In-memory read-through cache with a fixed TTL per instance.

Entries are evicted lazily: an expired entry is only removed when it is next
read. Nothing sweeps the cache in the background and nothing survives a
process restart.

Every operation is synchronous, so on a single event loop a get-then-set
sequence cannot interleave with another coroutine's.

Example:
    cache = TTLCache(ttl=300)
    data = cache.get(url)
    if data is None:
        data = await fetch(url)
        cache.set(url, data)
"""

import time
from dataclasses import dataclass
from typing import Any

from mlb_preview_agent.monitoring import CacheMetrics


@dataclass
class CacheEntry:
    """Cached value and the epoch time it was stored.

    Attributes:
        data: Cached value
        timestamp: time.time() when the value was stored
    """

    data: Any
    timestamp: float

    def is_expired(self, ttl: float, now: float) -> bool:
        return now - self.timestamp >= ttl


class TTLCache:
    """Process-lifetime key/value cache where every entry shares one TTL."""

    def __init__(self, ttl: float):
        """Initialize an empty cache.

        Args:
            ttl: Seconds an entry stays fresh after it is stored
        """
        self.ttl = ttl
        self._entries: dict[str, CacheEntry] = {}
        self.metrics = CacheMetrics()

    def get(self, key: str) -> Any | None:
        """Return the live value for key, or None when missing or expired.

        An expired entry is evicted as a side effect.
        """
        entry = self._entries.get(key)
        if entry is None:
            self.metrics.misses += 1
            return None

        if entry.is_expired(self.ttl, time.time()):
            del self._entries[key]
            self.metrics.expirations += 1
            return None

        self.metrics.hits += 1
        return entry.data

    def set(self, key: str, data: Any) -> None:
        self._entries[key] = CacheEntry(data=data, timestamp=time.time())

    def clear(self) -> None:
        """Drop every entry. Metrics are kept."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def stats(self) -> dict:
        """Size, keys and hit/miss counters, for health and debugging output."""
        return {
            "size": len(self._entries),
            "keys": list(self._entries),
            "ttl": self.ttl,
            **self.metrics.to_dict(),
        }
