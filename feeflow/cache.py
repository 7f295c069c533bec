import time
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class CacheEntry:
    value: Any
    fetched_at: float

    def is_stale(self, now, ttl):
        return now - self.fetched_at >= ttl


class TTLCache:
    """Single-value cache with an injectable clock.

    Holds at most one entry. A stale entry is kept until replaced so callers
    can still serve it when a refresh fails.
    """

    def __init__(self, ttl=300, clock=time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self._entry: Optional[CacheEntry] = None

    def fresh(self):
        """Return the cached value if still within the TTL, else None"""
        if self._entry is None or self._entry.is_stale(self.clock(), self.ttl):
            return None
        return self._entry.value

    def stale(self):
        """Return whatever is cached, regardless of age"""
        return self._entry.value if self._entry else None

    def store(self, value):
        self._entry = CacheEntry(value, self.clock())
        return value

    def clear(self):
        self._entry = None
