"""In-memory response cache with lazy expiry.

Entries carry an absolute expiry instant and are checked when read; there is
no background eviction. Long-running processes can call ``purge_expired`` to
bound memory.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

from loguru import logger


@dataclass
class CacheEntry:
    """A cached value and the instant it stops being valid."""

    data: Any
    expires_at: float


class ResponseCache:
    """Thread-safe TTL cache keyed by URL.

    Example:
        cache = ResponseCache(ttl=600)
        cache.set(url, body)
        cached = cache.get(url)  # body, or None once expired
    """

    def __init__(self, ttl: float = 600.0, clock: Callable[[], float] = time.monotonic):
        """Initialize the cache.

        Args:
            ttl: Seconds a stored entry stays live.
            clock: Monotonic time source (injectable for tests).
        """
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, key: str) -> Any | None:
        """Return the live value for ``key`` or None."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or self._clock() >= entry.expires_at:
            return None
        return entry.data

    def set(self, key: str, data: Any) -> None:
        """Store ``data`` under ``key`` with the configured TTL."""
        entry = CacheEntry(data=data, expires_at=self._clock() + self._ttl)
        with self._lock:
            self._entries[key] = entry

    def clear(self) -> None:
        """Invalidate every entry."""
        with self._lock:
            count = len(self._entries)
            self._entries = {}
        logger.debug(f"Response cache cleared: entries={count}")

    def purge_expired(self) -> int:
        """Drop expired entries.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
