"""Resolution cache — bounded, TTL-expiring store of upstream payloads.

Keys are the exact upstream request URLs (query string included); values are
the last successfully fetched JSON payload for that URL.

  - One TTL for every entry, reset on each put
  - LRU eviction (by access, not insertion) once max_entries is exceeded
  - Only successful fetches are stored; failures are never cached
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

from cachetools import TTLCache

logger = logging.getLogger(__name__)


class ResolutionCache:
    """Thread-safe wrapper around cachetools.TTLCache."""

    def __init__(
        self,
        max_entries: int = 500,
        ttl: float = 300,
        timer: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.ttl = ttl
        self._store: TTLCache = TTLCache(maxsize=max_entries, ttl=ttl, timer=timer)
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """Return the cached payload, or None on a miss or an expired entry."""
        with self._lock:
            self._store.expire()
            data = self._store.get(key)
        if data is None:
            return None
        logger.debug("Cache HIT | key=%s", key)
        return data

    def put(self, key: str, data: Any) -> None:
        """Insert or replace an entry, restarting its TTL."""
        with self._lock:
            self._store[key] = data
        logger.debug("Cache SET | key=%s | ttl=%ss", key, self.ttl)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def __len__(self) -> int:
        with self._lock:
            self._store.expire()
            return len(self._store)
