# src/cache/memory_store.py — v1
"""In-process cache store with fixed TTL and lazy eviction.

Expired entries are evicted when read and swept on every ``set``. The map is
guarded by a lock held only for the lookup or insert itself, so a slow
inference for one document never blocks cache access for another.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from rentroll.cache.base_cache_store import BaseCacheStore, CacheUnavailableError
from rentroll.cache.models import CacheEntry, CacheStats
from rentroll.core.models import HeaderDetectionResult

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60


class InMemoryCacheStore(BaseCacheStore):
    """Dict-backed cache store, one instance per running pipeline."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._closed = False

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    async def get(self, key: str) -> HeaderDetectionResult | None:
        """Return the cached detection if ``now <= expires_at``."""
        now = self._clock()
        with self._lock:
            self._ensure_open()
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(now):
                del self._entries[key]
                logger.debug("Cache entry expired: %s", key)
                return None
        logger.info("Cache hit for key: %s", key)
        return entry.header_detection

    async def set(self, key: str, result: HeaderDetectionResult) -> None:
        """Insert or replace; last writer wins."""
        now = self._clock()
        entry = CacheEntry(
            key=key,
            header_detection=result,
            created_at=now,
            expires_at=now + self._ttl,
        )
        with self._lock:
            self._ensure_open()
            self._entries[key] = entry
            evicted = self._sweep_expired(now)
        logger.info("Cache stored for key: %s", key)
        if evicted:
            logger.debug("Swept %d expired cache entries", evicted)

    async def delete(self, key: str) -> None:
        with self._lock:
            self._ensure_open()
            self._entries.pop(key, None)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(size=len(self._entries), keys=list(self._entries))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def close(self) -> None:
        with self._lock:
            self._entries.clear()
            self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise CacheUnavailableError("Cache store is closed")

    def _sweep_expired(self, now: float) -> int:
        """Drop every expired entry. Caller holds the lock."""
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for k in expired:
            del self._entries[k]
        return len(expired)
