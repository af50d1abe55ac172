# src/cache/base_cache_store.py — v2
"""Abstract inference cache interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rentroll.cache.models import CacheStats
from rentroll.core.models import HeaderDetectionResult


class CacheUnavailableError(Exception):
    """The cache cannot serve the request; callers fall back to inference."""


class BaseCacheStore(ABC):
    """Unified interface for header-detection cache backends."""

    @abstractmethod
    async def get(self, key: str) -> HeaderDetectionResult | None:
        """Return the cached detection, or None if absent or expired."""

    @abstractmethod
    async def set(self, key: str, result: HeaderDetectionResult) -> None:
        """Insert or replace the entry for ``key``."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the entry for ``key`` if present."""

    @abstractmethod
    def stats(self) -> CacheStats:
        """Size and keys currently held."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all entries."""

    @abstractmethod
    def close(self) -> None:
        """Release the store. Further operations raise CacheUnavailableError."""
