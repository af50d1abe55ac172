# src/cache/models.py — v2
"""Cache domain models: CacheEntry, CacheStats."""

from __future__ import annotations

from pydantic import BaseModel, Field

from rentroll.core.models import HeaderDetectionResult


class CacheEntry(BaseModel):
    """Header detection stored under a fingerprint.

    Entries are replaced, never updated: ``expires_at`` is fixed at creation.
    """

    model_config = {"frozen": True}

    key: str
    header_detection: HeaderDetectionResult
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """True once ``now`` is strictly past ``expires_at``."""
        return now > self.expires_at


class CacheStats(BaseModel):
    """Read-only snapshot of a cache store."""

    size: int = 0
    keys: list[str] = Field(default_factory=list)
