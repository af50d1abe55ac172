# src/storage/models.py — v2
"""Processed-file metadata record."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from rentroll.core.models import (
    CANONICAL_SCHEMA_VERSION,
    PortfolioRiskSummary,
    RentRollSummary,
)


class ProcessedFileRecord(BaseModel):
    """What the persistence collaborator stores about one processed sheet."""

    document_id: str
    file_name: str
    size_bytes: int
    fingerprint: str
    detector: str
    cache_hit: bool
    header_row_index: int
    data_start_row_index: int
    column_mapping: dict[str, str] = Field(default_factory=dict)
    row_count: int = 0
    warning_count: int = 0
    rent_roll_summary: RentRollSummary | None = None
    risk_summary: PortfolioRiskSummary | None = None
    schema_version: str = CANONICAL_SCHEMA_VERSION
    processed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
