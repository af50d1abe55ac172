# src/api/models.py — v2
"""API-level models: DocumentInput, ProcessingOutcome."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from rentroll.core.models import (
    HeaderDetectionResult,
    PortfolioRiskSummary,
    RentRollSummary,
    RentRollUnit,
)

ProcessingStage = Literal[
    "fingerprinting",
    "cache_lookup",
    "inferring",
    "cache_store",
    "normalizing",
    "aggregating",
    "done",
    "failed",
]


class DocumentInput(BaseModel):
    """One sheet to process, with the identity of the file it came from."""

    name: str
    size_bytes: int = Field(ge=0)
    rows: list[list[Any]] = Field(default_factory=list)
    document_id: str | None = None


class ProcessingOutcome(BaseModel):
    """Result of AnalysisOrchestrator.process(); the only failure channel.

    ``success`` is False exactly when ``error_message`` is set, and then
    ``canonical_rows`` and ``summary`` are None.
    """

    success: bool
    document_id: str
    canonical_rows: list[RentRollUnit] | None = None
    warnings: list[str] = Field(default_factory=list)
    summary: PortfolioRiskSummary | None = None
    error_message: str | None = None

    fingerprint: str | None = None
    cache_hit: bool = False
    stage: ProcessingStage = "done"
    header_detection: HeaderDetectionResult | None = None
    rent_roll_summary: RentRollSummary | None = None
    processing_time_ms: int = 0
