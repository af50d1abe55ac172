# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from rentroll.core.columns import normalize_column_ref

# === CANONICAL SCHEMA ===

CANONICAL_SCHEMA_VERSION = "1"

CanonicalField = Literal[
    "unit_number",
    "floor_plan",
    "square_footage",
    "current_rent",
    "lease_start",
    "lease_end",
    "occupancy_status",
    "market_rent",
    "tenant_name",
]

# Adding a field here is a schema change: bump CANONICAL_SCHEMA_VERSION.
CANONICAL_FIELDS: tuple[CanonicalField, ...] = (
    "unit_number",
    "floor_plan",
    "square_footage",
    "current_rent",
    "lease_start",
    "lease_end",
    "occupancy_status",
    "market_rent",
    "tenant_name",
)

NUMERIC_FIELDS: frozenset[str] = frozenset({"square_footage", "current_rent", "market_rent"})
DATE_FIELDS: frozenset[str] = frozenset({"lease_start", "lease_end"})

OccupancyStatus = Literal["occupied", "vacant", "notice"]
RiskSeverity = Literal["low", "medium", "high"]
ActionPriority = Literal["immediate", "urgent", "normal", "low"]
RiskColor = Literal["red", "orange", "yellow", "green"]
PriorityColor = Literal["red", "orange", "blue", "gray"]


# === RAW INPUT ===


class RawSheet(BaseModel):
    """One sheet of a workbook as read from disk, values only."""

    name: str
    index: int = 0
    rows: list[list[Any]] = Field(default_factory=list)


# === HEADER DETECTION ===


class HeaderDetectionResult(BaseModel):
    """Where the header sits and which column feeds each canonical field.

    Column references are spreadsheet letters. A canonical field missing
    from ``column_mapping`` is unmapped. Row offsets are checked by the
    column normalizer, not here, so an engine may report a sheet without
    a usable header.
    """

    model_config = {"frozen": True}

    header_row_index: int
    data_start_row_index: int
    headers: dict[str, str] = Field(default_factory=dict)
    column_mapping: dict[CanonicalField, str] = Field(default_factory=dict)
    confidence_score: float = Field(ge=0.0, le=1.0)

    @field_validator("column_mapping")
    @classmethod
    def validate_column_refs(cls, v: dict[str, str]) -> dict[str, str]:  # noqa: N805
        return {name: normalize_column_ref(ref) for name, ref in v.items()}

    @field_validator("headers")
    @classmethod
    def validate_header_refs(cls, v: dict[str, str]) -> dict[str, str]:  # noqa: N805
        return {normalize_column_ref(ref): label for ref, label in v.items()}

    def unmapped_fields(self) -> list[CanonicalField]:
        """Canonical fields with no column reference, in schema order."""
        return [f for f in CANONICAL_FIELDS if f not in self.column_mapping]


# === CANONICAL ROWS ===


class RentRollUnit(BaseModel):
    """One normalized rent-roll row. Absent values are None."""

    source_row_index: int
    unit_number: str | None = None
    floor_plan: str | None = None
    square_footage: float | None = None
    current_rent: float | None = None
    lease_start: date | None = None
    lease_end: date | None = None
    occupancy_status: OccupancyStatus | None = None
    market_rent: float | None = None
    tenant_name: str | None = None
    is_summary_row: bool = False


class FieldWarning(BaseModel):
    """A non-fatal problem with one field, optionally on one row."""

    field: str
    message: str
    row_index: int | None = None
    raw_value: str | None = None

    def __str__(self) -> str:
        where = f"Row {self.row_index + 1}: " if self.row_index is not None else ""
        return f"{where}{self.field}: {self.message}"


class RentRollSummary(BaseModel):
    """Unit-level totals over the canonical rows of one sheet."""

    total_units: int = 0
    occupied_units: int = 0
    vacant_units: int = 0
    total_rent: float = 0.0
    average_rent: float = 0.0
    average_sqft: float = 0.0
    occupancy_rate: float = 0.0


# === TENANT RISK ===


class TenantRiskAssessment(BaseModel):
    """Scored default risk for one tenant, produced upstream."""

    model_config = {"frozen": True}

    tenant_name: str
    unit_number: str
    default_probability: float = Field(ge=0.0, le=100.0)
    risk_severity: RiskSeverity = "low"
    risk_factors: frozenset[str] = Field(default_factory=frozenset)
    protective_factors: frozenset[str] = Field(default_factory=frozenset)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    comments: str = ""


class RecommendedAction(BaseModel):
    """Follow-up action suggested for one tenant."""

    model_config = {"frozen": True}

    tenant_name: str
    unit_number: str
    action_type: str
    priority: ActionPriority = "normal"
    timeline: str = "TBD"
    description: str = ""


class PortfolioRiskSummary(BaseModel):
    """Bucketed risk counts, recomputed on every aggregation."""

    average_risk: float = 0.0
    high_risk_count: int = 0
    medium_risk_count: int = 0
    low_risk_count: int = 0
    total_assessed: int = 0


class PortfolioAnalysis(BaseModel):
    """Summary plus the inputs it was derived from, actions in priority order."""

    summary: PortfolioRiskSummary
    assessments: list[TenantRiskAssessment] = Field(default_factory=list)
    actions: list[RecommendedAction] = Field(default_factory=list)
