# src/normalization/column_normalizer.py — v1
"""Turn a header detection plus raw rows into canonical rent-roll rows.

Every row at or after ``data_start_row_index`` yields exactly one
RentRollUnit. Cells that cannot be coerced become None and a FieldWarning;
only a structurally unusable detection stops the sheet.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field

from rentroll.core.columns import column_letter_to_index
from rentroll.core.models import (
    CANONICAL_FIELDS,
    DATE_FIELDS,
    NUMERIC_FIELDS,
    FieldWarning,
    HeaderDetectionResult,
    RentRollUnit,
)
from rentroll.normalization.values import (
    infer_occupancy,
    is_blank,
    is_summary_row,
    parse_date,
    parse_number,
    parse_text,
)

logger = logging.getLogger(__name__)


class UnparseableHeaderError(Exception):
    """The detection gives no usable header/data boundary for the sheet."""


class NormalizationResult(BaseModel):
    """Canonical rows of one sheet and the warnings raised producing them."""

    rows: list[RentRollUnit] = Field(default_factory=list)
    warnings: list[FieldWarning] = Field(default_factory=list)


class ColumnNormalizer:
    """Apply a HeaderDetectionResult to raw sheet rows."""

    def __init__(self, min_confidence: float = 0.0) -> None:
        self._min_confidence = min_confidence

    def resolve(
        self,
        detection: HeaderDetectionResult,
        rows: Sequence[Sequence[Any]],
    ) -> NormalizationResult:
        """Normalize ``rows`` according to ``detection``.

        Raises:
            UnparseableHeaderError: If the header/data boundary is invalid,
                confidence is below the minimum, or nothing is mapped.
        """
        self._check_structure(detection)

        warnings = [
            FieldWarning(field=field, message="column not mapped, values left empty")
            for field in detection.unmapped_fields()
        ]
        columns = {
            field: column_letter_to_index(ref)
            for field, ref in detection.column_mapping.items()
        }

        units: list[RentRollUnit] = []
        for row_index in range(detection.data_start_row_index, len(rows)):
            row = list(rows[row_index] or ())
            units.append(self._resolve_row(row_index, row, columns, warnings))

        logger.info(
            "Normalized %d rows, %d warnings", len(units), len(warnings),
        )
        return NormalizationResult(rows=units, warnings=warnings)

    def _check_structure(self, detection: HeaderDetectionResult) -> None:
        if detection.header_row_index < 0:
            raise UnparseableHeaderError("Header row not found")
        if detection.data_start_row_index <= detection.header_row_index:
            raise UnparseableHeaderError(
                f"Data start row {detection.data_start_row_index + 1} is not "
                f"after header row {detection.header_row_index + 1}"
            )
        if detection.confidence_score < self._min_confidence:
            raise UnparseableHeaderError(
                "Low confidence in header detection "
                f"({round(detection.confidence_score * 100)}%)"
            )
        if not detection.column_mapping:
            raise UnparseableHeaderError("No column mappings found")

    def _resolve_row(
        self,
        row_index: int,
        row: list[Any],
        columns: dict[str, int],
        warnings: list[FieldWarning],
    ) -> RentRollUnit:
        raw = {
            field: row[col] if col < len(row) else None
            for field, col in columns.items()
        }
        values: dict[str, Any] = {}

        for field in CANONICAL_FIELDS:
            if field not in columns or field == "occupancy_status":
                continue
            cell = raw[field]
            try:
                if field in NUMERIC_FIELDS:
                    values[field] = parse_number(cell)
                elif field in DATE_FIELDS:
                    values[field] = parse_date(cell)
                else:
                    values[field] = parse_text(cell)
            except ValueError as e:
                values[field] = None
                warnings.append(
                    FieldWarning(
                        field=field,
                        message=str(e),
                        row_index=row_index,
                        raw_value=str(cell),
                    )
                )

        # Status text alone is often blank; the tenant column settles it.
        if "occupancy_status" in columns and not _row_is_blank(row):
            values["occupancy_status"] = infer_occupancy(
                raw["occupancy_status"], raw.get("tenant_name")
            )

        return RentRollUnit(
            source_row_index=row_index,
            is_summary_row=is_summary_row(row),
            **values,
        )


def _row_is_blank(row: list[Any]) -> bool:
    return all(is_blank(c) for c in row)
