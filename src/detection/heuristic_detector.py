# src/detection/heuristic_detector.py — v1
"""Keyword-pattern header detector.

Scans the first rows for the one whose cells match the most known rent-roll
header labels. Deterministic and offline; the LLM detector is the
alternative when layouts are too irregular for keywords.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from rentroll.core.columns import column_index_to_letter
from rentroll.core.models import CANONICAL_FIELDS, CanonicalField, HeaderDetectionResult
from rentroll.detection.base_detector import BaseHeaderDetector

logger = logging.getLogger(__name__)

# A cell goes to the field with the longest matching pattern; ties go to the
# earlier field. The first column claiming a field keeps it.
HEADER_PATTERNS: dict[CanonicalField, tuple[str, ...]] = {
    "unit_number": ("unit", "unit number", "unit #", "apt", "apartment", "suite"),
    "tenant_name": ("tenant", "tenant name", "resident", "resident name", "name"),
    "current_rent": ("rent", "current rent", "monthly rent", "amount", "rental amount"),
    "lease_start": ("lease start", "start date", "move in", "move-in", "lease begin"),
    "lease_end": (
        "lease end", "end date", "move out", "move-out", "lease expire", "expiration",
    ),
    "occupancy_status": ("status", "occupancy", "occupied", "vacancy status"),
    "square_footage": ("sqft", "sq ft", "square feet", "size", "area"),
    "floor_plan": ("floor plan", "floorplan", "type", "plan"),
    "market_rent": ("market rent", "market rate", "asking rent", "base rent"),
}

SCAN_ROWS = 10
MIN_MATCHES = 2


class HeuristicHeaderDetector(BaseHeaderDetector):
    """Pick the leading row with the highest share of recognised header labels."""

    def __init__(self, scan_rows: int = SCAN_ROWS, min_matches: int = MIN_MATCHES) -> None:
        self._scan_rows = scan_rows
        self._min_matches = min_matches

    @property
    def engine_name(self) -> str:
        return "heuristic"

    async def detect(self, sample_rows: Sequence[Sequence[Any]]) -> HeaderDetectionResult:
        best = HeaderDetectionResult(
            header_row_index=-1,
            data_start_row_index=-1,
            confidence_score=0.0,
        )

        for row_index, row in enumerate(list(sample_rows)[: self._scan_rows]):
            if not row:
                continue
            headers, mapping, match_count = self._match_row(row)
            confidence = match_count / max(len(CANONICAL_FIELDS), len(row))
            logger.debug(
                "Row %d: %d matches, confidence %.2f", row_index + 1, match_count, confidence,
            )
            if confidence > best.confidence_score and match_count >= self._min_matches:
                best = HeaderDetectionResult(
                    header_row_index=row_index,
                    data_start_row_index=row_index + 1,
                    headers=headers,
                    column_mapping=mapping,
                    confidence_score=min(confidence, 1.0),
                )

        if best.header_row_index < 0:
            logger.info("No header row found in first %d rows", self._scan_rows)
        else:
            logger.info(
                "Header row %d, confidence %d%%",
                best.header_row_index + 1, round(best.confidence_score * 100),
            )
        return best

    @staticmethod
    def _match_row(
        row: Sequence[Any],
    ) -> tuple[dict[str, str], dict[CanonicalField, str], int]:
        headers: dict[str, str] = {}
        mapping: dict[CanonicalField, str] = {}
        match_count = 0

        for col_index, cell in enumerate(row):
            text = "" if cell is None else str(cell).strip()
            if not text:
                continue
            letter = column_index_to_letter(col_index)
            headers[letter] = text
            label = text.lower()
            field = _best_field(label)
            if field is None:
                continue
            match_count += 1
            mapping.setdefault(field, letter)

        return headers, mapping, match_count


def _best_field(label: str) -> CanonicalField | None:
    best_field: CanonicalField | None = None
    best_len = 0
    for field, patterns in HEADER_PATTERNS.items():
        for pattern in patterns:
            if pattern in label and len(pattern) > best_len:
                best_field, best_len = field, len(pattern)
    return best_field
