# tests/unit/normalization/test_unit_column_normalizer.py — v1
"""Tests for normalization/column_normalizer.py and normalization/summary.py."""

from __future__ import annotations

from datetime import date

import pytest

from rentroll.core.models import HeaderDetectionResult, RentRollUnit
from rentroll.normalization.column_normalizer import ColumnNormalizer, UnparseableHeaderError
from rentroll.normalization.summary import summarize_units


def _detection(**overrides) -> HeaderDetectionResult:
    values = {
        "header_row_index": 0,
        "data_start_row_index": 1,
        "column_mapping": {"unit_number": "A", "current_rent": "B"},
        "confidence_score": 0.8,
    }
    values.update(overrides)
    return HeaderDetectionResult(**values)


class TestColumnNormalizer:
    def test_full_sheet(self, sample_rows, sample_detection):
        result = ColumnNormalizer().resolve(sample_detection, sample_rows)
        assert [r.source_row_index for r in result.rows] == [3, 4, 5, 6]
        assert result.warnings == []

        first, second, vacant, total = result.rows
        assert first.unit_number == "101"
        assert first.current_rent == 1200.0
        assert first.lease_start == date(2024, 1, 1)
        assert first.occupancy_status == "occupied"
        assert second.unit_number == "102"
        assert second.lease_end == date(2025, 2, 28)
        assert second.market_rent == 1550.0
        assert second.occupancy_status == "occupied"
        assert vacant.occupancy_status == "vacant"
        assert vacant.current_rent is None
        assert total.is_summary_row is True

    def test_unmapped_fields_warned(self):
        rows = [["Unit", "Rent"], ["101", 900]]
        result = ColumnNormalizer().resolve(_detection(), rows)
        assert len(result.rows) == 1
        unmapped = {w.field for w in result.warnings}
        assert unmapped == {
            "floor_plan", "square_footage", "lease_start", "lease_end",
            "occupancy_status", "market_rent", "tenant_name",
        }
        assert all(w.row_index is None for w in result.warnings)
        assert result.rows[0].tenant_name is None
        assert result.rows[0].occupancy_status is None

    def test_bad_cell_becomes_warning(self):
        rows = [["Unit", "Rent"], ["101", "call office"], ["102", 950]]
        result = ColumnNormalizer().resolve(_detection(), rows)
        assert len(result.rows) == 2
        assert result.rows[0].current_rent is None
        assert result.rows[1].current_rent == 950.0
        bad = [w for w in result.warnings if w.row_index is not None]
        assert len(bad) == 1
        assert bad[0].field == "current_rent"
        assert bad[0].row_index == 1
        assert bad[0].raw_value == "call office"
        assert str(bad[0]).startswith("Row 2: current_rent:")

    def test_non_finite_number_cell_becomes_warning(self):
        rows = [["Unit", "Rent"], ["101", float("nan")], ["102", float("inf")]]
        result = ColumnNormalizer().resolve(_detection(), rows)
        assert [r.current_rent for r in result.rows] == [None, None]
        bad = [w for w in result.warnings if w.row_index is not None]
        assert [w.row_index for w in bad] == [1, 2]
        assert all("Not a finite number" in w.message for w in bad)

    def test_short_rows_and_blank_rows_kept(self):
        rows = [["Unit", "Rent"], ["101"], [], [None, None]]
        result = ColumnNormalizer().resolve(_detection(), rows)
        assert len(result.rows) == 3
        assert result.rows[0].current_rent is None
        assert result.rows[1].unit_number is None

    def test_blank_row_has_no_inferred_status(self):
        rows = [["Unit", "Status"], [], ["102", ""]]
        detection = _detection(column_mapping={"unit_number": "A", "occupancy_status": "B"})
        result = ColumnNormalizer().resolve(detection, rows)
        assert result.rows[0].occupancy_status is None
        assert result.rows[1].occupancy_status == "vacant"

    def test_header_only_sheet(self):
        result = ColumnNormalizer().resolve(_detection(), [["Unit", "Rent"]])
        assert result.rows == []

    def test_missing_header(self):
        with pytest.raises(UnparseableHeaderError, match="Header row not found"):
            ColumnNormalizer().resolve(
                _detection(header_row_index=-1, data_start_row_index=-1), []
            )

    def test_data_before_header(self):
        with pytest.raises(UnparseableHeaderError, match="not after header"):
            ColumnNormalizer().resolve(
                _detection(header_row_index=2, data_start_row_index=2), []
            )

    def test_low_confidence(self):
        with pytest.raises(UnparseableHeaderError, match=r"Low confidence .*\(20%\)"):
            ColumnNormalizer(min_confidence=0.3).resolve(_detection(confidence_score=0.2), [])

    def test_no_mapping(self):
        with pytest.raises(UnparseableHeaderError, match="No column mappings"):
            ColumnNormalizer().resolve(_detection(column_mapping={}), [])


class TestSummarizeUnits:
    def test_sample_sheet(self, sample_rows, sample_detection):
        rows = ColumnNormalizer().resolve(sample_detection, sample_rows).rows
        summary = summarize_units(rows)
        assert summary.total_units == 3
        assert summary.occupied_units == 2
        assert summary.vacant_units == 1
        assert summary.total_rent == 2700.0
        assert summary.average_rent == 1350.0
        assert summary.average_sqft == 733.0
        assert summary.occupancy_rate == 66.67

    def test_empty(self):
        summary = summarize_units([])
        assert summary.total_units == 0
        assert summary.occupancy_rate == 0.0

    def test_occupancy_from_tenant_without_status_column(self):
        rows = [
            ["Unit", "Tenant", "Rent"],
            ["101", "Jane Doe", 1200],
            ["102", "John Roe", 1100],
            ["103", "", None],
        ]
        detection = _detection(
            column_mapping={"unit_number": "A", "tenant_name": "B", "current_rent": "C"}
        )
        result = ColumnNormalizer().resolve(detection, rows)
        assert all(r.occupancy_status is None for r in result.rows)

        summary = summarize_units(result.rows)
        assert summary.occupied_units == 2
        assert summary.vacant_units == 1
        assert summary.occupancy_rate == 66.67

    def test_explicit_status_wins_over_tenant(self):
        rows = [
            RentRollUnit(source_row_index=1, unit_number="1", tenant_name="Jane Doe",
                         occupancy_status="notice"),
        ]
        assert summarize_units(rows).occupied_units == 0

    def test_rows_without_unit_ignored(self):
        rows = [
            RentRollUnit(source_row_index=1, unit_number="1", current_rent=1000.0,
                         occupancy_status="occupied"),
            RentRollUnit(source_row_index=2, current_rent=5000.0),
        ]
        summary = summarize_units(rows)
        assert summary.total_units == 1
        assert summary.total_rent == 1000.0
        assert summary.occupancy_rate == 100.0
