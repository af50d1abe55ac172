# tests/unit/core/test_unit_columns.py — v1
"""Tests for core/columns.py and core/rounding.py."""

from __future__ import annotations

import pytest

from rentroll.core.columns import (
    column_index_to_letter,
    column_letter_to_index,
    normalize_column_ref,
)
from rentroll.core.rounding import round_half_up


class TestColumnLetters:
    @pytest.mark.parametrize(
        "index,letter", [(0, "A"), (8, "I"), (25, "Z"), (26, "AA"), (27, "AB"), (701, "ZZ"), (702, "AAA")]
    )
    def test_index_to_letter(self, index, letter):
        assert column_index_to_letter(index) == letter
        assert column_letter_to_index(letter) == index

    def test_negative_index(self):
        with pytest.raises(ValueError):
            column_index_to_letter(-1)

    def test_lowercase_normalized(self):
        assert normalize_column_ref(" ab ") == "AB"
        assert column_letter_to_index("c") == 2

    @pytest.mark.parametrize("ref", ["", "A1", "1", "A-B", "Ä"])
    def test_invalid_refs(self, ref):
        with pytest.raises(ValueError, match="Invalid column reference"):
            normalize_column_ref(ref)


class TestRoundHalfUp:
    def test_half_rounds_up(self):
        assert round_half_up(0.5) == 1.0
        assert round_half_up(2.5) == 3.0

    def test_one_decimal(self):
        assert round_half_up(39.25, 1) == 39.3
        assert round_half_up(39.24, 1) == 39.2

    def test_two_decimals(self):
        assert round_half_up(200 / 3, 2) == 66.67
