# src/core/columns.py — v1
"""Spreadsheet column references: 0-based index <-> letter ("A", "Z", "AA")."""

from __future__ import annotations

import re

_COLUMN_RE = re.compile(r"^[A-Z]+$")


def column_index_to_letter(index: int) -> str:
    """Convert a 0-based column index to its spreadsheet letter."""
    if index < 0:
        raise ValueError(f"Column index must be >= 0, got {index}")
    result = ""
    while index >= 0:
        result = chr(65 + index % 26) + result
        index = index // 26 - 1
    return result


def column_letter_to_index(letter: str) -> int:
    """Convert a spreadsheet letter to its 0-based column index."""
    ref = normalize_column_ref(letter)
    result = 0
    for char in ref:
        result = result * 26 + (ord(char) - 64)
    return result - 1


def normalize_column_ref(ref: str) -> str:
    """Uppercase and validate a column reference.

    Raises:
        ValueError: If ``ref`` is not made only of letters.
    """
    candidate = str(ref).strip().upper()
    if not _COLUMN_RE.match(candidate):
        raise ValueError(f"Invalid column reference: {ref!r}")
    return candidate
