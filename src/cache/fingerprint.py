# src/cache/fingerprint.py — v4
"""Content fingerprint used as the inference cache key.

The key is ``{name}_{size}_{hash}`` where ``hash`` covers the first rows of
the sheet. It only has to be stable within one running system: it is a
lookup key, not a security boundary.
"""

from __future__ import annotations

import hashlib
import re
from itertools import islice
from collections.abc import Sequence
from typing import Any

DEFAULT_SAMPLE_ROWS = 10
CELL_DELIMITER = "|"
ROW_DELIMITER = "\n"

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_]")


def compute_fingerprint(
    name: str,
    size_bytes: int,
    sample_rows: Sequence[Sequence[Any]],
    sample_size: int = DEFAULT_SAMPLE_ROWS,
) -> str:
    """Derive the cache key for a sheet.

    Args:
        name: File (or file:sheet) name.
        size_bytes: File size in bytes.
        sample_rows: Sheet rows; only the first ``sample_size`` are hashed.
        sample_size: Number of leading rows covered by the hash.

    Returns:
        Key made only of ``[A-Za-z0-9_]`` characters.
    """
    rows_hash = hash_sample_rows(sample_rows, sample_size)
    return _UNSAFE_KEY_CHARS.sub("_", f"{name}_{size_bytes}_{rows_hash}")


def hash_sample_rows(
    rows: Sequence[Sequence[Any]], sample_size: int = DEFAULT_SAMPLE_ROWS
) -> str:
    """Hash the leading rows: SHA-256 of the joined content, 16 hex digits."""
    content = sample_content(rows, sample_size)
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:16]


def sample_content(
    rows: Sequence[Sequence[Any]], sample_size: int = DEFAULT_SAMPLE_ROWS
) -> str:
    """Join the leading rows into one string; missing cells become ''."""
    return ROW_DELIMITER.join(
        CELL_DELIMITER.join(_cell_text(cell) for cell in (row or ()))
        for row in islice(rows, sample_size)
    )


def _cell_text(cell: Any) -> str:
    if cell is None:
        return ""
    return str(cell)
