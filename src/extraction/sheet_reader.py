# src/extraction/sheet_reader.py — v1
"""Read workbook files into RawSheet records (values only)."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Any

from rentroll.api.models import DocumentInput
from rentroll.core.models import RawSheet

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".xlsx", ".xlsm", ".csv")


class UnsupportedFormatError(ValueError):
    """The file extension has no reader."""


def read_workbook(path: Path) -> list[RawSheet]:
    """Read every sheet of ``path``.

    Raises:
        UnsupportedFormatError: If the suffix is not .xlsx, .xlsm or .csv.
    """
    suffix = path.suffix.lower()
    if suffix in (".xlsx", ".xlsm"):
        return _read_excel(path)
    if suffix == ".csv":
        return [_read_csv(path)]
    raise UnsupportedFormatError(f"Unsupported format: {path.suffix or path.name}")


def to_documents(path: Path, sheets: list[RawSheet]) -> list[DocumentInput]:
    """One DocumentInput per sheet; multi-sheet files are named ``file:sheet``."""
    size = path.stat().st_size
    single = len(sheets) == 1
    return [
        DocumentInput(
            name=path.name if single else f"{path.name}:{sheet.name}",
            size_bytes=size,
            rows=sheet.rows,
        )
        for sheet in sheets
    ]


def _read_excel(path: Path) -> list[RawSheet]:
    from openpyxl import load_workbook

    workbook = load_workbook(filename=str(path), read_only=True, data_only=True)
    try:
        sheets = []
        for index, worksheet in enumerate(workbook.worksheets):
            rows = [_trim(list(row)) for row in worksheet.iter_rows(values_only=True)]
            sheets.append(RawSheet(name=worksheet.title, index=index, rows=_trim_tail(rows)))
            logger.debug("Read sheet %r: %d rows", worksheet.title, len(rows))
        return sheets
    finally:
        workbook.close()


def _read_csv(path: Path) -> RawSheet:
    text = path.read_bytes().decode("utf-8-sig", errors="replace")
    rows = [_trim(list(r)) for r in csv.reader(io.StringIO(text))]
    return RawSheet(name=path.stem, index=0, rows=_trim_tail(rows))


def _trim(row: list[Any]) -> list[Any]:
    """Drop trailing empty cells."""
    while row and (row[-1] is None or row[-1] == ""):
        row.pop()
    return row


def _trim_tail(rows: list[list[Any]]) -> list[list[Any]]:
    """Drop trailing empty rows (xlsx dimensions often overshoot)."""
    while rows and not rows[-1]:
        rows.pop()
    return rows
