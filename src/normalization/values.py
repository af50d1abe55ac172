# src/normalization/values.py — v2
"""Cell coercion for canonical fields.

Parsers return None for empty cells and raise ValueError for cells that are
present but cannot be read; the column normalizer turns the latter into
warnings.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import Any

from rentroll.core.models import OccupancyStatus

_NUMERIC_NOISE = re.compile(r"[$€£¥,\s]")
_EXCEL_EPOCH = date(1899, 12, 30)
# Serial numbers outside this window are more likely plain numbers than dates.
_EXCEL_SERIAL_MIN = 1
_EXCEL_SERIAL_MAX = 2_958_465

DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%m-%d-%Y",
    "%d-%b-%Y",
    "%d-%b-%y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%Y/%m/%d",
)

SUMMARY_KEYWORDS = (
    "total",
    "summary",
    "subtotal",
    "grand total",
    "average",
    "occupied units",
    "vacant units",
    "revenue",
    "non rev",
    "current/notice/vacant",
    "future residents",
    "applicants",
)


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_number(value: Any) -> float | None:
    """Read a number, tolerating currency symbols, separators and ``(1,200)``.

    Raises:
        ValueError: If the cell is non-empty and not numeric.
    """
    if is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, (int, float)):
        return _finite(float(value), value)

    text = _NUMERIC_NOISE.sub("", str(value))
    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]
    if not text:
        raise ValueError(f"Not a number: {value!r}")
    try:
        number = float(text)
    except ValueError:
        raise ValueError(f"Not a number: {value!r}") from None
    _finite(number, value)
    return -number if negative else number


def _finite(number: float, raw: Any) -> float:
    if math.isnan(number) or math.isinf(number):
        raise ValueError(f"Not a finite number: {raw!r}")
    return number


def parse_date(value: Any) -> date | None:
    """Read a lease date from a date cell, a known string format or an Excel serial.

    Raises:
        ValueError: If the cell is non-empty and not a date.
    """
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _from_excel_serial(value)

    text = str(value).strip()
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Not a date: {value!r}")


def _from_excel_serial(serial: float) -> date:
    if not _EXCEL_SERIAL_MIN <= serial <= _EXCEL_SERIAL_MAX:
        raise ValueError(f"Not a date serial: {serial!r}")
    return _EXCEL_EPOCH + timedelta(days=int(serial))


def parse_text(value: Any) -> str | None:
    if is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        # Unit numbers read from xlsx arrive as 101.0
        return str(int(value))
    return str(value).strip()


def infer_occupancy(status: Any, tenant_name: Any) -> OccupancyStatus:
    """Normalize a free-text status, falling back on whether a tenant is named."""
    status_text = "" if status is None else str(status).lower()
    tenant_text = "" if tenant_name is None else str(tenant_name).strip().lower()
    has_tenant = bool(tenant_text) and tenant_text not in ("-", "vacant")

    if "vacant" in status_text or "empty" in status_text:
        return "vacant"
    if "notice" in status_text or "moving" in status_text:
        return "notice"
    if "occupied" in status_text or "rented" in status_text:
        return "occupied"
    return "occupied" if has_tenant else "vacant"


def is_summary_row(row: list[Any]) -> bool:
    """True for total/summary lines mixed in with unit rows."""
    text = " ".join("" if c is None else str(c).lower() for c in row)
    return any(keyword in text for keyword in SUMMARY_KEYWORDS)
