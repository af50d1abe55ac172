# src/normalization/summary.py — v2
"""Unit-level rent roll totals over canonical rows."""

from __future__ import annotations

from collections.abc import Sequence

from rentroll.core.models import RentRollSummary, RentRollUnit
from rentroll.core.rounding import round_half_up
from rentroll.normalization.values import infer_occupancy


def summarize_units(rows: Sequence[RentRollUnit]) -> RentRollSummary:
    """Totals over rows that name a unit and are not summary lines.

    Averages only cover units with a positive value; the occupancy rate is a
    percentage with two decimals. Units without a status count as occupied
    when a tenant is named.
    """
    units = [r for r in rows if r.unit_number and not r.is_summary_row]
    if not units:
        return RentRollSummary()

    occupied = sum(1 for u in units if _is_occupied(u))
    rents = [u.current_rent for u in units if u.current_rent and u.current_rent > 0]
    sizes = [u.square_footage for u in units if u.square_footage and u.square_footage > 0]
    total_rent = sum(rents)

    return RentRollSummary(
        total_units=len(units),
        occupied_units=occupied,
        vacant_units=len(units) - occupied,
        total_rent=total_rent,
        average_rent=round_half_up(total_rent / len(rents)) if rents else 0.0,
        average_sqft=round_half_up(sum(sizes) / len(sizes)) if sizes else 0.0,
        occupancy_rate=round_half_up(occupied / len(units) * 100, 2),
    )


def _is_occupied(unit: RentRollUnit) -> bool:
    status = unit.occupancy_status
    if status is None:
        status = infer_occupancy(None, unit.tenant_name)
    return status == "occupied"
