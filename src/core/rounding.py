# src/core/rounding.py — v1
"""Half-up rounding; built-in round() rounds halves to even."""

from __future__ import annotations

import math


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor
