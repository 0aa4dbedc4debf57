"""
Numeric coercion helpers for model-produced JSON values.

Models return numbers as ints, floats, numeric strings or not at all;
these helpers read them the same way everywhere.
"""

import math
from typing import Any, Optional


def to_finite_number(value: Any) -> Optional[float]:
    """Numeric reading of a JSON value, or None when it is not a finite number."""
    if value is None or isinstance(value, (list, dict)):
        return None
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def round_half_up(number: float) -> int:
    """Round to the nearest integer, halves towards +infinity (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(number + 0.5)


def clamp_int(value: Any, fallback: int, minimum: int, maximum: int) -> int:
    """Round and clamp into [minimum, maximum]; non-numbers give fallback."""
    number = to_finite_number(value)
    if number is None:
        return fallback
    return max(minimum, min(maximum, round_half_up(number)))


def clamp_percent(value: Any, fallback: int = 0) -> int:
    """Integer percentage in [0, 100]."""
    return clamp_int(value, fallback, 0, 100)


def clamp_unit(value: Any, fallback: float, digits: int = 3) -> float:
    """Float in [0, 1] rounded to `digits` decimals."""
    number = to_finite_number(value)
    if number is None:
        return fallback
    return max(0.0, min(1.0, round(number, digits)))
