"""Numeric validation helpers shared by the price pipeline."""

import math
from typing import Optional


def as_finite(value) -> Optional[float]:
    """Return value as a float if it is a real, finite number; otherwise None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def as_positive_price(value) -> Optional[float]:
    """
    Return value as a usable price, or None.

    Zero, negative, non-numeric and non-finite values all count as "absent".
    """
    number = as_finite(value)
    if number is None or number <= 0:
        return None
    return number


def safe_ratio(numerator: float, denominator: float) -> Optional[float]:
    """Divide, returning None instead of inf/NaN on a zero or non-finite result."""
    if denominator == 0:
        return None
    result = numerator / denominator
    return result if math.isfinite(result) else None
