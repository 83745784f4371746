"""Numeric guards applied wherever upstream values enter an aggregate."""

import math


def clamp(value: float, low: float, high: float) -> float:
    """Clamp *value* into ``[low, high]``; NaN collapses to *low*."""
    if math.isnan(value):
        return low
    return max(low, min(high, value))


def finite_or(value: float | None, default: float) -> float:
    """Return *value* if it is a finite number, else *default*."""
    if value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number
