"""Numeric coercion and rounding helpers."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded toward +infinity."""
    return math.floor(value + 0.5)


def to_int(value: object, default: int = 0) -> int:
    """Coerce user-supplied input to an int, falling back to a default."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except ValueError:
            return default
    return default


def to_float(value: object) -> float | None:
    """Coerce user-supplied input to a float, or None when absent."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None
