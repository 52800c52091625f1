import math
from typing import Any


def coerce_number(value: Any, default: float) -> float:
    """Parse a query value as a number, falling back to ``default``."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return number


def ensure_non_negative(value: Any, field: str) -> float:
    if value is None or isinstance(value, bool):
        raise ValueError(f"{field} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field} must be a number") from exc
    if not math.isfinite(number):
        raise ValueError(f"{field} must be a finite number")
    if number < 0:
        raise ValueError(f"{field} must be >= 0")
    return number


def ensure_positive_int(value: Any, field: str) -> int:
    if value is None or isinstance(value, bool):
        raise ValueError(f"{field} must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{field} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field} must be an integer") from exc
    if number < 1:
        raise ValueError(f"{field} must be > 0")
    return number
