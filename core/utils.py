import math
from datetime import datetime, timezone
from typing import Any, Optional


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (0.5 -> 1, 2.5 -> 3).

    Python's round() uses banker's rounding; scores are rounded half-up so
    that a 72.5 blend is reported as 73 regardless of parity.
    """
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def safe_float(value: Any) -> Optional[float]:
    """Parse a loosely typed numeric field, returning None when unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
