import math
from typing import Any, Optional

from core.config_loader import BlendConfig
from core.utils import clamp, round_half_up


def usable_ai_score(ai_score: Any) -> Optional[float]:
    """Return the AI score as a float when it is a finite number above 0, else None."""
    if ai_score is None or isinstance(ai_score, bool):
        return None
    if not isinstance(ai_score, (int, float)):
        return None
    value = float(ai_score)
    if math.isnan(value) or math.isinf(value) or value <= 0:
        return None
    return value


def validate_score(score: Any) -> int:
    """Clamp and round any score into the integer range [0, 100]; junk becomes 0."""
    if score is None or isinstance(score, bool):
        return 0
    try:
        value = float(score)
    except (TypeError, ValueError):
        return 0
    if math.isnan(value):
        return 0
    return int(clamp(round_half_up(clamp(value, 0.0, 100.0)), 0, 100))


def blend_score(logic_score: float, ai_score: Any = None, config: Optional[BlendConfig] = None) -> int:
    """Blend the deterministic score with an optional AI score.

    round(logic * logic_weight + ai * ai_weight) when the AI score is usable,
    round(logic) otherwise. Always an integer in [0, 100].
    """
    config = config or BlendConfig()
    ai = usable_ai_score(ai_score)
    if ai is None:
        return validate_score(logic_score)
    return validate_score(logic_score * config.logic_weight + ai * config.ai_weight)
