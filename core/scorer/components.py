from dataclasses import dataclass, asdict
from typing import Dict, Mapping, Optional

from core.utils import round_half_up


@dataclass
class QCSComponents:
    """Sub-scores persisted next to the total on the QCS record."""
    profile_score: int
    college_tier: int
    personality_depth: int
    behavior_score: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


# Returned with the fixed fallback score when a request cannot be scored
FALLBACK_COMPONENTS = QCSComponents(profile_score=15, college_tier=20, personality_depth=15, behavior_score=10)


def compute_components(
    per_category: Mapping[str, float],
    category_weights: Mapping[str, float],
    reports_count: Optional[int] = 0,
) -> QCSComponents:
    """Derive the component breakdown from per-category fractions.

    profile = basic + bio + interests contributions, college tier = basic on
    a 30 point scale, personality depth = personality + values + mindset,
    behavior starts at 10 and loses 2 per report (floor 0).
    """
    def part(name: str) -> float:
        return per_category.get(name, 0.0) * category_weights.get(name, 0.0)

    reports = max(int(reports_count or 0), 0)

    return QCSComponents(
        profile_score=round_half_up(part("basic") + part("bio") + part("interests")),
        college_tier=round_half_up(per_category.get("basic", 0.0) * 30),
        personality_depth=round_half_up(part("personality") + part("values") + part("mindset")),
        behavior_score=max(10 - reports * 2, 0),
    )
