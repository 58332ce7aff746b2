#!/usr/bin/env python3
"""
Matcher Models - Data structures for matching.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class MatchPreferences:
    """Requester's partner preferences; empty fields mean no constraint."""
    preferred_gender: List[str] = field(default_factory=list)
    age_range_min: Optional[int] = None
    age_range_max: Optional[int] = None

    @property
    def has_age_range(self) -> bool:
        return self.age_range_min is not None or self.age_range_max is not None


@dataclass
class MatchCandidate:
    """A ranked candidate with its compatibility breakdown."""
    user_id: str
    profile: Dict[str, Any]
    age: Optional[int]
    physical_score: int
    mental_score: int
    qcs_score: int
    compatibility_score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "age": self.age,
            "physical_score": self.physical_score,
            "mental_score": self.mental_score,
            "qcs_score": self.qcs_score,
            "compatibility_score": self.compatibility_score,
            "profile": self.profile,
        }
