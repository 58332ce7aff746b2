#!/usr/bin/env python3
"""
Local Big-5 psychology assessment.

Maps traits, values, mindset, interests and bio sentiment onto the five
personality dimensions and folds them into a 0-100 diagnostic score. The
result is reported alongside the QCS but does not feed the blend.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from core.scorer import categories
from core.scorer.normalizer import NormalizedProfile
from core.scorer.rubric import RubricTables, DEFAULT_RUBRIC
from core.utils import clamp, round_half_up

logger = logging.getLogger(__name__)

DIMENSIONS = ("openness", "conscientiousness", "extraversion", "agreeableness", "neuroticism")

_OPENNESS_VALUE_MARKERS = ("open", "creative", "intellect", "adventure")
_AGREEABLE_VALUE_MARKERS = ("family", "financial", "responsible")
_OPENNESS_INTERESTS = ("reading", "art", "philosophy", "science")
_EXTRAVERSION_INTERESTS = ("fitness", "sports")
_AGREEABLE_INTERESTS = ("volunteering", "family")


@dataclass
class PsychologyAssessment:
    score: int
    reason: str
    big5: Dict[str, float] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "reason": self.reason,
            "big5": dict(self.big5),
            "metadata": dict(self.metadata),
        }


class _Accumulator:
    def __init__(self):
        self.dims = {d: 0.0 for d in DIMENSIONS}
        self.weights = {d: 0.0 for d in DIMENSIONS}

    def add(self, dimension: str, contribution: float, weight: float):
        self.dims[dimension] += contribution
        self.weights[dimension] += weight

    def normalized(self) -> Dict[str, float]:
        # raw in [-1, 1] mapped onto [0, 1]; untouched dimensions stay 0
        big5 = {}
        for d in DIMENSIONS:
            if self.weights[d] > 0:
                raw = max(-1.0, min(1.0, self.dims[d] / self.weights[d]))
                big5[d] = clamp((raw + 1.0) / 2.0)
            else:
                big5[d] = 0.0
        return big5


def compute_big5(profile: NormalizedProfile, tables: RubricTables = DEFAULT_RUBRIC) -> PsychologyAssessment:
    acc = _Accumulator()
    traits = profile.personality or []
    values = profile.values or []
    mindset = profile.mindset or []
    interests = profile.interests or []

    for trait in traits:
        mapping = tables.personality_to_big5.get(trait)
        if not mapping:
            continue
        weight = categories.option_weight(trait, tables.personality)
        for dimension, contrib in mapping.items():
            acc.add(dimension, weight * contrib, weight)

    for value in values:
        weight = categories.option_weight(value, tables.values)
        if any(marker in value for marker in _OPENNESS_VALUE_MARKERS):
            acc.add("openness", 0.6 * weight, weight)
        if any(marker in value for marker in _AGREEABLE_VALUE_MARKERS):
            acc.add("agreeableness", 0.5 * weight, weight)

    for item in mindset:
        weight = categories.option_weight(item, tables.mindset)
        if "growth" in item or "curious" in item:
            acc.add("openness", 0.7 * weight, weight)
        if "positive" in item:
            acc.add("neuroticism", -0.6 * weight, weight)

    for interest in interests:
        weight = categories.option_weight(interest, tables.interests)
        if interest in _OPENNESS_INTERESTS:
            acc.add("openness", 0.6 * weight, weight)
        if interest in _EXTRAVERSION_INTERESTS:
            acc.add("extraversion", 0.5 * weight, weight)
        if interest in _AGREEABLE_INTERESTS:
            acc.add("agreeableness", 0.6 * weight, weight)

    bio_sentiment = 0.0
    pos, neg = categories.sentiment_counts(
        categories.bio_words(profile.bio), tables.positive_words, tables.negative_words
    )
    if pos + neg > 0:
        bio_sentiment = (pos - neg) / (pos + neg)
        acc.add("neuroticism", -0.5 * bio_sentiment, 0.6)
        acc.add("agreeableness", 0.2 * bio_sentiment, 0.3)

    big5 = acc.normalized()
    weights = tables.big5_weights
    raw_score = sum(
        weights[d] * (1.0 - big5[d] if d == "neuroticism" else big5[d])
        for d in DIMENSIONS
    )
    score = int(clamp(round_half_up(raw_score * 100.0), 0, 100))

    return PsychologyAssessment(
        score=score,
        reason=_reason(profile),
        big5=big5,
        metadata={
            "bio_sentiment": bio_sentiment,
            "traits_processed": len(traits),
            "values_processed": len(values),
            "interests_processed": len(interests),
            "weights_used": dict(weights),
        },
    )


def _reason(profile: NormalizedProfile) -> str:
    parts = []
    if profile.personality:
        parts.append(f"Traits: {', '.join(profile.personality)}")
    if profile.values:
        parts.append(f"Values: {', '.join(profile.values)}")
    if profile.interests:
        parts.append(f"Interests: {', '.join(profile.interests[:6])}")
    if profile.bio:
        snippet = profile.bio if len(profile.bio) <= 140 else profile.bio[:140] + "..."
        parts.append(f'Bio: "{snippet}"')
    return " | ".join(parts) if parts else "Based on available profile fields."
