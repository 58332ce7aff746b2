#!/usr/bin/env python3
"""
Deterministic Scoring Engine - weighted average of category fractions.

Only categories with usable input participate, so a sparse profile is
judged on what it contains rather than penalized for what it omits.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from core.config_loader import ScoringConfig
from core.scorer import categories
from core.scorer.normalizer import NormalizedProfile
from core.scorer.rubric import RubricTables, DEFAULT_RUBRIC


@dataclass
class LogicScoreResult:
    """Deterministic score in [0, 100] plus the raw per-category fractions."""
    score: float
    per_category: Dict[str, float] = field(default_factory=dict)


def _mean(values: List[float]) -> float:
    return sum(values) / len(values)


def _basic_fraction(
    profile: NormalizedProfile,
    tables: RubricTables,
    config: ScoringConfig,
    today: Optional[date],
) -> Optional[float]:
    components = []

    if profile.date_of_birth:
        components.append(categories.age_fraction_from_dob(
            profile.date_of_birth, today, config.target_age, config.age_span
        ))

    level = categories.education_level(profile.year_of_study)
    if level:
        components.append(categories.option_weight(level, tables.education, config.default_option_weight))

    profession = categories.profession_weight(profile.field_of_study, tables.profession_keywords)
    if profession:
        components.append(profession)

    return _mean(components) if components else None


def _physical_fraction(profile: NormalizedProfile, tables: RubricTables, config: ScoringConfig) -> Optional[float]:
    components = []

    height = categories.height_fraction(profile.height)
    if height is not None:
        components.append(height)

    if profile.body_type:
        components.append(categories.single_option_fraction(
            profile.body_type, tables.body_type, config.default_option_weight
        ))

    if profile.skin_tone:
        components.append(categories.single_option_fraction(
            profile.skin_tone, tables.skin_tone, config.default_option_weight
        ))

    return _mean(components) if components else None


def category_fractions(
    profile: NormalizedProfile,
    tables: RubricTables = DEFAULT_RUBRIC,
    config: Optional[ScoringConfig] = None,
    today: Optional[date] = None,
) -> Dict[str, float]:
    """Fraction per category, present only for categories with usable input."""
    config = config or ScoringConfig()
    fractions: Dict[str, Optional[float]] = {
        "basic": _basic_fraction(profile, tables, config, today),
        "physical": _physical_fraction(profile, tables, config),
    }

    multiselect = (
        ("personality", profile.personality, tables.personality),
        ("values", profile.values, tables.values),
        ("mindset", profile.mindset, tables.mindset),
        ("relationship", profile.relationship_goals, tables.relationship),
        ("interests", profile.interests, tables.interests),
    )
    for name, selected, table in multiselect:
        if selected:
            fractions[name] = categories.multiselect_fraction(
                selected, table, config.max_choices[name], config.default_option_weight
            )

    if profile.bio:
        fractions["bio"] = categories.bio_fraction(profile.bio, tables.positive_words, tables.negative_words)

    return {name: value for name, value in fractions.items() if value is not None}


def compute_logic_score(
    profile: NormalizedProfile,
    tables: RubricTables = DEFAULT_RUBRIC,
    config: Optional[ScoringConfig] = None,
    today: Optional[date] = None,
) -> LogicScoreResult:
    """score = sum(w * f) / sum(w) * 100 over participating categories.

    A profile with no usable data scores exactly the neutral score (50.0).
    """
    config = config or ScoringConfig()
    per_category = category_fractions(profile, tables, config, today)

    included = 0.0
    contribution = 0.0
    for name, fraction in per_category.items():
        weight = config.category_weights.get(name, 0.0)
        included += weight
        contribution += fraction * weight

    if included <= 0:
        return LogicScoreResult(score=config.neutral_score, per_category=per_category)

    return LogicScoreResult(score=contribution / included * 100.0, per_category=per_category)


def describe_behaviors(per_category: Dict[str, float]) -> List[str]:
    """Short phrases summarizing strong and weak categories, fed to the AI prompt."""
    behaviors = []
    for name, fraction in per_category.items():
        if fraction > 0.8:
            behaviors.append(f"Strong {name} profile")
        elif fraction > 0.6:
            behaviors.append(f"Good {name} traits")
        elif fraction < 0.3:
            behaviors.append(f"Needs {name} improvement")
    return behaviors
