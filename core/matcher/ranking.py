#!/usr/bin/env python3
"""
Ranking Engine - score and order candidate profiles for a requester.

Pure functions over plain profile mappings: the caller fetches the
candidate pool, block list and QCS totals; nothing here touches the
database.
"""
import logging
from datetime import date
from typing import Any, Collection, Dict, List, Mapping, Optional, Sequence

from core.config_loader import MatchingConfig
from core.matcher.models import MatchCandidate, MatchPreferences
from core.matcher.similarity import SimilarityCalculator
from core.scorer.categories import parse_age
from core.utils import round_half_up

logger = logging.getLogger(__name__)

VALID_GENDERS = ('male', 'female', 'non_binary', 'prefer_not_to_say')


def valid_genders(preferences: Optional[MatchPreferences]) -> List[str]:
    if not preferences or not preferences.preferred_gender:
        return []
    return [g for g in preferences.preferred_gender if g in VALID_GENDERS]


def passes_filters(
    requester_id: str,
    candidate: Mapping[str, Any],
    candidate_age: Optional[int],
    blocked_ids: Collection[str],
    preferences: Optional[MatchPreferences],
) -> bool:
    """Active, not the requester, not blocked, preferred gender, within age range."""
    user_id = candidate.get('user_id')
    if not candidate.get('is_active', True):
        return False
    if user_id == requester_id or user_id in blocked_ids:
        return False

    genders = valid_genders(preferences)
    if genders and candidate.get('gender') not in genders:
        return False

    if preferences and preferences.has_age_range:
        if candidate_age is None:
            return False
        if preferences.age_range_min is not None and candidate_age < preferences.age_range_min:
            return False
        if preferences.age_range_max is not None and candidate_age > preferences.age_range_max:
            return False

    return True


def physical_score(
    requester: Mapping[str, Any],
    candidate: Mapping[str, Any],
    requester_age: Optional[int],
    candidate_age: Optional[int],
) -> float:
    """
    Age closeness + college tier bonus + lifestyle overlap, capped at 100.

    - Age: 50 - 5 per year of difference (floor 0); 0 if either age is unknown
    - Tier: +30 same tier, +15 adjacent tier; only when both tiers are known
    - Lifestyle: 20 * Jaccard of lifestyle keys
    """
    score = 0.0

    if requester_age is not None and candidate_age is not None:
        score += max(0, 50 - 5 * abs(requester_age - candidate_age))

    tier_a = SimilarityCalculator.parse_tier(requester.get('college_tier'))
    tier_b = SimilarityCalculator.parse_tier(candidate.get('college_tier'))
    if tier_a is not None and tier_b is not None:
        if tier_a == tier_b:
            score += 30
        elif abs(tier_a - tier_b) == 1:
            score += 15

    score += 20 * SimilarityCalculator.jaccard(
        SimilarityCalculator.lifestyle_keys(requester.get('lifestyle')),
        SimilarityCalculator.lifestyle_keys(candidate.get('lifestyle')),
    )

    return min(100.0, score)


def mental_score(requester: Mapping[str, Any], candidate: Mapping[str, Any]) -> float:
    """50 * interests Jaccard + 30 * relationship-goals Jaccard + 20 for the same personality type."""
    score = 50 * SimilarityCalculator.jaccard(
        SimilarityCalculator.token_list(requester.get('interests')),
        SimilarityCalculator.token_list(candidate.get('interests')),
    )
    score += 30 * SimilarityCalculator.jaccard(
        SimilarityCalculator.token_list(requester.get('relationship_goals')),
        SimilarityCalculator.token_list(candidate.get('relationship_goals')),
    )

    type_a = requester.get('personality_type')
    type_b = candidate.get('personality_type')
    if type_a and type_b and type_a == type_b:
        score += 20

    return min(100.0, score)


def qcs_component(total_score: Optional[float], default: float = 50.0) -> float:
    if total_score is None or total_score <= 0:
        return default
    return min(100.0, float(total_score))


def rank_candidates(
    requester: Mapping[str, Any],
    candidates: Sequence[Mapping[str, Any]],
    blocked_ids: Collection[str] = (),
    preferences: Optional[MatchPreferences] = None,
    qcs_scores: Optional[Dict[str, float]] = None,
    limit: int = 10,
    config: Optional[MatchingConfig] = None,
    today: Optional[date] = None,
) -> List[MatchCandidate]:
    """
    Filter, score and order candidates for a requester.

    compatibility = round(w_p * physical + w_m * mental + w_q * qcs); ties
    keep input order. Returns at most `limit` candidates.
    """
    config = config or MatchingConfig()
    qcs_scores = qcs_scores or {}
    blocked = set(blocked_ids)
    requester_id = requester.get('user_id')
    requester_age = parse_age(requester.get('date_of_birth'), today)

    ranked: List[MatchCandidate] = []
    for candidate in candidates:
        candidate_age = parse_age(candidate.get('date_of_birth'), today)
        if not passes_filters(requester_id, candidate, candidate_age, blocked, preferences):
            continue

        physical = physical_score(requester, candidate, requester_age, candidate_age)
        mental = mental_score(requester, candidate)
        qcs = qcs_component(qcs_scores.get(candidate.get('user_id')), config.default_qcs_score)

        compatibility = round_half_up(
            physical * config.physical_weight
            + mental * config.mental_weight
            + qcs * config.qcs_weight
        )

        ranked.append(MatchCandidate(
            user_id=candidate.get('user_id'),
            profile=dict(candidate),
            age=candidate_age,
            physical_score=round_half_up(physical),
            mental_score=round_half_up(mental),
            qcs_score=round_half_up(qcs),
            compatibility_score=compatibility,
        ))

    ranked.sort(key=lambda m: m.compatibility_score, reverse=True)
    return ranked[:max(limit, 0)]
