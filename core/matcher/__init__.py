"""Matcher Module - attribute similarity and QCS-weighted candidate ranking."""
from core.matcher.models import MatchCandidate, MatchPreferences
from core.matcher.service import MatchingService
from core.matcher.ranking import rank_candidates
from core.matcher.similarity import SimilarityCalculator

__all__ = [
    'MatchingService', 'rank_candidates', 'SimilarityCalculator',
    'MatchCandidate', 'MatchPreferences',
]
