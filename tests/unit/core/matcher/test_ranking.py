#!/usr/bin/env python3
"""
Unit tests for the pure ranking engine.
"""

import unittest
from datetime import date

from core.config_loader import MatchingConfig
from core.matcher.models import MatchPreferences
from core.matcher.ranking import rank_candidates, physical_score, mental_score, qcs_component, valid_genders
from core.matcher.similarity import SimilarityCalculator

TODAY = date(2025, 6, 1)

REQUESTER = {
    "user_id": "me",
    "date_of_birth": "1995-01-01",
    "college_tier": "tier1",
    "lifestyle": {"smoking": "no", "drinking": "social"},
    "interests": ["travel", "music"],
    "relationship_goals": ["marriage"],
    "personality_type": "INTJ",
}


def _candidate(user_id, **fields):
    data = {"user_id": user_id, "gender": "female", "is_active": True}
    data.update(fields)
    return data


PERFECT = _candidate(
    "a",
    date_of_birth="1995-03-01",
    college_tier="Tier 1",
    lifestyle='{"smoking": "no", "drinking": "no"}',
    interests="travel, music",
    relationship_goals=["marriage"],
    personality_type="INTJ",
)

DISTANT = _candidate(
    "b",
    date_of_birth="1990-01-01",
    college_tier="tier3",
    interests=["gaming"],
)


class TestRankCandidates(unittest.TestCase):

    def test_01_scores_and_order(self):
        print("\n📊 UNIT Test 1: Ranking order")
        matches = rank_candidates(
            REQUESTER, [DISTANT, PERFECT], qcs_scores={"a": 80}, today=TODAY
        )

        self.assertEqual([m.user_id for m in matches], ["a", "b"])

        top = matches[0]
        self.assertEqual(top.physical_score, 100)
        self.assertEqual(top.mental_score, 100)
        self.assertEqual(top.qcs_score, 80)
        self.assertEqual(top.compatibility_score, 96)

        low = matches[1]
        self.assertEqual(low.physical_score, 25)
        self.assertEqual(low.mental_score, 0)
        self.assertEqual(low.qcs_score, 50)
        self.assertEqual(low.compatibility_score, 20)
        print(f"  ✓ {[(m.user_id, m.compatibility_score) for m in matches]}")

    def test_02_blocked_self_and_inactive_excluded(self):
        candidates = [
            PERFECT,
            _candidate("me"),
            _candidate("blocked"),
            _candidate("asleep", is_active=False),
        ]
        matches = rank_candidates(REQUESTER, candidates, blocked_ids=["blocked"], today=TODAY)

        self.assertEqual([m.user_id for m in matches], ["a"])

    def test_03_ties_keep_input_order(self):
        twins = [_candidate("d1"), _candidate("d2"), _candidate("d3")]
        matches = rank_candidates(REQUESTER, twins, today=TODAY)

        self.assertEqual([m.user_id for m in matches], ["d1", "d2", "d3"])

    def test_04_limit(self):
        matches = rank_candidates(REQUESTER, [PERFECT, DISTANT], limit=1, today=TODAY)
        self.assertEqual(len(matches), 1)

    def test_05_gender_preference(self):
        male = _candidate("m", gender="male")
        prefs = MatchPreferences(preferred_gender=["female", "alien"])

        matches = rank_candidates(REQUESTER, [male, PERFECT], preferences=prefs, today=TODAY)
        self.assertEqual([m.user_id for m in matches], ["a"])

    def test_06_unknown_gender_values_mean_no_filter(self):
        male = _candidate("m", gender="male")
        prefs = MatchPreferences(preferred_gender=["alien"])

        self.assertEqual(valid_genders(prefs), [])
        matches = rank_candidates(REQUESTER, [male], preferences=prefs, today=TODAY)
        self.assertEqual(len(matches), 1)

    def test_07_age_range_excludes_unknown_ages(self):
        no_dob = _candidate("x")
        prefs = MatchPreferences(age_range_min=25, age_range_max=32)

        matches = rank_candidates(REQUESTER, [no_dob, DISTANT, PERFECT], preferences=prefs, today=TODAY)
        self.assertEqual([m.user_id for m in matches], ["a"])

    def test_08_unknown_age_allowed_without_range(self):
        matches = rank_candidates(REQUESTER, [_candidate("x")], today=TODAY)

        self.assertEqual(len(matches), 1)
        self.assertIsNone(matches[0].age)

    def test_09_custom_weights(self):
        config = MatchingConfig(physical_weight=0.0, mental_weight=0.0, qcs_weight=1.0)
        matches = rank_candidates(REQUESTER, [PERFECT], qcs_scores={"a": 64}, config=config, today=TODAY)

        self.assertEqual(matches[0].compatibility_score, 64)


class TestSubScores(unittest.TestCase):

    def test_tier_bonus_needs_both_tiers(self):
        requester = {"college_tier": None}
        candidate = {"college_tier": "tier1"}
        self.assertEqual(physical_score(requester, candidate, None, None), 0.0)

    def test_adjacent_tier(self):
        self.assertEqual(physical_score({"college_tier": "tier1"}, {"college_tier": "tier2"}, None, None), 15.0)

    def test_age_gap(self):
        self.assertEqual(physical_score({}, {}, 30, 33), 35.0)
        self.assertEqual(physical_score({}, {}, 30, 45), 0.0)

    def test_mental_partial_overlap(self):
        score = mental_score({"interests": ["travel", "music"]}, {"interests": ["travel", "art"]})
        self.assertAlmostEqual(score, 50 / 3)

    def test_qcs_component(self):
        self.assertEqual(qcs_component(None), 50.0)
        self.assertEqual(qcs_component(0), 50.0)
        self.assertEqual(qcs_component(88), 88.0)


class TestSimilarityCalculator(unittest.TestCase):

    def test_jaccard(self):
        self.assertEqual(SimilarityCalculator.jaccard([], ["a"]), 0.0)
        self.assertEqual(SimilarityCalculator.jaccard(["a", "b"], ["b", "c"]), 1 / 3)

    def test_parse_tier(self):
        self.assertEqual(SimilarityCalculator.parse_tier("tier1"), 1)
        self.assertEqual(SimilarityCalculator.parse_tier("Tier 2"), 2)
        self.assertIsNone(SimilarityCalculator.parse_tier("top"))
        self.assertIsNone(SimilarityCalculator.parse_tier(None))

    def test_lifestyle_keys(self):
        self.assertEqual(SimilarityCalculator.lifestyle_keys('{"a": 1}'), ["a"])
        self.assertEqual(SimilarityCalculator.lifestyle_keys("not json"), [])
        self.assertEqual(SimilarityCalculator.lifestyle_keys(None), [])


if __name__ == '__main__':
    unittest.main()
