#!/usr/bin/env python3
"""
Unit tests for the per-category scorers.
"""

import unittest
from datetime import date

from core.scorer import categories
from core.scorer.rubric import DEFAULT_RUBRIC


class TestParseAge(unittest.TestCase):

    def test_iso_date(self):
        self.assertEqual(categories.parse_age("1995-06-15", today=date(2025, 6, 14)), 29)
        self.assertEqual(categories.parse_age("1995-06-15", today=date(2025, 6, 15)), 30)

    def test_bare_year(self):
        self.assertEqual(categories.parse_age("1995", today=date(2025, 1, 1)), 30)

    def test_year_inside_free_text(self):
        self.assertEqual(categories.parse_age("sometime 1990 maybe", today=date(2025, 1, 1)), 35)

    def test_unusable_values(self):
        self.assertIsNone(categories.parse_age(None))
        self.assertIsNone(categories.parse_age(""))
        self.assertIsNone(categories.parse_age("123"))
        self.assertIsNone(categories.parse_age("not a date"))

    def test_future_date(self):
        self.assertIsNone(categories.parse_age("2030-01-01", today=date(2025, 1, 1)))


class TestAgeFraction(unittest.TestCase):

    def test_target_age_is_full_credit(self):
        self.assertAlmostEqual(categories.age_fraction(30), 1.0)

    def test_linear_falloff(self):
        self.assertAlmostEqual(categories.age_fraction(55), 0.5)
        self.assertAlmostEqual(categories.age_fraction(5), 0.5)

    def test_floor_at_zero(self):
        self.assertAlmostEqual(categories.age_fraction(80), 0.0)
        self.assertAlmostEqual(categories.age_fraction(95), 0.0)

    def test_unknown_age(self):
        self.assertEqual(categories.age_fraction(None), 0.0)

    def test_from_dob(self):
        fraction = categories.age_fraction_from_dob("1995-01-01", today=date(2025, 6, 1))
        self.assertAlmostEqual(fraction, 1.0)


class TestOptionWeights(unittest.TestCase):

    def test_option_weight(self):
        table = DEFAULT_RUBRIC.body_type
        self.assertEqual(categories.option_weight("", table), 0.0)
        self.assertEqual(categories.option_weight(None, table), 0.0)
        self.assertEqual(categories.option_weight("athletic", table), 1.0)
        self.assertEqual(categories.option_weight("very athletic", table), 1.0)
        self.assertEqual(categories.option_weight("unheard of", table), 0.6)
        self.assertEqual(categories.option_weight("unheard of", table, default_weight=0.4), 0.4)

    def test_multiselect_fraction(self):
        table = {"a": 1.0, "b": 0.5, "c": 0.25}
        self.assertAlmostEqual(categories.multiselect_fraction(["b"], table, 1), 0.5)
        self.assertAlmostEqual(categories.multiselect_fraction(["a", "b"], table, 1), 1.0)
        self.assertAlmostEqual(categories.multiselect_fraction(["b", "c"], table, 2), 0.75 / 1.5)

    def test_multiselect_monotonic(self):
        table = DEFAULT_RUBRIC.interests
        base = categories.multiselect_fraction(["movies"], table, 10)
        more = categories.multiselect_fraction(["movies", "fitness"], table, 10)
        self.assertGreater(more, base)

    def test_multiselect_empty(self):
        self.assertEqual(categories.multiselect_fraction([], {"a": 1.0}, 3), 0.0)
        self.assertEqual(categories.multiselect_fraction(None, {"a": 1.0}, 3), 0.0)

    def test_unknown_options_earn_default_weight(self):
        table = {"a": 1.0}
        self.assertAlmostEqual(categories.multiselect_fraction(["zzz"], table, 1), 0.6)


class TestTextAndNumbers(unittest.TestCase):

    def test_bio_fraction_sentiment(self):
        fraction = categories.bio_fraction(
            "I love hiking and I am kind", DEFAULT_RUBRIC.positive_words, DEFAULT_RUBRIC.negative_words
        )
        # 4 words of length > 2, two of them positive
        self.assertAlmostEqual(fraction, 4 / 80.0 + 0.3)

    def test_bio_fraction_negative_clamped(self):
        fraction = categories.bio_fraction(
            "hate", DEFAULT_RUBRIC.positive_words, DEFAULT_RUBRIC.negative_words
        )
        self.assertEqual(fraction, 0.0)

    def test_bio_fraction_empty(self):
        self.assertEqual(categories.bio_fraction(None, (), ()), 0.0)
        self.assertEqual(categories.bio_fraction("a b", (), ()), 0.0)

    def test_height_fraction(self):
        self.assertAlmostEqual(categories.height_fraction(175), 1.0)
        self.assertAlmostEqual(categories.height_fraction(195), 0.5)
        self.assertEqual(categories.height_fraction(250), 0.0)
        self.assertIsNone(categories.height_fraction(None))

    def test_education_level(self):
        self.assertEqual(categories.education_level("2nd Year"), "undergraduate")
        self.assertEqual(categories.education_level("Masters"), "postgraduate")
        self.assertEqual(categories.education_level("PhD"), "phd")
        self.assertEqual(categories.education_level("working professional"), "working professional")
        self.assertIsNone(categories.education_level(None))

    def test_profession_weight(self):
        keywords = DEFAULT_RUBRIC.profession_keywords
        self.assertEqual(categories.profession_weight("Computer Engineering", keywords), 0.9)
        self.assertIsNone(categories.profession_weight("History", keywords))
        self.assertIsNone(categories.profession_weight(None, keywords))


if __name__ == '__main__':
    unittest.main()
