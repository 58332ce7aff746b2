#!/usr/bin/env python3
"""
Category Scorers - pure functions mapping normalized input to a [0, 1] fraction.

Each scorer takes its lookup table as an argument; none of them touch the
network, the database or the clock (age parsing accepts an explicit `today`).
"""

import re
import logging
from datetime import date
from typing import Iterable, Mapping, Optional, Sequence, Tuple

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from core.utils import clamp

logger = logging.getLogger(__name__)

DEFAULT_OPTION_WEIGHT = 0.6

_YEAR_ANYWHERE = re.compile(r"\d{4}")
_WORD_SPLIT = re.compile(r"\W+")


# ---------------------------------------------------------------------------
# Age
# ---------------------------------------------------------------------------

def parse_age(value: Optional[str], today: Optional[date] = None) -> Optional[int]:
    """Derive an age in whole years from a date of birth or a birth year.

    Accepts ISO and free-form dates ("1995-04-12", "12 April 1995"), a bare
    year ("1995"), or any string containing a 4-digit year. Returns None
    when nothing usable is found.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    today = today or date.today()

    if text.isdigit():
        if len(text) == 4:
            return _age_from_year(int(text), today)
        return None

    try:
        born = date_parser.parse(text).date()
    except (ValueError, OverflowError):
        match = _YEAR_ANYWHERE.search(text)
        if not match:
            return None
        return _age_from_year(int(match.group(0)), today)

    if born > today:
        return None
    return relativedelta(today, born).years


def _age_from_year(year: int, today: date) -> Optional[int]:
    age = today.year - year
    return age if age >= 0 else None


def age_fraction(age: Optional[float], target_age: float = 30.0, span: float = 50.0) -> float:
    """max(0, 1 - |age - target| / span), clamped to [0, 1]."""
    if age is None:
        return 0.0
    return clamp(1.0 - abs(age - target_age) / span)


def age_fraction_from_dob(
    value: Optional[str],
    today: Optional[date] = None,
    target_age: float = 30.0,
    span: float = 50.0,
) -> float:
    return age_fraction(parse_age(value, today), target_age, span)


# ---------------------------------------------------------------------------
# Option tables
# ---------------------------------------------------------------------------

def option_weight(
    option: Optional[str],
    table: Mapping[str, float],
    default_weight: float = DEFAULT_OPTION_WEIGHT,
) -> float:
    """Canonical weight of an option, with containment fallback and a default."""
    if not option:
        return 0.0
    o = option.lower()

    if o in table:
        return table[o]

    for key, weight in table.items():
        if key in o or o in key:
            return weight

    return default_weight


def single_option_fraction(
    option: Optional[str],
    table: Mapping[str, float],
    default_weight: float = DEFAULT_OPTION_WEIGHT,
) -> float:
    return option_weight(option, table, default_weight)


def multiselect_fraction(
    selected: Optional[Sequence[str]],
    table: Mapping[str, float],
    max_choices: int,
    default_weight: float = DEFAULT_OPTION_WEIGHT,
) -> float:
    """Sum of selected weights over the best achievable sum of `max_choices` picks.

    The denominator is the sum of the top-N table weights, so picking the N
    strongest canonical options yields 1.0. Capped at 1.0.
    """
    if not selected:
        return 0.0

    selected_sum = sum(option_weight(s, table, default_weight) for s in selected)

    top_weights = sorted(table.values(), reverse=True)[:max_choices]
    max_possible = sum(top_weights) or max_choices * 1.0
    if max_possible <= 0:
        return 0.0

    return min(1.0, selected_sum / max_possible)


# ---------------------------------------------------------------------------
# Free text and numbers
# ---------------------------------------------------------------------------

def bio_words(bio: Optional[str]) -> list:
    if not bio:
        return []
    return [w for w in _WORD_SPLIT.split(bio.lower()) if len(w) > 2]


def sentiment_counts(
    words: Iterable[str],
    positive_words: Iterable[str],
    negative_words: Iterable[str],
) -> Tuple[int, int]:
    positive = set(positive_words)
    negative = set(negative_words)
    pos = neg = 0
    for word in words:
        if word in positive:
            pos += 1
        elif word in negative:
            neg += 1
    return pos, neg


def bio_fraction(
    bio: Optional[str],
    positive_words: Iterable[str],
    negative_words: Iterable[str],
) -> float:
    """Length factor (saturating at 80 words) plus a +/-0.3 sentiment tilt."""
    words = bio_words(bio)
    if not words:
        return 0.0

    length_factor = min(1.0, len(words) / 80.0)

    pos, neg = sentiment_counts(words, positive_words, negative_words)
    sentiment = 0.0
    if pos + neg > 0:
        sentiment = ((pos - neg) / (pos + neg)) * 0.3

    return clamp(length_factor + sentiment)


def height_fraction(height_cm: Optional[float]) -> Optional[float]:
    """Closeness to 175cm over a 40cm span; None when height is unknown."""
    if height_cm is None:
        return None
    return max(0.0, 1.0 - abs(height_cm - 175.0) / 40.0)


def education_level(year_of_study: Optional[str]) -> Optional[str]:
    """Collapse a year-of-study label into an education table key."""
    if not year_of_study:
        return None
    label = year_of_study.lower()
    if any(marker in label for marker in ("1st", "2nd", "3rd", "4th", "year", "undergrad")):
        return "undergraduate"
    if any(marker in label for marker in ("graduate", "masters", "pg", "postgraduate")):
        return "postgraduate"
    if "phd" in label or "doctorate" in label:
        return "phd"
    return label


def profession_weight(field_of_study: Optional[str], keywords: Mapping[str, float]) -> Optional[float]:
    """Weight of the first profession keyword found in the field of study."""
    if not field_of_study:
        return None
    text = field_of_study.lower()
    for keyword, weight in keywords.items():
        if keyword in text:
            return weight
    return None
