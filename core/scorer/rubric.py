#!/usr/bin/env python3
"""
Rubric Tables - canonical vocabularies, weights, aliases and personas.

The deterministic scorer never hardcodes a table; every function takes a
RubricTables instance so the rubric can be tuned or swapped in tests.
Weights are in [0, 1]; aliases map messy user input onto canonical keys.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple


EDUCATION_WEIGHTS = {
    "high school": 0.6,
    "undergraduate": 0.8,
    "postgraduate": 0.9,
    "phd": 1.0,
    "doctorate": 1.0,
    "working professional": 0.9,
    "entrepreneur": 0.95,
    "other": 0.7,
}

PROFESSION_KEYWORDS = {
    "engineer": 0.9,
    "developer": 0.9,
    "manager": 0.9,
    "teacher": 0.85,
    "doctor": 1.0,
    "research": 0.95,
    "student": 0.7,
    "entrepreneur": 0.95,
}

BODY_TYPE_WEIGHTS = {
    "slim": 0.8,
    "athletic": 1.0,
    "average": 0.75,
    "curvy": 0.7,
    "plus size": 0.65,
    "prefer not to say": 0.7,
    "any": 0.7,
}

SKIN_TONE_WEIGHTS = {
    "very fair": 0.7,
    "fair": 0.75,
    "medium": 0.8,
    "olive": 0.8,
    "brown": 0.75,
    "dark": 0.7,
    "prefer not to say": 0.7,
}

PERSONALITY_WEIGHTS = {
    "adventurous": 0.95,
    "analytical": 0.9,
    "creative": 0.95,
    "outgoing": 0.9,
    "introverted": 0.75,
    "empathetic": 0.98,
    "ambitious": 0.96,
    "laid-back": 0.7,
    "intellectual": 0.92,
    "spontaneous": 0.88,
    "humorous": 0.9,
    "practical": 0.82,
    "responsible": 0.95,
    "emotional": 0.65,
    "calm": 0.85,
    "positive": 0.9,
    "philosophical": 0.9,
}

VALUES_WEIGHTS = {
    "family-oriented": 0.95,
    "career-focused": 0.9,
    "health-conscious": 0.95,
    "spiritual": 0.7,
    "traditional": 0.65,
    "social justice": 0.85,
    "environmental": 0.85,
    "creative": 0.9,
    "intellectual": 0.92,
    "open-minded": 1.0,
    "adventure-seeking": 0.88,
    "financially responsible": 0.9,
}

MINDSET_WEIGHTS = {
    "growth mindset": 1.0,
    "positive thinking": 0.98,
    "pragmatic": 0.87,
    "optimistic": 0.9,
    "realistic": 0.86,
    "ambitious": 0.94,
    "balanced": 0.96,
    "curious": 0.9,
    "reflective": 0.88,
}

RELATIONSHIP_WEIGHTS = {
    "serious relationship": 1.0,
    "casual dating": 0.6,
    "marriage": 1.0,
    "friendship first": 0.75,
    "long-term commitment": 1.0,
    "short-term fun": 0.5,
    "open to anything": 0.65,
    "travel companion": 0.6,
}

INTERESTS_WEIGHTS = {
    "travel": 0.95,
    "reading": 0.9,
    "music": 0.85,
    "movies": 0.7,
    "sports": 0.9,
    "cooking": 0.8,
    "art": 0.9,
    "technology": 0.98,
    "nature": 0.9,
    "photography": 0.8,
    "dancing": 0.8,
    "gaming": 0.6,
    "fitness": 1.0,
    "writing": 0.85,
    "volunteering": 0.9,
    "fashion": 0.65,
    "food": 0.85,
    "history": 0.78,
    "science": 0.95,
    "politics": 0.6,
    "spirituality": 0.65,
    "adventure activities": 0.98,
    "leadership": 0.9,
    "philosophy": 0.9,
}

POSITIVE_WORDS = (
    "love", "kind", "happy", "strong", "caring",
    "supportive", "honest", "grateful", "excited", "optimistic",
)
NEGATIVE_WORDS = (
    "hate", "angry", "toxic", "lazy", "sad",
    "jealous", "unstable", "depressed", "resentful", "bitter",
)

BODY_TYPE_ALIASES = {
    "fit": "athletic",
    "fit/athletic": "athletic",
    "fit & athletic": "athletic",
    "average athletic": "athletic",
    "athl": "athletic",
}

SKIN_TONE_ALIASES = {
    "wheatish": "medium",
    "wheat": "medium",
    "dusky": "brown",
    "brownish": "brown",
    "light brown": "brown",
}

PERSONALITY_ALIASES = {
    "positive": "positive thinking",
    "intellect": "intellectual",
    "philosophical": "philosophical",
}

MINDSET_ALIASES = {
    "growth": "growth mindset",
}

RELATIONSHIP_ALIASES = {
    "travel": "travel companion",
}

# Declaration order is the tie-break order.
PERSONAS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Adventurous Explorer", ("adventurous", "travel", "fitness", "athletic", "sports")),
    ("Intellectual Thinker", ("intellectual", "analytical", "reading", "science", "philosophy")),
    ("Creative Visionary", ("creative", "art", "music", "writing", "photography")),
    ("Empathetic Caregiver", ("empathetic", "caring", "family-oriented", "supportive", "kind")),
    ("Ambitious Leader", ("ambitious", "career-focused", "leadership", "confident", "responsible")),
    ("Balanced Individual", ("balanced", "calm", "practical", "realistic", "stable")),
    ("Social Connector", ("outgoing", "humorous", "social", "dancing", "music")),
    ("Growth-Minded Optimist", ("growth mindset", "optimistic", "positive", "curious", "learning")),
    ("Health-Conscious Achiever", ("health-conscious", "fitness", "athletic", "discipline", "active")),
    ("Open-Minded Free Spirit", ("open-minded", "spontaneous", "creative", "adventure-seeking", "flexible")),
)

DEFAULT_PERSONA = "Balanced Individual"

# Big-5 contributions of canonical personality traits
PERSONALITY_TO_BIG5 = {
    "adventurous": {"openness": 0.8, "extraversion": 0.6},
    "analytical": {"openness": 0.6, "conscientiousness": 0.7},
    "creative": {"openness": 0.9, "extraversion": 0.3},
    "outgoing": {"extraversion": 0.9},
    "introverted": {"extraversion": 0.2},
    "empathetic": {"agreeableness": 0.9},
    "ambitious": {"conscientiousness": 0.9},
    "laid-back": {"neuroticism": -0.5},
    "intellectual": {"openness": 0.8, "conscientiousness": 0.5},
    "spontaneous": {"openness": 0.7, "extraversion": 0.5},
    "humorous": {"extraversion": 0.5, "agreeableness": 0.4},
    "practical": {"conscientiousness": 0.7},
    "responsible": {"conscientiousness": 0.95},
    "emotional": {"neuroticism": 0.6},
    "calm": {"neuroticism": -0.5},
    "positive thinking": {"neuroticism": -0.6, "agreeableness": 0.4},
    "philosophical": {"openness": 0.85},
}

BIG5_WEIGHTS = {
    "openness": 0.22,
    "conscientiousness": 0.26,
    "extraversion": 0.18,
    "agreeableness": 0.20,
    "neuroticism": 0.14,
}


@dataclass(frozen=True)
class RubricTables:
    """All lookup tables consumed by the normalizer and category scorers."""
    education: Dict[str, float] = field(default_factory=lambda: dict(EDUCATION_WEIGHTS))
    profession_keywords: Dict[str, float] = field(default_factory=lambda: dict(PROFESSION_KEYWORDS))
    body_type: Dict[str, float] = field(default_factory=lambda: dict(BODY_TYPE_WEIGHTS))
    skin_tone: Dict[str, float] = field(default_factory=lambda: dict(SKIN_TONE_WEIGHTS))
    personality: Dict[str, float] = field(default_factory=lambda: dict(PERSONALITY_WEIGHTS))
    values: Dict[str, float] = field(default_factory=lambda: dict(VALUES_WEIGHTS))
    mindset: Dict[str, float] = field(default_factory=lambda: dict(MINDSET_WEIGHTS))
    relationship: Dict[str, float] = field(default_factory=lambda: dict(RELATIONSHIP_WEIGHTS))
    interests: Dict[str, float] = field(default_factory=lambda: dict(INTERESTS_WEIGHTS))

    body_type_aliases: Dict[str, str] = field(default_factory=lambda: dict(BODY_TYPE_ALIASES))
    skin_tone_aliases: Dict[str, str] = field(default_factory=lambda: dict(SKIN_TONE_ALIASES))
    personality_aliases: Dict[str, str] = field(default_factory=lambda: dict(PERSONALITY_ALIASES))
    mindset_aliases: Dict[str, str] = field(default_factory=lambda: dict(MINDSET_ALIASES))
    relationship_aliases: Dict[str, str] = field(default_factory=lambda: dict(RELATIONSHIP_ALIASES))

    positive_words: Tuple[str, ...] = POSITIVE_WORDS
    negative_words: Tuple[str, ...] = NEGATIVE_WORDS

    personas: Tuple[Tuple[str, Tuple[str, ...]], ...] = PERSONAS
    default_persona: str = DEFAULT_PERSONA

    personality_to_big5: Dict[str, Dict[str, float]] = field(default_factory=lambda: dict(PERSONALITY_TO_BIG5))
    big5_weights: Dict[str, float] = field(default_factory=lambda: dict(BIG5_WEIGHTS))


DEFAULT_RUBRIC = RubricTables()
