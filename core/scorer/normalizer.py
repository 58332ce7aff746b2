#!/usr/bin/env python3
"""
Profile Normalizer - turn loosely typed profile fields into canonical tokens.

Profile fields arrive in many shapes: missing, a scalar, a delimited string
("travel, music"), a JSON-encoded array ('["travel","music"]') or a native
list. Everything downstream consumes the NormalizedProfile built here, so
the shape juggling happens exactly once.
"""

import json
import re
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.scorer.rubric import RubricTables, DEFAULT_RUBRIC
from core.utils import safe_float

logger = logging.getLogger(__name__)

_DELIMITERS = re.compile(r"[,;/|]+")


def _clean_items(items: Iterable[Any]) -> List[str]:
    out = []
    for item in items:
        if item is None:
            continue
        token = str(item).strip().lower()
        if token:
            out.append(token)
    return out


def parse_string_list(value: Any) -> Optional[List[str]]:
    """Parse any supported field shape into lowercase trimmed tokens.

    Returns None when nothing usable is present. Never raises: a malformed
    JSON array degrades to delimiter splitting.
    """
    if value is None or isinstance(value, (bool, dict)):
        return None

    if isinstance(value, (list, tuple, set)):
        items = _clean_items(value)
        return items or None

    text = str(value).strip()
    if not text:
        return None

    if text.startswith("[") and text.endswith("]"):
        try:
            parsed = json.loads(text)
        except ValueError:
            logger.debug("Malformed JSON array %r, falling back to delimiter split", text[:80])
        else:
            if isinstance(parsed, list):
                items = _clean_items(parsed)
                return items or None

    items = _clean_items(_DELIMITERS.split(text))
    return items or None


def normalize_option(raw: Any, aliases: Mapping[str, str], vocabulary: Iterable[str]) -> Optional[str]:
    """Map one raw option onto the canonical vocabulary.

    Order: alias table, exact vocabulary hit, containment either way (first
    key in table order wins). Unmatched options pass through lowercased so
    they can still earn the default weight.
    """
    if raw is None:
        return None
    option = str(raw).strip().lower()
    if not option:
        return None

    if option in aliases:
        return aliases[option]

    keys = list(vocabulary)
    if option in keys:
        return option

    for key in keys:
        if key in option or option in key:
            return key

    return option


def normalize_list(raw: Any, aliases: Mapping[str, str], vocabulary: Iterable[str]) -> Optional[List[str]]:
    parsed = parse_string_list(raw)
    if not parsed:
        return None

    keys = list(vocabulary)
    out = []
    for item in parsed:
        mapped = normalize_option(item, aliases, keys)
        if mapped:
            out.append(mapped)
    return out or None


def _first_present(raw: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        value = raw.get(name)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        if isinstance(value, (list, tuple)) and not value:
            continue
        return value
    return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass
class NormalizedProfile:
    """Canonical, scorer-ready view of a profile."""
    user_id: Optional[str] = None
    date_of_birth: Optional[str] = None
    year_of_study: Optional[str] = None
    field_of_study: Optional[str] = None
    height: Optional[float] = None
    body_type: Optional[str] = None
    skin_tone: Optional[str] = None
    personality: Optional[List[str]] = None
    values: Optional[List[str]] = None
    mindset: Optional[List[str]] = None
    relationship_goals: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    bio: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


def normalize_profile(raw: Mapping[str, Any], tables: RubricTables = DEFAULT_RUBRIC) -> NormalizedProfile:
    """Build the NormalizedProfile for a raw profile mapping."""
    personality_source = _first_present(raw, "personality_traits", "personality_type")

    year_of_study = _text(raw.get("year_of_study"))
    field_of_study = _text(raw.get("field_of_study"))

    return NormalizedProfile(
        user_id=_text(raw.get("user_id")),
        date_of_birth=_text(_first_present(raw, "date_of_birth", "dob")),
        year_of_study=year_of_study.lower() if year_of_study else None,
        field_of_study=field_of_study.lower() if field_of_study else None,
        height=safe_float(raw.get("height")),
        body_type=normalize_option(
            _text(raw.get("body_type")), tables.body_type_aliases, tables.body_type
        ),
        skin_tone=normalize_option(
            _text(raw.get("skin_tone")), tables.skin_tone_aliases, tables.skin_tone
        ),
        personality=normalize_list(personality_source, tables.personality_aliases, tables.personality),
        values=normalize_list(raw.get("values"), {}, tables.values),
        mindset=normalize_list(raw.get("mindset"), tables.mindset_aliases, tables.mindset),
        relationship_goals=normalize_list(
            raw.get("relationship_goals"), tables.relationship_aliases, tables.relationship
        ),
        interests=normalize_list(raw.get("interests"), {}, tables.interests),
        bio=_text(raw.get("bio")),
    )
