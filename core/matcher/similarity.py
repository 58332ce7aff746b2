#!/usr/bin/env python3
"""
Similarity Calculator - set overlap and attribute helpers for matching.
"""
import json
import re
from typing import Any, Iterable, List, Mapping, Optional

from core.scorer.normalizer import parse_string_list

_TIER_NUMBER = re.compile(r"(\d+)")


class SimilarityCalculator:
    """Attribute comparisons used by the ranking engine."""

    @staticmethod
    def jaccard(items_a: Optional[Iterable[str]], items_b: Optional[Iterable[str]]) -> float:
        """
        Jaccard similarity |A & B| / |A | B|.

        Returns:
            0.0 when either side is empty, else a value in [0, 1]
        """
        set_a = set(items_a or [])
        set_b = set(items_b or [])
        if not set_a or not set_b:
            return 0.0
        return len(set_a & set_b) / len(set_a | set_b)

    @staticmethod
    def parse_tier(value: Any) -> Optional[int]:
        """'tier1', 'Tier 2', '3' -> 1, 2, 3; anything else -> None."""
        if value is None or isinstance(value, bool):
            return None
        match = _TIER_NUMBER.search(str(value))
        return int(match.group(1)) if match else None

    @staticmethod
    def lifestyle_keys(value: Any) -> List[str]:
        """Keys of a lifestyle map, which may arrive as a JSON-encoded object."""
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                return []
        if isinstance(value, Mapping):
            return [str(k) for k in value.keys()]
        return []

    @staticmethod
    def token_list(value: Any) -> List[str]:
        return parse_string_list(value) or []
