#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from functools import lru_cache

from core.app_context import AppContext
from core.matcher.service import MatchingService
from core.scorer.service import QCSScoringService
from .config import get_config


@lru_cache()
def get_app_context() -> AppContext:
    """
    Build the wired services once per process.

    The database engine is created lazily on first use, so importing the
    app does not require a reachable database.
    """
    return AppContext.build(get_config())


def get_scoring_service() -> QCSScoringService:
    """
    FastAPI dependency for the QCS scoring service.

    Usage:
        @router.post("/score")
        def score(service: QCSScoringService = Depends(get_scoring_service)):
            ...
    """
    return get_app_context().scoring_service


def get_matching_service() -> MatchingService:
    """FastAPI dependency for the matching service."""
    return get_app_context().matching_service
