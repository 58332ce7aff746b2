#!/usr/bin/env python3
"""
Persistence Operations - write a QCS result to the database.

The preferred path is a single call to the atomic_qcs_update() stored
function, which writes the QCS row and the profile summary in one
transaction. If that call fails the row and the summary are written in
sequence; if that fails too the failure is logged and the computed score
is still returned to the caller.
"""

import logging
from typing import Callable, ContextManager

from sqlalchemy.exc import SQLAlchemyError

from core.scorer.models import (
    QCSResult,
    PERSISTENCE_ATOMIC,
    PERSISTENCE_SEQUENTIAL,
    PERSISTENCE_FAILED,
)
from database.repository import ScoringRepository

logger = logging.getLogger(__name__)


def _ai_meta(result: QCSResult) -> dict:
    return {
        **result.ai.to_dict(),
        "persona": result.persona,
        "psychology_score": result.psychology.get("score"),
    }


def _write_atomic(repo: ScoringRepository, result: QCSResult) -> None:
    outcome = repo.qcs.atomic_update(
        user_id=result.user_id,
        total_score=result.total_score,
        logic_score=result.logic_score,
        ai_score=result.ai_score,
        ai_meta=_ai_meta(result),
        per_category=result.per_category,
        total_score_float=float(result.total_score),
        components=result.components.to_dict(),
    )
    logger.info(f"Atomic QCS update successful for user {result.user_id}: {outcome}")


def _write_sequential(repo: ScoringRepository, result: QCSResult) -> None:
    components = result.components
    repo.qcs.upsert_record(
        user_id=result.user_id,
        profile_score=components.profile_score,
        college_tier=components.college_tier,
        personality_depth=components.personality_depth,
        behavior_score=components.behavior_score,
        total_score=result.total_score,
        logic_score=result.logic_score,
        ai_score=result.ai_score,
        per_category=result.per_category,
        ai_meta=_ai_meta(result),
    )
    repo.qcs.update_profile_summary(result.user_id, result.total_score)


def save_qcs_result(
    uow_factory: Callable[[], ContextManager[ScoringRepository]],
    result: QCSResult,
) -> str:
    """
    Persist a QCS result, returning which path succeeded.

    Returns:
        "atomic", "sequential" or "failed"
    """
    try:
        with uow_factory() as repo:
            _write_atomic(repo, result)
        return PERSISTENCE_ATOMIC
    except SQLAlchemyError as e:
        logger.error(f"Atomic QCS update failed for user {result.user_id}: {e}")

    try:
        with uow_factory() as repo:
            _write_sequential(repo, result)
        logger.info(f"Fallback updates completed for user {result.user_id}")
        return PERSISTENCE_SEQUENTIAL
    except SQLAlchemyError as e:
        logger.error(f"Fallback updates also failed for user {result.user_id}: {e}")

    return PERSISTENCE_FAILED
