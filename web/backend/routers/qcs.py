#!/usr/bin/env python3
"""
QCS endpoints - compute, read and resync quality/compatibility scores.
"""

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from core.errors import ProfileNotFoundError, PersistenceError
from core.scorer.service import QCSScoringService, fallback_response
from ..dependencies import get_scoring_service
from ..exceptions import (
    ProfileNotFoundException,
    QCSRecordNotFoundException,
    PersistenceUnavailableException,
)
from ..models.requests import ScoreRequest, SyncRequest
from ..models.responses import (
    ScoreResponse,
    ScoreMetadata,
    QCSBreakdown,
    QCSRecordResponse,
    SyncResponse,
    SyncResult,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/qcs", tags=["qcs"])


@router.post("/score", response_model=ScoreResponse)
def score_profile(
    request: ScoreRequest,
    service: QCSScoringService = Depends(get_scoring_service)
):
    """
    Compute, persist and return the QCS for a user.

    Unexpected failures still answer 200 with the fixed fallback score and
    `fallback_mode: true`; a missing profile is 404 and an unreadable
    database is 503.
    """
    try:
        result = service.score_user(
            request.user_id,
            physical=request.physical,
            mental=request.mental,
            description=request.description,
        )
    except ProfileNotFoundError as e:
        raise ProfileNotFoundException(str(e))
    except PersistenceError as e:
        raise PersistenceUnavailableException(str(e))
    except Exception as e:
        logger.exception(f"QCS scoring failed for user {request.user_id}")
        return JSONResponse(
            status_code=200,
            content=fallback_response(
                request.user_id,
                service.config.scoring.fallback_score,
                e.__class__.__name__,
            ),
        )

    return ScoreResponse(
        success=True,
        user_id=result.user_id,
        qcs=QCSBreakdown(**result.qcs_dict()),
        ai_status={
            **result.ai.to_dict(),
            "persona": result.persona,
            "psychology_score": result.psychology.get("score"),
            "logic_weight": service.config.blend.logic_weight,
            "ai_weight": service.config.blend.ai_weight,
        },
        scoring_details=result.scoring_details(),
        metadata=ScoreMetadata(
            timestamp=result.computed_at.isoformat(),
            version=result.version,
            persistence=result.persistence,
        ),
    )


@router.get("/{user_id}", response_model=QCSRecordResponse)
def get_qcs(
    user_id: str,
    service: QCSScoringService = Depends(get_scoring_service)
):
    """
    Get the persisted QCS record for a user.
    """
    try:
        record = service.get_record(user_id)
    except PersistenceError as e:
        raise PersistenceUnavailableException(str(e))

    if record is None:
        raise QCSRecordNotFoundException(f"No QCS record for user {user_id}")

    return QCSRecordResponse(
        success=True,
        user_id=user_id,
        qcs=QCSBreakdown(**{k: record[k] for k in QCSBreakdown.model_fields}),
        per_category=record["per_category"],
        ai_meta=record["ai_meta"],
        last_computed_at=record["last_computed_at"],
    )


@router.post("/sync", response_model=SyncResponse)
def sync_qcs(
    request: SyncRequest,
    service: QCSScoringService = Depends(get_scoring_service)
):
    """
    Recompute the QCS for a page of active profiles.

    Per-user failures are reported in `results` and do not fail the batch.
    """
    try:
        results = service.sync_users(limit=request.limit, offset=request.offset)
    except PersistenceError as e:
        raise PersistenceUnavailableException(str(e))

    succeeded = sum(1 for r in results if r["success"])
    return SyncResponse(
        success=True,
        processed=len(results),
        succeeded=succeeded,
        failed=len(results) - succeeded,
        results=[SyncResult(**r) for r in results],
    )
