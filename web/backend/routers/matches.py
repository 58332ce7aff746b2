#!/usr/bin/env python3
"""
Match endpoints - ranked compatible profiles for a user.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query

from core.errors import ProfileNotFoundError, PersistenceError
from core.matcher.service import MatchingService
from ..dependencies import get_matching_service
from ..exceptions import ProfileNotFoundException, PersistenceUnavailableException
from ..models.responses import MatchesResponse, MatchCandidateResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/matches", tags=["matches"])


@router.get("/{user_id}", response_model=MatchesResponse)
def get_matches(
    user_id: str,
    limit: Optional[int] = Query(default=None, ge=1, le=100, description="Maximum results to return"),
    service: MatchingService = Depends(get_matching_service)
):
    """
    Get ranked match candidates for a user.

    Candidates are filtered by the user's partner preferences and block
    list, then ordered by compatibility score (highest first).
    """
    try:
        matches = service.get_matches(user_id, limit=limit)
    except ProfileNotFoundError as e:
        raise ProfileNotFoundException(str(e))
    except PersistenceError as e:
        raise PersistenceUnavailableException(str(e))

    return MatchesResponse(
        success=True,
        user_id=user_id,
        count=len(matches),
        matches=[MatchCandidateResponse(**m.to_dict()) for m in matches],
    )
