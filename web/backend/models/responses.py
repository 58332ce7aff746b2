#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any


class QCSBreakdown(BaseModel):
    """QCS total with its logic/AI parts and component sub-scores."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total_score": 73,
                "logic_score": 70,
                "ai_score": 78,
                "profile_score": 22,
                "college_tier": 21,
                "personality_depth": 30,
                "behavior_score": 10
            }
        }
    )

    total_score: int = Field(ge=0, le=100)
    logic_score: int = Field(ge=0, le=100)
    ai_score: Optional[int] = Field(None, ge=0, le=100)
    profile_score: int = Field(ge=0)
    college_tier: int = Field(ge=0)
    personality_depth: int = Field(ge=0)
    behavior_score: int = Field(ge=0, le=10)


class ScoreMetadata(BaseModel):
    timestamp: str
    version: str
    persistence: str


class ScoreResponse(BaseModel):
    """Response for a scoring request."""
    success: bool
    user_id: str
    qcs: QCSBreakdown
    ai_status: Dict[str, Any]
    scoring_details: Dict[str, Any]
    metadata: ScoreMetadata


class QCSRecordResponse(BaseModel):
    """Persisted QCS record for a user."""
    success: bool
    user_id: str
    qcs: QCSBreakdown
    per_category: Dict[str, float] = Field(default_factory=dict)
    ai_meta: Optional[Dict[str, Any]] = None
    last_computed_at: Optional[str] = None


class SyncResult(BaseModel):
    user_id: str
    success: bool
    total_score: Optional[int] = None
    persistence: Optional[str] = None
    error: Optional[str] = None


class SyncResponse(BaseModel):
    """Response for a bulk QCS resync."""
    success: bool
    processed: int
    succeeded: int
    failed: int
    results: List[SyncResult]


class MatchCandidateResponse(BaseModel):
    """A ranked match with its compatibility breakdown."""
    user_id: str
    age: Optional[int]
    compatibility_score: int = Field(ge=0, le=100)
    physical_score: int = Field(ge=0, le=100)
    mental_score: int = Field(ge=0, le=100)
    qcs_score: int = Field(ge=0, le=100)
    profile: Dict[str, Any] = Field(default_factory=dict)


class MatchesResponse(BaseModel):
    """Response containing ranked matches."""
    success: bool
    user_id: str
    count: int
    matches: List[MatchCandidateResponse]
