#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from pydantic import BaseModel, Field
from typing import Optional


class ScoreRequest(BaseModel):
    """Request to compute the QCS for one user."""
    user_id: str = Field(..., min_length=1, description="User whose profile is scored")
    physical: Optional[str] = Field(None, description="Free-text physical summary passed to the AI prompt")
    mental: Optional[str] = Field(None, description="Free-text mental summary passed to the AI prompt")
    description: Optional[str] = Field(None, description="Free-text description passed to the AI prompt")


class SyncRequest(BaseModel):
    """Request to recompute the QCS for a page of active profiles."""
    limit: int = Field(default=100, ge=1, le=1000, description="Profiles to rescore (1-1000)")
    offset: int = Field(default=0, ge=0, description="Offset into active profiles ordered by user id")
