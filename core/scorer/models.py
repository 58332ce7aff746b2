#!/usr/bin/env python3
"""
Scoring Models - Data structures for QCS results.
"""

from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime

from core.scorer.components import QCSComponents

# AI phase statuses reported in ai_status.status
AI_SUCCESS = "success"
AI_FAILED = "failed"
AI_TIMEOUT = "timeout"
AI_CIRCUIT_OPEN = "circuit_open"
AI_DISABLED = "disabled"
AI_INVALID_RESPONSE = "invalid_response"
AI_CANCELLED = "cancelled"

PERSISTENCE_ATOMIC = "atomic"
PERSISTENCE_SEQUENTIAL = "sequential"
PERSISTENCE_FAILED = "failed"


@dataclass
class AiPhaseResult:
    """Outcome of the optional AI refinement phase."""
    status: str
    ai_score: Optional[int] = None
    model: Optional[str] = None
    reason: Optional[str] = None
    insights: Optional[str] = None
    attempts: Dict[str, int] = field(default_factory=dict)
    error: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "status": self.status,
            "ai_score": self.ai_score,
            "model": self.model,
            "attempts": dict(self.attempts),
        }
        if self.reason:
            data["reason"] = self.reason
        if self.insights:
            data["insights"] = self.insights
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class QCSResult:
    """Complete QCS computation for one user."""
    user_id: str
    total_score: int
    logic_score: int
    ai_score: Optional[int]
    components: QCSComponents
    raw_logic_score: float = 0.0
    per_category: Dict[str, float] = field(default_factory=dict)
    persona: str = ""
    behaviors: List[str] = field(default_factory=list)
    psychology: Dict[str, Any] = field(default_factory=dict)
    ai: AiPhaseResult = field(default_factory=lambda: AiPhaseResult(status=AI_DISABLED))
    persistence: str = PERSISTENCE_FAILED
    computed_at: Optional[datetime] = None
    version: str = ""

    def qcs_dict(self) -> Dict[str, Any]:
        return {
            "total_score": self.total_score,
            "logic_score": self.logic_score,
            "ai_score": self.ai_score,
            **self.components.to_dict(),
        }

    def scoring_details(self) -> Dict[str, Any]:
        return {
            "raw_logic_score": self.raw_logic_score,
            "per_category": dict(self.per_category),
            "persona": self.persona,
            "behaviors": list(self.behaviors),
            "psychology_model": dict(self.psychology),
        }
