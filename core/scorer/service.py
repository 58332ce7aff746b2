#!/usr/bin/env python3
"""
QCS Scoring Service - deterministic rubric plus optional AI refinement.

Pipeline for one user:
- Load and normalize the profile
- Deterministic logic score, persona, Big-5 diagnostic
- AI refinement (gated by the per-user circuit breaker, bounded by a timeout)
- Blend, component breakdown, persistence

Scoring never blocks on AI availability: every AI problem degrades to the
logic-only result.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Any, Callable, ContextManager, Dict, List, Optional
import logging
import threading

from sqlalchemy.exc import SQLAlchemyError

from core.config_loader import AppConfig
from core.errors import ProfileNotFoundError, PersistenceError
from core.llm.circuit_breaker import UserCircuitBreaker
from core.llm.client import AllAttemptsFailedError, AiRequestCancelled
from core.llm.interfaces import ChatClient
from core.llm.prompts import build_refinement_messages
from core.scorer import models
from core.scorer.blend import blend_score, validate_score
from core.scorer.components import compute_components, FALLBACK_COMPONENTS
from core.scorer.engine import compute_logic_score, describe_behaviors
from core.scorer.normalizer import NormalizedProfile, normalize_profile
from core.scorer.persistence import save_qcs_result
from core.scorer.persona import classify_persona
from core.scorer.psychology import compute_big5
from core.scorer.rubric import RubricTables, DEFAULT_RUBRIC
from core.utils import round_half_up, utcnow
from database.repositories import profile_to_dict
from database.repository import ScoringRepository

logger = logging.getLogger(__name__)

AI_SCORE_KEYS = ("final_score", "score", "predicted_score")


def extract_ai_score(content: Any) -> Optional[int]:
    """Pull a 0-100 integer score out of the model's JSON reply."""
    if not isinstance(content, dict):
        return None
    for key in AI_SCORE_KEYS:
        value = content.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        return max(0, min(100, round_half_up(value)))
    return None


def default_hints(raw: Dict[str, Any]) -> Dict[str, str]:
    """Prompt hints derived from the profile when the request gives none."""
    height = raw.get("height")
    stature = "tall" if isinstance(height, (int, float)) and height > 170 else "average"
    interests = raw.get("interests")
    drive = "ambitious" if isinstance(interests, list) and "fitness" in interests else "calm"
    return {
        "physical": f"{raw.get('body_type') or 'average'} {stature}",
        "mental": f"{raw.get('personality_type') or 'average'} {drive}",
        "description": raw.get("bio") or "No description available",
    }


def fallback_response(user_id: Optional[str], fallback_score: int, error_type: str) -> Dict[str, Any]:
    """Fixed-score payload returned when a request cannot be scored at all."""
    return {
        "success": False,
        "user_id": user_id,
        "qcs": {
            "total_score": fallback_score,
            "logic_score": fallback_score,
            "ai_score": None,
            **FALLBACK_COMPONENTS.to_dict(),
        },
        "error": "QCS calculation failed, using fallback score",
        "fallback_mode": True,
        "ai_status": {"status": "error", "error_type": error_type},
        "metadata": {"timestamp": utcnow().isoformat(), "version": "fallback"},
    }


class QCSScoringService:
    """
    Computes, persists and reports the QCS for a user.

    The AI phase runs on a shared thread pool; the caller waits at most
    `scoring.ai_phase_timeout_seconds` before falling back to the logic
    score and signalling the worker to stop.
    """

    def __init__(
        self,
        config: AppConfig,
        uow_factory: Callable[[], ContextManager[ScoringRepository]],
        chat_client: Optional[ChatClient] = None,
        breaker: Optional[UserCircuitBreaker] = None,
        tables: RubricTables = DEFAULT_RUBRIC,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self.config = config
        self.uow_factory = uow_factory
        self.chat_client = chat_client
        self.breaker = breaker
        self.tables = tables
        self.executor = executor or ThreadPoolExecutor(
            max_workers=config.scoring.ai_workers, thread_name_prefix="qcs-ai"
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_profile(self, user_id: str) -> Dict[str, Any]:
        try:
            with self.uow_factory() as repo:
                profile = repo.profiles.get_by_user_id(user_id)
                if profile is None:
                    raise ProfileNotFoundError(user_id)
                return profile_to_dict(profile)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load profile for {user_id}: {e}")
            raise PersistenceError(f"Could not read profile for user {user_id}") from e

    # ------------------------------------------------------------------
    # AI phase
    # ------------------------------------------------------------------

    def _refine(
        self,
        user_id: str,
        messages: List[Dict[str, str]],
        cancel_event: threading.Event,
        started: threading.Event,
    ) -> models.AiPhaseResult:
        started.set()
        if cancel_event.is_set():
            return models.AiPhaseResult(status=models.AI_CANCELLED)

        try:
            completion = self.chat_client.complete(
                messages,
                preferred_model=self.config.llm.preferred_model,
                parse_json=True,
                cancel_event=cancel_event,
            )
        except AiRequestCancelled:
            logger.info(f"AI refinement for {user_id} cancelled")
            return models.AiPhaseResult(status=models.AI_CANCELLED)
        except AllAttemptsFailedError as e:
            # The caller has already recorded the timeout
            if cancel_event.is_set():
                logger.info(f"AI refinement for {user_id} failed after the phase timed out")
                return models.AiPhaseResult(status=models.AI_CANCELLED)
            logger.warning(f"AI refinement failed for {user_id}: {e}")
            if self.breaker:
                self.breaker.record_failure(user_id)
            return models.AiPhaseResult(
                status=models.AI_FAILED,
                attempts=e.attempts,
                error=_summarize_error(e.last_error),
            )
        except Exception as e:
            if cancel_event.is_set():
                return models.AiPhaseResult(status=models.AI_CANCELLED)
            logger.exception(f"Unexpected AI refinement error for {user_id}")
            if self.breaker:
                self.breaker.record_failure(user_id)
            return models.AiPhaseResult(
                status=models.AI_FAILED,
                error={"reason": "unexpected_error", "error": f"{type(e).__name__}: {e}"},
            )

        if cancel_event.is_set():
            logger.info(f"AI reply for {user_id} arrived after the phase timed out; discarded")
            return models.AiPhaseResult(status=models.AI_CANCELLED)

        if self.breaker:
            self.breaker.record_success(user_id)

        score = extract_ai_score(completion.content)
        if score is None:
            logger.info(f"AI refinement for {user_id} returned no usable score")
            return models.AiPhaseResult(
                status=models.AI_INVALID_RESPONSE,
                model=completion.model,
                attempts=completion.attempts,
            )

        content = completion.content
        logger.info(f"AI refinement success for {user_id} using model {completion.model}: {score}")
        return models.AiPhaseResult(
            status=models.AI_SUCCESS,
            ai_score=score,
            model=completion.model,
            reason=content.get("reason"),
            insights=content.get("insights"),
            attempts=completion.attempts,
        )

    def run_ai_phase(
        self,
        user_id: str,
        raw: Dict[str, Any],
        profile: NormalizedProfile,
        logic_score: float,
        persona: str,
        behaviors: List[str],
        hints: Dict[str, Optional[str]],
    ) -> models.AiPhaseResult:
        if not self.config.scoring.ai_enabled or self.chat_client is None:
            return models.AiPhaseResult(status=models.AI_DISABLED)

        if self.breaker and not self.breaker.allows(user_id):
            return models.AiPhaseResult(status=models.AI_CIRCUIT_OPEN)

        defaults = default_hints(raw)
        messages = build_refinement_messages(
            profile.to_dict(),
            logic_score,
            persona,
            behaviors,
            physical=hints.get("physical") or defaults["physical"],
            mental=hints.get("mental") or defaults["mental"],
            description=hints.get("description") or defaults["description"],
        )

        cancel_event = threading.Event()
        started = threading.Event()
        future = self.executor.submit(self._refine, user_id, messages, cancel_event, started)
        timeout = self.config.scoring.ai_phase_timeout_seconds
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            cancel_event.set()
            future.cancel()
            if not started.is_set():
                # Still queued behind busy workers; no request was sent
                logger.warning(f"AI phase for {user_id} queued past {timeout}s; using logic score")
                return models.AiPhaseResult(status=models.AI_TIMEOUT)
            logger.warning(f"AI phase for {user_id} timed out after {timeout}s; using logic score")
            if self.breaker:
                self.breaker.record_failure(user_id)
            return models.AiPhaseResult(status=models.AI_TIMEOUT)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def score_user(
        self,
        user_id: str,
        physical: Optional[str] = None,
        mental: Optional[str] = None,
        description: Optional[str] = None,
    ) -> models.QCSResult:
        """
        Compute and persist the QCS for one user.

        Raises:
            ProfileNotFoundError: no profile for user_id
            PersistenceError: the profile could not be read
        """
        raw = self.load_profile(user_id)
        profile = normalize_profile(raw, self.tables)

        logic = compute_logic_score(profile, self.tables, self.config.scoring)
        persona = classify_persona(profile, self.tables)
        psychology = compute_big5(profile, self.tables)
        behaviors = describe_behaviors(logic.per_category)
        logger.info(f"Local psychology assessment for user {user_id}: score={psychology.score}")

        ai = self.run_ai_phase(
            user_id, raw, profile, logic.score, persona, behaviors,
            {"physical": physical, "mental": mental, "description": description},
        )

        logic_score = validate_score(logic.score)
        total_score = blend_score(logic.score, ai.ai_score, self.config.blend)
        components = compute_components(
            logic.per_category, self.config.scoring.category_weights, raw.get("reports_count")
        )

        result = models.QCSResult(
            user_id=user_id,
            total_score=total_score,
            logic_score=logic_score,
            ai_score=ai.ai_score,
            components=components,
            raw_logic_score=logic.score,
            per_category=logic.per_category,
            persona=persona,
            behaviors=behaviors,
            psychology=psychology.to_dict(),
            ai=ai,
            computed_at=utcnow(),
            version=self.config.scoring.version,
        )
        result.persistence = save_qcs_result(self.uow_factory, result)

        logger.info(
            f"QCS calculated for {user_id}: Logic={logic_score}, AI={ai.ai_score}, Final={total_score} "
            f"(Profile: {components.profile_score}, College: {components.college_tier}, "
            f"Personality: {components.personality_depth}, Behavior: {components.behavior_score}) "
            f"| AI status: {ai.status} | persistence: {result.persistence}"
        )
        return result

    def get_record(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Persisted QCS record for a user, or None if never scored."""
        try:
            with self.uow_factory() as repo:
                record = repo.qcs.get_by_user_id(user_id)
                if record is None:
                    return None
                return {
                    "user_id": record.user_id,
                    "total_score": record.total_score,
                    "logic_score": record.logic_score,
                    "ai_score": record.ai_score,
                    "profile_score": record.profile_score,
                    "college_tier": record.college_tier,
                    "personality_depth": record.personality_depth,
                    "behavior_score": record.behavior_score,
                    "per_category": record.per_category or {},
                    "ai_meta": record.ai_meta,
                    "last_computed_at": record.last_computed_at.isoformat() if record.last_computed_at else None,
                }
        except SQLAlchemyError as e:
            logger.error(f"Failed to read QCS record for {user_id}: {e}")
            raise PersistenceError(f"Could not read QCS record for user {user_id}") from e

    def sync_users(self, limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
        """Recompute the QCS for a page of active profiles."""
        try:
            with self.uow_factory() as repo:
                user_ids = repo.profiles.get_active_user_ids(limit=limit, offset=offset)
        except SQLAlchemyError as e:
            raise PersistenceError("Could not list active profiles") from e

        logger.info(f"Starting QCS sync for {len(user_ids)} profiles")
        results = []
        for user_id in user_ids:
            try:
                result = self.score_user(user_id)
                results.append({
                    "user_id": user_id,
                    "success": True,
                    "total_score": result.total_score,
                    "persistence": result.persistence,
                })
            except Exception as e:
                logger.exception(f"QCS sync failed for {user_id}")
                results.append({"user_id": user_id, "success": False, "error": str(e)})

        succeeded = sum(1 for r in results if r["success"])
        logger.info(f"QCS sync complete: {succeeded}/{len(results)} succeeded")
        return results

    def shutdown(self) -> None:
        self.executor.shutdown(wait=False, cancel_futures=True)


def _summarize_error(last_error: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not last_error:
        return None
    summary = {k: v for k, v in last_error.items() if k in ("status", "reason", "model", "error")}
    raw = last_error.get("raw")
    if raw:
        summary["raw"] = raw[:200]
    return summary
