"""
Per-user circuit breaker for the AI phase.

State lives in the ai_request_failures table so every worker sees the same
backoff window; increments and resets are single SQL statements.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, ContextManager, Optional

from sqlalchemy.exc import SQLAlchemyError

from core.config_loader import CircuitBreakerConfig
from database.repository import ScoringRepository

logger = logging.getLogger(__name__)


class UserCircuitBreaker:
    """
    Gate AI calls per user with exponential backoff after failures.

    Storage problems are logged and treated as "closed": a broken breaker
    table must never fail or block scoring.
    """

    def __init__(
        self,
        uow_factory: Callable[[], ContextManager[ScoringRepository]],
        config: Optional[CircuitBreakerConfig] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.uow_factory = uow_factory
        self.config = config or CircuitBreakerConfig()
        self.clock = clock

    def next_allowed_at(self, user_id: str) -> Optional[datetime]:
        try:
            with self.uow_factory() as repo:
                state = repo.ai_failures.get_state(user_id)
                return state.next_allowed_at if state else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read AI failure state for {user_id}: {e}")
            return None

    def allows(self, user_id: str) -> bool:
        """False while the user's backoff window is open."""
        if not self.config.enabled:
            return True

        next_allowed = self.next_allowed_at(user_id)
        if next_allowed is None:
            return True

        if next_allowed.tzinfo is None:
            next_allowed = next_allowed.replace(tzinfo=timezone.utc)

        if next_allowed > self.clock():
            logger.info(f"AI request blocked by circuit breaker for {user_id}, next allowed: {next_allowed.isoformat()}")
            return False
        return True

    def record_success(self, user_id: str) -> None:
        if not self.config.enabled:
            return
        try:
            with self.uow_factory() as repo:
                repo.ai_failures.reset(user_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to reset AI failures for {user_id}: {e}")

    def record_failure(self, user_id: str) -> None:
        if not self.config.enabled:
            return
        try:
            with self.uow_factory() as repo:
                count, next_allowed = repo.ai_failures.record_failure(
                    user_id,
                    self.config.base_delay_seconds,
                    self.config.max_delay_seconds,
                )
            logger.warning(f"AI failure #{count} recorded for {user_id}; next attempt allowed at {next_allowed}")
        except SQLAlchemyError as e:
            logger.error(f"Failed to record AI failure for {user_id}: {e}")


def backoff_delay_seconds(failure_count: int, config: Optional[CircuitBreakerConfig] = None) -> int:
    """Delay applied after the given number of consecutive failures."""
    config = config or CircuitBreakerConfig()
    if failure_count <= 0:
        return 0
    return min(config.max_delay_seconds, config.base_delay_seconds * 2 ** (failure_count - 1))
