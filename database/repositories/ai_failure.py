import logging
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.dialects.postgresql import insert

from database.models import AiRequestFailure
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class AiFailureRepository(BaseRepository):
    def get_state(self, user_id: str) -> Optional[AiRequestFailure]:
        stmt = select(AiRequestFailure).where(AiRequestFailure.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def reset(self, user_id: str) -> int:
        stmt = (
            update(AiRequestFailure)
            .where(AiRequestFailure.user_id == user_id)
            .values(failure_count=0, next_allowed_at=None, updated_at=func.now())
        )
        return self.db.execute(stmt).rowcount

    def record_failure(
        self,
        user_id: str,
        base_delay_seconds: int,
        max_delay_seconds: int,
    ) -> Tuple[int, Optional[datetime]]:
        """
        Increment the failure count and push next_allowed_at out, in one statement.

        The new delay is min(max, base * 2 ** (new_count - 1)); since the
        existing count is new_count - 1, the conflict branch uses
        base * 2 ** failure_count.
        """
        first_delay = min(base_delay_seconds, max_delay_seconds)
        backoff_seconds = func.least(
            max_delay_seconds,
            base_delay_seconds * func.power(2, AiRequestFailure.failure_count),
        )
        stmt = insert(AiRequestFailure).values(
            user_id=user_id,
            failure_count=1,
            next_allowed_at=func.now() + func.make_interval(0, 0, 0, 0, 0, 0, first_delay),
        ).on_conflict_do_update(
            index_elements=['user_id'],
            set_={
                'failure_count': AiRequestFailure.failure_count + 1,
                'next_allowed_at': func.now() + func.make_interval(0, 0, 0, 0, 0, 0, backoff_seconds),
                'updated_at': func.now(),
            },
        ).returning(AiRequestFailure.failure_count, AiRequestFailure.next_allowed_at)
        row = self.db.execute(stmt).one()
        return row.failure_count, row.next_allowed_at
