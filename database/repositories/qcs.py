import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from sqlalchemy import select, update, func
from sqlalchemy.dialects.postgresql import insert

from database.models import QCSRecord, Profile
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class QCSRepository(BaseRepository):
    def get_by_user_id(self, user_id: str) -> Optional[QCSRecord]:
        stmt = select(QCSRecord).where(QCSRecord.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_total_scores(self, user_ids: Sequence[str]) -> Dict[str, int]:
        """Batched lookup of persisted total scores keyed by user id."""
        if not user_ids:
            return {}
        stmt = select(QCSRecord.user_id, QCSRecord.total_score).where(
            QCSRecord.user_id.in_(list(user_ids))
        )
        return {row.user_id: row.total_score for row in self.db.execute(stmt)}

    def atomic_update(
        self,
        user_id: str,
        total_score: int,
        logic_score: int,
        ai_score: Optional[int],
        ai_meta: Optional[Dict[str, Any]],
        per_category: Dict[str, float],
        total_score_float: float,
        components: Dict[str, int],
    ) -> Any:
        """Write the QCS row and the profile summary in one stored-function call."""
        stmt = select(func.atomic_qcs_update(
            user_id,
            total_score,
            logic_score,
            ai_score,
            json.dumps(ai_meta) if ai_meta is not None else None,
            json.dumps(per_category),
            total_score_float,
            components['profile_score'],
            components['college_tier'],
            components['personality_depth'],
            components['behavior_score'],
        ))
        return self.db.execute(stmt).scalar()

    def upsert_record(
        self,
        user_id: str,
        profile_score: int,
        college_tier: int,
        personality_depth: int,
        behavior_score: int,
        total_score: int,
        logic_score: int,
        ai_score: Optional[int],
        per_category: Dict[str, float],
        ai_meta: Optional[Dict[str, Any]] = None,
        total_score_float: Optional[float] = None,
    ) -> None:
        values = {
            'profile_score': profile_score,
            'college_tier': college_tier,
            'personality_depth': personality_depth,
            'behavior_score': behavior_score,
            'total_score': total_score,
            'logic_score': logic_score,
            'ai_score': ai_score,
            'per_category': per_category,
            'ai_meta': ai_meta,
            'total_score_float': total_score_float if total_score_float is not None else float(total_score),
            'last_computed_at': datetime.now(timezone.utc),
        }
        stmt = insert(QCSRecord).values(user_id=user_id, **values).on_conflict_do_update(
            index_elements=['user_id'],
            set_=values,
        )
        self.db.execute(stmt)

    def update_profile_summary(self, user_id: str, total_score: int) -> int:
        stmt = (
            update(Profile)
            .where(Profile.user_id == user_id)
            .values(total_qcs=total_score, qcs_synced_at=datetime.now(timezone.utc))
        )
        return self.db.execute(stmt).rowcount
