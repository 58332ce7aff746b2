import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select

from database.models import Profile, PartnerPreference, Block
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

SCORING_FIELDS = (
    'user_id', 'gender', 'date_of_birth', 'year_of_study', 'field_of_study', 'college_tier',
    'height', 'body_type', 'skin_tone', 'personality_traits', 'personality_type', 'values',
    'mindset', 'relationship_goals', 'interests', 'lifestyle', 'bio', 'is_active', 'reports_count',
)


def profile_to_dict(profile: Profile) -> Dict[str, Any]:
    """Plain mapping of the fields the scorer and matcher read."""
    data = {name: getattr(profile, name) for name in SCORING_FIELDS}
    if isinstance(data['date_of_birth'], date):
        data['date_of_birth'] = data['date_of_birth'].isoformat()
    return data


class ProfileRepository(BaseRepository):
    def get_by_user_id(self, user_id: str) -> Optional[Profile]:
        stmt = select(Profile).where(Profile.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_active_user_ids(self, limit: int = 100, offset: int = 0) -> List[str]:
        stmt = (
            select(Profile.user_id)
            .where(Profile.is_active.is_(True))
            .order_by(Profile.user_id)
            .offset(offset)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_partner_preference(self, user_id: str) -> Optional[PartnerPreference]:
        stmt = select(PartnerPreference).where(PartnerPreference.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_blocked_user_ids(self, user_id: str) -> List[str]:
        stmt = select(Block.blocked_user_id).where(Block.user_id == user_id)
        return list(self.db.execute(stmt).scalars().all())

    def get_candidate_pool(
        self,
        requester_id: str,
        genders: Optional[Sequence[str]] = None,
        exclude_user_ids: Optional[Sequence[str]] = None,
        born_after: Optional[date] = None,
        born_before: Optional[date] = None,
        limit: int = 500,
    ) -> List[Profile]:
        """
        Active profiles other than the requester, narrowed by the requester's
        gender preference, block list and date-of-birth window.

        born_after / born_before are inclusive bounds derived from the
        preferred age range; rows without a date of birth are dropped when
        either bound is given.
        """
        stmt = select(Profile).where(
            Profile.is_active.is_(True),
            Profile.user_id != requester_id,
        )

        if genders:
            stmt = stmt.where(Profile.gender.in_(list(genders)))

        if exclude_user_ids:
            stmt = stmt.where(Profile.user_id.not_in(list(exclude_user_ids)))

        if born_after is not None:
            stmt = stmt.where(Profile.date_of_birth >= born_after)

        if born_before is not None:
            stmt = stmt.where(Profile.date_of_birth <= born_before)

        stmt = stmt.order_by(Profile.user_id).limit(limit)
        return list(self.db.execute(stmt).scalars().all())
