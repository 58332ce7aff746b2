#!/usr/bin/env python3
"""
Matching Service - rank compatible profiles for a user.

Performs one candidate-pool query (active, gender, block list and
date-of-birth window pushed into SQL), one block-list query and one
batched QCS lookup, then hands the rows to the pure ranking engine.
"""
from datetime import date
from typing import Callable, ContextManager, List, Optional, Tuple
import logging

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import SQLAlchemyError

from core.config_loader import MatchingConfig
from core.errors import ProfileNotFoundError, PersistenceError
from core.matcher.models import MatchCandidate, MatchPreferences
from core.matcher.ranking import rank_candidates, valid_genders
from database.repositories import profile_to_dict
from database.repository import ScoringRepository

logger = logging.getLogger(__name__)


def birth_date_bounds(
    preferences: MatchPreferences,
    today: Optional[date] = None,
) -> Tuple[Optional[date], Optional[date]]:
    """
    Inclusive date-of-birth window for an age range.

    Someone aged max_age was born after today - (max_age + 1) years;
    someone aged min_age was born on or before today - min_age years.
    """
    today = today or date.today()
    born_after = None
    born_before = None
    if preferences.age_range_max is not None:
        born_after = today - relativedelta(years=preferences.age_range_max + 1) + relativedelta(days=1)
    if preferences.age_range_min is not None:
        born_before = today - relativedelta(years=preferences.age_range_min)
    return born_after, born_before


class MatchingService:
    """
    Service for ranked match retrieval.
    """

    def __init__(
        self,
        uow_factory: Callable[[], ContextManager[ScoringRepository]],
        config: Optional[MatchingConfig] = None,
    ):
        self.uow_factory = uow_factory
        self.config = config or MatchingConfig()

    def effective_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.config.default_limit
        return max(1, min(limit, self.config.max_limit))

    def get_matches(self, user_id: str, limit: Optional[int] = None, today: Optional[date] = None) -> List[MatchCandidate]:
        """
        Top-K candidates for user_id by compatibility score.

        Raises:
            ProfileNotFoundError: the requester has no profile
            PersistenceError: the database could not be read
        """
        limit = self.effective_limit(limit)
        try:
            with self.uow_factory() as repo:
                requester = repo.profiles.get_by_user_id(user_id)
                if requester is None:
                    raise ProfileNotFoundError(user_id)
                requester_data = profile_to_dict(requester)

                pref_row = repo.profiles.get_partner_preference(user_id)
                preferences = MatchPreferences(
                    preferred_gender=list(pref_row.preferred_gender or []),
                    age_range_min=pref_row.age_range_min,
                    age_range_max=pref_row.age_range_max,
                ) if pref_row else MatchPreferences()

                blocked_ids = repo.profiles.get_blocked_user_ids(user_id)
                born_after, born_before = birth_date_bounds(preferences, today)

                pool = repo.profiles.get_candidate_pool(
                    requester_id=user_id,
                    genders=valid_genders(preferences),
                    exclude_user_ids=blocked_ids,
                    born_after=born_after,
                    born_before=born_before,
                    limit=self.config.candidate_pool_size,
                )
                candidates = [profile_to_dict(p) for p in pool]
                qcs_scores = repo.qcs.get_total_scores([c['user_id'] for c in candidates])
        except SQLAlchemyError as e:
            logger.error(f"Failed to load match candidates for {user_id}: {e}")
            raise PersistenceError(f"Could not read match candidates for user {user_id}") from e

        matches = rank_candidates(
            requester_data,
            candidates,
            blocked_ids=blocked_ids,
            preferences=preferences,
            qcs_scores=qcs_scores,
            limit=limit,
            config=self.config,
            today=today,
        )
        logger.info(f"Ranked {len(matches)} of {len(candidates)} candidates for {user_id}")
        return matches
