import contextlib
import logging
from typing import Callable, Iterator, Optional

from sqlalchemy.orm import Session

from database.database import new_session
from database.repository import ScoringRepository

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def scoring_uow(session_factory: Optional[Callable[[], Session]] = None) -> Iterator[ScoringRepository]:
    """Per-unit-of-work transaction scope.

    Yields a ScoringRepository bound to a fresh Session. Commits on success,
    rolls back on exception, always closes.

    Usage:
        with scoring_uow() as repo:
            profile = repo.profiles.get_by_user_id(user_id)
        # commit happens automatically on successful exit
    """
    session = (session_factory or new_session)()
    try:
        yield ScoringRepository(session)
        session.commit()
    except Exception as e:
        logger.debug(f"Rolling back unit of work: {e}")
        session.rollback()
        raise
    finally:
        session.close()
