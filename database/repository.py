import logging

from sqlalchemy.orm import Session

from database.repositories import ProfileRepository, QCSRepository, AiFailureRepository

logger = logging.getLogger(__name__)


class ScoringRepository:
    """
    Facade over the per-table repositories sharing one Session.

    Services receive this from `scoring_uow()` and reach the tables through
    `profiles`, `qcs` and `ai_failures`.
    """

    def __init__(self, db: Session):
        self.db = db
        self.profiles = ProfileRepository(db)
        self.qcs = QCSRepository(db)
        self.ai_failures = AiFailureRepository(db)
