from sqlalchemy.orm import Session


class BaseRepository:
    """Table-level queries over the Session owned by the unit of work.

    Repositories never commit; the transaction boundary is `scoring_uow()`.
    """

    def __init__(self, db: Session):
        self.db = db
