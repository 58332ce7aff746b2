"""Domain errors raised by the scoring and matching services."""


class QCSError(Exception):
    """Base class for scoring/matching failures the HTTP layer maps to a status."""


class ProfileNotFoundError(QCSError):
    def __init__(self, user_id: str):
        super().__init__(f"Profile not found for user {user_id}")
        self.user_id = user_id


class PersistenceError(QCSError):
    """The database could not be read; the request cannot be scored."""
