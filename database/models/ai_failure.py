from sqlalchemy import Column, Text, Integer, TIMESTAMP
from sqlalchemy.sql import text as sql_text

from .base import Base


class AiRequestFailure(Base):
    """
    Per-user AI circuit-breaker state.

    Created on the first failure, reset to (0, NULL) on success. While
    next_allowed_at is in the future the AI phase is skipped for the user.
    """
    __tablename__ = 'ai_request_failures'

    user_id = Column(Text, primary_key=True)
    failure_count = Column(Integer, nullable=False, default=0)
    next_allowed_at = Column(TIMESTAMP(timezone=True), nullable=True)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))
