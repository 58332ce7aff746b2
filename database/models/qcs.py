import uuid

from sqlalchemy import Column, Text, Integer, Float, TIMESTAMP, ForeignKey, Index
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import UUID, JSONB

from .base import Base


class QCSRecord(Base):
    """
    Latest QCS computation for a user; overwritten on every recomputation.

    Stores:
    - Component breakdown (profile, college tier, personality depth, behavior)
    - Logic, AI and blended total scores
    - Raw per-category fractions and the AI status of the run
    """
    __tablename__ = 'qcs'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, ForeignKey('profiles.user_id', ondelete='CASCADE'), nullable=False, unique=True)

    profile_score = Column(Integer, nullable=False, default=0)
    college_tier = Column(Integer, nullable=False, default=0)
    personality_depth = Column(Integer, nullable=False, default=0)
    behavior_score = Column(Integer, nullable=False, default=0)

    logic_score = Column(Integer, nullable=False)
    ai_score = Column(Integer, nullable=True)
    total_score = Column(Integer, nullable=False)
    total_score_float = Column(Float)

    per_category = Column(JSONB, default=dict)
    ai_meta = Column(JSONB, nullable=True)

    last_computed_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))

    __table_args__ = (
        Index('idx_qcs_total_score', 'total_score'),
    )
