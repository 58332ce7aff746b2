import uuid

from sqlalchemy import Column, Text, Boolean, Integer, Float, Date, TIMESTAMP, ForeignKey, UniqueConstraint, Index, func
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import UUID, JSONB, ARRAY

from .base import Base


class Profile(Base):
    """
    Dating profile as captured by the app.

    List-like fields (traits, values, interests...) are stored as JSONB and
    may hold a native list, a JSON-encoded string or a delimited string;
    the scorer normalizes them on read.
    """
    __tablename__ = 'profiles'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, unique=True)

    # Demographic
    gender = Column(Text)
    date_of_birth = Column(Date)
    year_of_study = Column(Text)
    field_of_study = Column(Text)
    college_tier = Column(Text)

    # Physical
    height = Column(Float)
    body_type = Column(Text)
    skin_tone = Column(Text)

    # Psychological
    personality_traits = Column(JSONB)
    personality_type = Column(Text)
    values = Column(JSONB)
    mindset = Column(JSONB)
    relationship_goals = Column(JSONB)
    interests = Column(JSONB)
    lifestyle = Column(JSONB)
    bio = Column(Text)

    is_active = Column(Boolean, nullable=False, default=True)
    reports_count = Column(Integer, nullable=False, default=0)

    # Denormalized QCS summary, written with the QCS record
    total_qcs = Column(Integer)
    qcs_synced_at = Column(TIMESTAMP(timezone=True))

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"), onupdate=func.now())

    __table_args__ = (
        Index('idx_profiles_active_gender', 'is_active', 'gender'),
        Index('idx_profiles_dob', 'date_of_birth'),
    )


class PartnerPreference(Base):
    __tablename__ = 'partner_preferences'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, ForeignKey('profiles.user_id', ondelete='CASCADE'), nullable=False, unique=True)
    preferred_gender = Column(ARRAY(Text))
    age_range_min = Column(Integer)
    age_range_max = Column(Integer)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"), onupdate=func.now())


class Block(Base):
    """`user_id` has blocked `blocked_user_id`."""
    __tablename__ = 'blocks'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, ForeignKey('profiles.user_id', ondelete='CASCADE'), nullable=False)
    blocked_user_id = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))

    __table_args__ = (
        UniqueConstraint('user_id', 'blocked_user_id', name='uq_blocks_user_blocked'),
        Index('idx_blocks_user', 'user_id'),
    )
