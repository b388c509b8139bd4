from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from fit360.core.db import Base


class OuraPersonalInfo(Base):
    __tablename__ = "oura_personal_info"
    __table_args__ = (UniqueConstraint("user_id", name="uq_oura_personal_info_user"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    oura_user_id = Column(String)
    age = Column(Integer)
    biological_sex = Column(String(32))
    height = Column(Float)  # meters
    weight = Column(Float)  # kg
    email = Column(String)
    country = Column(String(8))
    ring_model = Column(String(64))

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class OuraWorkout(Base):
    __tablename__ = "oura_workouts"
    __table_args__ = (UniqueConstraint("user_id", "oura_workout_id", name="uq_oura_workout_user_id"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    oura_workout_id = Column(String, nullable=False)

    activity = Column(String(64))
    intensity = Column(String(16))  # easy / moderate / hard
    calories = Column(Float)
    distance = Column(Float)  # meters
    label = Column(String)
    source = Column(String(32))

    start_datetime = Column(DateTime)
    end_datetime = Column(DateTime)
    day = Column(Date, index=True)

    workout_data = Column(JSON)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class OuraSession(Base):
    """Meditation / rest / breathing session."""

    __tablename__ = "oura_sessions"
    __table_args__ = (UniqueConstraint("user_id", "oura_session_id", name="uq_oura_session_user_id"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    oura_session_id = Column(String, nullable=False)

    category = Column(String(64))
    start_datetime = Column(DateTime)
    end_datetime = Column(DateTime)
    day = Column(Date, index=True)
    average_hr = Column(Float)

    session_data = Column(JSON)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class OuraTag(Base):
    __tablename__ = "oura_tags"
    __table_args__ = (UniqueConstraint("user_id", "oura_tag_id", name="uq_oura_tag_user_id"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    oura_tag_id = Column(String, nullable=False)

    day = Column(Date, index=True)
    timestamp_utc = Column(DateTime)
    text = Column(Text)
    tags = Column(JSON)  # list of tag labels
    comment = Column(Text)

    start_datetime = Column(DateTime)
    end_datetime = Column(DateTime)
    repeat_daily = Column(Boolean)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
