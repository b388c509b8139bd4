from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint

from fit360.core.db import Base


class Metric(Base):
    """
    One numeric measurement per (user, type, source, timestamp).

    Re-syncing the same day overwrites the value and raw payload in place.
    """

    __tablename__ = "metrics"
    __table_args__ = (
        UniqueConstraint("user_id", "type", "source", "timestamp", name="uq_metric_user_type_source_ts"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(String(64), nullable=False, index=True)  # sleep_score, steps, ...
    source = Column(String(32), nullable=False)  # "oura"
    timestamp = Column(DateTime, nullable=False, index=True)

    value = Column(Float)
    value_json = Column(JSON)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
