"""
SQLAlchemy ORM models for persistence.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Integer, JSON, Float, Numeric, String, Text

from db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WalkORM(Base):
    __tablename__ = "walks"

    id = Column(String, primary_key=True, index=True)
    dogs = Column(String, nullable=False, default="")
    duration_minutes = Column(Integer, nullable=False, default=0)
    distance_miles = Column(Float, nullable=False, default=0.0)
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    amount_due = Column(Numeric(10, 2), nullable=True)
    temperature_f = Column(Integer, nullable=True)
    weather_summary = Column(String, nullable=False, default="")
    notes = Column(Text, nullable=False, default="")
    route_points = Column(JSON, nullable=True)
    media = Column(JSON, nullable=True)
    recap_image_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
