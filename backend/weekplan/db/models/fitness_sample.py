"""Daily fitness sample ORM model."""
from __future__ import annotations

from sqlalchemy import Column, Date, Float, Integer, Text

from weekplan.db.base import Base


class FitnessSample(Base):
    __tablename__ = "fitness_samples"

    date = Column(Date, primary_key=True)
    steps = Column(Integer, nullable=False, default=0)
    steps_goal = Column(Integer, nullable=False, default=5000)
    active_minutes = Column(Integer, nullable=False, default=0)
    calories_burned = Column(Integer, nullable=False, default=0)
    distance_km = Column(Float, nullable=False, default=0.0)
    heart_rate_avg = Column(Integer, nullable=True)
    sleep_hours = Column(Float, nullable=True)
    sleep_quality = Column(Text, nullable=True)
