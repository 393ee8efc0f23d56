"""Task ORM model."""
from __future__ import annotations

from sqlalchemy import Column, Date, ForeignKey, Index, Integer, Text

from weekplan.db.base import Base
from weekplan.db.types import UTCDateTime


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_goal_id", "goal_id"),
        Index("ix_tasks_day_index", "day_index"),
    )

    id = Column(Text, primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    goal_id = Column(Text, ForeignKey("goals.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    day_index = Column(Integer, nullable=False)
    scheduled_date = Column(Date, nullable=False)
    estimated_minutes = Column(Integer, nullable=False)
    actual_minutes = Column(Integer, nullable=True)
    # "HH:MM" wall-clock strings; day rollover is not modelled.
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default="pending")
    difficulty = Column(Text, nullable=False, default="medium")
    completed_at = Column(UTCDateTime, nullable=True)
    notes = Column(Text, nullable=True)
