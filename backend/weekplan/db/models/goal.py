"""Goal ORM model."""
from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, Integer, Text, text as sa_text

from weekplan.db.base import Base
from weekplan.db.types import UTCDateTime


class Goal(Base):
    __tablename__ = "goals"

    id = Column(Text, primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(Text, nullable=False)
    priority = Column(Text, nullable=False, server_default="medium")
    target_weeks = Column(Integer, nullable=False, default=4)
    target_value = Column(Integer, nullable=True)
    current_value = Column(Integer, nullable=True)
    unit = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False)
    deadline = Column(Date, nullable=True)
    is_recurring = Column(Boolean, nullable=False, server_default=sa_text("false"))
    color = Column(Text, nullable=False, default="#6366f1")
