"""Calendar event (busy interval) ORM model."""
from __future__ import annotations

from sqlalchemy import Column, Integer, Text

from weekplan.db.base import Base


class CalendarEvent(Base):
    __tablename__ = "calendar_events"

    id = Column(Text, primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    title = Column(Text, nullable=False)
    # ISO date or datetime strings exactly as the provider sent them.
    start = Column(Text, nullable=False)
    end = Column(Text, nullable=False)
    type = Column(Text, nullable=False, default="blocked")
    source = Column(Text, nullable=False, default="manual")
    color = Column(Text, nullable=True)
