"""Micro-adjustment ORM model."""
from __future__ import annotations

from sqlalchemy import Boolean, Column, Integer, Text, text as sa_text

from weekplan.db.base import Base
from weekplan.db.types import UTCDateTime


class MicroAdjustment(Base):
    __tablename__ = "micro_adjustments"

    id = Column(Text, primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    type = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    reason = Column(Text, nullable=False)
    impact = Column(Text, nullable=False)
    applied = Column(Boolean, nullable=False, server_default=sa_text("false"))
    suggested_at = Column(UTCDateTime, nullable=False)
    applied_at = Column(UTCDateTime, nullable=True)
