"""Agent action log ORM model.

One journal for everything the agent records: plan snapshots, reasoning
steps, coach messages and agent actions, distinguished by ``action_type``.
"""
from __future__ import annotations

from sqlalchemy import Column, Index, Integer, Text, func

from weekplan.db.base import Base
from weekplan.db.types import JSONBCompat, UTCDateTime


class AgentActionLog(Base):
    __tablename__ = "agent_actions_log"
    __table_args__ = (Index("ix_agent_actions_log_action_type", "action_type"),)

    # Autoincrement keeps journal order stable within the same second.
    id = Column(Integer, primary_key=True, autoincrement=True)
    action_type = Column(Text, nullable=False)
    action_payload = Column(JSONBCompat, nullable=False, default=dict)
    reason = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, server_default=func.now())
