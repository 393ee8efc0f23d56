"""Schemas for the agent's reasoning trail, action log and plan snapshots."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from weekplan.api.schemas.goal import Goal
from weekplan.api.schemas.task import Task

ReasoningPhase = Literal["understand", "propose", "execute", "observe", "update"]
AgentActionType = Literal[
    "analyze_goal",
    "generate_plan",
    "check_progress",
    "replan",
    "suggest_adjustment",
    "sync_calendar",
    "sync_fitness",
    "send_reminder",
    "analyze_behavior",
]


class ReasoningStep(BaseModel):
    id: str
    phase: ReasoningPhase
    title: str
    description: str
    timestamp: datetime
    data: Dict[str, Any] = Field(default_factory=dict)


class AgentAction(BaseModel):
    id: str
    type: AgentActionType
    title: Optional[str] = None
    description: Optional[str] = None
    timestamp: datetime
    input: Optional[str] = None
    output: Optional[str] = None
    status: Literal["pending", "running", "completed", "failed"] = "completed"
    duration_ms: Optional[float] = None


class PlanSnapshot(BaseModel):
    id: str
    created_at: datetime
    tasks: List[Task]
    goals: List[Goal]
    label: Literal["initial", "replan", "adjustment"]
    reason: Optional[str] = None
