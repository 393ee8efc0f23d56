"""Schemas for planning and replanning endpoints."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from weekplan.api.schemas.agent_log import ReasoningStep
from weekplan.api.schemas.coaching import BehaviorPattern, BehaviorSnapshot, CoachMessage, DailyInsight, MicroAdjustment
from weekplan.api.schemas.goal import Goal, GoalInput
from weekplan.api.schemas.profile import UserProfile
from weekplan.api.schemas.task import Task


class PlanRequest(BaseModel):
    goals: List[GoalInput] = Field(default_factory=list, max_length=10)
    profile: Optional[UserProfile] = None
    # None defers to the AI_GENERATION_ENABLED setting.
    use_ai: Optional[bool] = None


class PlanResponse(BaseModel):
    goals: List[Goal]
    tasks: List[Task]
    reasoning_steps: List[ReasoningStep]
    ai_powered: bool
    message: str
    request_id: str


class ReplanResponse(BaseModel):
    updated_tasks: List[Task]
    completion_percent: int
    coach_message: CoachMessage
    diff_summary: str
    micro_adjustments: List[MicroAdjustment]
    reasoning_steps: List[ReasoningStep]
    behavior: BehaviorSnapshot
    behavior_patterns: List[BehaviorPattern]
    behavior_insight: DailyInsight
    recommendations: List[str]
    goals: List[Goal]
    request_id: str
