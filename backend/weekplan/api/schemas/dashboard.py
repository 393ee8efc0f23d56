"""Schemas for dashboard endpoint."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from weekplan.api.schemas.agent_log import AgentAction, ReasoningStep
from weekplan.api.schemas.coaching import BehaviorSnapshot, CoachMessage, MicroAdjustment
from weekplan.api.schemas.goal import Goal
from weekplan.api.schemas.integrations import CalendarEvent, FitnessSample
from weekplan.api.schemas.task import Task


class DayStats(BaseModel):
    day_index: int
    total: int
    completed: int
    minutes: int


class GoalProgress(BaseModel):
    goal_id: str
    title: str
    current_value: int
    target_value: Optional[int]
    percent: int


class DashboardResponse(BaseModel):
    goals: List[Goal]
    tasks: List[Task]
    today_tasks: List[Task]
    today_completion_percent: int
    week: List[DayStats]
    goal_progress: List[GoalProgress]
    behavior: BehaviorSnapshot
    pending_adjustments: List[MicroAdjustment]
    latest_coach_message: Optional[CoachMessage]
    reasoning_steps: List[ReasoningStep]
    agent_actions: List[AgentAction]
    fitness_today: Optional[FitnessSample]
    calendar_events: List[CalendarEvent]
    request_id: str
