"""Schemas for behaviour analysis, micro-adjustments and coach messages."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from weekplan.api.schemas.task import Task

TimeSlot = Literal["morning", "afternoon", "evening"]
SkipPattern = Literal["none", "difficulty", "late_night", "random"]
AdjustmentType = Literal[
    "shorten_session",
    "add_break",
    "reduce_difficulty",
    "reschedule",
    "motivational",
    "swap_task",
]
Impact = Literal["low", "medium", "high"]
CoachMessageType = Literal["celebration", "encouragement", "feedback", "suggestion", "warning"]


class BehaviorSnapshot(BaseModel):
    avg_completion_minutes: int
    preferred_time_slot: TimeSlot
    skip_pattern: SkipPattern
    streak_days: int = Field(..., ge=0)


class BehaviorPattern(BaseModel):
    id: str
    type: Literal[
        "productivity_peak",
        "completion_rate",
        "skip_pattern",
        "focus_duration",
        "break_pattern",
        "low_energy",
        "streak",
        "focus_champion",
    ]
    title: str
    description: str
    insight: str
    confidence: float = Field(..., ge=0, le=1)
    detected_at: datetime
    data_points: int = Field(..., ge=0)


class DailyInsight(BaseModel):
    date: date
    tasks_completed: int
    tasks_total: int
    completion_rate: int
    focus_minutes: int
    streak_days: int
    mood: Literal["great", "good", "okay", "low", "tired", "stressed"]
    energy_level: Literal["high", "medium", "low"]


class BehaviorAnalysisResponse(BaseModel):
    behavior: BehaviorSnapshot
    patterns: List[BehaviorPattern]
    insights: DailyInsight
    recommendations: List[str]
    request_id: str


class MicroAdjustment(BaseModel):
    id: str
    type: AdjustmentType
    title: str
    description: str
    reason: str
    impact: Impact
    applied: bool = False
    suggested_at: datetime
    applied_at: Optional[datetime] = None


class AdjustmentApplyRequest(BaseModel):
    adjustment_id: str = Field(..., min_length=1)


class AdjustmentApplyResponse(BaseModel):
    adjustment: MicroAdjustment
    tasks: List[Task]
    message: str
    request_id: str


class AdjustmentListResponse(BaseModel):
    adjustments: List[MicroAdjustment]
    request_id: str


class CoachMessage(BaseModel):
    id: str
    message: str
    type: CoachMessageType
    timestamp: datetime
    related_task_id: Optional[str] = None
    related_goal_id: Optional[str] = None
