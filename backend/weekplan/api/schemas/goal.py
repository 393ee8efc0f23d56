"""Schemas for user goals."""
from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

GoalCategory = Literal["Study", "Fitness", "Project", "Health", "Career", "Personal"]
GoalPriority = Literal["high", "medium", "low"]


class Goal(BaseModel):
    id: str
    title: str = Field(..., min_length=1)
    description: str = ""
    category: GoalCategory
    priority: GoalPriority = "medium"
    target_weeks: int = Field(default=4, ge=1)
    target_value: Optional[int] = Field(default=None, ge=0)
    current_value: Optional[int] = Field(default=None, ge=0)
    unit: Optional[str] = None
    created_at: datetime
    deadline: Optional[date] = None
    is_recurring: bool = False
    color: str = "#6366f1"


class GoalInput(BaseModel):
    """Goal as submitted by the setup flow, before ids and defaults are assigned."""

    title: str = Field(..., min_length=1)
    description: str = ""
    category: GoalCategory = "Study"
    priority: GoalPriority = "high"
    target_weeks: int = Field(default=4, ge=1)
    target_value: Optional[int] = Field(default=None, ge=0)
    unit: Optional[str] = None
