"""Schemas for scheduled tasks."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from weekplan.api.schemas.common import ClockTime, DayIndex

TaskStatus = Literal["pending", "in_progress", "done", "skipped", "rescheduled"]
TaskDifficulty = Literal["easy", "medium", "hard"]


class Task(BaseModel):
    id: str
    goal_id: str
    title: str
    description: str = ""
    day_index: DayIndex
    scheduled_date: date
    estimated_minutes: int = Field(..., ge=0)
    actual_minutes: Optional[int] = Field(default=None, ge=0)
    start_time: ClockTime
    end_time: Optional[ClockTime] = None
    status: TaskStatus = "pending"
    difficulty: TaskDifficulty = "medium"
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _check_consistency(self) -> "Task":
        if self.completed_at is not None and self.status != "done":
            raise ValueError("completed_at may only be set on done tasks")
        if self.end_time is not None and self.end_time <= self.start_time:
            raise ValueError("end_time must be later than start_time on the same day")
        return self


class TaskUpdateRequest(BaseModel):
    status: Optional[TaskStatus] = None
    actual_minutes: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None, max_length=500)


class TaskUpdateResponse(BaseModel):
    task: Task
    request_id: str


class TaskListResponse(BaseModel):
    tasks: List[Task]
    request_id: str
