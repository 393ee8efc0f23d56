"""Schemas for calendar and fitness integrations."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class CalendarEvent(BaseModel):
    """A busy interval. ``start``/``end`` are ISO dates or ISO datetimes as sent by the provider."""

    id: str
    title: str = "Untitled Event"
    start: str
    end: str
    type: Literal["deadline", "meeting", "reminder", "blocked"] = "blocked"
    source: Literal["google", "outlook", "manual"] = "manual"
    color: Optional[str] = None

    @field_validator("start", "end")
    @classmethod
    def _check_iso(cls, value: str) -> str:
        if "T" in value:
            datetime.fromisoformat(value)
        else:
            date.fromisoformat(value)
        return value


class CalendarEventsRequest(BaseModel):
    events: List[CalendarEvent]


class CalendarEventsResponse(BaseModel):
    events: List[CalendarEvent]
    request_id: str


class CalendarPushRequest(BaseModel):
    task_ids: Optional[List[str]] = None


class CalendarPushResponse(BaseModel):
    pushed_count: int
    events: List[CalendarEvent]
    message: str
    request_id: str


class FitnessSample(BaseModel):
    date: date
    steps: int = Field(default=0, ge=0)
    steps_goal: int = Field(default=5000, ge=0)
    active_minutes: int = Field(default=0, ge=0)
    calories_burned: int = Field(default=0, ge=0)
    distance_km: float = Field(default=0.0, ge=0)
    heart_rate_avg: Optional[int] = None
    sleep_hours: Optional[float] = Field(default=None, ge=0)
    sleep_quality: Optional[Literal["poor", "fair", "good", "excellent"]] = None


class FitnessUpdateRequest(BaseModel):
    steps: int = Field(..., ge=0)


class FitnessResponse(BaseModel):
    today: Optional[FitnessSample]
    history: List[FitnessSample]
    request_id: str
