"""Schemas for the user's time preferences."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from weekplan.api.schemas.common import ClockTime


class TimeWindow(BaseModel):
    start: ClockTime
    end: ClockTime


class UserPreferences(BaseModel):
    preferred_session_length: int = Field(default=45, gt=0, le=240)
    break_duration: int = Field(default=10, ge=0, le=120)
    focus_time_start: ClockTime = "18:00"
    focus_time_end: ClockTime = "22:00"
    notifications_enabled: bool = True


class UserProfile(BaseModel):
    id: str = "user-1"
    name: str = "Demo User"
    email: Optional[str] = None
    college_hours: TimeWindow = Field(default_factory=lambda: TimeWindow(start="08:00", end="17:00"))
    sleep_hours: TimeWindow = Field(default_factory=lambda: TimeWindow(start="23:00", end="06:00"))
    daily_available_minutes: int = Field(default=180, ge=0)
    preferences: UserPreferences = Field(default_factory=UserPreferences)
