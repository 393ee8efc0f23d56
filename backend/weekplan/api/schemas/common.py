"""Shared schema primitives."""
from __future__ import annotations

from typing import Annotated

from pydantic import Field

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

ClockTime = Annotated[str, Field(pattern=HHMM_PATTERN, examples=["18:00"])]
DayIndex = Annotated[int, Field(ge=0, le=6)]
