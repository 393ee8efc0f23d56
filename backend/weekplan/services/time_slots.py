"""Wall-clock arithmetic and busy-interval checks for the 7-day planning horizon."""
from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Iterable

from weekplan.api.schemas.integrations import CalendarEvent
from weekplan.core.errors import InvalidTimeError

MINUTES_PER_DAY = 24 * 60
WHOLE_DAY_START = "00:00"
WHOLE_DAY_END = "23:59"

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time(value: str) -> int:
    """Return minutes since midnight for an ``HH:MM`` string."""
    match = _CLOCK_RE.match(value or "") if isinstance(value, str) else None
    if not match:
        raise InvalidTimeError(value)
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeError(value)
    return hours * 60 + minutes


def format_minutes(total: int) -> str:
    """Render minutes since midnight as ``HH:MM``, wrapping around the clock face."""
    total %= MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def add_minutes(time: str, minutes: int) -> str:
    """Add (or subtract) minutes to a wall-clock time. Day rollover is not tracked."""
    return format_minutes(parse_time(time) + minutes)


def hour_of(time: str) -> int:
    return parse_time(time) // 60


def date_for_day_offset(offset: int, today: date | None = None) -> date:
    """Calendar date for a day index relative to ``today`` (local date by default)."""
    return (today or date.today()) + timedelta(days=offset)


def event_window(event: CalendarEvent) -> tuple[date, str, str]:
    """Return (date, start HH:MM, end HH:MM) for a busy interval.

    Events without a time component cover the whole day.
    """
    start_date, _, start_clock = event.start.partition("T")
    _, _, end_clock = event.end.partition("T")
    return (
        date.fromisoformat(start_date),
        start_clock[:5] or WHOLE_DAY_START,
        end_clock[:5] or WHOLE_DAY_END,
    )


def has_conflict(
    start_time: str,
    duration_minutes: int,
    day_offset: int,
    busy_intervals: Iterable[CalendarEvent],
    today: date | None = None,
) -> bool:
    """True when ``[start, start + duration)`` overlaps a busy interval on that day.

    Touching endpoints do not conflict.
    """
    target_date = date_for_day_offset(day_offset, today)
    start = parse_time(start_time)
    end = start + duration_minutes
    for event in busy_intervals:
        event_date, event_start, event_end = event_window(event)
        if event_date != target_date:
            continue
        if start < parse_time(event_end) and end > parse_time(event_start):
            return True
    return False
