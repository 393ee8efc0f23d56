from __future__ import annotations

from datetime import date

import pytest

from weekplan.api.schemas.integrations import CalendarEvent
from weekplan.core.errors import InvalidTimeError, PlanInputError
from weekplan.services.time_slots import (
    add_minutes,
    date_for_day_offset,
    event_window,
    format_minutes,
    has_conflict,
    hour_of,
    parse_time,
)

TODAY = date(2025, 1, 6)


def _event(start: str, end: str) -> CalendarEvent:
    return CalendarEvent(id="evt-1", title="Lab", start=start, end=end)


def test_parse_time_returns_minutes_since_midnight() -> None:
    assert parse_time("00:00") == 0
    assert parse_time("18:30") == 1110
    assert parse_time("23:59") == 1439


@pytest.mark.parametrize("value", ["24:00", "12:60", "7:5", "noon", "", None])
def test_parse_time_rejects_malformed_values(value) -> None:
    with pytest.raises(InvalidTimeError):
        parse_time(value)


def test_invalid_time_error_is_an_input_error() -> None:
    with pytest.raises(PlanInputError):
        parse_time("25:00")


def test_format_and_add_minutes_wrap_around_midnight() -> None:
    assert format_minutes(1500) == "01:00"
    assert add_minutes("23:30", 45) == "00:15"
    assert add_minutes("10:00", -30) == "09:30"
    assert add_minutes("10:00", 0) == "10:00"
    assert hour_of("21:45") == 21


def test_date_for_day_offset() -> None:
    assert date_for_day_offset(0, TODAY) == TODAY
    assert date_for_day_offset(6, TODAY) == date(2025, 1, 12)


def test_event_without_time_spans_whole_day() -> None:
    assert event_window(_event("2025-01-07", "2025-01-07")) == (date(2025, 1, 7), "00:00", "23:59")


def test_has_conflict_uses_half_open_intervals() -> None:
    busy = [_event("2025-01-06T19:00:00", "2025-01-06T20:00:00")]

    assert has_conflict("18:30", 45, 0, busy, TODAY) is True
    assert has_conflict("19:30", 10, 0, busy, TODAY) is True
    assert has_conflict("18:00", 60, 0, busy, TODAY) is False
    assert has_conflict("20:00", 30, 0, busy, TODAY) is False


def test_has_conflict_only_checks_the_same_date() -> None:
    busy = [_event("2025-01-06T19:00:00", "2025-01-06T20:00:00")]

    assert has_conflict("19:00", 45, 1, busy, TODAY) is False


def test_all_day_event_blocks_every_slot() -> None:
    busy = [_event("2025-01-07", "2025-01-07")]

    assert has_conflict("07:00", 30, 1, busy, TODAY) is True
    assert has_conflict("21:30", 45, 1, busy, TODAY) is True
