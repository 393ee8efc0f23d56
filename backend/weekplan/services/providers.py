"""Calendar and fitness provider boundary.

Providers may fail (network, credentials, bad payloads). The ``load_*``
helpers swallow those failures with a warning so planning always proceeds
with an empty busy set or no fitness data.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional, Sequence

from weekplan.api.schemas.goal import Goal
from weekplan.api.schemas.integrations import CalendarEvent, FitnessSample
from weekplan.api.schemas.task import Task
from weekplan.services.time_slots import add_minutes
from weekplan.store.base import PlannerStore

logger = logging.getLogger(__name__)

_PUSHABLE_STATUSES = frozenset({"pending", "in_progress", "rescheduled"})


class CalendarProvider(ABC):
    @abstractmethod
    def fetch_busy_intervals(self) -> List[CalendarEvent]: ...

    @abstractmethod
    def push_events(self, events: Sequence[CalendarEvent]) -> int:
        """Publish events and return how many were accepted."""


class FitnessProvider(ABC):
    @abstractmethod
    def fetch_sample(self, day: date) -> Optional[FitnessSample]: ...


class StoreCalendarProvider(CalendarProvider):
    """Calendar backed by events uploaded through the API."""

    def __init__(self, store: PlannerStore) -> None:
        self.store = store

    def fetch_busy_intervals(self) -> List[CalendarEvent]:
        return self.store.get_calendar_events()

    def push_events(self, events: Sequence[CalendarEvent]) -> int:
        self.store.append_calendar_events(events)
        return len(events)


class StoreFitnessProvider(FitnessProvider):
    def __init__(self, store: PlannerStore) -> None:
        self.store = store

    def fetch_sample(self, day: date) -> Optional[FitnessSample]:
        return self.store.get_fitness_sample(day)


def load_busy_intervals(provider: Optional[CalendarProvider]) -> List[CalendarEvent]:
    if provider is None:
        return []
    try:
        return list(provider.fetch_busy_intervals())
    except Exception as exc:
        logger.warning("Calendar provider failed; planning without busy intervals: %s", exc)
        return []


def load_fitness_sample(provider: Optional[FitnessProvider], day: date | None = None) -> Optional[FitnessSample]:
    if provider is None:
        return None
    try:
        return provider.fetch_sample(day or date.today())
    except Exception as exc:
        logger.warning("Fitness provider failed; continuing without a sample: %s", exc)
        return None


def tasks_to_calendar_events(
    tasks: Sequence[Task],
    goals: Sequence[Goal],
    task_ids: Optional[Sequence[str]] = None,
) -> List[CalendarEvent]:
    """Upcoming open tasks as calendar events, coloured by their goal."""
    colours = {goal.id: goal.color for goal in goals}
    wanted = set(task_ids) if task_ids is not None else None
    events: List[CalendarEvent] = []
    for task in tasks:
        if task.status not in _PUSHABLE_STATUSES:
            continue
        if wanted is not None and task.id not in wanted:
            continue
        end_time = task.end_time or add_minutes(task.start_time, task.estimated_minutes)
        # A session crossing midnight is clipped to the end of its own day.
        if end_time <= task.start_time:
            end_time = "23:59"
        day = task.scheduled_date.isoformat()
        events.append(
            CalendarEvent(
                id=f"event-{task.id}",
                title=task.title,
                start=f"{day}T{task.start_time}:00",
                end=f"{day}T{end_time}:00",
                type="reminder",
                source="manual",
                color=colours.get(task.goal_id),
            )
        )
    return events
