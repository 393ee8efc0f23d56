from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from weekplan.api.schemas.goal import Goal
from weekplan.api.schemas.task import Task
from weekplan.services.identifiers import sequential_ids
from weekplan.store.memory import InMemoryPlannerStore

TODAY = date(2025, 1, 6)
NOW = datetime(2025, 1, 6, 21, 0, tzinfo=timezone.utc)


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def ids():
    return sequential_ids()


@pytest.fixture()
def store() -> InMemoryPlannerStore:
    return InMemoryPlannerStore()


@pytest.fixture()
def make_goal():
    def factory(goal_id: str = "goal-1", category: str = "Study", **overrides) -> Goal:
        values = {
            "id": goal_id,
            "title": overrides.pop("title", f"{category} goal"),
            "category": category,
            "created_at": NOW,
        }
        values.update(overrides)
        return Goal(**values)

    return factory


@pytest.fixture()
def make_task():
    def factory(
        task_id: str,
        day_index: int = 0,
        status: str = "pending",
        start_time: str = "18:00",
        minutes: int = 45,
        difficulty: str = "medium",
        goal_id: str = "goal-1",
        **overrides,
    ) -> Task:
        values = {
            "id": task_id,
            "goal_id": goal_id,
            "title": f"Task {task_id}",
            "day_index": day_index,
            "scheduled_date": TODAY + timedelta(days=day_index),
            "estimated_minutes": minutes,
            "start_time": start_time,
            "status": status,
            "difficulty": difficulty,
        }
        values.update(overrides)
        return Task(**values)

    return factory
