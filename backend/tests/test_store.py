from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from weekplan.api.schemas.agent_log import AgentAction, PlanSnapshot, ReasoningStep
from weekplan.api.schemas.coaching import CoachMessage, MicroAdjustment
from weekplan.api.schemas.integrations import CalendarEvent, FitnessSample
from weekplan.store.memory import InMemoryPlannerStore
from weekplan.store.sql import SqlPlannerStore


def _sql_store() -> SqlPlannerStore:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    return SqlPlannerStore(TestingSessionLocal)


@pytest.fixture(params=["memory", "sql"])
def any_store(request):
    return InMemoryPlannerStore() if request.param == "memory" else _sql_store()


def test_tasks_round_trip_in_order(any_store, make_goal, make_task, now) -> None:
    any_store.set_goals([make_goal()])
    tasks = [make_task("b", day_index=1), make_task("a", status="done", completed_at=now, actual_minutes=30)]

    any_store.set_tasks(tasks)

    assert [task.model_dump() for task in any_store.get_tasks()] == [task.model_dump() for task in tasks]
    assert any_store.get_task("a").completed_at == now
    assert any_store.get_task("missing") is None


def test_reads_are_copies(any_store, make_goal, make_task) -> None:
    any_store.set_goals([make_goal()])
    any_store.set_tasks([make_task("a")])

    any_store.get_tasks()[0].status = "done"

    assert any_store.get_task("a").status == "pending"


def test_save_task_replaces_by_id(any_store, make_goal, make_task) -> None:
    any_store.set_goals([make_goal()])
    any_store.set_tasks([make_task("a"), make_task("b")])
    task = any_store.get_task("b")
    task.start_time = "20:00"

    any_store.save_task(task)

    assert [t.start_time for t in any_store.get_tasks()] == ["18:00", "20:00"]


def test_set_tasks_drops_missing_rows(any_store, make_goal, make_task) -> None:
    any_store.set_goals([make_goal()])
    any_store.set_tasks([make_task("a"), make_task("b")])

    any_store.set_tasks([make_task("b", start_time="19:00")])

    assert [(t.id, t.start_time) for t in any_store.get_tasks()] == [("b", "19:00")]


def test_goal_rewrite_keeps_tasks(any_store, make_goal, make_task) -> None:
    any_store.set_goals([make_goal()])
    any_store.set_tasks([make_task("a")])

    any_store.set_goals([make_goal(current_value=3)])

    assert any_store.get_goals()[0].current_value == 3
    assert len(any_store.get_tasks()) == 1


def test_adjustments(any_store, now) -> None:
    adjustment = MicroAdjustment(
        id="adj-1",
        type="add_break",
        title="Breaks",
        description="More breaks",
        reason="Tired",
        impact="medium",
        suggested_at=now,
    )
    any_store.set_adjustments([adjustment])
    adjustment.applied, adjustment.applied_at = True, now

    any_store.save_adjustment(adjustment)

    stored = any_store.get_adjustment("adj-1")
    assert stored.applied is True and stored.applied_at == now
    assert any_store.get_adjustment("adj-2") is None


def test_journal_entries_keep_order(any_store, make_goal, make_task, now) -> None:
    steps = [
        ReasoningStep(id=f"r{i}", phase="observe", title="t", description="d", timestamp=now, data={"i": i})
        for i in range(3)
    ]
    any_store.append_reasoning(steps)
    any_store.append_snapshot(
        PlanSnapshot(id="s1", created_at=now, tasks=[make_task("a")], goals=[make_goal()], label="initial")
    )
    any_store.append_coach_message(CoachMessage(id="c1", message="hi", type="feedback", timestamp=now))
    any_store.append_agent_action(AgentAction(id="x1", type="replan", timestamp=now, duration_ms=12.5))

    assert [step.data["i"] for step in any_store.get_reasoning()] == [0, 1, 2]
    assert any_store.get_snapshots()[0].tasks[0].id == "a"
    assert any_store.get_coach_messages()[0].timestamp == now
    assert any_store.get_agent_actions()[0].duration_ms == 12.5

    any_store.clear_reasoning()
    assert any_store.get_reasoning() == []
    assert len(any_store.get_snapshots()) == 1


def test_reset_keeps_integrations(any_store, make_goal, make_task, today, now) -> None:
    any_store.set_goals([make_goal()])
    any_store.set_tasks([make_task("a")])
    any_store.append_coach_message(CoachMessage(id="c1", message="hi", type="feedback", timestamp=now))
    any_store.set_calendar_events([CalendarEvent(id="e1", start="2025-01-06", end="2025-01-06")])
    any_store.save_fitness_sample(FitnessSample(date=today, steps=100))

    any_store.reset()

    assert any_store.get_goals() == [] and any_store.get_tasks() == []
    assert any_store.get_coach_messages() == []
    assert [event.id for event in any_store.get_calendar_events()] == ["e1"]
    assert any_store.get_fitness_sample(today).steps == 100


def test_calendar_append_replaces_same_id(any_store) -> None:
    any_store.set_calendar_events([CalendarEvent(id="e1", title="Old", start="2025-01-06", end="2025-01-06")])

    any_store.append_calendar_events(
        [
            CalendarEvent(id="e1", title="New", start="2025-01-07", end="2025-01-07"),
            CalendarEvent(id="e2", start="2025-01-08", end="2025-01-08"),
        ]
    )

    assert [(event.id, event.title) for event in any_store.get_calendar_events()] == [
        ("e1", "New"),
        ("e2", "Untitled Event"),
    ]


def test_fitness_history_newest_first(any_store, today) -> None:
    for offset in range(10):
        any_store.save_fitness_sample(FitnessSample(date=today - timedelta(days=offset), steps=offset))
    any_store.save_fitness_sample(FitnessSample(date=today, steps=999))

    history = any_store.get_fitness_history(limit=3)

    assert [sample.steps for sample in history] == [999, 1, 2]


def test_planning_cycle_discards_writes_on_error(any_store, make_goal, make_task, now) -> None:
    any_store.set_goals([make_goal()])
    any_store.set_tasks([make_task("a"), make_task("b")])

    with pytest.raises(RuntimeError):
        with any_store.planning_cycle():
            any_store.set_tasks([make_task("a", start_time="20:00")])
            any_store.append_coach_message(CoachMessage(id="c1", message="hi", type="feedback", timestamp=now))
            assert [task.id for task in any_store.get_tasks()] == ["a"]
            raise RuntimeError("cycle failed")

    assert [(task.id, task.start_time) for task in any_store.get_tasks()] == [("a", "18:00"), ("b", "18:00")]
    assert any_store.get_coach_messages() == []


def test_planning_cycle_commits_together(any_store, make_goal, make_task) -> None:
    with any_store.planning_cycle():
        any_store.set_goals([make_goal()])
        with any_store.planning_cycle():
            any_store.set_tasks([make_task("a")])

    assert [task.id for task in any_store.get_tasks()] == ["a"]
    assert len(any_store.get_goals()) == 1
