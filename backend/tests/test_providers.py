from __future__ import annotations

from weekplan.api.schemas.integrations import CalendarEvent, FitnessSample
from weekplan.services.providers import (
    CalendarProvider,
    FitnessProvider,
    StoreCalendarProvider,
    StoreFitnessProvider,
    load_busy_intervals,
    load_fitness_sample,
    tasks_to_calendar_events,
)


class _BrokenCalendar(CalendarProvider):
    def fetch_busy_intervals(self):
        raise ConnectionError("calendar offline")

    def push_events(self, events):
        raise ConnectionError("calendar offline")


class _BrokenFitness(FitnessProvider):
    def fetch_sample(self, day):
        raise TimeoutError("fitness offline")


def test_failing_providers_degrade_to_empty(today) -> None:
    assert load_busy_intervals(_BrokenCalendar()) == []
    assert load_fitness_sample(_BrokenFitness(), today) is None
    assert load_busy_intervals(None) == []
    assert load_fitness_sample(None, today) is None


def test_store_providers_read_uploaded_data(store, today) -> None:
    store.set_calendar_events([CalendarEvent(id="e1", start="2025-01-06T18:00:00", end="2025-01-06T19:00:00")])
    store.save_fitness_sample(FitnessSample(date=today, steps=3000))

    assert [event.id for event in load_busy_intervals(StoreCalendarProvider(store))] == ["e1"]
    assert load_fitness_sample(StoreFitnessProvider(store), today).steps == 3000


def test_tasks_to_calendar_events(make_goal, make_task) -> None:
    goals = [make_goal(color="#10b981")]
    tasks = [
        make_task("a", start_time="18:00", minutes=45),
        make_task("b", status="done"),
        make_task("c", day_index=1, status="rescheduled", start_time="23:30", minutes=60),
        make_task("d", status="skipped"),
    ]

    events = tasks_to_calendar_events(tasks, goals)

    assert [event.id for event in events] == ["event-a", "event-c"]
    assert (events[0].start, events[0].end) == ("2025-01-06T18:00:00", "2025-01-06T18:45:00")
    assert events[1].end == "2025-01-07T23:59:00"
    assert {event.color for event in events} == {"#10b981"}
    assert {event.type for event in events} == {"reminder"}


def test_push_selected_tasks_become_busy_intervals(store, make_goal, make_task) -> None:
    goals = [make_goal()]
    tasks = [make_task("a"), make_task("b", start_time="20:00")]
    provider = StoreCalendarProvider(store)

    pushed = provider.push_events(tasks_to_calendar_events(tasks, goals, task_ids=["b"]))
    provider.push_events(tasks_to_calendar_events(tasks, goals, task_ids=["b"]))

    assert pushed == 1
    assert [event.id for event in provider.fetch_busy_intervals()] == ["event-b"]
