from __future__ import annotations

from datetime import datetime, timedelta, timezone

from weekplan.api.schemas.integrations import FitnessSample
from weekplan.services.behavior_analyzer import (
    analyze_behavior,
    classify_skip_pattern,
    compute_streak,
    round_half_up,
    summarize_behavior,
)


def _done_on(make_task, task_id: str, day: datetime, **kwargs):
    return make_task(task_id, status="done", completed_at=day, **kwargs)


def test_empty_history_uses_defaults(today) -> None:
    snapshot = summarize_behavior([], today)

    assert snapshot.avg_completion_minutes == 40
    assert snapshot.preferred_time_slot == "evening"
    assert snapshot.skip_pattern == "none"
    assert snapshot.streak_days == 0


def test_average_prefers_actual_minutes_and_rounds_half_up(make_task, today) -> None:
    tasks = [
        make_task("a", status="done", actual_minutes=30),
        make_task("b", status="done", minutes=45),
        make_task("c", status="pending", minutes=200),
    ]

    assert summarize_behavior(tasks, today).avg_completion_minutes == 38
    assert round_half_up(2.5) == 3


def test_preferred_slot_picks_the_busiest_bucket(make_task, today) -> None:
    tasks = [
        make_task("a", status="done", start_time="08:00"),
        make_task("b", status="done", start_time="09:30"),
        make_task("c", status="done", start_time="19:00"),
    ]

    assert summarize_behavior(tasks, today).preferred_time_slot == "morning"


def test_preferred_slot_tie_defaults_to_evening(make_task, today) -> None:
    tasks = [
        make_task("a", status="done", start_time="08:00"),
        make_task("b", status="done", start_time="13:00"),
    ]

    assert summarize_behavior(tasks, today).preferred_time_slot == "evening"


def test_skip_pattern_checks_difficulty_before_lateness(make_task) -> None:
    hard = [make_task(f"h{i}", status="skipped", difficulty="hard", start_time="21:30") for i in range(3)]
    other = [make_task("e", status="skipped", difficulty="easy", start_time="18:00")]

    assert classify_skip_pattern(hard + other) == "difficulty"


def test_skip_pattern_late_night_needs_strict_majority(make_task) -> None:
    tasks = [
        make_task("a", status="skipped", difficulty="hard", start_time="21:00"),
        make_task("b", status="skipped", difficulty="hard", start_time="21:30"),
        make_task("c", status="skipped", difficulty="easy", start_time="22:00"),
        make_task("d", status="skipped", difficulty="easy", start_time="18:00"),
    ]

    assert classify_skip_pattern(tasks) == "late_night"
    assert classify_skip_pattern(tasks[1:3]) == "late_night"
    assert classify_skip_pattern([tasks[1], tasks[3]]) == "random"
    assert classify_skip_pattern([make_task("x")]) == "none"


def test_streak_counts_consecutive_completion_days(make_task, today) -> None:
    midday = datetime(today.year, today.month, today.day, 12, tzinfo=timezone.utc)
    tasks = [
        _done_on(make_task, "a", midday),
        _done_on(make_task, "b", midday - timedelta(days=1)),
        _done_on(make_task, "c", midday - timedelta(days=2)),
        _done_on(make_task, "d", midday - timedelta(days=4)),
    ]

    assert compute_streak(tasks, today) == 3


def test_streak_starts_yesterday_when_today_is_empty(make_task, today) -> None:
    midday = datetime(today.year, today.month, today.day, 12, tzinfo=timezone.utc)
    tasks = [
        _done_on(make_task, "b", midday - timedelta(days=1)),
        _done_on(make_task, "c", midday - timedelta(days=2)),
    ]

    assert compute_streak(tasks, today) == 2
    assert compute_streak([_done_on(make_task, "z", midday - timedelta(days=3))], today) == 0


def test_streak_falls_back_to_scheduled_date(make_task, today) -> None:
    tasks = [make_task("a", status="done"), make_task("b", status="done", day_index=1)]

    assert compute_streak(tasks, today) == 1


def test_analyze_behavior_builds_patterns_insight_and_recommendations(make_task, today, now, ids) -> None:
    midday = datetime(today.year, today.month, today.day, 12, tzinfo=timezone.utc)
    tasks = [
        _done_on(make_task, "a", midday, start_time="18:00", actual_minutes=40),
        _done_on(make_task, "b", midday, start_time="19:00", minutes=30),
        make_task("c", status="skipped", difficulty="hard"),
        make_task("d", status="pending"),
        _done_on(make_task, "e", midday - timedelta(days=1), day_index=1),
        _done_on(make_task, "f", midday - timedelta(days=2), day_index=2),
    ]
    sample = FitnessSample(date=today, steps=1000, steps_goal=5000, sleep_hours=8)

    analysis = analyze_behavior(tasks, sample, today=today, now=now, id_factory=ids)

    kinds = [pattern.type for pattern in analysis.patterns]
    assert kinds == ["productivity_peak", "focus_duration", "completion_rate", "skip_pattern", "streak", "low_energy"]
    assert all(0 <= pattern.confidence <= 1 for pattern in analysis.patterns)
    assert all(pattern.detected_at == now for pattern in analysis.patterns)
    assert analysis.behavior.streak_days == 3
    assert analysis.behavior.skip_pattern == "difficulty"

    insight = analysis.insights
    assert (insight.tasks_completed, insight.tasks_total, insight.completion_rate) == (2, 4, 50)
    assert insight.focus_minutes == 70
    assert insight.mood == "okay"
    assert insight.energy_level == "low"

    assert analysis.recommendations[0].startswith("Start tomorrow with your easiest task")
    assert any("Energy looks low" in rec for rec in analysis.recommendations)
    assert any("3-day streak" in rec for rec in analysis.recommendations)


def test_analyze_behavior_without_fitness_is_medium_energy(make_task, today, now) -> None:
    analysis = analyze_behavior([make_task("a")], today=today, now=now)

    assert analysis.insights.energy_level == "medium"
    assert analysis.insights.mood == "low"
    assert [pattern.type for pattern in analysis.patterns] == ["completion_rate"]
