from __future__ import annotations

from collections import defaultdict

from weekplan.api.schemas.integrations import CalendarEvent
from weekplan.api.schemas.profile import UserPreferences, UserProfile
from weekplan.services.task_synthesizer import determine_difficulty, synthesize_tasks
from weekplan.services.time_slots import parse_time


def _profile(start: str = "18:00", session: int = 45, brk: int = 10) -> UserProfile:
    return UserProfile(
        preferences=UserPreferences(preferred_session_length=session, break_duration=brk, focus_time_start=start)
    )


def test_study_goal_fills_syllabus_across_the_week(make_goal, today, ids) -> None:
    tasks = synthesize_tasks(make_goal(), _profile(), today=today, id_factory=ids)

    assert len(tasks) == 20
    per_day = defaultdict(int)
    for task in tasks:
        per_day[task.day_index] += 1
    assert per_day == {0: 3, 1: 3, 2: 3, 3: 3, 4: 3, 5: 3, 6: 2}
    assert [task.start_time for task in tasks[:3]] == ["18:00", "18:55", "19:50"]
    assert tasks[0].title == "Unit 1: Introduction to ML"
    assert tasks[4].title == "Unit 2: Linear Regression"
    assert tasks[-1].title == "Unit 5: Final Review"
    assert all(task.status == "pending" and task.estimated_minutes == 45 for task in tasks)
    assert tasks[0].id == "task-1"


def test_study_difficulty_follows_position(make_goal, today, ids) -> None:
    tasks = synthesize_tasks(make_goal(), _profile(), today=today, id_factory=ids)

    for index, task in enumerate(tasks):
        ratio = index / 20
        expected = "easy" if ratio < 0.3 else "medium" if ratio < 0.7 else "hard"
        assert task.difficulty == expected


def test_determine_difficulty_boundaries() -> None:
    assert determine_difficulty(5, 20) == "easy"
    assert determine_difficulty(6, 20) == "medium"
    assert determine_difficulty(13, 20) == "medium"
    assert determine_difficulty(14, 20) == "hard"


def test_busy_interval_pushes_first_session_past_it(make_goal, today, ids) -> None:
    busy = [CalendarEvent(id="evt-1", title="Lab", start="2025-01-06T18:00:00", end="2025-01-06T19:00:00")]

    tasks = synthesize_tasks(make_goal(), _profile(), busy, today=today, id_factory=ids)

    day0 = [task for task in tasks if task.day_index == 0]
    assert day0[0].start_time == "19:00"
    assert [task.start_time for task in tasks if task.day_index == 1][0] == "18:00"


def test_slots_past_cutoff_are_dropped(make_goal, today, ids) -> None:
    tasks = synthesize_tasks(make_goal(), _profile(start="21:00"), today=today, id_factory=ids)

    assert len(tasks) == 14
    assert all(parse_time(task.start_time) <= parse_time("22:00") for task in tasks)


def test_study_tasks_never_overlap_within_a_day(make_goal, today, ids) -> None:
    busy = [CalendarEvent(id="evt-1", start="2025-01-08T18:30:00", end="2025-01-08T19:40:00")]
    tasks = synthesize_tasks(make_goal(), _profile(session=50, brk=0), busy, today=today, id_factory=ids)

    by_day = defaultdict(list)
    for task in tasks:
        start = parse_time(task.start_time)
        by_day[task.day_index].append((start, start + task.estimated_minutes))
    for intervals in by_day.values():
        intervals.sort()
        for (_, end), (next_start, _) in zip(intervals, intervals[1:]):
            assert end <= next_start
    assert all(0 <= task.day_index <= 6 for task in tasks)


def test_non_study_default_goal_uses_phase_titles(make_goal, today, ids) -> None:
    goal = make_goal(category="Project", title="Ship portfolio site")

    tasks = synthesize_tasks(goal, _profile(), today=today, id_factory=ids)

    assert tasks[0].title == "Ship portfolio site: phase 1, step 1"
    assert tasks[5].title == "Ship portfolio site: phase 2, step 2"


def test_fitness_plan_shape(make_goal, today, ids) -> None:
    goal = make_goal(category="Fitness", target_value=5000)

    tasks = synthesize_tasks(goal, _profile(), today=today, id_factory=ids)

    steps = [task for task in tasks if task.title.startswith("Daily Steps")]
    exercise = [task for task in tasks if task.title.endswith("Session")]
    assert len(steps) == 7
    assert [task.day_index for task in exercise] == [0, 2, 4, 6]
    assert [task.title for task in exercise] == ["Cardio Session", "Strength Session", "Yoga Session", "HIIT Session"]
    assert steps[0].status == "in_progress"
    assert all(task.status == "pending" for task in tasks if task is not steps[0])
    assert steps[0].title == "Daily Steps: 5,000 steps"
    assert (steps[0].start_time, steps[0].estimated_minutes) == ("07:00", 60)
    assert [task.difficulty for task in exercise] == ["easy", "easy", "medium", "medium"]


def test_health_goal_uses_fitness_policy_with_default_target(make_goal, today, ids) -> None:
    tasks = synthesize_tasks(make_goal(category="Health"), _profile(), today=today, id_factory=ids)

    assert len(tasks) == 11
    assert tasks[0].title == "Daily Steps: 5,000 steps"
