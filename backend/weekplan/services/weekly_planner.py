"""Rule-based weekly planner: goals + preferences + busy intervals -> 7-day task list."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Sequence

from weekplan.api.schemas.agent_log import ReasoningStep
from weekplan.api.schemas.goal import Goal
from weekplan.api.schemas.integrations import CalendarEvent
from weekplan.api.schemas.profile import UserPreferences, UserProfile
from weekplan.api.schemas.task import Task
from weekplan.core.config import Settings, settings
from weekplan.core.errors import PlanInputError
from weekplan.services.identifiers import IdFactory, new_id
from weekplan.services.reasoning import ReasoningTrail
from weekplan.services.task_synthesizer import PLANNING_DAYS, synthesize_tasks
from weekplan.services.time_slots import parse_time

logger = logging.getLogger(__name__)


@dataclass
class PlanResult:
    tasks: List[Task]
    reasoning_trail: List[ReasoningStep] = field(default_factory=list)


def build_default_profile(config: Settings | None = None) -> UserProfile:
    """Profile used when the caller has not configured one."""
    config = config or settings
    return UserProfile(
        daily_available_minutes=config.default_daily_available_minutes,
        preferences=UserPreferences(
            preferred_session_length=config.default_session_minutes,
            break_duration=config.default_break_minutes,
            focus_time_start=config.default_focus_time_start,
            focus_time_end=config.default_focus_time_end,
        ),
    )


def generate_plan(
    goal: Goal,
    profile: UserProfile,
    busy_intervals: Sequence[CalendarEvent] = (),
    *,
    today: date | None = None,
    now: datetime | None = None,
    id_factory: IdFactory = new_id,
    trail: Optional[ReasoningTrail] = None,
) -> PlanResult:
    """Schedule one goal across the next seven days."""
    trail = trail if trail is not None else ReasoningTrail(now=now, id_factory=id_factory)
    prefs = profile.preferences
    first_step = len(trail)

    trail.record(
        "understand",
        "Analyzing User State",
        f'Processing goal: "{goal.title}" ({goal.category}). User available: '
        f"{profile.daily_available_minutes} mins/day. Focus time: {prefs.focus_time_start}-{prefs.focus_time_end}.",
        {"goal_id": goal.id, "category": goal.category, "daily_available_minutes": profile.daily_available_minutes},
    )
    trail.record(
        "propose",
        "Designing Schedule Strategy",
        f"Planning {goal.target_weeks} week schedule. Will distribute tasks across {PLANNING_DAYS} days, "
        f"respecting {len(busy_intervals)} calendar events.",
        {"calendar_events": len(busy_intervals)},
    )

    tasks = synthesize_tasks(goal, profile, busy_intervals, today=today, id_factory=id_factory)

    trail.record(
        "execute",
        "Generating Task Schedule",
        f"Created {len(tasks)} tasks spanning {PLANNING_DAYS} days. Each session: "
        f"{prefs.preferred_session_length} mins with {prefs.break_duration} min breaks.",
        {"tasks_generated": len(tasks)},
    )
    total_minutes = sum(task.estimated_minutes for task in tasks)
    average_daily = round(total_minutes / PLANNING_DAYS)
    trail.record(
        "observe",
        "Validating Schedule",
        f"Total scheduled: {total_minutes} mins across {len(tasks)} tasks. Average daily load: {average_daily} mins.",
        {"total_minutes": total_minutes, "average_daily": average_daily},
    )
    trail.record(
        "update",
        "Plan Ready",
        "Schedule fitted to your focus time with calendar conflicts avoided. Ready to begin!",
    )

    logger.info("Planned %s tasks (%s mins) for goal %s", len(tasks), total_minutes, goal.id)
    return PlanResult(tasks=tasks, reasoning_trail=trail.steps[first_step:])


def generate_multi_goal_plan(
    goals: Sequence[Goal],
    profile: UserProfile,
    busy_intervals: Sequence[CalendarEvent] = (),
    *,
    today: date | None = None,
    now: datetime | None = None,
    id_factory: IdFactory = new_id,
    trail: Optional[ReasoningTrail] = None,
) -> PlanResult:
    """Plan every goal independently and merge into one list ordered by (day, start time)."""
    if not goals:
        raise PlanInputError("At least one goal is required to generate a plan.")

    trail = trail if trail is not None else ReasoningTrail(now=now, id_factory=id_factory)
    first_step = len(trail)
    tasks: List[Task] = []
    for goal in goals:
        result = generate_plan(
            goal,
            profile,
            busy_intervals,
            today=today,
            now=now,
            id_factory=id_factory,
            trail=trail,
        )
        tasks.extend(result.tasks)

    tasks.sort(key=lambda task: (task.day_index, parse_time(task.start_time)))
    return PlanResult(tasks=tasks, reasoning_trail=trail.steps[first_step:])
