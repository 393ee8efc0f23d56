"""Task status transitions and the goal progress derived from them."""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, FrozenSet, List, Optional, Sequence

from weekplan.api.schemas.goal import Goal
from weekplan.api.schemas.integrations import FitnessSample
from weekplan.api.schemas.task import Task, TaskStatus
from weekplan.core.errors import InvalidTransitionError, PlanInputError, TaskNotFoundError
from weekplan.services.identifiers import utc_now
from weekplan.store.base import PlannerStore

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"in_progress", "done", "skipped", "rescheduled"}),
    "in_progress": frozenset({"done", "skipped"}),
    "rescheduled": frozenset({"in_progress", "done", "skipped"}),
    "done": frozenset(),
    "skipped": frozenset(),
}

FITNESS_GOAL_CATEGORY = "Fitness"


def transition_task(task: Task, status: TaskStatus, now: datetime | None = None) -> Task:
    """Move ``task`` to ``status`` in place. Re-requesting the current status changes nothing."""
    if status == task.status:
        return task
    if status not in ALLOWED_TRANSITIONS[task.status]:
        raise InvalidTransitionError(task.id, task.status, status)
    task.status = status
    task.completed_at = (now or utc_now()) if status == "done" else None
    return task


def update_task(
    store: PlannerStore,
    task_id: str,
    *,
    status: Optional[TaskStatus] = None,
    actual_minutes: Optional[int] = None,
    notes: Optional[str] = None,
    now: datetime | None = None,
    today: date | None = None,
) -> Task:
    today = today or date.today()
    with store.planning_cycle():
        task = store.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        if status is not None:
            previous = task.status
            transition_task(task, status, now)
            if previous != task.status:
                logger.info("Task %s moved %s -> %s", task_id, previous, task.status)
        if actual_minutes is not None:
            task.actual_minutes = actual_minutes
        if notes is not None:
            task.notes = notes
        store.save_task(task)

        goals = refresh_goal_progress(store.get_goals(), store.get_tasks(), store.get_fitness_sample(today))
        store.set_goals(goals)
    return task


def refresh_goal_progress(
    goals: Sequence[Goal],
    tasks: Sequence[Task],
    fitness_sample: Optional[FitnessSample] = None,
) -> List[Goal]:
    """Fitness goals track today's steps when a sample exists; every other goal counts done tasks."""
    refreshed: List[Goal] = []
    for goal in goals:
        goal = goal.model_copy()
        if goal.category == FITNESS_GOAL_CATEGORY and fitness_sample is not None:
            goal.current_value = fitness_sample.steps
        elif goal.category != FITNESS_GOAL_CATEGORY:
            goal.current_value = sum(1 for task in tasks if task.goal_id == goal.id and task.status == "done")
        refreshed.append(goal)
    return refreshed


def record_steps(store: PlannerStore, steps: int, *, today: date | None = None) -> FitnessSample:
    """Store today's step count and mirror it onto the first Fitness goal."""
    if steps < 0:
        raise PlanInputError("Step count cannot be negative.", details={"steps": steps})
    today = today or date.today()
    sample = store.get_fitness_sample(today) or FitnessSample(date=today)
    sample.steps = steps
    store.save_fitness_sample(sample)

    goals = store.get_goals()
    fitness_goal = next((goal for goal in goals if goal.category == FITNESS_GOAL_CATEGORY), None)
    if fitness_goal is not None:
        fitness_goal.current_value = steps
        store.set_goals(goals)
    logger.debug("Recorded %s steps for %s", steps, today.isoformat())
    return sample
