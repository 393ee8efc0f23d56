"""End-of-day replanning.

``replan_week`` is the pure cycle: measure day 0, move what was not done onto
days 1-6, ease the load when the day went badly, suggest micro-adjustments
and write a coach message. ``run_replan`` wraps it with persistence.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from time import perf_counter
from typing import List, Optional, Sequence

from weekplan.api.schemas.agent_log import AgentAction, PlanSnapshot, ReasoningStep
from weekplan.api.schemas.coaching import BehaviorSnapshot, CoachMessage, MicroAdjustment
from weekplan.api.schemas.goal import Goal
from weekplan.api.schemas.task import Task
from weekplan.core.context import operation_scope
from weekplan.core.errors import NothingToReplanError
from weekplan.observability.metrics import log_metric, timed_operation
from weekplan.observability.tracing import trace
from weekplan.services.adjustment_policy import generate_micro_adjustments
from weekplan.services.behavior_analyzer import (
    BehaviorAnalysis,
    analyze_behavior,
    completion_percent as percent_done,
    summarize_behavior,
)
from weekplan.services.identifiers import IdFactory, new_id, utc_now
from weekplan.services.providers import FitnessProvider, StoreFitnessProvider, load_fitness_sample
from weekplan.services.reasoning import ReasoningTrail
from weekplan.services.task_progress import refresh_goal_progress
from weekplan.services.time_slots import date_for_day_offset
from weekplan.store.base import PlannerStore

logger = logging.getLogger(__name__)

FUTURE_DAYS = 6
LOAD_REDUCTION_BELOW_PERCENT = 40
LOAD_REDUCTION_FACTOR = 0.75
SLOT_START_TIMES = {"morning": "08:00", "afternoon": "14:00", "evening": "18:00"}


@dataclass
class ReplanResult:
    updated_tasks: List[Task]
    completion_percent: int
    coach_message: CoachMessage
    diff_summary: str
    micro_adjustments: List[MicroAdjustment]
    behavior: BehaviorSnapshot
    snapshot: PlanSnapshot
    reasoning_trail: List[ReasoningStep] = field(default_factory=list)
    moved_task_ids: List[str] = field(default_factory=list)


@dataclass
class ReplanRun:
    result: ReplanResult
    analysis: BehaviorAnalysis
    goals: List[Goal]


def replan_week(
    current_tasks: Sequence[Task],
    goals: Sequence[Goal] = (),
    *,
    today: date | None = None,
    now: datetime | None = None,
    id_factory: IdFactory = new_id,
) -> ReplanResult:
    """Run one replanning cycle anchored at day 0. ``current_tasks`` is left untouched."""
    today = today or date.today()
    now = now or utc_now()
    trail = ReasoningTrail(now=now, id_factory=id_factory)

    day0 = [task for task in current_tasks if task.day_index == 0]
    done_count = sum(1 for task in day0 if task.status == "done")
    completion = percent_done(done_count, len(day0))
    behavior = summarize_behavior(current_tasks, today)
    trail.record(
        "understand",
        "Analyzing Today's Progress",
        f"Completed {done_count}/{len(day0)} tasks ({completion}%). Preferred time: "
        f"{behavior.preferred_time_slot}. Skip pattern: {behavior.skip_pattern}. "
        f"Current streak: {behavior.streak_days} days.",
        {"done_count": done_count, "total_day0": len(day0), "completion_percent": completion, **behavior.model_dump()},
    )

    to_move = [task.id for task in day0 if task.status != "done"]
    trail.record(
        "propose",
        "Calculating Adjustments",
        f"{len(to_move)} tasks need rescheduling. Generating micro-adjustments based on your patterns.",
        {"tasks_to_move": len(to_move)},
    )

    updated = [task.model_copy(deep=True) for task in current_tasks]
    by_id = {task.id: task for task in updated}
    new_start = SLOT_START_TIMES.get(behavior.preferred_time_slot, SLOT_START_TIMES["evening"])
    for index, task_id in enumerate(to_move):
        task = by_id[task_id]
        task.day_index = 1 + (index % FUTURE_DAYS)
        task.scheduled_date = date_for_day_offset(task.day_index, today)
        task.status = "rescheduled"
        task.start_time = new_start
        task.end_time = None

    if to_move:
        diff_summary = f"Moved {len(to_move)} tasks to upcoming days."
    elif day0:
        diff_summary = "All tasks completed! Schedule maintained."
    else:
        diff_summary = "No tasks scheduled today. Schedule maintained."

    if completion < LOAD_REDUCTION_BELOW_PERCENT:
        for task in updated:
            if task.day_index > 0 and task.status == "pending":
                task.estimated_minutes = int(task.estimated_minutes * LOAD_REDUCTION_FACTOR)
        diff_summary += " Reduced future session lengths by 25%."
    trail.record("execute", "Applying Schedule Changes", diff_summary, {"moved": len(to_move)})

    adjustments = generate_micro_adjustments(current_tasks, completion, behavior, now=now, id_factory=id_factory)
    trail.record(
        "observe",
        "Generated Recommendations",
        f"Created {len(adjustments)} micro-adjustments for optimal performance.",
        {"adjustments": [adjustment.type for adjustment in adjustments]},
    )

    coach_message = build_coach_message(
        completion,
        len(to_move),
        behavior,
        goals[0] if goals else None,
        now=now,
        id_factory=id_factory,
    )
    trail.record(
        "update",
        "Plan Updated Successfully",
        "New schedule is ready. Tomorrow's plan has been optimized based on today's performance.",
    )

    snapshot = PlanSnapshot(
        id=id_factory("snapshot"),
        created_at=now,
        tasks=[task.model_copy(deep=True) for task in updated],
        goals=[goal.model_copy(deep=True) for goal in goals],
        label="replan",
        reason=diff_summary,
    )
    logger.info("Replan complete: %s%% done, %s moved, %s adjustments", completion, len(to_move), len(adjustments))
    return ReplanResult(
        updated_tasks=updated,
        completion_percent=completion,
        coach_message=coach_message,
        diff_summary=diff_summary,
        micro_adjustments=adjustments,
        behavior=behavior,
        snapshot=snapshot,
        reasoning_trail=trail.steps,
        moved_task_ids=to_move,
    )


def build_coach_message(
    completion_percent: int,
    moved_count: int,
    behavior: BehaviorSnapshot,
    goal: Optional[Goal] = None,
    *,
    now: datetime | None = None,
    id_factory: IdFactory = new_id,
) -> CoachMessage:
    """Templated message; tone escalates from celebration down to suggestion as completion drops."""
    if completion_percent >= 90:
        kind = "celebration"
        message = (
            f"Outstanding work! You completed {completion_percent}% of today's tasks. "
            f"Your {behavior.streak_days}-day streak is incredible! Keep this momentum going."
        )
    elif completion_percent >= 70:
        kind = "encouragement"
        message = (
            f"Great progress today! You completed {completion_percent}% of your tasks. "
            f"You're most productive in the {behavior.preferred_time_slot}, so I'll prioritize that time slot tomorrow."
        )
    elif completion_percent >= 50:
        kind = "feedback"
        message = (
            f"You're making steady progress with {completion_percent}% done. "
            f"I've moved {moved_count} tasks to upcoming days and adjusted the schedule to reduce pressure."
        )
    elif completion_percent >= 30:
        kind = "suggestion"
        message = (
            f"Today was challenging, but that's okay! I've redistributed {moved_count} tasks across the week "
            "and shortened session lengths. Tomorrow's load will be lighter."
        )
    else:
        kind = "suggestion"
        message = (
            "Tough day, and it happens to everyone. I've reduced tomorrow's workload and added extra breaks. "
            "Let's start fresh with smaller, achievable wins."
        )
    return CoachMessage(
        id=id_factory("coach"),
        message=message,
        type=kind,
        timestamp=now or utc_now(),
        related_goal_id=goal.id if goal else None,
    )


def run_replan(
    store: PlannerStore,
    *,
    fitness_provider: Optional[FitnessProvider] = None,
    today: date | None = None,
    now: datetime | None = None,
    id_factory: IdFactory = new_id,
    request_id: str | None = None,
) -> ReplanRun:
    """Replan the stored week and persist everything the cycle produced."""
    today = today or date.today()
    now = now or utc_now()
    fitness_provider = fitness_provider or StoreFitnessProvider(store)

    with store.planning_cycle():
        tasks = store.get_tasks()
        if not tasks:
            raise NothingToReplanError()
        goals = store.get_goals()
        run = _replan_stored_week(
            store, tasks, goals, fitness_provider, today=today, now=now, id_factory=id_factory, request_id=request_id
        )

    log_metric("replan.completion_percent", run.result.completion_percent)
    return run


def _replan_stored_week(
    store: PlannerStore,
    tasks: List[Task],
    goals: List[Goal],
    fitness_provider: FitnessProvider,
    *,
    today: date,
    now: datetime,
    id_factory: IdFactory,
    request_id: str | None,
) -> ReplanRun:
    started = perf_counter()
    with operation_scope("replan"), trace(
        "replan.run", metadata={"tasks": len(tasks), "goals": len(goals)}, request_id=request_id
    ) as replan_trace, timed_operation("replan.run", {"tasks": len(tasks)}):
        store.clear_reasoning()
        result = replan_week(tasks, goals, today=today, now=now, id_factory=id_factory)
        fitness_sample = load_fitness_sample(fitness_provider, today)
        analysis = analyze_behavior(tasks, fitness_sample, today=today, now=now, id_factory=id_factory)

        store.set_tasks(result.updated_tasks)
        refreshed_goals = refresh_goal_progress(goals, result.updated_tasks, fitness_sample)
        store.set_goals(refreshed_goals)
        store.append_snapshot(result.snapshot)
        store.set_adjustments(store.get_adjustments() + result.micro_adjustments)
        store.append_reasoning(result.reasoning_trail)
        store.append_coach_message(result.coach_message)
        store.append_agent_action(
            AgentAction(
                id=id_factory("action"),
                type="replan",
                title="Week Replanned",
                description=result.coach_message.message,
                timestamp=now,
                input=f"Day completion: {result.completion_percent}%",
                output=result.diff_summary,
                status="completed",
                duration_ms=round((perf_counter() - started) * 1000, 2),
            )
        )
        if replan_trace:
            replan_trace.update(
                output={
                    "completion_percent": result.completion_percent,
                    "moved": len(result.moved_task_ids),
                    "adjustments": len(result.micro_adjustments),
                }
            )

    return ReplanRun(result=result, analysis=analysis, goals=refreshed_goals)
