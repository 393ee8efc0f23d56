"""Micro-adjustment suggestions and the task mutations they stand for.

Suggesting is pure: ``generate_micro_adjustments`` reads tasks and statistics
and never touches them. Applying is explicit and always runs against the
live task list held by the store, not the list the suggestion was built from.
"""
from __future__ import annotations

import logging
from datetime import datetime
from itertools import groupby
from typing import Callable, Dict, List, Sequence

from weekplan.api.schemas.agent_log import AgentAction, PlanSnapshot
from weekplan.api.schemas.coaching import AdjustmentType, BehaviorSnapshot, MicroAdjustment
from weekplan.api.schemas.task import Task
from weekplan.core.errors import AdjustmentAlreadyAppliedError, AdjustmentNotFoundError
from weekplan.observability.metrics import timed_operation
from weekplan.observability.tracing import trace
from weekplan.services.identifiers import IdFactory, new_id, utc_now
from weekplan.services.time_slots import MINUTES_PER_DAY, format_minutes, hour_of, parse_time
from weekplan.store.base import PlannerStore

logger = logging.getLogger(__name__)

LOW_COMPLETION_PERCENT = 50
HIGH_COMPLETION_PERCENT = 80
SHORTEN_FACTOR = 2 / 3
MIN_SESSION_MINUTES = 5
BREAK_GAP_MINUTES = 15
EVENING_ANCHOR = "18:00"
REORDER_GAP_MINUTES = 10
LATE_START_HOUR = 21

_DIFFICULTY_RANK = {"easy": 0, "medium": 1, "hard": 2}
_ADJUSTABLE_STATUSES = frozenset({"pending", "rescheduled"})


def generate_micro_adjustments(
    tasks: Sequence[Task],
    completion_percent: int,
    behavior: BehaviorSnapshot,
    *,
    now: datetime | None = None,
    id_factory: IdFactory = new_id,
) -> List[MicroAdjustment]:
    """Suggest adjustments in a fixed order. ``tasks`` is only read."""
    now = now or utc_now()

    def suggest(kind: AdjustmentType, title: str, description: str, reason: str, impact) -> MicroAdjustment:
        return MicroAdjustment(
            id=id_factory("adj"),
            type=kind,
            title=title,
            description=description,
            reason=reason,
            impact=impact,
            applied=False,
            suggested_at=now,
        )

    suggestions: List[MicroAdjustment] = []
    if completion_percent < LOW_COMPLETION_PERCENT:
        suggestions.append(
            suggest(
                "shorten_session",
                "Shorter Study Sessions",
                "Cut upcoming session lengths by about a third to make them easier to finish.",
                f"Only {completion_percent}% of today's tasks were completed.",
                "high",
            )
        )
        suggestions.append(
            suggest(
                "add_break",
                "Add Recovery Breaks",
                f"Leave at least {BREAK_GAP_MINUTES} minutes between upcoming sessions.",
                "Back-to-back sessions make it harder to keep going.",
                "medium",
            )
        )
    if behavior.skip_pattern == "difficulty":
        suggestions.append(
            suggest(
                "reduce_difficulty",
                "Easier Tasks First",
                f"Reorder tomorrow's tasks from easiest to hardest starting at {EVENING_ANCHOR}.",
                "Most skipped tasks were hard ones.",
                "medium",
            )
        )
    if behavior.skip_pattern == "late_night":
        suggestions.append(
            suggest(
                "reschedule",
                "Move Late Sessions Earlier",
                f"Sessions starting at 9 PM or later move to {EVENING_ANCHOR}.",
                "Most skipped tasks were scheduled late at night.",
                "high",
            )
        )
    if completion_percent >= HIGH_COMPLETION_PERCENT:
        suggestions.append(
            suggest(
                "motivational",
                "Keep The Momentum",
                "You're on a roll. Keep the current schedule as it is.",
                f"{completion_percent}% of today's tasks were completed.",
                "low",
            )
        )
    return suggestions


def apply_adjustment_to_tasks(adjustment_type: AdjustmentType, tasks: Sequence[Task]) -> List[Task]:
    """Return copies of ``tasks`` with the adjustment's mutation applied."""
    copies = [task.model_copy(deep=True) for task in tasks]
    handler = _HANDLERS.get(adjustment_type)
    if handler is None:
        return copies
    return handler(copies)


def _shorten_sessions(tasks: List[Task]) -> List[Task]:
    for task in tasks:
        if task.day_index > 0 and task.status in _ADJUSTABLE_STATUSES:
            task.estimated_minutes = max(MIN_SESSION_MINUTES, int(task.estimated_minutes * SHORTEN_FACTOR))
    return tasks


def _add_breaks(tasks: List[Task]) -> List[Task]:
    future = sorted(
        (task for task in tasks if task.day_index > 0 and task.status != "done"),
        key=lambda task: (task.day_index, parse_time(task.start_time)),
    )
    for _, day_tasks in groupby(future, key=lambda task: task.day_index):
        previous_end = None
        for task in day_tasks:
            start = parse_time(task.start_time)
            if previous_end is not None and start < previous_end + BREAK_GAP_MINUTES:
                pushed = previous_end + BREAK_GAP_MINUTES
                # Stop pushing once a session would run past midnight.
                if pushed + task.estimated_minutes > MINUTES_PER_DAY:
                    break
                start = pushed
                task.start_time = format_minutes(start)
            previous_end = start + task.estimated_minutes
    return tasks


def _reorder_by_difficulty(tasks: List[Task]) -> List[Task]:
    tomorrow = sorted(
        (task for task in tasks if task.day_index == 1),
        key=lambda task: _DIFFICULTY_RANK[task.difficulty],
    )
    cursor = parse_time(EVENING_ANCHOR)
    for task in tomorrow:
        # Sessions that no longer fit before midnight keep their current start.
        if cursor + task.estimated_minutes > MINUTES_PER_DAY:
            break
        task.start_time = format_minutes(cursor)
        cursor += task.estimated_minutes + REORDER_GAP_MINUTES
    return [task for task in tasks if task.day_index != 1] + tomorrow


def _move_late_sessions(tasks: List[Task]) -> List[Task]:
    for task in tasks:
        if task.day_index > 0 and hour_of(task.start_time) >= LATE_START_HOUR:
            task.start_time = EVENING_ANCHOR
    return tasks


_HANDLERS: Dict[str, Callable[[List[Task]], List[Task]]] = {
    "shorten_session": _shorten_sessions,
    "add_break": _add_breaks,
    "reduce_difficulty": _reorder_by_difficulty,
    "reschedule": _move_late_sessions,
}


def apply_micro_adjustment(
    store: PlannerStore,
    adjustment_id: str,
    *,
    now: datetime | None = None,
    id_factory: IdFactory = new_id,
) -> tuple[MicroAdjustment, List[Task]]:
    """Mark a suggestion applied and mutate the store's current tasks accordingly."""
    now = now or utc_now()
    with store.planning_cycle():
        adjustment = store.get_adjustment(adjustment_id)
        if adjustment is None:
            raise AdjustmentNotFoundError(adjustment_id)
        if adjustment.applied:
            raise AdjustmentAlreadyAppliedError(adjustment_id)
        updated = _apply_stored_adjustment(store, adjustment, now=now, id_factory=id_factory)

    logger.info("Applied %s adjustment %s", adjustment.type, adjustment_id)
    return adjustment, updated


def _apply_stored_adjustment(
    store: PlannerStore,
    adjustment: MicroAdjustment,
    *,
    now: datetime,
    id_factory: IdFactory,
) -> List[Task]:
    metadata = {"adjustment_id": adjustment.id, "type": adjustment.type}
    with trace("adjustment.apply", metadata=metadata), timed_operation("adjustment.apply", metadata):
        updated = apply_adjustment_to_tasks(adjustment.type, store.get_tasks())
        adjustment.applied = True
        adjustment.applied_at = now
        store.save_adjustment(adjustment)
        store.set_tasks(updated)
        store.append_snapshot(
            PlanSnapshot(
                id=id_factory("snapshot"),
                created_at=now,
                tasks=updated,
                goals=store.get_goals(),
                label="adjustment",
                reason=f"Applied adjustment: {adjustment.title}",
            )
        )
        store.append_agent_action(
            AgentAction(
                id=id_factory("action"),
                type="suggest_adjustment",
                title="Micro-adjustment Applied",
                description=adjustment.title,
                timestamp=now,
                input=adjustment.type,
                output=f"Updated {len(updated)} tasks",
                status="completed",
            )
        )

    return updated
