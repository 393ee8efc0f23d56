"""Setup flow: turn submitted goals into a fresh, persisted week plan."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from time import perf_counter
from typing import List, Optional, Sequence

from weekplan.api.schemas.agent_log import AgentAction, PlanSnapshot, ReasoningStep
from weekplan.api.schemas.goal import Goal, GoalCategory, GoalInput
from weekplan.api.schemas.profile import UserProfile
from weekplan.api.schemas.task import Task
from weekplan.core.context import operation_scope
from weekplan.observability.metrics import log_metric, timed_operation
from weekplan.observability.tracing import trace
from weekplan.services.identifiers import IdFactory, new_id, utc_now
from weekplan.services.providers import CalendarProvider, StoreCalendarProvider, load_busy_intervals
from weekplan.services.task_generation import generate_tasks
from weekplan.services.weekly_planner import build_default_profile
from weekplan.store.base import PlannerStore

logger = logging.getLogger(__name__)

CATEGORY_COLORS = {
    "Study": "#6366f1",
    "Fitness": "#10b981",
    "Health": "#f43f5e",
    "Project": "#f59e0b",
    "Career": "#06b6d4",
    "Personal": "#8b5cf6",
}

DEFAULT_GOALS = (
    GoalInput(
        title="Finish ML syllabus (Units 1-5)",
        description="Cover all 5 units including supervised learning, unsupervised learning, and neural networks.",
        category="Study",
        target_weeks=4,
        target_value=20,
        unit="chapters",
    ),
    GoalInput(
        title="Walk 5,000 steps daily",
        description="Build a consistent walking habit for better health and energy levels.",
        category="Fitness",
        target_weeks=4,
        target_value=5000,
        unit="steps",
    ),
)


@dataclass
class PlanningRun:
    goals: List[Goal]
    tasks: List[Task]
    reasoning_trail: List[ReasoningStep] = field(default_factory=list)
    ai_powered: bool = False
    calendar_events_used: int = 0


def category_color(category: GoalCategory) -> str:
    return CATEGORY_COLORS.get(category, CATEGORY_COLORS["Study"])


def materialize_goals(
    goal_inputs: Sequence[GoalInput],
    *,
    now: datetime | None = None,
    id_factory: IdFactory = new_id,
) -> List[Goal]:
    """Assign ids and setup defaults. An empty submission yields the demo goals."""
    now = now or utc_now()
    return [
        Goal(
            id=id_factory("goal"),
            title=item.title,
            description=item.description,
            category=item.category,
            priority=item.priority,
            target_weeks=item.target_weeks,
            target_value=item.target_value,
            current_value=0,
            unit=item.unit,
            created_at=now,
            is_recurring=item.category == "Fitness",
            color=category_color(item.category),
        )
        for item in (goal_inputs or DEFAULT_GOALS)
    ]


def run_planning(
    store: PlannerStore,
    goal_inputs: Sequence[GoalInput] = (),
    profile: Optional[UserProfile] = None,
    *,
    use_ai: bool = False,
    calendar_provider: Optional[CalendarProvider] = None,
    today: date | None = None,
    now: datetime | None = None,
    id_factory: IdFactory = new_id,
    request_id: str | None = None,
) -> PlanningRun:
    """Reset the store and plan a new week for the submitted goals."""
    now = now or utc_now()
    profile = profile or build_default_profile()
    started = perf_counter()

    with store.planning_cycle(), operation_scope("plan"), trace(
        "plan.run", metadata={"goals": len(goal_inputs), "use_ai": use_ai}, request_id=request_id
    ), timed_operation("plan.run", {"use_ai": use_ai}):
        store.reset()
        goals = materialize_goals(goal_inputs, now=now, id_factory=id_factory)
        store.set_goals(goals)

        busy = load_busy_intervals(calendar_provider or StoreCalendarProvider(store))
        generated = generate_tasks(
            goals,
            profile,
            busy,
            use_ai=use_ai,
            today=today,
            now=now,
            id_factory=id_factory,
            request_id=request_id,
        )
        store.set_tasks(generated.tasks)
        store.append_reasoning(generated.reasoning_trail)
        store.append_snapshot(
            PlanSnapshot(
                id=id_factory("snapshot"),
                created_at=now,
                tasks=generated.tasks,
                goals=goals,
                label="initial",
                reason="Initial plan generated",
            )
        )
        store.append_agent_action(
            AgentAction(
                id=id_factory("action"),
                type="generate_plan",
                title="Weekly Plan Generated",
                description=f"Generated {len(generated.tasks)} tasks for {len(goals)} goals",
                timestamp=now,
                input=", ".join(goal.title for goal in goals),
                output="ai" if generated.ai_powered else "rules",
                status="completed",
                duration_ms=round((perf_counter() - started) * 1000, 2),
            )
        )

    log_metric("plan.tasks_generated", len(generated.tasks), {"ai_powered": generated.ai_powered})
    logger.info(
        "Planned %s tasks for %s goals (%s calendar events, ai=%s)",
        len(generated.tasks),
        len(goals),
        len(busy),
        generated.ai_powered,
    )
    return PlanningRun(
        goals=goals,
        tasks=generated.tasks,
        reasoning_trail=generated.reasoning_trail,
        ai_powered=generated.ai_powered,
        calendar_events_used=len(busy),
    )
