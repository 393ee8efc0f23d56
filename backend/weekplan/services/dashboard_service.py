"""Aggregation helpers for dashboard endpoint."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from weekplan.api.schemas.agent_log import AgentAction, ReasoningStep
from weekplan.api.schemas.coaching import BehaviorSnapshot, CoachMessage, MicroAdjustment
from weekplan.api.schemas.dashboard import DayStats, GoalProgress
from weekplan.api.schemas.goal import Goal
from weekplan.api.schemas.integrations import CalendarEvent, FitnessSample
from weekplan.api.schemas.task import Task
from weekplan.core.errors import NotFoundError
from weekplan.services.behavior_analyzer import completion_percent, summarize_behavior
from weekplan.services.task_synthesizer import PLANNING_DAYS
from weekplan.store.base import PlannerStore

RECENT_ACTIONS = 20


@dataclass
class DashboardData:
    goals: List[Goal]
    tasks: List[Task]
    today_tasks: List[Task]
    today_completion_percent: int
    week: List[DayStats]
    goal_progress: List[GoalProgress]
    behavior: BehaviorSnapshot
    pending_adjustments: List[MicroAdjustment]
    latest_coach_message: Optional[CoachMessage]
    reasoning_steps: List[ReasoningStep]
    agent_actions: List[AgentAction]
    fitness_today: Optional[FitnessSample]
    calendar_events: List[CalendarEvent]


def _week_stats(tasks: List[Task]) -> List[DayStats]:
    stats = []
    for day in range(PLANNING_DAYS):
        day_tasks = [task for task in tasks if task.day_index == day]
        stats.append(
            DayStats(
                day_index=day,
                total=len(day_tasks),
                completed=sum(1 for task in day_tasks if task.status == "done"),
                minutes=sum(task.estimated_minutes for task in day_tasks),
            )
        )
    return stats


def _goal_progress(goal: Goal) -> GoalProgress:
    current = goal.current_value or 0
    percent = min(100, completion_percent(current, goal.target_value)) if goal.target_value else 0
    return GoalProgress(
        goal_id=goal.id,
        title=goal.title,
        current_value=current,
        target_value=goal.target_value,
        percent=percent,
    )


def get_dashboard_data(store: PlannerStore, today: date | None = None) -> DashboardData:
    today = today or date.today()
    goals = store.get_goals()
    tasks = store.get_tasks()
    if not goals and not tasks:
        raise NotFoundError("No plan found. Please set up your goals first.")

    today_tasks = [task for task in tasks if task.day_index == 0]
    done_today = sum(1 for task in today_tasks if task.status == "done")
    coach_messages = store.get_coach_messages()
    actions = store.get_agent_actions()

    return DashboardData(
        goals=goals,
        tasks=tasks,
        today_tasks=today_tasks,
        today_completion_percent=completion_percent(done_today, len(today_tasks)),
        week=_week_stats(tasks),
        goal_progress=[_goal_progress(goal) for goal in goals],
        behavior=summarize_behavior(tasks, today),
        pending_adjustments=[item for item in store.get_adjustments() if not item.applied],
        latest_coach_message=coach_messages[-1] if coach_messages else None,
        reasoning_steps=store.get_reasoning(),
        agent_actions=list(reversed(actions))[:RECENT_ACTIONS],
        fitness_today=store.get_fitness_sample(today),
        calendar_events=store.get_calendar_events(),
    )
