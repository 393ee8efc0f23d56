"""Task generation strategies.

The rule-based planner is always available. The LLM strategy is tried only
when enabled and configured; any failure or an empty answer falls back to the
rules so callers always receive the same ``Task`` schema.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Sequence

import openai
from pydantic import BaseModel, Field, ValidationError

from weekplan.api.schemas.agent_log import ReasoningStep
from weekplan.api.schemas.common import ClockTime, DayIndex
from weekplan.api.schemas.goal import Goal
from weekplan.api.schemas.integrations import CalendarEvent
from weekplan.api.schemas.profile import UserProfile
from weekplan.api.schemas.task import Task, TaskDifficulty
from weekplan.core.config import Settings, settings
from weekplan.core.errors import PlanInputError
from weekplan.observability.metrics import log_metric
from weekplan.observability.tracing import trace
from weekplan.services.identifiers import IdFactory, new_id
from weekplan.services.reasoning import ReasoningTrail
from weekplan.services.time_slots import date_for_day_offset, parse_time
from weekplan.services.weekly_planner import generate_multi_goal_plan

logger = logging.getLogger(__name__)

MIN_SUGGESTIONS = 20
MAX_SUGGESTIONS = 30


@dataclass
class GenerationResult:
    tasks: List[Task]
    reasoning_trail: List[ReasoningStep] = field(default_factory=list)
    ai_powered: bool = False


class TaskSuggestion(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    estimated_minutes: int = Field(..., gt=0, le=240)
    difficulty: TaskDifficulty = "medium"
    goal_index: int = Field(default=0, ge=0)
    day_index: DayIndex
    start_time: ClockTime


class RuleBasedTaskGenerator:
    def generate(
        self,
        goals: Sequence[Goal],
        profile: UserProfile,
        busy_intervals: Sequence[CalendarEvent],
        *,
        today: date | None = None,
        now: datetime | None = None,
        id_factory: IdFactory = new_id,
    ) -> GenerationResult:
        plan = generate_multi_goal_plan(goals, profile, busy_intervals, today=today, now=now, id_factory=id_factory)
        return GenerationResult(tasks=plan.tasks, reasoning_trail=plan.reasoning_trail, ai_powered=False)


class LLMTaskGenerator:
    """Asks an OpenAI chat model for a week of tasks in JSON mode."""

    def __init__(self, client: "openai.OpenAI", model: str) -> None:
        self.client = client
        self.model = model

    def generate(
        self,
        goals: Sequence[Goal],
        profile: UserProfile,
        busy_intervals: Sequence[CalendarEvent],
        *,
        today: date | None = None,
        now: datetime | None = None,
        id_factory: IdFactory = new_id,
    ) -> GenerationResult:
        today = today or date.today()
        response = self.client.chat.completions.create(
            model=self.model,
            response_format={"type": "json_object"},
            temperature=0.4,
            messages=[
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": _build_user_prompt(goals, profile, busy_intervals)},
            ],
        )
        content = response.choices[0].message.content or "{}"
        payload = json.loads(content)
        suggestions = parse_suggestions(payload)
        tasks = suggestions_to_tasks(suggestions, goals, today=today, id_factory=id_factory)

        trail = ReasoningTrail(now=now, id_factory=id_factory)
        trail.record(
            "understand",
            "Analyzing Goals With AI",
            f"Sent {len(goals)} goals and {len(busy_intervals)} calendar events to {self.model}.",
            {"goals": len(goals), "model": self.model},
        )
        trail.record(
            "execute",
            "AI Schedule Generated",
            f"Accepted {len(tasks)} of {len(suggestions)} suggested tasks.",
            {"accepted": len(tasks), "suggested": len(suggestions)},
        )
        trail.record("update", "Plan Ready", "AI-generated schedule is ready. Ready to begin!")
        return GenerationResult(tasks=tasks, reasoning_trail=trail.steps, ai_powered=True)


_SYSTEM_PROMPT = (
    "You are an AI life planning assistant. Build a realistic 7-day schedule of specific, actionable tasks "
    "for the user's goals. Respond with JSON only."
)


def _build_user_prompt(goals: Sequence[Goal], profile: UserProfile, busy_intervals: Sequence[CalendarEvent]) -> str:
    goal_lines = "\n".join(
        f"Goal {index}: {goal.title} ({goal.category}). {goal.description} "
        f"Target: {goal.target_value or '-'} {goal.unit or ''} in {goal.target_weeks} weeks."
        for index, goal in enumerate(goals)
    )
    busy_lines = "\n".join(f"- {event.title}: {event.start} to {event.end}" for event in busy_intervals) or "- none"
    prefs = profile.preferences
    return (
        f"{goal_lines}\n\n"
        f"Focus time: {prefs.focus_time_start}-{prefs.focus_time_end}. "
        f"College hours: {profile.college_hours.start}-{profile.college_hours.end}. "
        f"Sleep hours: {profile.sleep_hours.start}-{profile.sleep_hours.end}. "
        f"Daily available minutes: {profile.daily_available_minutes}.\n"
        f"Busy intervals:\n{busy_lines}\n\n"
        f"Generate {MIN_SUGGESTIONS}-{MAX_SUGGESTIONS} tasks covering all goals. Return an object "
        '{"tasks": [{"title", "description", "estimated_minutes", "difficulty" (easy|medium|hard), '
        '"goal_index", "day_index" (0-6, 0 is today), "start_time" ("HH:MM")}]}.'
    )


def parse_suggestions(payload: object) -> List[TaskSuggestion]:
    """Validate raw model output, dropping entries that do not fit the schema."""
    items = payload.get("tasks", []) if isinstance(payload, dict) else payload
    if not isinstance(items, list):
        return []
    suggestions: List[TaskSuggestion] = []
    for item in items[:MAX_SUGGESTIONS]:
        try:
            suggestions.append(TaskSuggestion.model_validate(item))
        except ValidationError as exc:
            logger.debug("Discarding invalid AI task suggestion: %s", exc.errors()[:1])
    return suggestions


def suggestions_to_tasks(
    suggestions: Sequence[TaskSuggestion],
    goals: Sequence[Goal],
    *,
    today: date | None = None,
    id_factory: IdFactory = new_id,
) -> List[Task]:
    if not goals:
        return []
    tasks = [
        Task(
            id=id_factory("task"),
            # Unknown goal indexes attach to the first goal.
            goal_id=goals[item.goal_index].id if item.goal_index < len(goals) else goals[0].id,
            title=item.title,
            description=item.description,
            day_index=item.day_index,
            scheduled_date=date_for_day_offset(item.day_index, today),
            estimated_minutes=item.estimated_minutes,
            start_time=item.start_time,
            status="pending",
            difficulty=item.difficulty,
        )
        for item in suggestions
    ]
    tasks.sort(key=lambda task: (task.day_index, parse_time(task.start_time)))
    return tasks


def build_llm_generator(config: Settings | None = None) -> Optional[LLMTaskGenerator]:
    config = config or settings
    if not config.openai_api_key:
        return None
    client = openai.OpenAI(api_key=config.openai_api_key, timeout=config.ai_timeout_seconds, max_retries=0)
    return LLMTaskGenerator(client, config.openai_model)


def generate_tasks(
    goals: Sequence[Goal],
    profile: UserProfile,
    busy_intervals: Sequence[CalendarEvent] = (),
    *,
    use_ai: bool = False,
    today: date | None = None,
    now: datetime | None = None,
    id_factory: IdFactory = new_id,
    request_id: str | None = None,
    llm_generator: Optional[LLMTaskGenerator] = None,
) -> GenerationResult:
    """Generate the week's tasks, preferring the LLM when asked and falling back to rules."""
    if not goals:
        raise PlanInputError("At least one goal is required to generate a plan.")

    fallback = RuleBasedTaskGenerator()
    generator = llm_generator or (build_llm_generator() if use_ai else None)
    if not use_ai or generator is None:
        if use_ai:
            logger.info("OPENAI_API_KEY missing; using rule-based plan.")
        return fallback.generate(goals, profile, busy_intervals, today=today, now=now, id_factory=id_factory)

    with trace("plan.generate_ai", metadata={"goals": len(goals), "model": generator.model}, request_id=request_id) as ai_trace:
        try:
            result = generator.generate(goals, profile, busy_intervals, today=today, now=now, id_factory=id_factory)
        except Exception as exc:
            logger.warning("AI task generation failed, falling back to rules: %s", exc)
            result = None
        if result is None or not result.tasks:
            log_metric("plan.ai_fallback.used", 1, {"goals": len(goals)})
            result = fallback.generate(goals, profile, busy_intervals, today=today, now=now, id_factory=id_factory)
        if ai_trace:
            ai_trace.update(output={"ai_powered": result.ai_powered, "tasks": len(result.tasks)})
    return result
