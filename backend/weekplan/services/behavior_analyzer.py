"""Completion-behaviour statistics and the insights derived from them.

``summarize_behavior`` produces the BehaviorSnapshot the replanner and the
adjustment policy consume. ``analyze_behavior`` builds the richer, user-facing
view (patterns, today's insight card, recommendations) on top of it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence

from weekplan.api.schemas.coaching import (
    BehaviorPattern,
    BehaviorSnapshot,
    DailyInsight,
    SkipPattern,
    TimeSlot,
)
from weekplan.api.schemas.integrations import FitnessSample
from weekplan.api.schemas.task import Task
from weekplan.services.identifiers import IdFactory, new_id, utc_now
from weekplan.services.time_slots import hour_of

logger = logging.getLogger(__name__)

DEFAULT_COMPLETION_MINUTES = 40
LATE_NIGHT_HOUR = 21
_SLOT_ORDER: tuple[TimeSlot, ...] = ("morning", "afternoon", "evening")


@dataclass
class BehaviorAnalysis:
    behavior: BehaviorSnapshot
    patterns: List[BehaviorPattern]
    insights: DailyInsight
    recommendations: List[str]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for the non-negative values used in percentages and averages."""
    return int(value + 0.5)


def completion_percent(done: int, total: int) -> int:
    return round_half_up(100 * done / total) if total else 0


def time_slot_for(start_time: str) -> TimeSlot:
    hour = hour_of(start_time)
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    return "evening"


def summarize_behavior(tasks: Sequence[Task], today: date | None = None) -> BehaviorSnapshot:
    """Recompute the behaviour snapshot from scratch over every task supplied."""
    today = today or date.today()
    done = [task for task in tasks if task.status == "done"]
    return BehaviorSnapshot(
        avg_completion_minutes=_average_completion_minutes(done),
        preferred_time_slot=_preferred_time_slot(done),
        skip_pattern=classify_skip_pattern(tasks),
        streak_days=compute_streak(tasks, today),
    )


def _average_completion_minutes(done: Sequence[Task]) -> int:
    if not done:
        return DEFAULT_COMPLETION_MINUTES
    total = sum(task.actual_minutes if task.actual_minutes is not None else task.estimated_minutes for task in done)
    return round_half_up(total / len(done))


def _preferred_time_slot(done: Sequence[Task]) -> TimeSlot:
    counts = _slot_counts(done)
    best = max(counts.values(), default=0)
    leaders = [slot for slot, count in counts.items() if count == best]
    if best == 0 or len(leaders) > 1:
        return "evening"
    return leaders[0]


def _slot_counts(tasks: Sequence[Task]) -> Dict[TimeSlot, int]:
    counts: Dict[TimeSlot, int] = {slot: 0 for slot in _SLOT_ORDER}
    for task in tasks:
        counts[time_slot_for(task.start_time)] += 1
    return counts


def classify_skip_pattern(tasks: Sequence[Task]) -> SkipPattern:
    """Difficulty skew is checked before lateness skew; each needs a strict majority."""
    skipped = [task for task in tasks if task.status == "skipped"]
    if not skipped:
        return "none"
    half = len(skipped) / 2
    if sum(1 for task in skipped if task.difficulty == "hard") > half:
        return "difficulty"
    if sum(1 for task in skipped if hour_of(task.start_time) >= LATE_NIGHT_HOUR) > half:
        return "late_night"
    return "random"


def compute_streak(tasks: Sequence[Task], today: date | None = None) -> int:
    """Consecutive days, ending today (or yesterday if nothing is done yet today), with a done task."""
    today = today or date.today()
    completion_days = {_completion_day(task) for task in tasks if task.status == "done"}
    cursor = today if today in completion_days else today - timedelta(days=1)
    streak = 0
    while cursor in completion_days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def _completion_day(task: Task) -> date:
    if task.completed_at is not None:
        return task.completed_at.date()
    return task.scheduled_date


def analyze_behavior(
    tasks: Sequence[Task],
    fitness_sample: Optional[FitnessSample] = None,
    *,
    today: date | None = None,
    now: datetime | None = None,
    id_factory: IdFactory = new_id,
) -> BehaviorAnalysis:
    """Build patterns, today's insight and recommendations from the task history."""
    today = today or date.today()
    now = now or utc_now()
    behavior = summarize_behavior(tasks, today)
    day0 = [task for task in tasks if task.day_index == 0]
    day0_done = [task for task in day0 if task.status == "done"]
    done = [task for task in tasks if task.status == "done"]
    skipped = [task for task in tasks if task.status == "skipped"]
    today_rate = completion_percent(len(day0_done), len(day0))
    energy = _energy_level(fitness_sample)

    patterns: List[BehaviorPattern] = []

    def add(kind, title, description, insight, confidence, data_points) -> None:
        patterns.append(
            BehaviorPattern(
                id=id_factory("pattern"),
                type=kind,
                title=title,
                description=description,
                insight=insight,
                confidence=round(min(max(confidence, 0.0), 1.0), 2),
                detected_at=now,
                data_points=data_points,
            )
        )

    if done:
        slot_share = _slot_counts(done)[behavior.preferred_time_slot] / len(done)
        add(
            "productivity_peak",
            f"{behavior.preferred_time_slot.title()} Performer",
            f"Most completed sessions start in the {behavior.preferred_time_slot}.",
            f"Schedule demanding work in the {behavior.preferred_time_slot}.",
            slot_share,
            len(done),
        )
        add(
            "focus_duration",
            "Typical Focus Block",
            f"Completed sessions average {behavior.avg_completion_minutes} minutes.",
            "Plan sessions close to this length to keep them finishable.",
            min(len(done) / 10, 1.0),
            len(done),
        )
    if day0:
        add(
            "completion_rate",
            "Today's Completion",
            f"{len(day0_done)} of {len(day0)} tasks done today ({today_rate}%).",
            "On track." if today_rate >= 70 else "Lighter days rebuild momentum.",
            min(len(day0) / 5, 1.0),
            len(day0),
        )
    if behavior.skip_pattern != "none":
        add(
            "skip_pattern",
            _SKIP_TITLES[behavior.skip_pattern],
            f"{len(skipped)} skipped tasks analysed.",
            _SKIP_INSIGHTS[behavior.skip_pattern],
            0.5 if behavior.skip_pattern == "random" else 0.8,
            len(skipped),
        )
    if behavior.streak_days >= 3:
        add(
            "streak",
            f"{behavior.streak_days}-Day Streak",
            f"At least one task completed on each of the last {behavior.streak_days} days.",
            "Consistency is compounding. Protect the streak with one small task a day.",
            min(behavior.streak_days / 7, 1.0),
            behavior.streak_days,
        )
    if energy == "low" and fitness_sample is not None:
        add(
            "low_energy",
            "Low Energy Day",
            f"{fitness_sample.steps} steps against a goal of {fitness_sample.steps_goal}.",
            "Favour shorter, easier sessions today.",
            0.6,
            1,
        )

    insights = DailyInsight(
        date=today,
        tasks_completed=len(day0_done),
        tasks_total=len(day0),
        completion_rate=today_rate,
        focus_minutes=sum(
            task.actual_minutes if task.actual_minutes is not None else task.estimated_minutes for task in day0_done
        ),
        streak_days=behavior.streak_days,
        mood=_mood_for(today_rate, len(day0)),
        energy_level=energy,
    )
    recommendations = _recommendations(behavior, today_rate, energy, bool(day0))
    logger.debug(
        "Behaviour analysed: slot=%s skip=%s streak=%s patterns=%s",
        behavior.preferred_time_slot,
        behavior.skip_pattern,
        behavior.streak_days,
        len(patterns),
    )
    return BehaviorAnalysis(behavior=behavior, patterns=patterns, insights=insights, recommendations=recommendations)


_SKIP_TITLES = {
    "difficulty": "Hard Tasks Get Skipped",
    "late_night": "Late Sessions Get Skipped",
    "random": "Occasional Skips",
}
_SKIP_INSIGHTS = {
    "difficulty": "Open the day with an easy task before tackling hard ones.",
    "late_night": "Sessions after 9 PM rarely happen; move them earlier.",
    "random": "No single cause stands out; keep the load steady.",
}


def _energy_level(sample: Optional[FitnessSample]) -> str:
    if sample is None:
        return "medium"
    ratio = sample.steps / sample.steps_goal if sample.steps_goal else 1.0
    rested = sample.sleep_hours is None or sample.sleep_hours >= 7
    if ratio >= 1.0 and rested:
        return "high"
    if ratio < 0.5 or (sample.sleep_hours is not None and sample.sleep_hours < 6):
        return "low"
    return "medium"


def _mood_for(rate: int, total: int) -> str:
    if total == 0:
        return "okay"
    if rate >= 90:
        return "great"
    if rate >= 70:
        return "good"
    if rate >= 40:
        return "okay"
    return "low"


def _recommendations(behavior: BehaviorSnapshot, today_rate: int, energy: str, has_today: bool) -> List[str]:
    recs: List[str] = []
    if behavior.skip_pattern == "difficulty":
        recs.append("Start tomorrow with your easiest task to build momentum.")
    elif behavior.skip_pattern == "late_night":
        recs.append("Move sessions scheduled after 9 PM to the early evening.")
    if has_today and today_rate < 50:
        recs.append("Try shorter sessions with a 15-minute break between them.")
    if energy == "low":
        recs.append("Energy looks low today: a short walk before studying can help.")
    recs.append(f"Protect your {behavior.preferred_time_slot} focus window; it is when you finish most work.")
    if behavior.streak_days >= 3:
        recs.append(f"Keep your {behavior.streak_days}-day streak alive with one small task tomorrow.")
    return recs
