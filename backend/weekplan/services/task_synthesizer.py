"""Turn a single goal into a 7-day sequence of scheduled tasks.

Two policies, picked by goal category:

* study/default: a 5-unit x 4-topic syllabus laid out 3 sessions a day
  (2 on the last day) from the user's focus window, stepping around busy
  intervals in 30-minute increments and never starting after 22:00;
* fitness/health: a daily steps tracker plus an exercise session every
  other day on a Cardio/Strength/Yoga/HIIT rotation.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Sequence

from weekplan.api.schemas.goal import Goal
from weekplan.api.schemas.integrations import CalendarEvent
from weekplan.api.schemas.profile import UserProfile
from weekplan.api.schemas.task import Task, TaskDifficulty
from weekplan.services.identifiers import IdFactory, new_id
from weekplan.services.time_slots import date_for_day_offset, format_minutes, has_conflict, parse_time

logger = logging.getLogger(__name__)

PLANNING_DAYS = 7
STUDY_UNITS = 5
TOPICS_PER_UNIT = 4
STUDY_CAPACITY = STUDY_UNITS * TOPICS_PER_UNIT
RETRY_STEP_MINUTES = 30
DAY_CUTOFF = "22:00"
DEFAULT_FOCUS_START = "18:00"
DEFAULT_SESSION_MINUTES = 40

FITNESS_CATEGORIES = frozenset({"Fitness", "Health"})
DEFAULT_STEP_TARGET = 5000
STEPS_START, STEPS_MINUTES = "07:00", 60
EXERCISE_START, EXERCISE_MINUTES = "17:30", 30

SYLLABUS: Dict[int, List[tuple[str, str]]] = {
    1: [
        ("Introduction to ML", "what machine learning is and where it is used"),
        ("Types of Learning", "supervised, unsupervised and reinforcement learning"),
        ("ML Pipeline", "the path from data collection to deployment"),
        ("Data Preprocessing", "cleaning, normalizing and preparing data"),
    ],
    2: [
        ("Linear Regression", "predicting continuous values with linear models"),
        ("Logistic Regression", "classification with the sigmoid function"),
        ("Gradient Descent", "optimizing model parameters"),
        ("Model Evaluation", "accuracy, precision, recall and F1"),
    ],
    3: [
        ("Decision Trees", "building tree-based classifiers"),
        ("Random Forests", "ensembles of decision trees"),
        ("SVM Basics", "maximum margin classifiers"),
        ("Ensemble Methods", "bagging and boosting"),
    ],
    4: [
        ("Neural Networks Intro", "perceptrons and multi-layer networks"),
        ("Backpropagation", "training neural networks"),
        ("CNNs Overview", "image recognition architectures"),
        ("RNNs Overview", "sequence modeling networks"),
    ],
    5: [
        ("Clustering (K-Means)", "unsupervised grouping"),
        ("Dimensionality Reduction", "reducing feature dimensions"),
        ("PCA", "principal component analysis"),
        ("Final Review", "a full course review"),
    ],
}

EXERCISE_ROTATION = [
    ("Cardio", "20-30 min cardio: jogging, cycling, or brisk walking"),
    ("Strength", "Full body strength training with bodyweight exercises"),
    ("Yoga", "Relaxation and flexibility focused yoga session"),
    ("HIIT", "High-intensity interval training for maximum calorie burn"),
]


def synthesize_tasks(
    goal: Goal,
    profile: UserProfile,
    busy_intervals: Sequence[CalendarEvent] = (),
    *,
    today: date | None = None,
    id_factory: IdFactory = new_id,
) -> List[Task]:
    """Produce the goal's tasks for the next seven days, ordered by day."""
    today = today or date.today()
    if goal.category in FITNESS_CATEGORIES:
        return _fitness_tasks(goal, today, id_factory)
    return _study_tasks(goal, profile, busy_intervals, today, id_factory)


def determine_difficulty(index: int, total: int) -> TaskDifficulty:
    """Position-based difficulty: first 30% easy, next 40% medium, last 30% hard."""
    progress = index / total
    if progress < 0.3:
        return "easy"
    if progress < 0.7:
        return "medium"
    return "hard"


def sessions_for_day(day: int) -> int:
    return 3 if day < PLANNING_DAYS - 1 else 2


def _study_tasks(
    goal: Goal,
    profile: UserProfile,
    busy_intervals: Sequence[CalendarEvent],
    today: date,
    id_factory: IdFactory,
) -> List[Task]:
    prefs = profile.preferences
    session = prefs.preferred_session_length or DEFAULT_SESSION_MINUTES
    cutoff = parse_time(DAY_CUTOFF)
    focus_start = parse_time(prefs.focus_time_start or DEFAULT_FOCUS_START)

    tasks: List[Task] = []
    unit, topic = 1, 1
    for day in range(PLANNING_DAYS):
        # Minutes since midnight; kept unwrapped so late sessions cannot roll into the small hours.
        cursor = focus_start
        for _ in range(sessions_for_day(day)):
            if len(tasks) >= STUDY_CAPACITY:
                break
            while cursor <= cutoff and has_conflict(format_minutes(cursor), session, day, busy_intervals, today):
                cursor += RETRY_STEP_MINUTES
            if cursor > cutoff:
                logger.debug("No slot before %s on day %s for goal %s; skipping session", DAY_CUTOFF, day, goal.id)
                continue

            title, description = _study_topic(goal, unit, topic)
            tasks.append(
                Task(
                    id=id_factory("task"),
                    goal_id=goal.id,
                    title=title,
                    description=description,
                    day_index=day,
                    scheduled_date=date_for_day_offset(day, today),
                    estimated_minutes=session,
                    start_time=format_minutes(cursor),
                    status="pending",
                    difficulty=determine_difficulty(len(tasks), STUDY_CAPACITY),
                )
            )
            cursor += session + prefs.break_duration
            topic += 1
            if topic > TOPICS_PER_UNIT:
                unit += 1
                topic = 1
    return tasks


def _study_topic(goal: Goal, unit: int, topic: int) -> tuple[str, str]:
    if goal.category == "Study":
        name, focus = SYLLABUS[unit][topic - 1]
        return f"Unit {unit}: {name}", f"Study session for Unit {unit}, covering {focus}"
    return (
        f"{goal.title}: phase {unit}, step {topic}",
        f"Focused work block {topic} of phase {unit} toward '{goal.title}'",
    )


def _fitness_tasks(goal: Goal, today: date, id_factory: IdFactory) -> List[Task]:
    target = goal.target_value or DEFAULT_STEP_TARGET
    tasks: List[Task] = []
    for day in range(PLANNING_DAYS):
        scheduled = date_for_day_offset(day, today)
        tasks.append(
            Task(
                id=id_factory("fitness"),
                goal_id=goal.id,
                title=f"Daily Steps: {target:,} steps",
                description="Track your daily step count. Break it into: morning walk, lunch walk, evening activity.",
                day_index=day,
                scheduled_date=scheduled,
                estimated_minutes=STEPS_MINUTES,
                start_time=STEPS_START,
                status="in_progress" if day == 0 else "pending",
                difficulty="medium",
            )
        )
        if day % 2 == 0:
            kind, description = EXERCISE_ROTATION[(day // 2) % len(EXERCISE_ROTATION)]
            tasks.append(
                Task(
                    id=id_factory("exercise"),
                    goal_id=goal.id,
                    title=f"{kind} Session",
                    description=description,
                    day_index=day,
                    scheduled_date=scheduled,
                    estimated_minutes=EXERCISE_MINUTES,
                    start_time=EXERCISE_START,
                    status="pending",
                    difficulty="easy" if day < 4 else "medium",
                )
            )
    return tasks
