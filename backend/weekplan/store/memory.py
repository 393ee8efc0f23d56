"""Process-local store backed by plain lists and dicts."""
from __future__ import annotations

import copy
from contextlib import contextmanager
from datetime import date
from threading import RLock
from typing import Dict, Iterator, List, Optional, Sequence, TypeVar

from pydantic import BaseModel

from weekplan.api.schemas.agent_log import AgentAction, PlanSnapshot, ReasoningStep
from weekplan.api.schemas.coaching import CoachMessage, MicroAdjustment
from weekplan.api.schemas.goal import Goal
from weekplan.api.schemas.integrations import CalendarEvent, FitnessSample
from weekplan.api.schemas.task import Task
from weekplan.store.base import PlannerStore

ModelT = TypeVar("ModelT", bound=BaseModel)

_STATE_FIELDS = (
    "_goals",
    "_tasks",
    "_snapshots",
    "_adjustments",
    "_reasoning",
    "_coach_messages",
    "_agent_actions",
    "_calendar_events",
    "_fitness",
)


def _copy(items: Sequence[ModelT]) -> List[ModelT]:
    return [item.model_copy(deep=True) for item in items]


class InMemoryPlannerStore(PlannerStore):
    def __init__(self) -> None:
        super().__init__()
        self._lock = RLock()
        self._goals: List[Goal] = []
        self._tasks: List[Task] = []
        self._snapshots: List[PlanSnapshot] = []
        self._adjustments: List[MicroAdjustment] = []
        self._reasoning: List[ReasoningStep] = []
        self._coach_messages: List[CoachMessage] = []
        self._agent_actions: List[AgentAction] = []
        self._calendar_events: List[CalendarEvent] = []
        self._fitness: Dict[date, FitnessSample] = {}

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        with self._lock:
            saved = {name: copy.deepcopy(getattr(self, name)) for name in _STATE_FIELDS}
            try:
                yield
            except Exception:
                for name, value in saved.items():
                    setattr(self, name, value)
                raise

    def reset(self) -> None:
        with self._lock:
            self._goals = []
            self._tasks = []
            self._snapshots = []
            self._adjustments = []
            self._reasoning = []
            self._coach_messages = []
            self._agent_actions = []

    def get_goals(self) -> List[Goal]:
        with self._lock:
            return _copy(self._goals)

    def set_goals(self, goals: Sequence[Goal]) -> None:
        with self._lock:
            self._goals = _copy(goals)

    def get_tasks(self) -> List[Task]:
        with self._lock:
            return _copy(self._tasks)

    def set_tasks(self, tasks: Sequence[Task]) -> None:
        with self._lock:
            self._tasks = _copy(tasks)

    def save_task(self, task: Task) -> None:
        with self._lock:
            self._tasks = [task.model_copy(deep=True) if item.id == task.id else item for item in self._tasks]

    def get_snapshots(self) -> List[PlanSnapshot]:
        with self._lock:
            return _copy(self._snapshots)

    def append_snapshot(self, snapshot: PlanSnapshot) -> None:
        with self._lock:
            self._snapshots.append(snapshot.model_copy(deep=True))

    def get_adjustments(self) -> List[MicroAdjustment]:
        with self._lock:
            return _copy(self._adjustments)

    def set_adjustments(self, adjustments: Sequence[MicroAdjustment]) -> None:
        with self._lock:
            self._adjustments = _copy(adjustments)

    def save_adjustment(self, adjustment: MicroAdjustment) -> None:
        with self._lock:
            self._adjustments = [
                adjustment.model_copy(deep=True) if item.id == adjustment.id else item for item in self._adjustments
            ]

    def get_reasoning(self) -> List[ReasoningStep]:
        with self._lock:
            return _copy(self._reasoning)

    def append_reasoning(self, steps: Sequence[ReasoningStep]) -> None:
        with self._lock:
            self._reasoning.extend(_copy(steps))

    def clear_reasoning(self) -> None:
        with self._lock:
            self._reasoning = []

    def get_coach_messages(self) -> List[CoachMessage]:
        with self._lock:
            return _copy(self._coach_messages)

    def append_coach_message(self, message: CoachMessage) -> None:
        with self._lock:
            self._coach_messages.append(message.model_copy(deep=True))

    def get_agent_actions(self) -> List[AgentAction]:
        with self._lock:
            return _copy(self._agent_actions)

    def append_agent_action(self, action: AgentAction) -> None:
        with self._lock:
            self._agent_actions.append(action.model_copy(deep=True))

    def get_calendar_events(self) -> List[CalendarEvent]:
        with self._lock:
            return _copy(self._calendar_events)

    def set_calendar_events(self, events: Sequence[CalendarEvent]) -> None:
        with self._lock:
            self._calendar_events = _copy(events)

    def get_fitness_sample(self, day: date) -> Optional[FitnessSample]:
        with self._lock:
            sample = self._fitness.get(day)
            return sample.model_copy(deep=True) if sample else None

    def save_fitness_sample(self, sample: FitnessSample) -> None:
        with self._lock:
            self._fitness[sample.date] = sample.model_copy(deep=True)

    def get_fitness_history(self, limit: int = 7) -> List[FitnessSample]:
        with self._lock:
            recent = sorted(self._fitness.values(), key=lambda sample: sample.date, reverse=True)[:limit]
            return _copy(recent)
