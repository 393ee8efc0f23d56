"""Persistence boundary for the planner.

Services talk to a ``PlannerStore`` and never to a concrete backend. Reads
return copies: mutating a returned record has no effect until it is written
back with the matching ``set_*``/``save_*``/``append_*`` call.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from threading import RLock
from typing import Iterator, List, Optional, Sequence

from weekplan.api.schemas.agent_log import AgentAction, PlanSnapshot, ReasoningStep
from weekplan.api.schemas.coaching import CoachMessage, MicroAdjustment
from weekplan.api.schemas.goal import Goal
from weekplan.api.schemas.integrations import CalendarEvent, FitnessSample
from weekplan.api.schemas.task import Task


class PlannerStore(ABC):
    """Get/set/append access to every record the planner owns."""

    def __init__(self) -> None:
        self._cycle_lock = RLock()

    @contextmanager
    def planning_cycle(self) -> Iterator[None]:
        """Run one plan, replan or adjustment cycle exclusively.

        Cycles on the same store never interleave, and the writes made inside
        one are kept together: an exception discards all of them.
        """
        with self._cycle_lock, self._atomic():
            yield

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        yield

    @abstractmethod
    def reset(self) -> None:
        """Drop all planning state (goals, tasks and everything derived from them)."""

    # goals
    @abstractmethod
    def get_goals(self) -> List[Goal]: ...

    @abstractmethod
    def set_goals(self, goals: Sequence[Goal]) -> None: ...

    # tasks
    @abstractmethod
    def get_tasks(self) -> List[Task]: ...

    @abstractmethod
    def set_tasks(self, tasks: Sequence[Task]) -> None: ...

    def get_task(self, task_id: str) -> Optional[Task]:
        return next((task for task in self.get_tasks() if task.id == task_id), None)

    @abstractmethod
    def save_task(self, task: Task) -> None:
        """Replace the stored task with the same id."""

    # snapshots
    @abstractmethod
    def get_snapshots(self) -> List[PlanSnapshot]: ...

    @abstractmethod
    def append_snapshot(self, snapshot: PlanSnapshot) -> None: ...

    # micro-adjustments
    @abstractmethod
    def get_adjustments(self) -> List[MicroAdjustment]: ...

    @abstractmethod
    def set_adjustments(self, adjustments: Sequence[MicroAdjustment]) -> None: ...

    def get_adjustment(self, adjustment_id: str) -> Optional[MicroAdjustment]:
        return next((item for item in self.get_adjustments() if item.id == adjustment_id), None)

    @abstractmethod
    def save_adjustment(self, adjustment: MicroAdjustment) -> None: ...

    # reasoning trail
    @abstractmethod
    def get_reasoning(self) -> List[ReasoningStep]: ...

    @abstractmethod
    def append_reasoning(self, steps: Sequence[ReasoningStep]) -> None: ...

    @abstractmethod
    def clear_reasoning(self) -> None: ...

    # coach messages and agent actions
    @abstractmethod
    def get_coach_messages(self) -> List[CoachMessage]: ...

    @abstractmethod
    def append_coach_message(self, message: CoachMessage) -> None: ...

    @abstractmethod
    def get_agent_actions(self) -> List[AgentAction]: ...

    @abstractmethod
    def append_agent_action(self, action: AgentAction) -> None: ...

    # integrations
    @abstractmethod
    def get_calendar_events(self) -> List[CalendarEvent]: ...

    @abstractmethod
    def set_calendar_events(self, events: Sequence[CalendarEvent]) -> None: ...

    def append_calendar_events(self, events: Sequence[CalendarEvent]) -> None:
        known = {event.id for event in events}
        kept = [event for event in self.get_calendar_events() if event.id not in known]
        self.set_calendar_events(kept + list(events))

    @abstractmethod
    def get_fitness_sample(self, day: date) -> Optional[FitnessSample]: ...

    @abstractmethod
    def save_fitness_sample(self, sample: FitnessSample) -> None: ...

    @abstractmethod
    def get_fitness_history(self, limit: int = 7) -> List[FitnessSample]:
        """Most recent samples first."""
