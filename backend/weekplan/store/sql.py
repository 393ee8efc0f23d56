"""SQLAlchemy-backed store.

Structured records live in their own tables. Snapshots, reasoning steps,
coach messages and agent actions are journal entries in ``agent_actions_log``.

Outside a planning cycle every call commits on its own. Inside one, all calls
made by the cycle's thread share a single session that commits once when the
cycle ends and rolls back if it raises.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Callable, Iterator, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Session

from weekplan.api.schemas.agent_log import AgentAction, PlanSnapshot, ReasoningStep
from weekplan.api.schemas.coaching import CoachMessage, MicroAdjustment
from weekplan.api.schemas.goal import Goal
from weekplan.api.schemas.integrations import CalendarEvent, FitnessSample
from weekplan.api.schemas.task import Task
from weekplan.db import models
from weekplan.db.base import Base
from weekplan.store.base import PlannerStore

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

SNAPSHOT = "plan_snapshot"
REASONING = "reasoning_step"
COACH_MESSAGE = "coach_message"
AGENT_ACTION = "agent_action"

_JOURNAL_TYPES = (SNAPSHOT, REASONING, COACH_MESSAGE, AGENT_ACTION)


class SqlPlannerStore(PlannerStore):
    def __init__(self, session_factory: Callable[[], Session], *, create_tables: bool = True) -> None:
        super().__init__()
        self._session_factory = session_factory
        self._local = threading.local()
        if create_tables:
            with self._session_factory() as db:
                Base.metadata.create_all(bind=db.get_bind())

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        if getattr(self._local, "session", None) is not None:
            yield
            return
        db = self._session_factory()
        self._local.session = db
        try:
            yield
            db.commit()
        except Exception:
            db.rollback()
            logger.warning("Planning cycle rolled back")
            raise
        finally:
            self._local.session = None
            db.close()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        shared = getattr(self._local, "session", None)
        if shared is not None:
            yield shared
            shared.flush()
            return
        with self._session_factory() as db:
            yield db
            db.commit()

    def reset(self) -> None:
        with self._session() as db:
            db.query(models.Task).delete()
            db.query(models.Goal).delete()
            db.query(models.MicroAdjustment).delete()
            db.query(models.AgentActionLog).filter(models.AgentActionLog.action_type.in_(_JOURNAL_TYPES)).delete()
        logger.debug("Planner tables cleared")

    # ordered tables

    def _load(self, orm_cls, schema: Type[ModelT]) -> List[ModelT]:
        with self._session() as db:
            rows = db.query(orm_cls).order_by(orm_cls.position).all()
            return [schema.model_validate(row, from_attributes=True) for row in rows]

    def _replace(self, orm_cls, items: Sequence[BaseModel]) -> None:
        # Upsert rather than delete-all so rewriting goals never cascades into their tasks.
        keep = [item.id for item in items]
        with self._session() as db:
            db.query(orm_cls).filter(orm_cls.id.notin_(keep)).delete()
            for position, item in enumerate(items):
                db.merge(orm_cls(position=position, **item.model_dump()))

    def _update(self, orm_cls, item: BaseModel) -> None:
        with self._session() as db:
            row = db.get(orm_cls, item.id)
            if row is None:
                return
            for key, value in item.model_dump().items():
                setattr(row, key, value)

    def get_goals(self) -> List[Goal]:
        return self._load(models.Goal, Goal)

    def set_goals(self, goals: Sequence[Goal]) -> None:
        self._replace(models.Goal, goals)

    def get_tasks(self) -> List[Task]:
        return self._load(models.Task, Task)

    def set_tasks(self, tasks: Sequence[Task]) -> None:
        self._replace(models.Task, tasks)

    def get_task(self, task_id: str) -> Optional[Task]:
        with self._session() as db:
            row = db.get(models.Task, task_id)
            return Task.model_validate(row, from_attributes=True) if row else None

    def save_task(self, task: Task) -> None:
        self._update(models.Task, task)

    def get_adjustments(self) -> List[MicroAdjustment]:
        return self._load(models.MicroAdjustment, MicroAdjustment)

    def set_adjustments(self, adjustments: Sequence[MicroAdjustment]) -> None:
        self._replace(models.MicroAdjustment, adjustments)

    def get_adjustment(self, adjustment_id: str) -> Optional[MicroAdjustment]:
        with self._session() as db:
            row = db.get(models.MicroAdjustment, adjustment_id)
            return MicroAdjustment.model_validate(row, from_attributes=True) if row else None

    def save_adjustment(self, adjustment: MicroAdjustment) -> None:
        self._update(models.MicroAdjustment, adjustment)

    def get_calendar_events(self) -> List[CalendarEvent]:
        return self._load(models.CalendarEvent, CalendarEvent)

    def set_calendar_events(self, events: Sequence[CalendarEvent]) -> None:
        self._replace(models.CalendarEvent, events)

    # fitness

    def get_fitness_sample(self, day: date) -> Optional[FitnessSample]:
        with self._session() as db:
            row = db.get(models.FitnessSample, day)
            return FitnessSample.model_validate(row, from_attributes=True) if row else None

    def save_fitness_sample(self, sample: FitnessSample) -> None:
        with self._session() as db:
            db.merge(models.FitnessSample(**sample.model_dump()))

    def get_fitness_history(self, limit: int = 7) -> List[FitnessSample]:
        with self._session() as db:
            rows = db.query(models.FitnessSample).order_by(models.FitnessSample.date.desc()).limit(limit).all()
            return [FitnessSample.model_validate(row, from_attributes=True) for row in rows]

    # journal

    def _journal(self, action_type: str, schema: Type[ModelT]) -> List[ModelT]:
        with self._session() as db:
            rows = (
                db.query(models.AgentActionLog)
                .filter(models.AgentActionLog.action_type == action_type)
                .order_by(models.AgentActionLog.id)
                .all()
            )
            return [schema.model_validate(row.action_payload) for row in rows]

    def _append_journal(self, action_type: str, items: Sequence[BaseModel], reason: str | None = None) -> None:
        with self._session() as db:
            for item in items:
                db.add(
                    models.AgentActionLog(
                        action_type=action_type,
                        action_payload=item.model_dump(mode="json"),
                        reason=reason,
                    )
                )

    def get_snapshots(self) -> List[PlanSnapshot]:
        return self._journal(SNAPSHOT, PlanSnapshot)

    def append_snapshot(self, snapshot: PlanSnapshot) -> None:
        self._append_journal(SNAPSHOT, [snapshot], reason=snapshot.reason)

    def get_reasoning(self) -> List[ReasoningStep]:
        return self._journal(REASONING, ReasoningStep)

    def append_reasoning(self, steps: Sequence[ReasoningStep]) -> None:
        self._append_journal(REASONING, steps)

    def clear_reasoning(self) -> None:
        with self._session() as db:
            db.query(models.AgentActionLog).filter(models.AgentActionLog.action_type == REASONING).delete()

    def get_coach_messages(self) -> List[CoachMessage]:
        return self._journal(COACH_MESSAGE, CoachMessage)

    def append_coach_message(self, message: CoachMessage) -> None:
        self._append_journal(COACH_MESSAGE, [message])

    def get_agent_actions(self) -> List[AgentAction]:
        return self._journal(AGENT_ACTION, AgentAction)

    def append_agent_action(self, action: AgentAction) -> None:
        self._append_journal(AGENT_ACTION, [action], reason=action.title)
