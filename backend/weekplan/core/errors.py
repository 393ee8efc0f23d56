"""Error types raised by the planning core.

Input problems subclass ValueError and lookups subclass LookupError so
callers that only know the builtin hierarchy still branch correctly.
"""
from __future__ import annotations

from typing import Any


class PlannerError(Exception):
    """Base class for all planner errors."""

    code: str = "PLANNER_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class PlanInputError(PlannerError, ValueError):
    code = "INVALID_INPUT"


class InvalidTimeError(PlanInputError):
    code = "INVALID_TIME"

    def __init__(self, value: object):
        super().__init__(
            message=f"Expected a 24-hour 'HH:MM' time, got {value!r}.",
            details={"value": str(value)},
        )


class InvalidTransitionError(PlannerError, ValueError):
    code = "INVALID_TRANSITION"

    def __init__(self, task_id: str, current: str, requested: str):
        super().__init__(
            message=f"Task {task_id} cannot move from {current} to {requested}.",
            details={"task_id": task_id, "current": current, "requested": requested},
        )


class NothingToReplanError(PlannerError):
    code = "NOTHING_TO_REPLAN"

    def __init__(self):
        super().__init__(message="No tasks to replan. Generate a plan first.")


class NotFoundError(PlannerError, LookupError):
    code = "NOT_FOUND"


class TaskNotFoundError(NotFoundError):
    code = "TASK_NOT_FOUND"

    def __init__(self, task_id: str):
        super().__init__(message=f"Task {task_id} not found.", details={"task_id": task_id})


class AdjustmentNotFoundError(NotFoundError):
    code = "ADJUSTMENT_NOT_FOUND"

    def __init__(self, adjustment_id: str):
        super().__init__(
            message=f"Adjustment {adjustment_id} not found.",
            details={"adjustment_id": adjustment_id},
        )


class AdjustmentAlreadyAppliedError(PlannerError):
    code = "ADJUSTMENT_ALREADY_APPLIED"

    def __init__(self, adjustment_id: str):
        super().__init__(
            message=f"Adjustment {adjustment_id} was already applied.",
            details={"adjustment_id": adjustment_id},
        )
