"""Translate planner errors into HTTP responses."""
from __future__ import annotations

from fastapi import HTTPException, status

from weekplan.core.errors import (
    AdjustmentAlreadyAppliedError,
    InvalidTransitionError,
    NotFoundError,
    PlanInputError,
    PlannerError,
)


def to_http_exception(exc: PlannerError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (AdjustmentAlreadyAppliedError, InvalidTransitionError)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, PlanInputError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=exc.to_dict())
