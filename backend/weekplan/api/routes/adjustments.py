"""Micro-adjustment routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from weekplan.api.errors import to_http_exception
from weekplan.api.schemas.coaching import AdjustmentApplyRequest, AdjustmentApplyResponse, AdjustmentListResponse
from weekplan.core.errors import PlannerError
from weekplan.services.adjustment_policy import apply_micro_adjustment
from weekplan.store import PlannerStore, get_store

router = APIRouter()


@router.get("/adjustments", response_model=AdjustmentListResponse, tags=["adjustments"])
def list_adjustments(
    http_request: Request,
    include_applied: bool = Query(False, description="Include adjustments that were already applied"),
    store: PlannerStore = Depends(get_store),
) -> AdjustmentListResponse:
    adjustments = store.get_adjustments()
    if not include_applied:
        adjustments = [item for item in adjustments if not item.applied]
    return AdjustmentListResponse(
        adjustments=adjustments,
        request_id=getattr(http_request.state, "request_id", None) or "",
    )


@router.post("/adjustments/apply", response_model=AdjustmentApplyResponse, tags=["adjustments"])
def apply_adjustment(
    payload: AdjustmentApplyRequest,
    http_request: Request,
    store: PlannerStore = Depends(get_store),
) -> AdjustmentApplyResponse:
    try:
        adjustment, tasks = apply_micro_adjustment(store, payload.adjustment_id)
    except PlannerError as exc:
        raise to_http_exception(exc) from exc
    return AdjustmentApplyResponse(
        adjustment=adjustment,
        tasks=tasks,
        message=f'Applied "{adjustment.title}"',
        request_id=getattr(http_request.state, "request_id", None) or "",
    )
