"""Dashboard API routes."""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from weekplan.api.errors import to_http_exception
from weekplan.api.schemas.dashboard import DashboardResponse
from weekplan.core.errors import PlannerError
from weekplan.observability.metrics import log_metric
from weekplan.observability.tracing import trace
from weekplan.services.dashboard_service import get_dashboard_data
from weekplan.store import PlannerStore, get_store

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse, tags=["dashboard"])
def get_dashboard(http_request: Request, store: PlannerStore = Depends(get_store)) -> DashboardResponse:
    request_id = getattr(http_request.state, "request_id", None)
    start_time = datetime.now(timezone.utc)

    try:
        with trace("dashboard.get", metadata={"request_id": request_id}, request_id=request_id):
            data = get_dashboard_data(store)
    except PlannerError as exc:
        raise to_http_exception(exc) from exc

    latency_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
    log_metric("dashboard.get.success", 1)
    log_metric("dashboard.get.latency_ms", latency_ms)

    return DashboardResponse(**data.__dict__, request_id=request_id or "")
