"""Plan generation and replanning routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from weekplan.api.errors import to_http_exception
from weekplan.api.schemas.plan import PlanRequest, PlanResponse, ReplanResponse
from weekplan.core.config import settings
from weekplan.core.errors import PlannerError
from weekplan.observability.metrics import log_metric
from weekplan.services.plan_setup import run_planning
from weekplan.services.replanner import run_replan
from weekplan.store import PlannerStore, get_store

router = APIRouter()


@router.post("/plans", response_model=PlanResponse, status_code=status.HTTP_201_CREATED, tags=["plans"])
def create_plan(
    payload: PlanRequest,
    http_request: Request,
    store: PlannerStore = Depends(get_store),
) -> PlanResponse:
    """Replace the current week with a fresh plan for the submitted goals."""
    request_id = getattr(http_request.state, "request_id", None)
    use_ai = settings.ai_generation_enabled if payload.use_ai is None else payload.use_ai
    try:
        run = run_planning(
            store,
            payload.goals,
            payload.profile,
            use_ai=use_ai,
            request_id=request_id,
        )
    except PlannerError as exc:
        log_metric("plan.create.failure", 1, metadata={"code": exc.code})
        raise to_http_exception(exc) from exc

    return PlanResponse(
        goals=run.goals,
        tasks=run.tasks,
        reasoning_steps=run.reasoning_trail,
        ai_powered=run.ai_powered,
        message=f"Generated {len(run.tasks)} tasks for {len(run.goals)} goals",
        request_id=request_id or "",
    )


@router.post("/replan", response_model=ReplanResponse, tags=["plans"])
def replan(http_request: Request, store: PlannerStore = Depends(get_store)) -> ReplanResponse:
    """Close out today: move unfinished tasks, suggest adjustments and coach."""
    request_id = getattr(http_request.state, "request_id", None)
    try:
        run = run_replan(store, request_id=request_id)
    except PlannerError as exc:
        raise to_http_exception(exc) from exc

    result = run.result
    return ReplanResponse(
        updated_tasks=result.updated_tasks,
        completion_percent=result.completion_percent,
        coach_message=result.coach_message,
        diff_summary=result.diff_summary,
        micro_adjustments=result.micro_adjustments,
        reasoning_steps=result.reasoning_trail,
        behavior=result.behavior,
        behavior_patterns=run.analysis.patterns,
        behavior_insight=run.analysis.insights,
        recommendations=run.analysis.recommendations,
        goals=run.goals,
        request_id=request_id or "",
    )
