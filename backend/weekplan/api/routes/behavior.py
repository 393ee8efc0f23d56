"""Behaviour analysis routes."""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Request

from weekplan.api.schemas.coaching import BehaviorAnalysisResponse
from weekplan.observability.tracing import trace
from weekplan.services.behavior_analyzer import analyze_behavior
from weekplan.services.providers import StoreFitnessProvider, load_fitness_sample
from weekplan.store import PlannerStore, get_store

router = APIRouter()


@router.get("/behavior", response_model=BehaviorAnalysisResponse, tags=["behavior"])
def get_behavior(http_request: Request, store: PlannerStore = Depends(get_store)) -> BehaviorAnalysisResponse:
    request_id = getattr(http_request.state, "request_id", None)
    tasks = store.get_tasks()
    with trace("behavior.analyze", metadata={"tasks": len(tasks)}, request_id=request_id):
        sample = load_fitness_sample(StoreFitnessProvider(store), date.today())
        analysis = analyze_behavior(tasks, sample)
    return BehaviorAnalysisResponse(
        behavior=analysis.behavior,
        patterns=analysis.patterns,
        insights=analysis.insights,
        recommendations=analysis.recommendations,
        request_id=request_id or "",
    )
