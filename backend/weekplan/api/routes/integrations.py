"""Fitness and calendar integration routes."""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Request

from weekplan.api.errors import to_http_exception
from weekplan.api.schemas.integrations import (
    CalendarEventsRequest,
    CalendarEventsResponse,
    CalendarPushRequest,
    CalendarPushResponse,
    FitnessResponse,
    FitnessUpdateRequest,
)
from weekplan.core.errors import PlannerError
from weekplan.services.providers import StoreCalendarProvider, tasks_to_calendar_events
from weekplan.services.task_progress import record_steps
from weekplan.store import PlannerStore, get_store

router = APIRouter()


def _request_id(http_request: Request) -> str:
    return getattr(http_request.state, "request_id", None) or ""


@router.get("/fitness", response_model=FitnessResponse, tags=["integrations"])
def get_fitness(http_request: Request, store: PlannerStore = Depends(get_store)) -> FitnessResponse:
    return FitnessResponse(
        today=store.get_fitness_sample(date.today()),
        history=store.get_fitness_history(),
        request_id=_request_id(http_request),
    )


@router.post("/fitness", response_model=FitnessResponse, tags=["integrations"])
def post_fitness(
    payload: FitnessUpdateRequest,
    http_request: Request,
    store: PlannerStore = Depends(get_store),
) -> FitnessResponse:
    try:
        sample = record_steps(store, payload.steps)
    except PlannerError as exc:
        raise to_http_exception(exc) from exc
    return FitnessResponse(today=sample, history=store.get_fitness_history(), request_id=_request_id(http_request))


@router.get("/calendar/events", response_model=CalendarEventsResponse, tags=["integrations"])
def get_calendar_events(http_request: Request, store: PlannerStore = Depends(get_store)) -> CalendarEventsResponse:
    return CalendarEventsResponse(events=store.get_calendar_events(), request_id=_request_id(http_request))


@router.post("/calendar/events", response_model=CalendarEventsResponse, tags=["integrations"])
def post_calendar_events(
    payload: CalendarEventsRequest,
    http_request: Request,
    store: PlannerStore = Depends(get_store),
) -> CalendarEventsResponse:
    """Replace the busy intervals the planner avoids."""
    store.set_calendar_events(payload.events)
    return CalendarEventsResponse(events=store.get_calendar_events(), request_id=_request_id(http_request))


@router.post("/calendar/push", response_model=CalendarPushResponse, tags=["integrations"])
def push_calendar(
    payload: CalendarPushRequest,
    http_request: Request,
    store: PlannerStore = Depends(get_store),
) -> CalendarPushResponse:
    """Publish open tasks to the calendar provider."""
    events = tasks_to_calendar_events(store.get_tasks(), store.get_goals(), payload.task_ids)
    pushed = StoreCalendarProvider(store).push_events(events)
    return CalendarPushResponse(
        pushed_count=pushed,
        events=events,
        message=f"Pushed {pushed} tasks to calendar",
        request_id=_request_id(http_request),
    )
