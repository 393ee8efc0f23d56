"""Task listing and status routes."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from weekplan.api.errors import to_http_exception
from weekplan.api.schemas.task import TaskListResponse, TaskStatus, TaskUpdateRequest, TaskUpdateResponse
from weekplan.core.errors import PlannerError
from weekplan.observability.metrics import log_metric
from weekplan.observability.tracing import trace
from weekplan.services.task_progress import update_task
from weekplan.store import PlannerStore, get_store

router = APIRouter()


@router.get("/tasks", response_model=TaskListResponse, tags=["tasks"])
def list_tasks(
    http_request: Request,
    day_index: Optional[int] = Query(default=None, ge=0, le=6),
    status_filter: Optional[TaskStatus] = Query(default=None, alias="status"),
    store: PlannerStore = Depends(get_store),
) -> TaskListResponse:
    """List the week's tasks, optionally narrowed to one day or status."""
    tasks = store.get_tasks()
    if day_index is not None:
        tasks = [task for task in tasks if task.day_index == day_index]
    if status_filter is not None:
        tasks = [task for task in tasks if task.status == status_filter]
    log_metric("task.list.count", len(tasks))
    return TaskListResponse(tasks=tasks, request_id=getattr(http_request.state, "request_id", None) or "")


@router.patch("/tasks/{task_id}", response_model=TaskUpdateResponse, tags=["tasks"])
def patch_task(
    task_id: str,
    payload: TaskUpdateRequest,
    http_request: Request,
    store: PlannerStore = Depends(get_store),
) -> TaskUpdateResponse:
    """Change a task's status, actual minutes or notes."""
    if payload.status is None and payload.actual_minutes is None and payload.notes is None:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Nothing to update")

    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/tasks/{task_id}", "task_id": task_id, "status": payload.status}
    try:
        with trace("task.update", metadata=metadata, request_id=request_id):
            task = update_task(
                store,
                task_id,
                status=payload.status,
                actual_minutes=payload.actual_minutes,
                notes=payload.notes,
            )
    except PlannerError as exc:
        log_metric("task.update.failure", 1, metadata={"code": exc.code})
        raise to_http_exception(exc) from exc

    log_metric("task.update.success", 1, metadata={"status": task.status})
    return TaskUpdateResponse(task=task, request_id=request_id or "")
