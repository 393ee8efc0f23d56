"""Main FastAPI application for the Weekplan backend."""
from fastapi import FastAPI, Request

from weekplan.api.routes.adjustments import router as adjustments_router
from weekplan.api.routes.behavior import router as behavior_router
from weekplan.api.routes.dashboard import router as dashboard_router
from weekplan.api.routes.integrations import router as integrations_router
from weekplan.api.routes.plan import router as plan_router
from weekplan.api.routes.task import router as task_router
from weekplan.core.config import settings
from weekplan.core.logging import configure_logging
from weekplan.core.middleware import RequestIDMiddleware
from weekplan.observability.client import init_opik
from weekplan.observability.tracing import trace

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.include_router(plan_router)
app.include_router(task_router)
app.include_router(behavior_router)
app.include_router(adjustments_router)
app.include_router(integrations_router)
app.include_router(dashboard_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
