"""Dedicated APScheduler worker process running the nightly replan."""
from __future__ import annotations

import logging
import signal
import threading
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from weekplan.core.config import settings
from weekplan.core.errors import NothingToReplanError
from weekplan.core.logging import configure_logging
from weekplan.services.replanner import ReplanRun, run_replan
from weekplan.store import PlannerStore, get_store

logger = logging.getLogger(__name__)

REPLAN_JOB_ID = "nightly_replan_job"


def main() -> None:
    configure_logging(log_level=settings.log_level)
    logger.info("Scheduler worker starting (enabled=%s)", settings.scheduler_enabled)
    if settings.storage_backend == "memory":
        logger.warning("STORAGE_BACKEND=memory: the worker cannot see plans created by the API process")

    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)

    if settings.scheduler_enabled:
        register_jobs(scheduler)
        scheduler.start()
        if settings.jobs_run_on_startup:
            logger.info("Running nightly replan once on startup")
            run_nightly_replan()
    else:
        logger.warning("Scheduler disabled via config; worker will idle")

    stop_event = threading.Event()

    def shutdown(signum, frame):  # pragma: no cover - signal handler
        logger.info("Scheduler worker shutting down (signal=%s)", signum)
        if scheduler.running:
            scheduler.shutdown(wait=False)
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        stop_event.wait()
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        shutdown(signal.SIGINT, None)


def register_jobs(scheduler: BackgroundScheduler) -> None:
    scheduler.add_job(
        run_nightly_replan,
        trigger="cron",
        hour=settings.replan_job_hour,
        minute=settings.replan_job_minute,
        id=REPLAN_JOB_ID,
        replace_existing=True,
    )
    logger.info(
        "Registered nightly replan (time=%02d:%02d %s)",
        settings.replan_job_hour,
        settings.replan_job_minute,
        settings.scheduler_timezone,
    )


def run_nightly_replan(store: Optional[PlannerStore] = None) -> Optional[ReplanRun]:
    """Run one replan cycle; failures are logged and never escape into the scheduler."""
    store = store or get_store()
    try:
        run = run_replan(store)
    except NothingToReplanError:
        logger.info("Nightly replan skipped: no plan yet")
        return None
    except Exception:
        logger.exception("Nightly replan failed")
        return None
    logger.info(
        "Nightly replan complete: completion=%s%%, summary=%s",
        run.result.completion_percent,
        run.result.diff_summary,
    )
    return run


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
