"""Planner persistence: an abstract store plus in-memory and SQL backends."""
from __future__ import annotations

import logging
from functools import lru_cache

from weekplan.core.config import settings
from weekplan.store.base import PlannerStore
from weekplan.store.memory import InMemoryPlannerStore

logger = logging.getLogger(__name__)


@lru_cache
def get_store() -> PlannerStore:
    """Process-wide store chosen by ``STORAGE_BACKEND``."""
    if settings.storage_backend == "database":
        from weekplan.db.session import SessionLocal
        from weekplan.store.sql import SqlPlannerStore

        logger.info("Using database store at %s", settings.database_url.split("@")[-1])
        return SqlPlannerStore(SessionLocal)
    return InMemoryPlannerStore()


__all__ = ["InMemoryPlannerStore", "PlannerStore", "get_store"]
