"""Identifier and clock sources injected into the planning core."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable
from uuid import uuid4

IdFactory = Callable[[str], str]


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:12]}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def sequential_ids(start: int = 1) -> IdFactory:
    """Deterministic ``prefix-N`` ids, one counter per prefix. Used for replayable runs."""
    counters: dict[str, int] = {}

    def factory(prefix: str) -> str:
        counters[prefix] = counters.get(prefix, start - 1) + 1
        return f"{prefix}-{counters[prefix]}"

    return factory
