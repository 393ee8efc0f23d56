"""Lightweight metrics helpers."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from time import perf_counter
from typing import Any, Dict, Iterator, Optional

from weekplan.observability.client import get_opik_client

logger = logging.getLogger(__name__)


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Log a metric to Opik if it is enabled."""
    client = get_opik_client()
    if not client:
        return

    payload: Dict[str, Any] = {"value": value}
    if metadata:
        payload.update(metadata)

    try:
        client.trace(name=f"metric:{name}", metadata=payload)
    except Exception as exc:  # pragma: no cover
        logger.debug("Unable to record metric %s: %s", name, exc)


@contextmanager
def timed_operation(name: str, metadata: Optional[Dict[str, Any]] = None) -> Iterator[None]:
    """Emit ``<name>.success``/``<name>.failure`` and ``<name>.latency_ms`` around a block."""
    start = perf_counter()
    try:
        yield
    except Exception:
        log_metric(f"{name}.failure", 1, metadata=metadata)
        raise
    latency_ms = (perf_counter() - start) * 1000
    log_metric(f"{name}.success", 1, metadata=metadata)
    log_metric(f"{name}.latency_ms", latency_ms, metadata=metadata)
