"""Per-request and per-operation context utilities."""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator
from uuid import uuid4

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
operation_ctx_var: ContextVar[str | None] = ContextVar("operation", default=None)


def get_request_id() -> str | None:
    """Return the current request id if available."""
    return request_id_ctx_var.get()


def get_operation() -> str | None:
    """Return the label of the planning operation currently running, e.g. ``replan:3f2a9c1e``."""
    return operation_ctx_var.get()


@contextmanager
def operation_scope(name: str) -> Iterator[str]:
    """Tag log records emitted inside the block with a short operation label."""
    label = f"{name}:{uuid4().hex[:8]}"
    token = operation_ctx_var.set(label)
    try:
        yield label
    finally:
        operation_ctx_var.reset(token)
