"""Centralized logging configuration."""
from __future__ import annotations

import logging
from logging.config import dictConfig

from weekplan.core.context import get_operation, get_request_id


class PlanningContextFilter(logging.Filter):
    """Add request_id and operation attributes to log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - minimal logic
        record.request_id = get_request_id() or "-"
        record.operation = get_operation() or "-"
        return True


def configure_logging(*, log_level: str = "INFO", core_log_level: str | None = None) -> None:
    """Configure application logging once at startup.

    ``core_log_level`` lets the planning services run chattier (or quieter)
    than the rest of the process, e.g. DEBUG while tuning replan policies.
    """
    if getattr(configure_logging, "_configured", False):
        return

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(operation)s | %(message)s",
                }
            },
            "filters": {
                "planning_context": {
                    "()": "weekplan.core.logging.PlanningContextFilter",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": "DEBUG",
                    "filters": ["planning_context"],
                }
            },
            "loggers": {
                "weekplan.services": {
                    "level": core_log_level or log_level,
                },
            },
            "root": {
                "handlers": ["console"],
                "level": log_level,
            },
        }
    )

    logging.getLogger(__name__).debug("Logging configured at %s (core=%s)", log_level, core_log_level or log_level)
    setattr(configure_logging, "_configured", True)
