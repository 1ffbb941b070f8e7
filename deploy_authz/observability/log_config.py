"""structlog setup shared by the authorizer and the operations pipeline."""

from __future__ import annotations

import logging

import structlog

_configured = False


def configure_logging(level: str = "INFO", json: bool = False, force: bool = False) -> None:
    """Configure structlog for the process.

    Runs once; later calls are no-ops unless *force* is set, so an application
    that configured logging first keeps its settings.
    """
    global _configured
    if _configured and not force:
        return

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        # Module-level loggers must pick up later reconfiguration.
        cache_logger_on_first_use=False,
    )
    _configured = True


def is_configured() -> bool:
    return _configured
