from __future__ import annotations

import logging
from typing import Optional

import structlog


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    app_id: Optional[str] = None,
) -> None:
    """
    Set up stdlib logging and structlog for a Sprouts app.

    Console output is the default; ``json_output`` switches to one JSON object per
    line. When ``app_id`` is given it is bound as a context variable so every event
    (store failures, session ends) carries the app variant that produced it.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric_level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    processors.append(
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )
    structlog.contextvars.clear_contextvars()
    if app_id:
        structlog.contextvars.bind_contextvars(app=app_id)


def get_logger(name: Optional[str] = None):
    """Return a structlog logger that inherits the global configuration."""
    return structlog.get_logger(name)
