"""
CommentLens logging setup - structlog for service events, stdlib logging for
library loggers (SQLAlchemy, httpx, celery).
"""
from __future__ import annotations

import logging

import structlog

from commentlens.core.config import get_settings


def configure_logging(level: str | None = None) -> None:
    """Configure structlog and the stdlib root logger once per process."""
    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=True,
    )
