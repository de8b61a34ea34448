"""Logging configuration.

structlog renders both structlog and stdlib loggers, so core modules can
keep using logging.getLogger(__name__) while the application layer uses
structlog.get_logger().
"""

from __future__ import annotations

import logging
from typing import Any

import structlog

from portal.core.config import Settings
from portal.core.config import settings as default_settings


def _get_log_level(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structlog for JSON structured logging.

    - JSON lines with ISO/UTC timestamp, level, event, and bound fields
    - Includes contextvars so request-scoped fields flow automatically
    - Formats exception info if exc_info is attached
    - LOG_FORMAT=console switches to the human-readable renderer
    """
    settings = settings or default_settings

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if settings.log_format == "console":
        renderer: Any = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=_get_log_level(settings.log_level),
        handlers=[handler],
        force=True,
    )
