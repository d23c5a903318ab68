"""Structured logging configuration using structlog."""

import logging
import sys
from typing import Any, Dict, Optional

import structlog
from rich.logging import RichHandler

from volunteer_lifecycle.config import Settings, settings as default_settings


def configure_logging(config: Optional[Settings] = None) -> None:
    """Route structlog and stdlib logging through rich, at the configured level."""
    config = config if config is not None else default_settings
    level = getattr(logging, config.log_level.upper())

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        handlers=[RichHandler(rich_tracebacks=True, markup=True)],
    )

    # JSON lines in production, coloured key/value output when debugging
    renderer = structlog.dev.ConsoleRenderer() if config.debug else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="ISO"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_application_state(application: Any) -> Dict[str, Any]:
    """Create a log context summarising an application aggregate."""
    record = application.volunteering_record
    communication = application.communication
    return {
        "application": {
            "id": application.id,
            "version": application.version,
            "status": application.status.value,
            "ai_score": application.matching.ai_score,
            "hours_entries": len(record.hours_logged),
            "total_hours": record.total_hours,
            "notifications_count": len(communication.notifications),
            "messages_count": len(communication.messages),
        }
    }
