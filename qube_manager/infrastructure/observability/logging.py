"""Structured logging configuration with structlog.

Production output is one JSON object per line; development output is the
colored console renderer. Logs go to stderr so that commands writing
events to stdout (``send-message``) keep a clean stream.

Log Entry Format:
    {
        "timestamp": "2026-01-01T00:00:00.000000Z",
        "level": "info",
        "event": "quorum_action_selected",
        "correlation_id": "uuid",
        "service": "QuorumCoordinator",
        ...additional context
    }

Usage:
    from qube_manager.infrastructure.observability import configure_structlog

    configure_structlog(environment="production")
    configure_structlog(environment="development", level="DEBUG")
"""

import logging
import os
import sys
from typing import cast

import structlog
from structlog.typing import Processor

from qube_manager.infrastructure.observability.correlation import (
    correlation_id_processor,
)

# Environment variable for log level (default: INFO)
LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"


def _get_log_level(level: str | None = None) -> int:
    """Resolve a level name (explicit or from LOG_LEVEL) to a logging int."""
    level_name = (level or os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)).upper()
    return getattr(logging, level_name, logging.INFO)


def configure_structlog(
    environment: str = "production", level: str | None = None
) -> None:
    """Configure structlog for the process.

    Should be called once at startup, before the first logger is used.

    Args:
        environment: 'production' for JSON output, 'development' for console.
        level: Explicit level name; overrides LOG_LEVEL when given.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == "production":
        final_processor: Processor = structlog.processors.JSONRenderer()
    else:
        final_processor = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [final_processor],
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger_for_service(
    service_name: str, component: str = "quorum"
) -> structlog.BoundLogger:
    """Get a logger with service and component already bound."""
    return structlog.get_logger().bind(
        service=service_name,
        component=component,
    )
