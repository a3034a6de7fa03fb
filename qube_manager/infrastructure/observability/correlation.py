"""Correlation ID management for evaluation cycles and ingestion loops.

Correlation IDs live in a contextvar, so every log line emitted while one
evaluation cycle runs (including from the executor and publisher it calls)
carries the same ID. Each asyncio task starts with a copy of its parent's
context, so setting an ID inside a task never leaks into other tasks.

Usage:
    # At the start of a cycle
    set_correlation_id(generate_correlation_id())

    # In structlog configuration
    processors = [..., correlation_id_processor, ...]
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4

# Default is empty string to avoid None type issues
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """Generate a new correlation ID (UUID4)."""
    return str(uuid4())


def get_correlation_id() -> str:
    """Get the current correlation ID, or an empty string if none is set."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID in the current context.

    Args:
        correlation_id: The correlation ID to set.
    """
    _correlation_id.set(correlation_id)


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor adding the current correlation_id to every entry.

    Args:
        logger: The logger instance (unused, required by structlog).
        method_name: The logging method name (unused, required by structlog).
        event_dict: The event dictionary to modify.

    Returns:
        The event dictionary with correlation_id added.
    """
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict
