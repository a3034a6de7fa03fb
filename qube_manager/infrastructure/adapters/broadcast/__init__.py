"""Broadcast boundary adapters: event sources and acknowledgement publishers."""

from qube_manager.infrastructure.adapters.broadcast.ack_outbox import (
    JsonlAcknowledgementOutbox,
    LoggingAcknowledgementPublisher,
)
from qube_manager.infrastructure.adapters.broadcast.jsonl_source import (
    STDIN_SOURCE,
    JsonlEventSource,
)

__all__ = [
    "STDIN_SOURCE",
    "JsonlAcknowledgementOutbox",
    "JsonlEventSource",
    "LoggingAcknowledgementPublisher",
]
