"""Acknowledgement publishers.

JsonlAcknowledgementOutbox appends each acknowledgement as an unsigned
kind-3333 wire event to an outbox file; a relay bridge signs and forwards
them. LoggingAcknowledgementPublisher only logs.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from qube_manager.application.dtos.wire import WireEvent
from qube_manager.domain.errors.publication import AcknowledgementPublishError
from qube_manager.domain.models.execution import Acknowledgement
from qube_manager.infrastructure.adapters.durable_files import append_line

logger = structlog.get_logger(__name__)

OUTBOX_FILENAME = "acks.jsonl"


class JsonlAcknowledgementOutbox:
    """AcknowledgementPublisherProtocol implementation over an NDJSON outbox."""

    def __init__(self, path: Path, node_identity: str) -> None:
        self.path = path
        self.node_identity = node_identity
        self._write_lock = asyncio.Lock()

    async def publish(self, acknowledgement: Acknowledgement) -> None:
        event = WireEvent.from_acknowledgement(acknowledgement, self.node_identity)
        line = event.model_dump_json(exclude_none=True)
        try:
            async with self._write_lock:
                await asyncio.to_thread(append_line, self.path, line)
        except OSError as exc:
            raise AcknowledgementPublishError(
                acknowledgement.action_key, str(exc)
            ) from exc
        logger.info(
            "acknowledgement_queued",
            outbox=str(self.path),
            action_key=acknowledgement.action_key,
            status=acknowledgement.status.value,
        )


class LoggingAcknowledgementPublisher:
    """Publisher that only logs the acknowledgement it would send."""

    async def publish(self, acknowledgement: Acknowledgement) -> None:
        logger.info(
            "acknowledgement",
            signal_reference=acknowledgement.signal_reference,
            action_key=acknowledgement.action_key,
            status=acknowledgement.status.value,
            node_id=acknowledgement.node_identity,
            content=acknowledgement.content,
        )
