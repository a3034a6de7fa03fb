"""Unit tests for acknowledgement publishers."""

import json
from pathlib import Path

import pytest

from qube_manager.application.ports.acknowledgement_publisher import (
    AcknowledgementPublisherProtocol,
)
from qube_manager.domain.errors.publication import AcknowledgementPublishError
from qube_manager.domain.models.action import ActionType
from qube_manager.domain.models.execution import Acknowledgement, ExecutionStatus
from qube_manager.infrastructure.adapters.broadcast.ack_outbox import (
    JsonlAcknowledgementOutbox,
    LoggingAcknowledgementPublisher,
)


@pytest.fixture
def acknowledgement() -> Acknowledgement:
    return Acknowledgement(
        action_key="upgrade:v1.0.0",
        action_type=ActionType.UPGRADE,
        version="v1.0.0",
        network_scope="hqz",
        origin_signer_identity="npub-origin",
        status=ExecutionStatus.FAILURE,
        node_identity="node-1",
        executed_at=1700000000,
        error="hook exited with status 1",
    )


class TestJsonlAcknowledgementOutbox:
    @pytest.mark.asyncio
    async def test_appends_kind_3333_event(self, tmp_path: Path, acknowledgement) -> None:
        outbox = JsonlAcknowledgementOutbox(tmp_path / "acks.jsonl", "node-1")

        await outbox.publish(acknowledgement)
        await outbox.publish(acknowledgement)

        lines = (tmp_path / "acks.jsonl").read_text().splitlines()
        assert len(lines) == 2
        event = json.loads(lines[0])
        assert event["kind"] == 3333
        assert event["pubkey"] == "node-1"
        assert event["created_at"] == 1700000000
        tags = {tag[0]: tag[1] for tag in event["tags"]}
        assert tags["a"] == "33321:npub-origin:hyperqube"
        assert tags["p"] == "npub-origin"
        assert tags["status"] == "failure"
        assert tags["error"] == "hook exited with status 1"
        assert "failed on node node-1" in event["content"]

    @pytest.mark.asyncio
    async def test_unwritable_outbox_raises_publish_error(
        self, tmp_path: Path, acknowledgement
    ) -> None:
        outbox = JsonlAcknowledgementOutbox(tmp_path / "no-dir" / "acks.jsonl", "node-1")

        with pytest.raises(AcknowledgementPublishError):
            await outbox.publish(acknowledgement)


class TestLoggingAcknowledgementPublisher:
    @pytest.mark.asyncio
    async def test_publish_only_logs(self, acknowledgement) -> None:
        publisher = LoggingAcknowledgementPublisher()

        assert isinstance(publisher, AcknowledgementPublisherProtocol)
        await publisher.publish(acknowledgement)
