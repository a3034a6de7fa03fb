"""Acknowledgement publisher stub for testing."""

from __future__ import annotations

from qube_manager.domain.errors.publication import AcknowledgementPublishError
from qube_manager.domain.models.execution import Acknowledgement


class AcknowledgementPublisherStub:
    """Stub implementation of AcknowledgementPublisherProtocol."""

    def __init__(self) -> None:
        self.published: list[Acknowledgement] = []
        self._force_failure = False

    def set_force_failure(self, fail: bool) -> None:
        self._force_failure = fail

    async def publish(self, acknowledgement: Acknowledgement) -> None:
        if self._force_failure:
            raise AcknowledgementPublishError(
                acknowledgement.action_key, "simulated publish failure"
            )
        self.published.append(acknowledgement)
