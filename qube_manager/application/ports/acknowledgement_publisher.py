"""Acknowledgement publisher port: reports execution outcomes to the network."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from qube_manager.domain.models.execution import Acknowledgement


@runtime_checkable
class AcknowledgementPublisherProtocol(Protocol):
    """Hands acknowledgements to the broadcast boundary."""

    async def publish(self, acknowledgement: Acknowledgement) -> None:
        """Publish one acknowledgement.

        Raises:
            AcknowledgementPublishError: If the acknowledgement could not be
                handed over. Ledger and History state are unaffected.
        """
        ...
