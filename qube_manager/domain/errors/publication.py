"""Acknowledgement publication errors."""

from __future__ import annotations

from qube_manager.domain.exceptions import QubeManagerError


class AcknowledgementPublishError(QubeManagerError):
    """Raised when an acknowledgement could not be handed to the broadcast boundary.

    Attributes:
        action_key: The action the acknowledgement refers to.
    """

    def __init__(self, action_key: str, reason: str) -> None:
        self.action_key = action_key
        self.reason = reason
        super().__init__(f"failed to publish acknowledgement for {action_key}: {reason}")
