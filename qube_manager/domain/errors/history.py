"""History store errors.

A History failure must never corrupt in-memory ledger state. The coordinator
treats any HistoryError raised while recording an action as a reason to abort
the rest of the cycle without clearing votes.
"""

from __future__ import annotations

from qube_manager.domain.exceptions import QubeManagerError


class HistoryError(QubeManagerError):
    """Base error for History store operations."""

    pass


class HistoryWriteError(HistoryError):
    """Raised when a History record cannot be made durable.

    Attributes:
        action_key: The action key being written.
        reason: Underlying failure description.
    """

    def __init__(self, action_key: str, reason: str) -> None:
        self.action_key = action_key
        self.reason = reason
        super().__init__(f"failed to persist history for {action_key}: {reason}")
