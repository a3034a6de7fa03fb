"""History port: durable record of action keys this node has acted on.

History is the idempotency guard of the daemon. The coordinator writes an
EXECUTING record before the executor runs, so a crash during execution never
causes the action to run again after restart.

Reads (``has``, ``get``, ``keys``) are synchronous: implementations load the
durable store into memory when they are created and answer from there, so
the evaluator can consult History while the coordinator lock is held.
Writes are asynchronous and must be durable when they return.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable


class HistoryStatus(Enum):
    """State of a History record."""

    EXECUTING = "executing"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class HistoryRecord:
    """One History entry.

    Attributes:
        action_key: The executed action.
        status: Current status of the record.
        recorded_at: Unix timestamp of the last write.
        error: Failure reason for FAILURE records.
    """

    action_key: str
    status: HistoryStatus
    recorded_at: int
    error: str | None = None


@runtime_checkable
class HistoryProtocol(Protocol):
    """Durable set of executed action keys."""

    def has(self, action_key: str) -> bool:
        """Return True if the key has a record in any status."""
        ...

    def get(self, action_key: str) -> HistoryRecord | None:
        """Return the record for a key, or None."""
        ...

    def keys(self) -> frozenset[str]:
        """Return every key currently recorded."""
        ...

    async def add(
        self,
        action_key: str,
        status: HistoryStatus,
        error: str | None = None,
    ) -> HistoryRecord:
        """Create or overwrite the record for a key, durably.

        Args:
            action_key: The action key.
            status: Status to record.
            error: Failure reason, for FAILURE records.

        Returns:
            The record as written.

        Raises:
            HistoryWriteError: If the record could not be made durable. The
                in-memory view must be unchanged in that case.
        """
        ...

    async def remove(self, action_key: str) -> None:
        """Delete the record for a key, durably. Missing keys are a no-op.

        Raises:
            HistoryWriteError: If the removal could not be made durable.
        """
        ...
