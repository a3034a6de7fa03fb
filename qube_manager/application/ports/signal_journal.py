"""Signal journal port: optional durable log of accepted signals.

Replaying the journal through the vote ledger at startup restores both the
vote sets and each signer's latest-signal entry, so a restart neither loses
accumulated votes nor lets an old signal reclaim a superseded vote.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from qube_manager.domain.models.signal import Signal


@runtime_checkable
class SignalJournalProtocol(Protocol):
    """Log of validated signals, compacted at startup."""

    async def append(self, signal: Signal) -> None:
        """Durably append one signal."""
        ...

    async def compact(self, signals: Sequence[Signal]) -> None:
        """Atomically replace the journal with signals, in the given order."""
        ...

    def replay(self) -> list[Signal]:
        """Return every journaled signal in append order.

        Entries that no longer validate are skipped.
        """
        ...
