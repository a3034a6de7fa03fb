"""Signal journal stub for testing."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from qube_manager.domain.models.signal import Signal


class SignalJournalStub:
    """Stub implementation of SignalJournalProtocol backed by a list."""

    def __init__(self, signals: Iterable[Signal] = ()) -> None:
        self.signals: list[Signal] = list(signals)
        self._force_failure = False
        self.compactions = 0

    def set_force_failure(self, fail: bool) -> None:
        self._force_failure = fail

    async def append(self, signal: Signal) -> None:
        if self._force_failure:
            raise OSError("simulated journal failure")
        self.signals.append(signal)

    async def compact(self, signals: Sequence[Signal]) -> None:
        if self._force_failure:
            raise OSError("simulated journal failure")
        self.compactions += 1
        self.signals = list(signals)

    def replay(self) -> list[Signal]:
        return list(self.signals)
