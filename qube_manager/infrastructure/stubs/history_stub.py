"""History stub for testing.

Keeps records in memory and can simulate write failures per phase, and
block a write until released so tests can cancel a cycle mid-commit.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass

from qube_manager.application.ports.history import HistoryRecord, HistoryStatus
from qube_manager.domain.errors.history import HistoryWriteError


@dataclass
class HistoryFailureMode:
    """Which writes should fail."""

    fail_executing: bool = False
    fail_final: bool = False
    fail_remove: bool = False


class HistoryStub:
    """Stub implementation of HistoryProtocol.

    Usage:
        history = HistoryStub()
        history.set_failure_mode(HistoryFailureMode(fail_final=True))
        ...
        assert history.status_of("upgrade:v1.0.0") is HistoryStatus.EXECUTING
    """

    def __init__(self, keys: tuple[str, ...] = ()) -> None:
        self._records: dict[str, HistoryRecord] = {
            key: HistoryRecord(action_key=key, status=HistoryStatus.SUCCESS, recorded_at=0)
            for key in keys
        }
        self._failure_mode = HistoryFailureMode()
        self._gate: asyncio.Event | None = None
        self.writes: list[tuple[str, HistoryStatus | None]] = []

    def set_failure_mode(self, mode: HistoryFailureMode) -> None:
        self._failure_mode = mode

    def block_final_writes(self) -> asyncio.Event:
        """Make final-status writes wait until the returned event is set."""
        self._gate = asyncio.Event()
        return self._gate

    def clear(self) -> None:
        self._records.clear()
        self._failure_mode = HistoryFailureMode()
        self._gate = None
        self.writes.clear()

    def status_of(self, action_key: str) -> HistoryStatus | None:
        record = self._records.get(action_key)
        return record.status if record else None

    def has(self, action_key: str) -> bool:
        return action_key in self._records

    def get(self, action_key: str) -> HistoryRecord | None:
        return self._records.get(action_key)

    def keys(self) -> frozenset[str]:
        return frozenset(self._records)

    async def add(
        self,
        action_key: str,
        status: HistoryStatus,
        error: str | None = None,
    ) -> HistoryRecord:
        final = status is not HistoryStatus.EXECUTING
        if final and self._gate is not None:
            await self._gate.wait()
        if (final and self._failure_mode.fail_final) or (
            not final and self._failure_mode.fail_executing
        ):
            raise HistoryWriteError(action_key, "simulated write failure")
        record = HistoryRecord(
            action_key=action_key,
            status=status,
            recorded_at=int(time.time()),
            error=error,
        )
        self._records[action_key] = record
        self.writes.append((action_key, status))
        return record

    async def remove(self, action_key: str) -> None:
        if self._gate is not None:
            await self._gate.wait()
        if self._failure_mode.fail_remove:
            raise HistoryWriteError(action_key, "simulated remove failure")
        self._records.pop(action_key, None)
        self.writes.append((action_key, None))
