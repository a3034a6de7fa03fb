"""NDJSON journal of accepted signals."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path

import structlog
from pydantic import ValidationError

from qube_manager.application.dtos.wire import JournalEntry
from qube_manager.domain.errors.signal import InvalidSignalError, InvalidVersionError
from qube_manager.domain.models.signal import Signal
from qube_manager.infrastructure.adapters.durable_files import append_line, atomic_write

logger = structlog.get_logger(__name__)

JOURNAL_FILENAME = "signals.jsonl"


class JsonlSignalJournal:
    """SignalJournalProtocol implementation writing one JSON object per line.

    Lines that fail to parse on replay (for instance a torn final line after
    a crash) are logged and skipped.

    compact() rewrites the file atomically, so a crash leaves either the old
    or the new journal.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._write_lock = asyncio.Lock()

    async def append(self, signal: Signal) -> None:
        line = JournalEntry.from_signal(signal).model_dump_json(exclude_none=True)
        async with self._write_lock:
            await asyncio.to_thread(append_line, self.path, line)

    async def compact(self, signals: Sequence[Signal]) -> None:
        payload = "".join(
            JournalEntry.from_signal(signal).model_dump_json(exclude_none=True) + "\n"
            for signal in signals
        )
        async with self._write_lock:
            await asyncio.to_thread(atomic_write, self.path, payload)
        logger.info("journal_compacted", path=str(self.path), entries=len(signals))

    def replay(self) -> list[Signal]:
        if not self.path.exists():
            return []
        signals: list[Signal] = []
        with self.path.open(encoding="utf-8") as handle:
            for line_number, line in enumerate(handle, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    signals.append(JournalEntry.model_validate_json(line).to_signal())
                except (ValidationError, InvalidSignalError, InvalidVersionError) as exc:
                    logger.warning(
                        "journal_entry_skipped",
                        path=str(self.path),
                        line=line_number,
                        error=str(exc),
                    )
        return signals
