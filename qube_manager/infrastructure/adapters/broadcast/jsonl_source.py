"""NDJSON event source.

Reads one wire event per line from a file or from stdin. A relay bridge (or
an operator with ``qube-manager send-message``) appends signed events to the
file; with ``follow`` enabled the source keeps reading new lines as they are
appended, like ``tail -f``, and restarts from the top if the file is
truncated.

Malformed lines are logged and skipped; they never end the stream.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import AsyncIterator
from pathlib import Path
from typing import BinaryIO

import structlog
from pydantic import ValidationError

from qube_manager.application.dtos.wire import parse_wire_event
from qube_manager.domain.models.signal import RawEvent

logger = structlog.get_logger(__name__)

# Source location meaning "read standard input"
STDIN_SOURCE = "-"

DEFAULT_POLL_INTERVAL_SECONDS = 1.0


class JsonlEventSource:
    """BroadcastSourceProtocol implementation over an NDJSON stream.

    Attributes:
        location: File path, or "-" for stdin.
        follow: Keep waiting for appended lines at end of file.
        poll_interval: Seconds between end-of-file checks when following.
    """

    def __init__(
        self,
        location: str,
        *,
        follow: bool = True,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self.location = location
        self.follow = follow
        self.poll_interval = poll_interval

    @property
    def name(self) -> str:
        return "stdin" if self.location == STDIN_SOURCE else self.location

    def _decode(self, line: str, line_number: int) -> RawEvent | None:
        line = line.strip()
        if not line:
            return None
        try:
            return parse_wire_event(line).to_raw_event()
        except ValidationError as exc:
            logger.warning(
                "malformed_event_skipped",
                source=self.name,
                line=line_number,
                errors=exc.error_count(),
            )
            return None

    async def events(self) -> AsyncIterator[RawEvent]:
        if self.location == STDIN_SOURCE:
            async for event in self._stdin_events():
                yield event
            return
        async for event in self._file_events(Path(self.location).expanduser()):
            yield event

    async def _stdin_events(self) -> AsyncIterator[RawEvent]:
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader()
        protocol = asyncio.StreamReaderProtocol(reader)
        transport, _ = await loop.connect_read_pipe(lambda: protocol, sys.stdin)
        try:
            line_number = 0
            while True:
                raw = await reader.readline()
                if not raw:
                    return
                line_number += 1
                event = self._decode(raw.decode("utf-8", errors="replace"), line_number)
                if event is not None:
                    yield event
        finally:
            transport.close()

    async def _file_events(self, path: Path) -> AsyncIterator[RawEvent]:
        handle: BinaryIO = await asyncio.to_thread(path.open, "rb")
        logger.info("source_opened", source=self.name, follow=self.follow)
        try:
            line_number = 0
            while True:
                line = await asyncio.to_thread(handle.readline)
                if line.endswith(b"\n") or (line and not self.follow):
                    line_number += 1
                    event = self._decode(
                        line.decode("utf-8", errors="replace"), line_number
                    )
                    if event is not None:
                        yield event
                    continue
                if line:
                    # Partial line still being written
                    handle.seek(-len(line), 1)
                if not self.follow:
                    return
                if await asyncio.to_thread(self._truncated, path, handle):
                    logger.info("source_truncated", source=self.name)
                    handle.seek(0)
                    line_number = 0
                await asyncio.sleep(self.poll_interval)
        finally:
            handle.close()

    @staticmethod
    def _truncated(path: Path, handle: BinaryIO) -> bool:
        return path.stat().st_size < handle.tell()
