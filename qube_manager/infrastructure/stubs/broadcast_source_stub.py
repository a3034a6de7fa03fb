"""Broadcast source stub for testing."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterable

from qube_manager.domain.models.signal import RawEvent


class BroadcastSourceStub:
    """Stub implementation of BroadcastSourceProtocol.

    Yields queued events. With ``keep_open`` the stream stays open after the
    queue drains, like a live relay subscription; ``close()`` ends it. A
    queued exception is raised from the stream when reached.
    """

    def __init__(
        self,
        events: Iterable[RawEvent | Exception] = (),
        *,
        name: str = "stub",
        keep_open: bool = False,
    ) -> None:
        self._name = name
        self._queue: asyncio.Queue[RawEvent | Exception | None] = asyncio.Queue()
        for event in events:
            self._queue.put_nowait(event)
        if not keep_open:
            self._queue.put_nowait(None)
        self.subscriptions = 0

    @property
    def name(self) -> str:
        return self._name

    def push(self, event: RawEvent | Exception) -> None:
        self._queue.put_nowait(event)

    def close(self) -> None:
        self._queue.put_nowait(None)

    async def events(self) -> AsyncIterator[RawEvent]:
        self.subscriptions += 1
        while True:
            item = await self._queue.get()
            if item is None:
                return
            if isinstance(item, Exception):
                raise item
            yield item
