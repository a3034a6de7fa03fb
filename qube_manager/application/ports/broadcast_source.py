"""Broadcast source port: a stream of authenticated raw events.

A source stands in for one relay connection. Authentication (signature
checks) happens behind this port; everything it yields is still untrusted
content and goes through the SignalValidator.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from qube_manager.domain.models.signal import RawEvent


@runtime_checkable
class BroadcastSourceProtocol(Protocol):
    """One independent stream of raw broadcast events."""

    @property
    def name(self) -> str:
        """Human-readable source name used in logs."""
        ...

    def events(self) -> AsyncIterator[RawEvent]:
        """Iterate over raw events until the source is exhausted.

        Raises:
            OSError: On I/O failures; the daemon classifies these and
                decides whether to reconnect.
        """
        ...
