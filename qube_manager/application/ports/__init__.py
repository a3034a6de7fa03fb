"""Application ports: the boundaries the quorum core talks through."""

from qube_manager.application.ports.acknowledgement_publisher import (
    AcknowledgementPublisherProtocol,
)
from qube_manager.application.ports.action_executor import ActionExecutorProtocol
from qube_manager.application.ports.broadcast_source import BroadcastSourceProtocol
from qube_manager.application.ports.history import (
    HistoryProtocol,
    HistoryRecord,
    HistoryStatus,
)
from qube_manager.application.ports.signal_journal import SignalJournalProtocol

__all__ = [
    "AcknowledgementPublisherProtocol",
    "ActionExecutorProtocol",
    "BroadcastSourceProtocol",
    "HistoryProtocol",
    "HistoryRecord",
    "HistoryStatus",
    "SignalJournalProtocol",
]
