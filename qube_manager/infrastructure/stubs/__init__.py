"""In-memory stub implementations of every port, for tests and local runs."""

from qube_manager.infrastructure.stubs.acknowledgement_publisher_stub import (
    AcknowledgementPublisherStub,
)
from qube_manager.infrastructure.stubs.action_executor_stub import ActionExecutorStub
from qube_manager.infrastructure.stubs.broadcast_source_stub import BroadcastSourceStub
from qube_manager.infrastructure.stubs.history_stub import HistoryFailureMode, HistoryStub
from qube_manager.infrastructure.stubs.signal_journal_stub import SignalJournalStub

__all__ = [
    "AcknowledgementPublisherStub",
    "ActionExecutorStub",
    "BroadcastSourceStub",
    "HistoryFailureMode",
    "HistoryStub",
    "SignalJournalStub",
]
