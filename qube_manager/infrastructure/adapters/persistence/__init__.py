"""Durable state adapters: History and the signal journal."""

from qube_manager.infrastructure.adapters.persistence.json_history import (
    JsonFileHistory,
)
from qube_manager.infrastructure.adapters.persistence.signal_journal import (
    JsonlSignalJournal,
)

__all__ = ["JsonFileHistory", "JsonlSignalJournal"]
