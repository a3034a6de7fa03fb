"""Wire and persistence DTOs."""

from qube_manager.application.dtos.wire import JournalEntry, WireEvent, parse_wire_event

__all__ = ["JournalEntry", "WireEvent", "parse_wire_event"]
