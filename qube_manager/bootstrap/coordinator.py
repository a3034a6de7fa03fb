"""Bootstrap wiring for the quorum coordinator.

The daemon registers its coordinator here so the status API can read the
same ledger without holding a reference to the daemon.
"""

from __future__ import annotations

from qube_manager.application.services.quorum_coordinator import QuorumCoordinator

_coordinator: QuorumCoordinator | None = None


def get_quorum_coordinator() -> QuorumCoordinator:
    """Get the registered coordinator.

    Raises:
        RuntimeError: If no coordinator has been registered.
    """
    if _coordinator is None:
        raise RuntimeError("quorum coordinator not initialized")
    return _coordinator


def set_quorum_coordinator(coordinator: QuorumCoordinator) -> None:
    """Register the coordinator (daemon startup, testing)."""
    global _coordinator
    _coordinator = coordinator


def reset_quorum_coordinator() -> None:
    """Reset the coordinator singleton (testing cleanup)."""
    global _coordinator
    _coordinator = None
