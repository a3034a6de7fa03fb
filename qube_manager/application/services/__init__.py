"""Application services."""

from qube_manager.application.services.quorum_coordinator import (
    CandidateStatus,
    CycleOutcome,
    CycleReport,
    FailurePolicy,
    QuorumCoordinator,
    TallySnapshot,
)

__all__ = [
    "CandidateStatus",
    "CycleOutcome",
    "CycleReport",
    "FailurePolicy",
    "QuorumCoordinator",
    "TallySnapshot",
]
