"""Domain services: signal validation, vote ledger and quorum evaluation.

All three are synchronous and free of I/O. They are not thread- or
task-safe on their own; the application layer serialises access to the
ledger and the evaluator behind a single lock.
"""

from qube_manager.domain.services.quorum_evaluator import (
    EvaluationResult,
    QuorumEvaluator,
)
from qube_manager.domain.services.signal_validator import (
    RejectionReason,
    SignalValidator,
    ValidationOutcome,
)
from qube_manager.domain.services.vote_ledger import (
    ActionRegistry,
    CandidateTally,
    LatestSignal,
    VoteLedger,
    VoteRecord,
    VoteRecordResult,
)

__all__: list[str] = [
    "ActionRegistry",
    "CandidateTally",
    "EvaluationResult",
    "LatestSignal",
    "QuorumEvaluator",
    "RejectionReason",
    "SignalValidator",
    "ValidationOutcome",
    "VoteLedger",
    "VoteRecord",
    "VoteRecordResult",
]
