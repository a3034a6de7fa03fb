"""Domain models for qube-manager."""

from qube_manager.domain.models.action import (
    ActionType,
    CandidateAction,
    RebootDetails,
    SemanticVersion,
    build_action_key,
)
from qube_manager.domain.models.execution import (
    Acknowledgement,
    ExecutionRequest,
    ExecutionResult,
    ExecutionStatus,
)
from qube_manager.domain.models.signal import (
    ACKNOWLEDGEMENT_KIND,
    SIGNAL_KIND,
    SIGNAL_TOPIC,
    RawEvent,
    Signal,
)

__all__: list[str] = [
    "ACKNOWLEDGEMENT_KIND",
    "SIGNAL_KIND",
    "SIGNAL_TOPIC",
    "Acknowledgement",
    "ActionType",
    "CandidateAction",
    "ExecutionRequest",
    "ExecutionResult",
    "ExecutionStatus",
    "RawEvent",
    "RebootDetails",
    "SemanticVersion",
    "Signal",
    "build_action_key",
]
