"""
Domain layer - pure quorum coordination logic for qube-manager.

This layer contains:
- Domain models (Signal, CandidateAction, ExecutionRequest, ...)
- Domain services (signal validation, vote ledger, quorum evaluation)
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure, or api.
Only stdlib, typing and the semver parser are allowed.
"""

from qube_manager.domain.exceptions import QubeManagerError
from qube_manager.domain.models import (
    ActionType,
    CandidateAction,
    RawEvent,
    RebootDetails,
    SemanticVersion,
    Signal,
)

__all__: list[str] = [
    "QubeManagerError",
    "ActionType",
    "CandidateAction",
    "RawEvent",
    "RebootDetails",
    "SemanticVersion",
    "Signal",
]
