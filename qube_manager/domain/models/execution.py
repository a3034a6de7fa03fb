"""Execution domain models: what the core hands to the executor and what it
sends back to the network afterwards.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum

from qube_manager.domain.models.action import ActionType, CandidateAction
from qube_manager.domain.models.signal import SIGNAL_KIND, SIGNAL_TOPIC


class ExecutionStatus(Enum):
    """Outcome of an executor call."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class ExecutionRequest:
    """Everything the executor needs to carry out a selected action.

    Attributes:
        action_key: Key of the selected action.
        action_type: Upgrade or reboot.
        version: Version as written in the winning signal.
        network_scope: Network identifier.
        origin_signer_identity: Signer whose signal created the action.
        binary_hash: Expected content hash of the binary.
        genesis_reference: Genesis URI for reboots.
        deadline: Reboot deadline, if any.
    """

    action_key: str
    action_type: ActionType
    version: str
    network_scope: str
    origin_signer_identity: str
    binary_hash: str
    genesis_reference: str | None = None
    deadline: int | None = None

    @classmethod
    def from_candidate(cls, candidate: CandidateAction) -> ExecutionRequest:
        """Build the request for a selected candidate."""
        return cls(
            action_key=candidate.key,
            action_type=candidate.action_type,
            version=candidate.version.raw,
            network_scope=candidate.network_scope,
            origin_signer_identity=candidate.origin_signer_identity,
            binary_hash=candidate.binary_hash,
            genesis_reference=candidate.genesis_reference,
            deadline=candidate.reboot.deadline if candidate.reboot else None,
        )


@dataclass(frozen=True)
class ExecutionResult:
    """Result reported by the executor boundary.

    Attributes:
        status: SUCCESS or FAILURE.
        error: Failure reason, None on success.
        finished_at: Unix timestamp when execution finished.
    """

    status: ExecutionStatus
    error: str | None = None
    finished_at: int = 0

    @classmethod
    def succeeded(cls, finished_at: int | None = None) -> ExecutionResult:
        return cls(
            status=ExecutionStatus.SUCCESS,
            finished_at=finished_at if finished_at is not None else int(time.time()),
        )

    @classmethod
    def failed(cls, error: str, finished_at: int | None = None) -> ExecutionResult:
        return cls(
            status=ExecutionStatus.FAILURE,
            error=error or "unknown error",
            finished_at=finished_at if finished_at is not None else int(time.time()),
        )

    @property
    def ok(self) -> bool:
        return self.status is ExecutionStatus.SUCCESS


@dataclass(frozen=True)
class Acknowledgement:
    """Status report a node broadcasts after acting on an action.

    The acknowledgement references the originating signal by its
    addressable coordinate ``<signal kind>:<origin signer>:<topic>``.

    Attributes:
        action_key: Key of the action acted upon.
        action_type: Upgrade or reboot.
        version: Version as written in the winning signal.
        network_scope: Network identifier of this node.
        origin_signer_identity: Signer the acknowledgement is addressed to.
        status: SUCCESS or FAILURE.
        node_identity: Identifier of the acknowledging node.
        executed_at: Unix timestamp of execution.
        error: Failure reason, None on success.
    """

    action_key: str
    action_type: ActionType
    version: str
    network_scope: str
    origin_signer_identity: str
    status: ExecutionStatus
    node_identity: str
    executed_at: int
    error: str | None = None

    @classmethod
    def for_execution(
        cls,
        request: ExecutionRequest,
        result: ExecutionResult,
        node_identity: str,
    ) -> Acknowledgement:
        """Build the acknowledgement for a finished execution."""
        return cls(
            action_key=request.action_key,
            action_type=request.action_type,
            version=request.version,
            network_scope=request.network_scope,
            origin_signer_identity=request.origin_signer_identity,
            status=result.status,
            node_identity=node_identity,
            executed_at=result.finished_at,
            error=result.error,
        )

    @property
    def signal_reference(self) -> str:
        """Addressable coordinate of the originating signal."""
        return f"{SIGNAL_KIND}:{self.origin_signer_identity}:{SIGNAL_TOPIC}"

    def to_tags(self) -> list[list[str]]:
        """Render the acknowledgement as wire tags."""
        tags = [
            ["a", self.signal_reference],
            ["p", self.origin_signer_identity],
            ["version", self.version],
            ["network", self.network_scope],
            ["action", self.action_type.value],
            ["status", self.status.value],
            ["node_id", self.node_identity],
            ["action_at", str(self.executed_at)],
        ]
        if self.error:
            tags.append(["error", self.error])
        return tags

    @property
    def content(self) -> str:
        """Human-readable summary for the event content."""
        if self.status is ExecutionStatus.SUCCESS:
            return (
                f"[qube-manager] The {self.action_type.value} to version {self.version} "
                f"has been successful on node {self.node_identity}."
            )
        return (
            f"[qube-manager] The {self.action_type.value} to version {self.version} "
            f"failed on node {self.node_identity}: {self.error}"
        )
