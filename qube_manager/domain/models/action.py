"""Action domain models: what a signal proposes.

An action is either an upgrade to a version or a reboot onto a new genesis.
Its identity (the action key) is a deterministic function of the action
type, the version exactly as written, and the genesis reference for reboots:

    upgrade:v1.5.0
    reboot:v2.0.0:https://example.org/genesis.json

The key uses the version as written, so ``v1.0.0`` and ``1.0.0`` are two
different actions that compare equal by version.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

import semver

from qube_manager.domain.errors.signal import InvalidVersionError

if TYPE_CHECKING:
    from qube_manager.domain.models.signal import Signal


class ActionType(Enum):
    """Kind of network-wide action a signal proposes."""

    UPGRADE = "upgrade"
    REBOOT = "reboot"


@dataclass(frozen=True)
class SemanticVersion:
    """A parsed semantic version that remembers how it was written.

    Equality and hashing use the raw text; ordering uses semantic
    version precedence (build metadata is ignored, pre-releases sort
    before their release).

    Attributes:
        raw: The version string exactly as received (e.g. "v1.5.0").
        parsed: The semver.Version used for ordering.
    """

    raw: str
    parsed: semver.Version = field(compare=False, repr=False)

    @classmethod
    def parse(cls, text: str) -> SemanticVersion:
        """Parse a version string.

        A leading "v" is accepted and missing minor/patch components default
        to zero ("v2" is 2.0.0).

        Args:
            text: Version string from the wire.

        Returns:
            The parsed SemanticVersion.

        Raises:
            InvalidVersionError: If text is not a semantic version.
        """
        candidate = text[1:] if text[:1] in ("v", "V") else text
        try:
            parsed = semver.Version.parse(candidate, optional_minor_and_patch=True)
        except (ValueError, TypeError) as exc:
            raise InvalidVersionError(text) from exc
        return cls(raw=text, parsed=parsed)

    def is_newer_than(self, other: SemanticVersion) -> bool:
        """Return True if this version has strictly higher precedence."""
        return self.parsed > other.parsed

    def same_precedence(self, other: SemanticVersion) -> bool:
        """Return True if neither version is newer than the other."""
        return self.parsed.compare(other.parsed) == 0

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True)
class RebootDetails:
    """Reboot-only payload of a signal.

    Attributes:
        genesis_reference: URI of the new genesis.
        deadline: Optional Unix timestamp by which the reboot is required.
    """

    genesis_reference: str
    deadline: int | None = None


def build_action_key(
    action_type: ActionType,
    version: SemanticVersion,
    reboot: RebootDetails | None = None,
) -> str:
    """Compute the deterministic action key.

    Args:
        action_type: Upgrade or reboot.
        version: Proposed version.
        reboot: Reboot payload (required for reboot, ignored for upgrade).

    Returns:
        The action key string.
    """
    if action_type is ActionType.REBOOT:
        if reboot is None:
            raise ValueError("reboot action key requires a genesis reference")
        return f"reboot:{version.raw}:{reboot.genesis_reference}"
    return f"upgrade:{version.raw}"


@dataclass(frozen=True)
class CandidateAction:
    """First-seen description of a proposed action.

    Created from the first accepted signal for a key and never mutated
    afterwards: later signals for the same key add votes only, they do not
    change the hash, network or origin recorded here.

    Attributes:
        key: The action key.
        action_type: Upgrade or reboot.
        version: Proposed version.
        binary_hash: Content hash carried by the first signal.
        network_scope: Network identifier carried by the first signal.
        origin_signer_identity: Signer of the first signal; acknowledgements
            are addressed back to this identity.
        reboot: Reboot payload, None for upgrades.
        first_seen_at: observed_at of the first signal.
    """

    key: str
    action_type: ActionType
    version: SemanticVersion
    binary_hash: str
    network_scope: str
    origin_signer_identity: str
    reboot: RebootDetails | None = None
    first_seen_at: int = 0

    @classmethod
    def from_signal(cls, signal: Signal) -> CandidateAction:
        """Create the candidate described by a signal."""
        return cls(
            key=signal.action_key,
            action_type=signal.action_type,
            version=signal.version,
            binary_hash=signal.binary_hash,
            network_scope=signal.network_scope,
            origin_signer_identity=signal.signer_identity,
            reboot=signal.reboot,
            first_seen_at=signal.observed_at,
        )

    @property
    def genesis_reference(self) -> str | None:
        """Genesis URI for reboots, None for upgrades."""
        return self.reboot.genesis_reference if self.reboot else None
