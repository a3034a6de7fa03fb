"""Signal domain models: raw broadcast events and validated signals.

A RawEvent is whatever the broadcast boundary hands over after it has
checked authenticity: who signed it, when it was created, its kind and its
name/value tags. A Signal is the validated, typed form that may enter the
vote ledger.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from qube_manager.domain.errors.signal import InvalidSignalError
from qube_manager.domain.models.action import (
    ActionType,
    RebootDetails,
    SemanticVersion,
    build_action_key,
)

# Addressable event kind carrying upgrade/reboot signals
SIGNAL_KIND = 33321

# Event kind of the status acknowledgement a node publishes after acting
ACKNOWLEDGEMENT_KIND = 3333

# Value of the "d" tag identifying the single topic this daemon consumes
SIGNAL_TOPIC = "hyperqube"

# Wire tag names
TAG_TOPIC = "d"
TAG_VERSION = "version"
TAG_HASH = "hash"
TAG_NETWORK = "network"
TAG_ACTION = "action"
TAG_GENESIS = "genesis_url"
TAG_DEADLINE = "required_by"


@dataclass(frozen=True)
class RawEvent:
    """An authenticated but otherwise untrusted broadcast event.

    Attributes:
        signer_identity: Authenticated identity of the broadcaster.
        observed_at: Creation timestamp of the event (Unix seconds).
        kind: Event kind.
        tags: Name/value tags; each tag is a tuple whose first element is
            the name.
        content: Free-form human-readable text.
        event_id: Identifier assigned by the broadcast medium, if any.
    """

    signer_identity: str
    observed_at: int
    kind: int
    tags: tuple[tuple[str, ...], ...] = ()
    content: str = ""
    event_id: str | None = None

    def tag_value(self, name: str) -> str:
        """Return the value of the first tag named ``name``, or "" if absent."""
        for tag in self.tags:
            if len(tag) >= 2 and tag[0] == name:
                return tag[1]
        return ""

    def has_tag(self, name: str) -> bool:
        """Return True if any tag is named ``name``."""
        return any(len(tag) > 0 and tag[0] == name for tag in self.tags)


@dataclass(frozen=True)
class Signal:
    """A validated proposal from one signer for one action.

    Invariant: ``reboot`` is set if and only if ``action_type`` is REBOOT.

    Attributes:
        signer_identity: Who endorses the action.
        observed_at: Monotonic-per-signer logical timestamp.
        action_type: Upgrade or reboot.
        version: Proposed version.
        binary_hash: Content hash of the binary (opaque).
        network_scope: Network the signal targets.
        reboot: Reboot payload, None for upgrades.
    """

    signer_identity: str
    observed_at: int
    action_type: ActionType
    version: SemanticVersion
    binary_hash: str
    network_scope: str
    reboot: RebootDetails | None = None
    action_key: str = field(init=False, compare=False)

    def __post_init__(self) -> None:
        """Validate invariants and derive the action key."""
        if not self.signer_identity:
            raise InvalidSignalError("signer_identity", "must not be empty")
        if not self.binary_hash:
            raise InvalidSignalError("binary_hash", "must not be empty")
        if not self.network_scope:
            raise InvalidSignalError("network_scope", "must not be empty")
        if self.action_type is ActionType.REBOOT and self.reboot is None:
            raise InvalidSignalError("reboot", "reboot signals need a genesis reference")
        if self.action_type is ActionType.UPGRADE and self.reboot is not None:
            raise InvalidSignalError("reboot", "upgrade signals carry no reboot payload")
        object.__setattr__(
            self,
            "action_key",
            build_action_key(self.action_type, self.version, self.reboot),
        )

    @property
    def genesis_reference(self) -> str | None:
        """Genesis URI for reboots, None for upgrades."""
        return self.reboot.genesis_reference if self.reboot else None

    @property
    def deadline(self) -> int | None:
        """Reboot deadline, None if absent or for upgrades."""
        return self.reboot.deadline if self.reboot else None
