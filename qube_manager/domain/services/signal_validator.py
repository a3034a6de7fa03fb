"""Signal validator: raw broadcast event -> Signal, or a rejection reason.

The validator is a pure function of the event and the node configuration.
It never raises for bad input and never logs; callers decide what to do
with a rejection (the coordinator logs it at debug and counts it).

Checks, in order:
1. Event kind is the signal kind
2. Topic tag ("d") is the single topic this daemon consumes
3. Signer is trusted (skipped when no trusted set is configured)
4. version, hash, network and action are all present and non-empty
5. network equals the node's network scope
6. version parses as a semantic version
7. action is "upgrade" or "reboot"
8. reboot: genesis_url present and a valid request URI
9. reboot: required_by, if present, is a Unix timestamp
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlsplit

from qube_manager.domain.errors.signal import InvalidVersionError
from qube_manager.domain.models.action import ActionType, RebootDetails, SemanticVersion
from qube_manager.domain.models.signal import (
    SIGNAL_KIND,
    SIGNAL_TOPIC,
    TAG_ACTION,
    TAG_DEADLINE,
    TAG_GENESIS,
    TAG_HASH,
    TAG_NETWORK,
    TAG_TOPIC,
    TAG_VERSION,
    RawEvent,
    Signal,
)

_UNIX_TIMESTAMP = re.compile(r"^\d+$")


class RejectionReason(Enum):
    """Why a raw event did not become a Signal."""

    WRONG_KIND = "wrong_kind"
    WRONG_TOPIC = "wrong_topic"
    UNTRUSTED_SIGNER = "untrusted_signer"
    MISSING_FIELD = "missing_field"
    WRONG_NETWORK = "wrong_network"
    INVALID_VERSION = "invalid_version"
    UNKNOWN_ACTION = "unknown_action"
    MISSING_GENESIS = "missing_genesis"
    INVALID_GENESIS = "invalid_genesis"
    INVALID_DEADLINE = "invalid_deadline"


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of validating one raw event.

    Attributes:
        signal: The validated signal, None when rejected.
        reason: Rejection reason, None when accepted.
        detail: Short human-readable context for logging.
    """

    signal: Signal | None = None
    reason: RejectionReason | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.signal is not None

    @classmethod
    def accepted(cls, signal: Signal) -> ValidationOutcome:
        return cls(signal=signal)

    @classmethod
    def rejected(cls, reason: RejectionReason, detail: str = "") -> ValidationOutcome:
        return cls(reason=reason, detail=detail)


def is_request_uri(text: str) -> bool:
    """Return True if text is an absolute URI or an absolute path."""
    if not text or any(ch.isspace() for ch in text):
        return False
    if text.startswith("/"):
        return True
    try:
        parts = urlsplit(text)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc or parts.path)


class SignalValidator:
    """Validates raw broadcast events against the node configuration.

    Attributes:
        network_scope: The only network this node acts for.
        trusted_signers: Identities allowed to propose actions. Empty means
            the broadcast boundary already restricts authors.
    """

    def __init__(
        self,
        network_scope: str,
        trusted_signers: Iterable[str] = (),
        *,
        topic: str = SIGNAL_TOPIC,
        kind: int = SIGNAL_KIND,
    ) -> None:
        if not network_scope:
            raise ValueError("network_scope must not be empty")
        self.network_scope = network_scope
        self.trusted_signers = frozenset(trusted_signers)
        self._topic = topic
        self._kind = kind

    def validate(self, event: RawEvent) -> ValidationOutcome:
        """Validate one raw event.

        Args:
            event: Authenticated raw event from a broadcast source.

        Returns:
            ValidationOutcome carrying either the Signal or the reason.
        """
        if event.kind != self._kind:
            return ValidationOutcome.rejected(
                RejectionReason.WRONG_KIND, f"kind={event.kind}"
            )

        topic = event.tag_value(TAG_TOPIC)
        if topic != self._topic:
            return ValidationOutcome.rejected(
                RejectionReason.WRONG_TOPIC, f"d={topic!r}"
            )

        if self.trusted_signers and event.signer_identity not in self.trusted_signers:
            return ValidationOutcome.rejected(
                RejectionReason.UNTRUSTED_SIGNER, event.signer_identity
            )

        version_text = event.tag_value(TAG_VERSION)
        binary_hash = event.tag_value(TAG_HASH)
        network = event.tag_value(TAG_NETWORK)
        action = event.tag_value(TAG_ACTION)
        missing = [
            name
            for name, value in (
                (TAG_VERSION, version_text),
                (TAG_HASH, binary_hash),
                (TAG_NETWORK, network),
                (TAG_ACTION, action),
            )
            if not value
        ]
        if missing:
            return ValidationOutcome.rejected(
                RejectionReason.MISSING_FIELD, ",".join(missing)
            )

        if network != self.network_scope:
            return ValidationOutcome.rejected(
                RejectionReason.WRONG_NETWORK,
                f"network={network} expected={self.network_scope}",
            )

        try:
            version = SemanticVersion.parse(version_text)
        except InvalidVersionError:
            return ValidationOutcome.rejected(
                RejectionReason.INVALID_VERSION, version_text
            )

        try:
            action_type = ActionType(action)
        except ValueError:
            return ValidationOutcome.rejected(RejectionReason.UNKNOWN_ACTION, action)

        reboot: RebootDetails | None = None
        if action_type is ActionType.REBOOT:
            genesis = event.tag_value(TAG_GENESIS)
            if not genesis:
                return ValidationOutcome.rejected(RejectionReason.MISSING_GENESIS)
            if not is_request_uri(genesis):
                return ValidationOutcome.rejected(
                    RejectionReason.INVALID_GENESIS, genesis
                )
            deadline_text = event.tag_value(TAG_DEADLINE)
            deadline: int | None = None
            if deadline_text:
                if not _UNIX_TIMESTAMP.match(deadline_text):
                    return ValidationOutcome.rejected(
                        RejectionReason.INVALID_DEADLINE, deadline_text
                    )
                deadline = int(deadline_text)
            reboot = RebootDetails(genesis_reference=genesis, deadline=deadline)

        return ValidationOutcome.accepted(
            Signal(
                signer_identity=event.signer_identity,
                observed_at=event.observed_at,
                action_type=action_type,
                version=version,
                binary_hash=binary_hash,
                network_scope=network,
                reboot=reboot,
            )
        )

    def admits(self, signal: Signal) -> bool:
        """Re-check node-scoped rules for an already validated signal.

        Used when replaying journaled signals, since the network scope or
        the trusted set may have changed since they were written.
        """
        if signal.network_scope != self.network_scope:
            return False
        return not self.trusted_signers or signal.signer_identity in self.trusted_signers
