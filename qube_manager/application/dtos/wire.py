"""Wire DTOs: the JSON shapes that cross the broadcast boundary.

Events are Nostr-style objects:

    {"id": "...", "pubkey": "...", "created_at": 1700000000, "kind": 33321,
     "tags": [["d", "hyperqube"], ["version", "v1.5.0"], ...], "content": ""}

Pydantic checks only the envelope (types, required keys). Whether the tags
make a valid signal is the SignalValidator's job.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from qube_manager.domain.errors.signal import InvalidSignalError, InvalidVersionError
from qube_manager.domain.models.action import ActionType, RebootDetails, SemanticVersion
from qube_manager.domain.models.execution import Acknowledgement
from qube_manager.domain.models.signal import ACKNOWLEDGEMENT_KIND, RawEvent, Signal


class WireEvent(BaseModel):
    """Envelope of one broadcast event.

    Attributes:
        id: Event id assigned by the signer, if present.
        pubkey: Signer identity.
        created_at: Creation time, Unix seconds.
        kind: Event kind.
        tags: List of [name, value, ...] string lists.
        content: Free-form text.
        sig: Signature, carried through untouched.
    """

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    pubkey: str = Field(..., min_length=1)
    created_at: int = Field(..., ge=0)
    kind: int
    tags: list[list[str]] = Field(default_factory=list)
    content: str = ""
    sig: str | None = None

    def to_raw_event(self) -> RawEvent:
        """Convert to the domain RawEvent."""
        return RawEvent(
            signer_identity=self.pubkey,
            observed_at=self.created_at,
            kind=self.kind,
            tags=tuple(tuple(tag) for tag in self.tags),
            content=self.content,
            event_id=self.id,
        )

    @classmethod
    def from_acknowledgement(
        cls, acknowledgement: Acknowledgement, node_identity: str
    ) -> WireEvent:
        """Render an acknowledgement as an unsigned kind-3333 event."""
        return cls(
            pubkey=node_identity,
            created_at=acknowledgement.executed_at,
            kind=ACKNOWLEDGEMENT_KIND,
            tags=acknowledgement.to_tags(),
            content=acknowledgement.content,
        )


def parse_wire_event(line: str) -> WireEvent:
    """Parse one NDJSON line.

    Raises:
        pydantic.ValidationError: If the line is not a valid event envelope.
    """
    return WireEvent.model_validate_json(line)


class JournalEntry(BaseModel):
    """One accepted signal as stored in the signal journal."""

    model_config = ConfigDict(extra="ignore")

    signer: str
    observed_at: int
    action: str
    version: str
    hash: str
    network: str
    genesis_url: str | None = None
    required_by: int | None = None

    @classmethod
    def from_signal(cls, signal: Signal) -> JournalEntry:
        return cls(
            signer=signal.signer_identity,
            observed_at=signal.observed_at,
            action=signal.action_type.value,
            version=signal.version.raw,
            hash=signal.binary_hash,
            network=signal.network_scope,
            genesis_url=signal.genesis_reference,
            required_by=signal.deadline,
        )

    def to_signal(self) -> Signal:
        """Rebuild the Signal.

        Raises:
            InvalidSignalError: If the stored fields are inconsistent.
            InvalidVersionError: If the stored version no longer parses.
        """
        try:
            action_type = ActionType(self.action)
        except ValueError as exc:
            raise InvalidSignalError("action", f"unknown action {self.action!r}") from exc
        reboot = None
        if action_type is ActionType.REBOOT:
            if not self.genesis_url:
                raise InvalidSignalError("genesis_url", "missing for reboot")
            reboot = RebootDetails(
                genesis_reference=self.genesis_url, deadline=self.required_by
            )
        return Signal(
            signer_identity=self.signer,
            observed_at=self.observed_at,
            action_type=action_type,
            version=SemanticVersion.parse(self.version),
            binary_hash=self.hash,
            network_scope=self.network,
            reboot=reboot,
        )

