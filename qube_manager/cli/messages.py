"""Signal event construction for ``qube-manager send-message``."""

from __future__ import annotations

import time

from qube_manager.application.dtos.wire import WireEvent
from qube_manager.domain.errors.signal import InvalidVersionError
from qube_manager.domain.models.action import ActionType, SemanticVersion
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
)
from qube_manager.domain.services.signal_validator import SignalValidator


class MessageError(ValueError):
    """Raised when send-message arguments do not form a valid signal."""


def signal_content(
    action_type: ActionType, version: str, network: str, required_by: str | None
) -> str:
    """Human-readable content of a signal event."""
    if action_type is ActionType.UPGRADE:
        return (
            f"[hypersignal] A HyperQube upgrade has been released for network "
            f"{network}. Please update binary to version {version}."
        )
    content = (
        f"[hypersignal] A HyperQube reboot for network {network} "
        f"version {version} has been scheduled."
    )
    if required_by:
        content += f" Required by timestamp {required_by}."
    return content


def build_signal_event(
    *,
    signer: str,
    action: str,
    version: str,
    binary_hash: str,
    network: str,
    genesis: str | None = None,
    required_by: str | None = None,
    created_at: int | None = None,
) -> WireEvent:
    """Build an unsigned signal event and check it would be accepted.

    Raises:
        MessageError: With an operator-facing message if any argument is
            missing or invalid.
    """
    try:
        action_type = ActionType(action)
    except ValueError as exc:
        raise MessageError(
            f"Invalid action type '{action}'. Must be 'upgrade' or 'reboot'."
        ) from exc
    if not version:
        raise MessageError("Version is required.")
    try:
        SemanticVersion.parse(version)
    except InvalidVersionError as exc:
        raise MessageError(f"Invalid semantic version '{version}'.") from exc
    if not binary_hash:
        raise MessageError("Hash is required (use --hash).")
    if not network:
        raise MessageError("Network is required (use --network).")
    if not signer:
        raise MessageError("Signer identity is required (use --signer).")

    tags = [
        [TAG_TOPIC, SIGNAL_TOPIC],
        [TAG_VERSION, version],
        [TAG_HASH, binary_hash],
        [TAG_NETWORK, network],
        [TAG_ACTION, action_type.value],
    ]
    if action_type is ActionType.REBOOT:
        if not genesis:
            raise MessageError("Genesis URL is required for reboot messages (use --genesis).")
        tags.append([TAG_GENESIS, genesis])
        if required_by:
            tags.append([TAG_DEADLINE, required_by])

    event = WireEvent(
        pubkey=signer,
        created_at=created_at if created_at is not None else int(time.time()),
        kind=SIGNAL_KIND,
        tags=tags,
        content=signal_content(action_type, version, network, required_by),
    )

    outcome = SignalValidator(network).validate(event.to_raw_event())
    if not outcome.ok:
        reason = outcome.reason.value if outcome.reason else "rejected"
        detail = f": {outcome.detail}" if outcome.detail else ""
        raise MessageError(f"Signal would be rejected ({reason}){detail}")
    return event
