"""Trusted signer keys.

config.yaml lists signers as bech32 ``npub1...`` strings (NIP-19) while wire
events carry the author as a 64-character hex public key. ``follows`` is
normalized to hex once, when configuration is loaded, so the validator can
compare identities directly.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

import structlog
from bech32 import bech32_decode, convertbits

logger = structlog.get_logger(__name__)

NPUB_PREFIX = "npub"
PUBKEY_BYTES = 32

_HEX_PUBKEY = re.compile(r"[0-9a-fA-F]{64}")


def decode_npub(value: str) -> str:
    """Decode a bech32 ``npub`` into a lowercase hex public key.

    Raises:
        ValueError: If value is not valid bech32, not an npub, or does not
            hold a 32-byte key.
    """
    hrp, data = bech32_decode(value)
    if hrp is None or data is None:
        raise ValueError("invalid bech32 string")
    if hrp != NPUB_PREFIX:
        raise ValueError(f"expected npub but got {hrp}")
    key = convertbits(data, 5, 8, False)
    if key is None or len(key) != PUBKEY_BYTES:
        raise ValueError("npub does not hold a 32-byte public key")
    return bytes(key).hex()


def normalize_follows(entries: Iterable[str]) -> tuple[str, ...]:
    """Return trusted signers as hex public keys.

    Hex keys pass through lowercased and npubs are decoded. Anything else is
    logged and skipped.

    Raises:
        ValueError: If entries were given but none is a usable key. An empty
            result would otherwise trust every author.
    """
    keys: list[str] = []
    given = 0
    for entry in entries:
        given += 1
        entry = entry.strip()
        if _HEX_PUBKEY.fullmatch(entry):
            keys.append(entry.lower())
            continue
        try:
            keys.append(decode_npub(entry))
        except ValueError as exc:
            logger.warning("follow_skipped", entry=entry, error=str(exc))

    if given and not keys:
        raise ValueError("follows contains no valid npub or hex public key")
    logger.debug("follows_decoded", given=given, valid=len(keys))
    return tuple(keys)
