"""Vote ledger with per-signer supersession, plus the action registry.

Only a signer's most recent signal counts. The ledger keeps, per signer, the
observed_at and action key of the latest accepted signal; a newer signal for
a different key moves the signer's vote, an older or equally old signal is
discarded without touching anything.

Invariant: a signer appears in at most one vote set, the one named by its
latest-signal entry (unless that set was cleared after execution).

Neither class is safe for concurrent use. The coordinator holds one lock
around every call that touches either of them.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from qube_manager.domain.models.action import CandidateAction
from qube_manager.domain.models.signal import Signal


class VoteRecordResult(Enum):
    """What record_vote did with a signal."""

    ACCEPTED = "accepted"  # first signal from this signer
    SUPERSEDED = "superseded"  # vote moved away from an earlier key
    REFRESHED = "refreshed"  # newer signal for the same key
    STALE = "stale"  # not newer than the signer's latest; ignored


@dataclass(frozen=True)
class LatestSignal:
    """Latest-signal index entry for one signer."""

    observed_at: int
    action_key: str


@dataclass(frozen=True)
class VoteRecord:
    """Outcome of record_vote.

    Attributes:
        result: What happened to the ledger.
        action_key: Key the signal endorses.
        previous_key: Key the signer's vote was moved away from, if any.
        new_candidate: True if this signal registered a new CandidateAction.
    """

    result: VoteRecordResult
    action_key: str
    previous_key: str | None = None
    new_candidate: bool = False

    @property
    def mutated(self) -> bool:
        return self.result is not VoteRecordResult.STALE


@dataclass(frozen=True)
class CandidateTally:
    """Read-only view of one candidate and its current endorsers."""

    candidate: CandidateAction
    voters: tuple[str, ...]

    @property
    def votes(self) -> int:
        return len(self.voters)


class ActionRegistry:
    """Action key -> first-seen CandidateAction.

    First writer wins: registering a key that already exists is a no-op, so
    the hash, network and origin recorded for an action never change.
    """

    def __init__(self) -> None:
        self._candidates: dict[str, CandidateAction] = {}

    def register(self, candidate: CandidateAction) -> bool:
        """Register a candidate unless its key is already known.

        Returns:
            True if the candidate was added, False if the key existed.
        """
        if candidate.key in self._candidates:
            return False
        self._candidates[candidate.key] = candidate
        return True

    def get(self, key: str) -> CandidateAction | None:
        return self._candidates.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._candidates

    def __iter__(self) -> Iterator[CandidateAction]:
        return iter(list(self._candidates.values()))

    def __len__(self) -> int:
        return len(self._candidates)


class VoteLedger:
    """Tracks which signers currently endorse which action.

    Attributes:
        registry: The action registry updated alongside the vote sets.
    """

    def __init__(self, registry: ActionRegistry | None = None) -> None:
        self.registry = registry if registry is not None else ActionRegistry()
        self._votes: dict[str, set[str]] = {}
        self._latest: dict[str, LatestSignal] = {}

    def record_vote(self, signal: Signal) -> VoteRecord:
        """Record a validated signal.

        Args:
            signal: A signal accepted by the SignalValidator.

        Returns:
            VoteRecord describing the change. STALE records mean the ledger
            was left untouched.
        """
        key = signal.action_key
        signer = signal.signer_identity
        previous = self._latest.get(signer)

        if previous is not None and signal.observed_at <= previous.observed_at:
            return VoteRecord(result=VoteRecordResult.STALE, action_key=key)

        result = VoteRecordResult.ACCEPTED
        previous_key: str | None = None
        if previous is not None:
            if previous.action_key == key:
                result = VoteRecordResult.REFRESHED
            else:
                result = VoteRecordResult.SUPERSEDED
                previous_key = previous.action_key
                self._discard_vote(previous_key, signer)

        new_candidate = self.registry.register(CandidateAction.from_signal(signal))
        self._votes.setdefault(key, set()).add(signer)
        self._latest[signer] = LatestSignal(
            observed_at=signal.observed_at, action_key=key
        )
        return VoteRecord(
            result=result,
            action_key=key,
            previous_key=previous_key,
            new_candidate=new_candidate,
        )

    def _discard_vote(self, key: str, signer: str) -> None:
        voters = self._votes.get(key)
        if voters is None:
            return
        voters.discard(signer)
        if not voters:
            del self._votes[key]

    def vote_count(self, key: str) -> int:
        return len(self._votes.get(key, ()))

    def voters(self, key: str) -> frozenset[str]:
        return frozenset(self._votes.get(key, ()))

    def candidates(self) -> list[CandidateAction]:
        """All registered candidates in first-seen order."""
        return list(self.registry)

    def latest_for(self, signer: str) -> LatestSignal | None:
        return self._latest.get(signer)

    def clear_votes(self, key: str) -> int:
        """Drop every vote for a key. The candidate stays registered.

        Returns:
            Number of votes removed.
        """
        voters = self._votes.pop(key, None)
        return len(voters) if voters else 0

    def snapshot(self) -> list[CandidateTally]:
        """Copy of every candidate with its sorted voter list."""
        return [
            CandidateTally(
                candidate=candidate,
                voters=tuple(sorted(self._votes.get(candidate.key, ()))),
            )
            for candidate in self.registry
        ]
