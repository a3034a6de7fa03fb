"""Quorum evaluator: pick at most one action to execute.

Selection rule:
- skip candidates already in History
- skip candidates with fewer distinct endorsers than the threshold
- among the rest, pick the greatest version by semantic-version precedence
- equal precedence: the lexically smallest action key wins

The evaluator reads the ledger and never mutates it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from qube_manager.domain.models.action import CandidateAction
from qube_manager.domain.services.vote_ledger import VoteLedger


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of one evaluation.

    Attributes:
        selected: Winning candidate, None if nothing reached quorum.
        tallies: (action_key, votes) for every candidate not in History.
        already_executed: Number of candidates skipped because of History.
    """

    selected: CandidateAction | None
    tallies: tuple[tuple[str, int], ...] = ()
    already_executed: int = 0

    @property
    def found(self) -> bool:
        return self.selected is not None


def _outranks(challenger: CandidateAction, incumbent: CandidateAction) -> bool:
    if challenger.version.is_newer_than(incumbent.version):
        return True
    if challenger.version.same_precedence(incumbent.version):
        return challenger.key < incumbent.key
    return False


class QuorumEvaluator:
    """Selects the highest-version candidate that has reached quorum."""

    def __init__(self, threshold: int) -> None:
        if threshold < 1:
            raise ValueError(f"quorum threshold must be >= 1, got {threshold}")
        self.threshold = threshold

    def evaluate_and_select(
        self,
        ledger: VoteLedger,
        is_executed: Callable[[str], bool],
    ) -> EvaluationResult:
        """Evaluate the current ledger.

        Args:
            ledger: Vote ledger (and its registry) to read.
            is_executed: History membership test for an action key.

        Returns:
            EvaluationResult with the winner, if any.
        """
        best: CandidateAction | None = None
        tallies: list[tuple[str, int]] = []
        executed = 0

        for candidate in ledger.candidates():
            if is_executed(candidate.key):
                executed += 1
                continue
            votes = ledger.vote_count(candidate.key)
            tallies.append((candidate.key, votes))
            if votes < self.threshold:
                continue
            if best is None or _outranks(candidate, best):
                best = candidate

        return EvaluationResult(
            selected=best, tallies=tuple(tallies), already_executed=executed
        )
