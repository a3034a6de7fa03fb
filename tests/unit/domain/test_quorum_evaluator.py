"""Unit tests for QuorumEvaluator selection."""

import pytest

from qube_manager.domain.services.quorum_evaluator import QuorumEvaluator
from qube_manager.domain.services.vote_ledger import VoteLedger


def _never(_: str) -> bool:
    return False


@pytest.fixture
def ledger() -> VoteLedger:
    return VoteLedger()


class TestSelection:
    """Tests for evaluate_and_select."""

    def test_scenario_a_three_signers_reach_quorum(self, ledger, make_signal) -> None:
        for signer in ("s1", "s2", "s3"):
            ledger.record_vote(make_signal(signer, 100, version="v1.0.0"))

        result = QuorumEvaluator(3).evaluate_and_select(ledger, _never)

        assert result.found
        assert result.selected.key == "upgrade:v1.0.0"

    def test_below_threshold_selects_nothing(self, ledger, make_signal) -> None:
        ledger.record_vote(make_signal("s1", 100))
        ledger.record_vote(make_signal("s2", 100))

        result = QuorumEvaluator(3).evaluate_and_select(ledger, _never)

        assert result.selected is None
        assert result.tallies == (("upgrade:v1.0.0", 2),)

    def test_scenario_b_highest_eligible_version_wins(self, ledger, make_signal) -> None:
        for signer in ("s1", "s2"):
            ledger.record_vote(make_signal(signer, 100, version="v1.0.0"))
        for signer in ("s3", "s4", "s5"):
            ledger.record_vote(make_signal(signer, 100, version="v2.0.0"))

        result = QuorumEvaluator(3).evaluate_and_select(ledger, _never)

        assert result.selected.key == "upgrade:v2.0.0"

    def test_two_eligible_versions_select_newer(self, ledger, make_signal) -> None:
        for signer in ("s1", "s2"):
            ledger.record_vote(make_signal(signer, 100, version="v2.0.0"))
        for signer in ("s3", "s4"):
            ledger.record_vote(make_signal(signer, 100, version="v1.9.0"))

        result = QuorumEvaluator(2).evaluate_and_select(ledger, _never)

        assert result.selected.key == "upgrade:v2.0.0"

    def test_executed_key_is_never_selected(self, ledger, make_signal) -> None:
        for signer in ("s1", "s2", "s3"):
            ledger.record_vote(make_signal(signer, 100, version="v2.0.0"))
        for signer in ("s4", "s5", "s6"):
            ledger.record_vote(make_signal(signer, 100, version="v1.0.0"))

        result = QuorumEvaluator(3).evaluate_and_select(
            ledger, lambda key: key == "upgrade:v2.0.0"
        )

        assert result.selected.key == "upgrade:v1.0.0"
        assert result.already_executed == 1

    def test_equal_versions_break_tie_by_smallest_key(self, ledger, make_signal) -> None:
        for signer in ("s1", "s2"):
            ledger.record_vote(
                make_signal(signer, 100, version="v2.0.0", genesis="https://z.example/g")
            )
        for signer in ("s3", "s4"):
            ledger.record_vote(
                make_signal(signer, 100, version="v2.0.0", genesis="https://a.example/g")
            )

        result = QuorumEvaluator(2).evaluate_and_select(ledger, _never)

        assert result.selected.key == "reboot:v2.0.0:https://a.example/g"

    def test_tie_break_ignores_insertion_order(self, make_signal) -> None:
        first, second = VoteLedger(), VoteLedger()
        a = [make_signal(s, 1, version="1.0.0") for s in ("s1", "s2")]
        b = [make_signal(s, 1, version="v1.0.0") for s in ("s3", "s4")]
        for signal in a + b:
            first.record_vote(signal)
        for signal in b + a:
            second.record_vote(signal)

        evaluator = QuorumEvaluator(2)

        assert (
            evaluator.evaluate_and_select(first, _never).selected.key
            == evaluator.evaluate_and_select(second, _never).selected.key
            == "upgrade:1.0.0"
        )

    def test_evaluation_does_not_mutate_ledger(self, ledger, make_signal) -> None:
        for signer in ("s1", "s2"):
            ledger.record_vote(make_signal(signer, 100))
        before = ledger.snapshot()

        QuorumEvaluator(1).evaluate_and_select(ledger, _never)

        assert ledger.snapshot() == before


class TestThreshold:
    def test_threshold_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            QuorumEvaluator(0)
