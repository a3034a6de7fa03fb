"""Unit tests for QuorumConfig."""

from pathlib import Path

import pytest

from qube_manager.application.services.quorum_coordinator import FailurePolicy
from qube_manager.config.quorum_config import ExecutorConfig, QuorumConfig

SIGNER_A = "aa" * 32
SIGNER_B = "bb" * 32


class TestQuorumConfigValidation:
    """Tests for QuorumConfig.__post_init__."""

    def test_defaults(self) -> None:
        config = QuorumConfig()

        assert config.quorum == 3
        assert config.network == "hqz"
        assert config.failure_policy is FailurePolicy.SUPPRESS
        assert config.status_port is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"quorum": 0},
            {"network": ""},
            {"check_interval_seconds": 0},
            {"follows": ("npub-a", "")},
            {"status_port": 70000},
        ],
    )
    def test_invalid_values_raise(self, kwargs) -> None:
        with pytest.raises(ValueError):
            QuorumConfig(**kwargs)

    def test_executor_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            ExecutorConfig(timeout_seconds=-1)


class TestDerivedValues:
    def test_state_paths_live_in_config_dir(self, tmp_path: Path) -> None:
        config = QuorumConfig(config_dir=tmp_path, outbox="out/acks.jsonl")

        assert config.history_path == tmp_path / "history.json"
        assert config.journal_path == tmp_path / "signals.jsonl"
        assert config.outbox_path == tmp_path / "out" / "acks.jsonl"

    def test_outbox_disabled(self) -> None:
        assert QuorumConfig(outbox=None).outbox_path is None

    @pytest.mark.parametrize(
        ("follows", "quorum", "reachable"),
        [
            ((), 3, True),
            (("a", "b"), 3, False),
            (("a", "a", "b"), 3, False),
            (("a", "b", "c"), 3, True),
        ],
    )
    def test_quorum_reachable(self, follows, quorum, reachable) -> None:
        assert QuorumConfig(follows=follows, quorum=quorum).quorum_reachable is reachable


class TestEnvironmentOverrides:
    """Tests for with_environment()."""

    def test_overrides_apply(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("QUBE_FOLLOWS", f"{SIGNER_A}, {SIGNER_B},,")
        monkeypatch.setenv("QUBE_QUORUM", "2")
        monkeypatch.setenv("QUBE_NETWORK", "testnet")
        monkeypatch.setenv("QUBE_FAILURE_POLICY", "retry")
        monkeypatch.setenv("QUBE_STATUS_PORT", "9100")
        monkeypatch.setenv("QUBE_CHECK_INTERVAL", "0.5")

        config = QuorumConfig(node_id="node-1").with_environment()

        assert config.follows == (SIGNER_A, SIGNER_B)
        assert config.quorum == 2
        assert config.network == "testnet"
        assert config.failure_policy is FailurePolicy.RETRY
        assert config.status_port == 9100
        assert config.check_interval_seconds == 0.5
        assert config.node_id == "node-1"

    def test_unparseable_numbers_keep_file_values(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("QUBE_QUORUM", "many")
        monkeypatch.setenv("QUBE_CHECK_INTERVAL", "soon")

        config = QuorumConfig(quorum=5, check_interval_seconds=10).with_environment()

        assert config.quorum == 5
        assert config.check_interval_seconds == 10

    def test_unknown_failure_policy_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("QUBE_FAILURE_POLICY", "ignore")

        with pytest.raises(ValueError):
            QuorumConfig().with_environment()

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("QUBE_SOURCES", "-,/var/lib/events.jsonl")

        config = QuorumConfig.from_environment()

        assert config.sources == ("-", "/var/lib/events.jsonl")

    def test_npub_override_is_decoded(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(
            "QUBE_FOLLOWS",
            "npub1sr47j9awvw2xa0m4w770dr2rl7ylzq4xt9k5rel3h4h58sc3mjysx6pj64",
        )

        config = QuorumConfig().with_environment()

        assert config.follows == (
            "80ebe917ae63946ebf7577bcf68d43ff89f102a6596d41e7f1bd6f43c311dc89",
        )
