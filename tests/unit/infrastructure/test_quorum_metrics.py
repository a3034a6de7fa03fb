"""Unit tests for QuorumMetrics and the metrics singleton."""

from prometheus_client import CollectorRegistry

from qube_manager.infrastructure.monitoring.metrics import (
    QuorumMetrics,
    generate_metrics,
    get_quorum_metrics,
    init_quorum_metrics,
    reset_quorum_metrics,
)


class TestQuorumMetrics:
    def test_counters_carry_network_label(self) -> None:
        registry = CollectorRegistry()
        metrics = QuorumMetrics(registry=registry, network="testnet")

        metrics.increment_signals_rejected("wrong_network")
        metrics.increment_actions_executed("reboot", "success")
        metrics.set_candidate_actions(4)

        assert registry.get_sample_value(
            "signals_rejected_total", {"network": "testnet", "reason": "wrong_network"}
        ) == 1
        assert registry.get_sample_value(
            "actions_executed_total",
            {"network": "testnet", "action": "reboot", "status": "success"},
        ) == 1
        assert registry.get_sample_value("candidate_actions", {"network": "testnet"}) == 4

    def test_separate_registries_are_isolated(self) -> None:
        first = QuorumMetrics(registry=CollectorRegistry())
        second = QuorumMetrics(registry=CollectorRegistry())

        first.increment_evaluation_cycles()

        assert second.get_registry().get_sample_value(
            "evaluation_cycles_total", {"network": "hqz"}
        ) is None


class TestSingleton:
    def test_init_replaces_singleton(self) -> None:
        metrics = init_quorum_metrics("testnet")

        assert get_quorum_metrics() is metrics
        assert metrics.network == "testnet"

        reset_quorum_metrics()
        assert get_quorum_metrics() is not metrics

    def test_generate_metrics_includes_uptime(self) -> None:
        metrics = init_quorum_metrics("hqz")
        metrics.increment_signals_received()

        output = generate_metrics().decode()

        assert 'signals_received_total{network="hqz"} 1.0' in output
        assert "uptime_seconds" in output
