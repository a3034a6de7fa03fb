"""Unit tests for the status API (GET /v1/health, /v1/tally, /v1/metrics)."""

import pytest
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from qube_manager.api.main import create_app
from qube_manager.application.services.quorum_coordinator import QuorumCoordinator
from qube_manager.bootstrap.coordinator import set_quorum_coordinator
from qube_manager.bootstrap.metrics import PrometheusMetricsExporter, set_metrics_exporter
from qube_manager.domain.services.quorum_evaluator import QuorumEvaluator
from qube_manager.domain.services.signal_validator import SignalValidator
from qube_manager.infrastructure.monitoring.metrics import QuorumMetrics
from qube_manager.infrastructure.stubs import (
    AcknowledgementPublisherStub,
    ActionExecutorStub,
    HistoryStub,
)


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app(), raise_server_exceptions=False)


@pytest.fixture
def history() -> HistoryStub:
    return HistoryStub(keys=("upgrade:v0.9.0",))


@pytest.fixture
def coordinator(history: HistoryStub) -> QuorumCoordinator:
    coordinator = QuorumCoordinator(
        SignalValidator("hqz"),
        QuorumEvaluator(2),
        history,
        ActionExecutorStub(),
        AcknowledgementPublisherStub(),
        node_identity="node-test",
    )
    set_quorum_coordinator(coordinator)
    return coordinator


class TestHealthEndpoint:
    def test_returns_healthy(self, client: TestClient, project_version: str) -> None:
        response = client.get("/v1/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": project_version}


class TestTallyEndpoint:
    """Tests for GET /v1/tally."""

    def test_lists_candidates_with_voters(
        self, client: TestClient, coordinator: QuorumCoordinator, make_signal
    ) -> None:
        coordinator.ledger.record_vote(make_signal("s2", 1, version="v1.0.0"))
        coordinator.ledger.record_vote(make_signal("s1", 1, version="v1.0.0"))
        coordinator.ledger.record_vote(make_signal("s3", 1, version="v0.9.0"))

        response = client.get("/v1/tally")

        assert response.status_code == 200
        data = response.json()
        assert data["network"] == "hqz"
        assert data["threshold"] == 2
        by_key = {c["action_key"]: c for c in data["candidates"]}
        assert by_key["upgrade:v1.0.0"]["voters"] == ["s1", "s2"]
        assert by_key["upgrade:v1.0.0"]["reached_quorum"] is True
        assert by_key["upgrade:v1.0.0"]["origin"] == "s2"
        assert by_key["upgrade:v1.0.0"]["history_status"] is None
        assert by_key["upgrade:v0.9.0"]["reached_quorum"] is False
        assert by_key["upgrade:v0.9.0"]["history_status"] == "success"

    def test_empty_ledger(self, client: TestClient, coordinator: QuorumCoordinator) -> None:
        response = client.get("/v1/tally")

        assert response.json()["candidates"] == []

    def test_without_coordinator_is_server_error(self, client: TestClient) -> None:
        response = client.get("/v1/tally")

        assert response.status_code == 500


class TestMetricsEndpoint:
    def test_exposes_prometheus_text(self, client: TestClient) -> None:
        collector = QuorumMetrics(registry=CollectorRegistry(), network="testnet")
        collector.increment_signals_received()
        set_metrics_exporter(PrometheusMetricsExporter(collector))

        response = client.get("/v1/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'signals_received_total{network="testnet"} 1.0' in response.text
        assert "uptime_seconds" in response.text
