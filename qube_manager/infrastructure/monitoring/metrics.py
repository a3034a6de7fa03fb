"""Prometheus metrics for the quorum daemon.

Every metric lives in a private CollectorRegistry owned by QuorumMetrics, so
tests can create isolated collectors and the status API exposes only what
the daemon registers.

Metrics:
- signals_received_total: raw events handed over by sources
- signals_rejected_total{reason}: validator rejections
- votes_recorded_total{result}: ledger outcomes (accepted, superseded, ...)
- evaluation_cycles_total: evaluator ticks
- actions_executed_total{action,status}: executor outcomes
- acknowledgements_failed_total: publish failures
- history_write_failures_total: History writes that were not durable
- candidate_actions: candidates currently registered
- uptime_seconds: seconds since the daemon started
"""

import threading
import time

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    generate_latest,
)

# Content type for Prometheus metrics endpoint
METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

_collector_lock = threading.Lock()


class QuorumMetrics:
    """Collects the daemon's operational Prometheus metrics.

    Attributes:
        network: Network label attached to every metric.
        started_at: Unix time the collector was created.
    """

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        network: str = "hqz",
    ) -> None:
        """Initialize the collector.

        Args:
            registry: Optional custom registry for testing isolation.
            network: Network scope label value.
        """
        self._registry = registry or CollectorRegistry()
        self.network = network
        self.started_at = time.time()

        self.signals_received_total = Counter(
            name="signals_received_total",
            documentation="Raw broadcast events received from all sources",
            labelnames=["network"],
            registry=self._registry,
        )
        self.signals_rejected_total = Counter(
            name="signals_rejected_total",
            documentation="Raw events rejected by the signal validator",
            labelnames=["network", "reason"],
            registry=self._registry,
        )
        self.votes_recorded_total = Counter(
            name="votes_recorded_total",
            documentation="Vote ledger outcomes for validated signals",
            labelnames=["network", "result"],
            registry=self._registry,
        )
        self.evaluation_cycles_total = Counter(
            name="evaluation_cycles_total",
            documentation="Quorum evaluation cycles run",
            labelnames=["network"],
            registry=self._registry,
        )
        self.actions_executed_total = Counter(
            name="actions_executed_total",
            documentation="Actions handed to the executor, by outcome",
            labelnames=["network", "action", "status"],
            registry=self._registry,
        )
        self.acknowledgements_failed_total = Counter(
            name="acknowledgements_failed_total",
            documentation="Acknowledgements that could not be published",
            labelnames=["network"],
            registry=self._registry,
        )
        self.history_write_failures_total = Counter(
            name="history_write_failures_total",
            documentation="History records that could not be made durable",
            labelnames=["network"],
            registry=self._registry,
        )
        self.candidate_actions = Gauge(
            name="candidate_actions",
            documentation="Candidate actions currently registered",
            labelnames=["network"],
            registry=self._registry,
        )
        self.uptime_seconds = Gauge(
            name="uptime_seconds",
            documentation="Seconds since daemon start",
            labelnames=["network"],
            registry=self._registry,
        )

    def increment_signals_received(self) -> None:
        self.signals_received_total.labels(network=self.network).inc()

    def increment_signals_rejected(self, reason: str) -> None:
        self.signals_rejected_total.labels(network=self.network, reason=reason).inc()

    def increment_votes_recorded(self, result: str) -> None:
        self.votes_recorded_total.labels(network=self.network, result=result).inc()

    def increment_evaluation_cycles(self) -> None:
        self.evaluation_cycles_total.labels(network=self.network).inc()

    def increment_actions_executed(self, action: str, status: str) -> None:
        self.actions_executed_total.labels(
            network=self.network, action=action, status=status
        ).inc()

    def increment_acknowledgements_failed(self) -> None:
        self.acknowledgements_failed_total.labels(network=self.network).inc()

    def increment_history_write_failures(self) -> None:
        self.history_write_failures_total.labels(network=self.network).inc()

    def set_candidate_actions(self, count: int) -> None:
        self.candidate_actions.labels(network=self.network).set(count)

    def update_uptime(self) -> None:
        self.uptime_seconds.labels(network=self.network).set(
            time.time() - self.started_at
        )

    def get_registry(self) -> CollectorRegistry:
        """Get the collector registry."""
        return self._registry


# Singleton instance
_quorum_metrics: QuorumMetrics | None = None


def init_quorum_metrics(network: str) -> QuorumMetrics:
    """Create (or replace) the singleton collector for a network."""
    global _quorum_metrics
    with _collector_lock:
        _quorum_metrics = QuorumMetrics(network=network)
    return _quorum_metrics


def get_quorum_metrics() -> QuorumMetrics:
    """Get the singleton QuorumMetrics instance (thread-safe).

    Uses double-checked locking for lazy initialization.
    """
    global _quorum_metrics
    if _quorum_metrics is None:
        with _collector_lock:
            if _quorum_metrics is None:
                _quorum_metrics = QuorumMetrics()
    return _quorum_metrics


def generate_metrics(collector: QuorumMetrics | None = None) -> bytes:
    """Generate Prometheus metrics in exposition format."""
    collector = collector or get_quorum_metrics()
    collector.update_uptime()
    return generate_latest(collector.get_registry())


def reset_quorum_metrics() -> None:
    """Reset the singleton collector (for testing only)."""
    global _quorum_metrics
    with _collector_lock:
        _quorum_metrics = None
