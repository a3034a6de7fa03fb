"""Bootstrap wiring for operational metrics."""

from __future__ import annotations

from qube_manager.infrastructure.monitoring.metrics import (
    METRICS_CONTENT_TYPE,
    QuorumMetrics,
    generate_metrics,
    get_quorum_metrics,
)


class PrometheusMetricsExporter:
    """Renders a QuorumMetrics collector in Prometheus exposition format."""

    def __init__(self, collector: QuorumMetrics | None = None) -> None:
        self._collector = collector

    @property
    def content_type(self) -> str:
        return METRICS_CONTENT_TYPE

    def generate_metrics(self) -> bytes:
        return generate_metrics(self._collector or get_quorum_metrics())


_metrics_exporter: PrometheusMetricsExporter | None = None


def get_metrics_exporter() -> PrometheusMetricsExporter:
    """Get the metrics exporter instance."""
    global _metrics_exporter
    if _metrics_exporter is None:
        _metrics_exporter = PrometheusMetricsExporter()
    return _metrics_exporter


def set_metrics_exporter(exporter: PrometheusMetricsExporter) -> None:
    """Set custom metrics exporter (testing/override)."""
    global _metrics_exporter
    _metrics_exporter = exporter


def reset_metrics() -> None:
    """Reset metrics singletons (testing cleanup)."""
    global _metrics_exporter
    _metrics_exporter = None
