"""Monitoring infrastructure: Prometheus metrics."""

from qube_manager.infrastructure.monitoring.metrics import (
    METRICS_CONTENT_TYPE,
    QuorumMetrics,
    generate_metrics,
    get_quorum_metrics,
    init_quorum_metrics,
    reset_quorum_metrics,
)

__all__ = [
    "METRICS_CONTENT_TYPE",
    "QuorumMetrics",
    "generate_metrics",
    "get_quorum_metrics",
    "init_quorum_metrics",
    "reset_quorum_metrics",
]
