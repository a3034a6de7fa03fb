"""Assemble a runnable daemon from a QuorumConfig."""

from __future__ import annotations

from pathlib import Path

import structlog

from qube_manager.api.server import StatusServer
from qube_manager.application.ports.acknowledgement_publisher import (
    AcknowledgementPublisherProtocol,
)
from qube_manager.application.ports.action_executor import ActionExecutorProtocol
from qube_manager.application.services.quorum_coordinator import QuorumCoordinator
from qube_manager.bootstrap.coordinator import set_quorum_coordinator
from qube_manager.bootstrap.metrics import (
    PrometheusMetricsExporter,
    set_metrics_exporter,
)
from qube_manager.config.quorum_config import QuorumConfig
from qube_manager.domain.errors.configuration import ConfigurationError
from qube_manager.domain.errors.history import HistoryError
from qube_manager.domain.services.quorum_evaluator import QuorumEvaluator
from qube_manager.domain.services.signal_validator import SignalValidator
from qube_manager.infrastructure.adapters.broadcast.ack_outbox import (
    JsonlAcknowledgementOutbox,
    LoggingAcknowledgementPublisher,
)
from qube_manager.infrastructure.adapters.broadcast.jsonl_source import (
    STDIN_SOURCE,
    JsonlEventSource,
)
from qube_manager.infrastructure.adapters.execution.command_executor import (
    CommandActionExecutor,
)
from qube_manager.infrastructure.adapters.execution.logging_executor import (
    LoggingActionExecutor,
)
from qube_manager.infrastructure.adapters.persistence.json_history import (
    JsonFileHistory,
)
from qube_manager.infrastructure.adapters.persistence.signal_journal import (
    JsonlSignalJournal,
)
from qube_manager.infrastructure.monitoring.metrics import init_quorum_metrics
from qube_manager.workers.quorum_daemon import QuorumDaemon

logger = structlog.get_logger(__name__)


def _resolve_source(config: QuorumConfig, location: str) -> str:
    if location == STDIN_SOURCE:
        return location
    path = Path(location).expanduser()
    if not path.is_absolute():
        path = config.config_dir / path
    return str(path)


def build_executor(config: QuorumConfig) -> ActionExecutorProtocol:
    if not config.executor.command:
        return LoggingActionExecutor()
    binary = config.executor.binary_path
    return CommandActionExecutor(
        config.executor.command,
        timeout_seconds=config.executor.timeout_seconds,
        binary_path=Path(binary).expanduser() if binary else None,
    )


def build_publisher(config: QuorumConfig) -> AcknowledgementPublisherProtocol:
    outbox = config.outbox_path
    if outbox is None:
        return LoggingAcknowledgementPublisher()
    return JsonlAcknowledgementOutbox(outbox, config.node_id)


def build_coordinator(config: QuorumConfig, dry_run: bool = False) -> QuorumCoordinator:
    """Create the coordinator and its adapters.

    Raises:
        ConfigurationError: If the History file cannot be loaded.
    """
    try:
        history = JsonFileHistory(config.history_path)
    except HistoryError as exc:
        raise ConfigurationError(str(exc), source=str(config.history_path)) from exc

    metrics = init_quorum_metrics(config.network)
    set_metrics_exporter(PrometheusMetricsExporter(metrics))

    coordinator = QuorumCoordinator(
        validator=SignalValidator(config.network, config.follows),
        evaluator=QuorumEvaluator(config.quorum),
        history=history,
        executor=build_executor(config),
        publisher=build_publisher(config),
        node_identity=config.node_id,
        failure_policy=config.failure_policy,
        journal=JsonlSignalJournal(config.journal_path) if config.journal else None,
        metrics=metrics,
        dry_run=dry_run,
    )
    set_quorum_coordinator(coordinator)
    return coordinator


def build_daemon(config: QuorumConfig, dry_run: bool = False) -> QuorumDaemon:
    """Create the full daemon for a configuration.

    Raises:
        ConfigurationError: If the configuration cannot be turned into a
            running daemon.
    """
    if not config.sources:
        raise ConfigurationError("no event sources configured", source="sources")

    coordinator = build_coordinator(config, dry_run=dry_run)
    sources = [
        JsonlEventSource(_resolve_source(config, location), follow=config.tail_sources)
        for location in config.sources
    ]

    status_server = None
    if config.status_port is not None:
        status_server = StatusServer(config.status_host, config.status_port)

    logger.info(
        "daemon_assembled",
        sources=[source.name for source in sources],
        quorum=config.quorum,
        network=config.network,
        failure_policy=config.failure_policy.value,
        journal=config.journal,
        dry_run=dry_run,
        status_port=config.status_port,
    )
    return QuorumDaemon(
        coordinator,
        sources,
        check_interval_seconds=config.check_interval_seconds,
        status_server=status_server,
    )
