"""Quorum daemon: the long-running process around the coordinator.

Tasks:
  1. One ingestion loop per broadcast source, feeding the coordinator
  2. One evaluation loop running a cycle every check interval
  3. Optionally, the status API server

A stop event (set by SIGINT/SIGTERM or ``stop()``) ends every task. An
evaluation cycle interrupted during its commit phase finishes the commit
before the cancellation takes effect.

The first evaluation runs one interval after startup, so signals backfilled
by the sources are tallied before anything is selected.
"""

from __future__ import annotations

import asyncio
import signal
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from qube_manager.application.ports.broadcast_source import BroadcastSourceProtocol
from qube_manager.application.services.quorum_coordinator import QuorumCoordinator
from qube_manager.workers.error_handler import ErrorAction, ErrorHandler

if TYPE_CHECKING:
    from qube_manager.api.server import StatusServer

logger = structlog.get_logger(__name__)


@dataclass
class DaemonMetrics:
    """Counters of the daemon loop itself."""

    events_ingested: int = 0
    cycles_run: int = 0
    source_restarts: int = 0
    sources_abandoned: int = 0
    started_at: float = field(default_factory=time.time)


class QuorumDaemon:
    """Runs ingestion and evaluation until stopped."""

    def __init__(
        self,
        coordinator: QuorumCoordinator,
        sources: Sequence[BroadcastSourceProtocol],
        *,
        check_interval_seconds: float = 60.0,
        error_handler: ErrorHandler | None = None,
        status_server: StatusServer | None = None,
    ) -> None:
        if check_interval_seconds <= 0:
            raise ValueError(
                f"check_interval_seconds must be positive, got {check_interval_seconds}"
            )
        self._coordinator = coordinator
        self._sources = list(sources)
        self._interval = check_interval_seconds
        self._error_handler = error_handler or ErrorHandler()
        self._status_server = status_server
        self._stop_event = asyncio.Event()
        self._running = False
        self._metrics = DaemonMetrics()

    @property
    def running(self) -> bool:
        return self._running

    async def run(self) -> None:
        """Run until ``stop()`` is called."""
        self._running = True
        self._metrics = DaemonMetrics()
        logger.info(
            "daemon_started",
            sources=len(self._sources),
            check_interval_seconds=self._interval,
            dry_run=self._coordinator.dry_run,
        )

        await self._coordinator.replay_journal()

        tasks = [
            asyncio.create_task(self._ingest_loop(source), name=f"ingest:{source.name}")
            for source in self._sources
        ]
        tasks.append(asyncio.create_task(self._evaluation_loop(), name="evaluator"))
        server_task = None
        if self._status_server is not None:
            server_task = asyncio.create_task(self._status_server.serve(), name="status")

        try:
            await self._stop_event.wait()
        finally:
            if self._status_server is not None:
                self._status_server.shutdown()
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            if server_task is not None:
                await asyncio.gather(server_task, return_exceptions=True)
            self._running = False
            logger.info("daemon_stopped", **self.get_metrics())

    def stop(self) -> None:
        """Ask every task to finish."""
        logger.info("daemon_stop_requested")
        self._stop_event.set()

    async def _sleep_or_stop(self, seconds: float) -> bool:
        """Sleep; return True if the stop event fired first."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    async def _ingest_loop(self, source: BroadcastSourceProtocol) -> None:
        log = logger.bind(source=source.name)
        attempt = 0
        while not self._stop_event.is_set():
            try:
                async for event in source.events():
                    attempt = 0
                    await self._coordinator.ingest(event)
                    self._metrics.events_ingested += 1
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                attempt += 1
                decision = self._error_handler.handle(
                    exc, attempt, context={"source": source.name}
                )
                if decision.action is ErrorAction.ABANDON:
                    self._metrics.sources_abandoned += 1
                    log.error(
                        "source_abandoned",
                        category=decision.category.value,
                        attempt=attempt,
                        error=str(exc),
                    )
                    return
                self._metrics.source_restarts += 1
                log.warning(
                    "source_retry_scheduled",
                    category=decision.category.value,
                    attempt=attempt,
                    delay_seconds=round(decision.retry_delay_seconds, 2),
                    error=str(exc),
                )
                if await self._sleep_or_stop(decision.retry_delay_seconds):
                    return
                continue
            log.info("source_exhausted")
            return

    async def _evaluation_loop(self) -> None:
        while not await self._sleep_or_stop(self._interval):
            try:
                await self._coordinator.run_evaluation_cycle()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("evaluation_cycle_crashed")
            self._metrics.cycles_run += 1

    def get_metrics(self) -> dict[str, Any]:
        """Get daemon loop counters."""
        return {
            "events_ingested": self._metrics.events_ingested,
            "cycles_run": self._metrics.cycles_run,
            "source_restarts": self._metrics.source_restarts,
            "sources_abandoned": self._metrics.sources_abandoned,
            "uptime_seconds": round(time.time() - self._metrics.started_at, 1),
        }


async def run_quorum_daemon(daemon: QuorumDaemon) -> None:
    """Run a daemon with SIGINT/SIGTERM wired to ``stop()``."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, daemon.stop)
    try:
        await daemon.run()
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
