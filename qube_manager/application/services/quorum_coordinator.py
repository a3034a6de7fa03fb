"""Quorum coordinator: the shared state and the two operations on it.

The coordinator owns the vote ledger (with its action registry and the
per-signer latest-signal index) and guards all of it with one asyncio.Lock.

- ``ingest`` validates a raw event and records the vote under the lock.
- ``run_evaluation_cycle`` selects a winner under the lock, then releases
  it before touching History, the executor or the publisher.

Execution ordering for a selected action:
1. Durably record EXECUTING in History. Failure aborts the cycle.
2. Run the executor. Exceptions become a failed ExecutionResult. If the
   cycle is cancelled here, the run is recorded as failed through steps 3
   and 4 before the cancellation propagates.
3. Commit (shielded from cancellation): final History status, then clear
   the action's votes. If the History write fails, votes stay.
4. Publish the acknowledgement. Failure is logged and counted only.

State machine per action key:
    Unseen -> Accumulating -> Eligible -> Executing -> {Completed | Failed}
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum

from qube_manager.application.ports.acknowledgement_publisher import (
    AcknowledgementPublisherProtocol,
)
from qube_manager.application.ports.action_executor import ActionExecutorProtocol
from qube_manager.application.ports.history import HistoryProtocol, HistoryStatus
from qube_manager.application.ports.signal_journal import SignalJournalProtocol
from qube_manager.application.services.base import LoggingMixin
from qube_manager.domain.errors.history import HistoryError
from qube_manager.domain.errors.publication import AcknowledgementPublishError
from qube_manager.domain.models.execution import (
    Acknowledgement,
    ExecutionRequest,
    ExecutionResult,
)
from qube_manager.domain.models.signal import RawEvent
from qube_manager.domain.services.quorum_evaluator import QuorumEvaluator
from qube_manager.domain.services.signal_validator import SignalValidator
from qube_manager.domain.services.vote_ledger import VoteLedger, VoteRecord
from qube_manager.infrastructure.monitoring.metrics import QuorumMetrics
from qube_manager.infrastructure.observability.correlation import (
    generate_correlation_id,
    set_correlation_id,
)

EXECUTION_CANCELLED = "execution cancelled"


class FailurePolicy(Enum):
    """What happens to an action whose execution failed.

    SUPPRESS: keep it in History as FAILURE and clear its votes; it never
        runs again on this node.
    RETRY: remove it from History and keep its votes; the next cycle
        selects it again.
    """

    SUPPRESS = "suppress"
    RETRY = "retry"


class CycleOutcome(Enum):
    """How an evaluation cycle ended."""

    IDLE = "idle"
    DRY_RUN = "dry_run"
    ABORTED = "aborted"
    EXECUTED = "executed"


@dataclass(frozen=True)
class CycleReport:
    """Summary of one evaluation cycle.

    Attributes:
        outcome: How the cycle ended.
        action_key: Selected action, None when idle.
        result: Executor result, None unless executed.
        committed: True if the final History write (and vote handling)
            completed.
        acknowledged: True if the acknowledgement was published.
    """

    outcome: CycleOutcome
    action_key: str | None = None
    result: ExecutionResult | None = None
    committed: bool = False
    acknowledged: bool = False


@dataclass(frozen=True)
class CandidateStatus:
    """Status API view of one candidate."""

    action_key: str
    action_type: str
    version: str
    origin_signer_identity: str
    votes: int
    voters: tuple[str, ...]
    history_status: str | None


@dataclass(frozen=True)
class TallySnapshot:
    """Status API view of the whole ledger."""

    network: str
    threshold: int
    candidates: tuple[CandidateStatus, ...]


class QuorumCoordinator(LoggingMixin):
    """Coordinates ingestion, evaluation and execution for one node."""

    def __init__(
        self,
        validator: SignalValidator,
        evaluator: QuorumEvaluator,
        history: HistoryProtocol,
        executor: ActionExecutorProtocol,
        publisher: AcknowledgementPublisherProtocol,
        *,
        node_identity: str,
        failure_policy: FailurePolicy = FailurePolicy.SUPPRESS,
        journal: SignalJournalProtocol | None = None,
        metrics: QuorumMetrics | None = None,
        ledger: VoteLedger | None = None,
        dry_run: bool = False,
    ) -> None:
        """Initialize the coordinator.

        Args:
            validator: Validates raw events.
            evaluator: Selects the winning candidate.
            history: Durable record of executed action keys.
            executor: Performs the selected action.
            publisher: Publishes acknowledgements.
            node_identity: Identifier of this node, used in acknowledgements.
            failure_policy: Handling of failed executions.
            journal: Optional signal journal for restart durability.
            metrics: Optional metrics collector.
            ledger: Ledger to use; a fresh one by default.
            dry_run: Select and log only; never execute, record or publish.
        """
        self._validator = validator
        self._evaluator = evaluator
        self._history = history
        self._executor = executor
        self._publisher = publisher
        self._node_identity = node_identity
        self._failure_policy = failure_policy
        self._journal = journal
        self._metrics = metrics
        self._ledger = ledger if ledger is not None else VoteLedger()
        self._dry_run = dry_run
        self._lock = asyncio.Lock()
        self._init_logger()

    @property
    def ledger(self) -> VoteLedger:
        return self._ledger

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    async def ingest(self, event: RawEvent) -> VoteRecord | None:
        """Validate a raw event and record it as a vote.

        Args:
            event: Raw event from a broadcast source.

        Returns:
            The VoteRecord, or None if the event was rejected.
        """
        if self._metrics:
            self._metrics.increment_signals_received()

        outcome = self._validator.validate(event)
        if outcome.signal is None:
            reason = outcome.reason.value if outcome.reason else "unknown"
            self._log.debug(
                "signal_rejected",
                signer=event.signer_identity,
                event_id=event.event_id,
                reason=reason,
                detail=outcome.detail,
            )
            if self._metrics:
                self._metrics.increment_signals_rejected(reason)
            return None

        signal = outcome.signal
        async with self._lock:
            record = self._ledger.record_vote(signal)
            votes = self._ledger.vote_count(record.action_key)
            candidate_count = len(self._ledger.registry)

        if self._metrics:
            self._metrics.increment_votes_recorded(record.result.value)
            self._metrics.set_candidate_actions(candidate_count)

        self._log.info(
            "vote_recorded",
            signer=signal.signer_identity,
            action_key=record.action_key,
            result=record.result.value,
            previous_key=record.previous_key,
            votes=votes,
        )

        if record.mutated and self._journal is not None:
            try:
                await self._journal.append(signal)
            except OSError as exc:
                self._log.warning(
                    "journal_append_failed",
                    action_key=record.action_key,
                    error=str(exc),
                )
        return record

    async def replay_journal(self) -> int:
        """Rebuild the ledger from the journal.

        Journaled signals go through the same record_vote algorithm as live
        ones, restoring vote sets and the latest-signal index together.

        The journal is then compacted to the signals that still determine
        that state: each signer's latest signal and the signal that first
        registered each action. Signals the validator no longer admits are
        kept as they are. Replaying the compacted journal yields the same
        ledger.

        Returns:
            Number of signals that changed the ledger.
        """
        if self._journal is None:
            return 0
        signals = self._journal.replay()
        applied = 0
        retained: set[int] = set()
        latest_position: dict[str, int] = {}
        async with self._lock:
            for position, signal in enumerate(signals):
                if not self._validator.admits(signal):
                    retained.add(position)
                    continue
                record = self._ledger.record_vote(signal)
                if not record.mutated:
                    continue
                applied += 1
                if record.new_candidate:
                    retained.add(position)
                latest_position[signal.signer_identity] = position
            candidate_count = len(self._ledger.registry)
        retained.update(latest_position.values())

        if self._metrics:
            self._metrics.set_candidate_actions(candidate_count)
        self._log.info(
            "journal_replayed",
            journaled=len(signals),
            applied=applied,
            retained=len(retained),
            candidates=candidate_count,
        )

        if len(retained) < len(signals):
            try:
                await self._journal.compact(
                    [signals[position] for position in sorted(retained)]
                )
            except OSError as exc:
                self._log.warning("journal_compaction_failed", error=str(exc))
        return applied

    async def run_evaluation_cycle(self) -> CycleReport:
        """Select at most one action and carry it out.

        Returns:
            CycleReport describing what happened.
        """
        set_correlation_id(generate_correlation_id())
        log = self._log_operation("run_evaluation_cycle")
        if self._metrics:
            self._metrics.increment_evaluation_cycles()

        async with self._lock:
            evaluation = self._evaluator.evaluate_and_select(
                self._ledger, self._history.has
            )
            votes = (
                self._ledger.vote_count(evaluation.selected.key)
                if evaluation.selected
                else 0
            )

        log.debug(
            "quorum_tally",
            tallies=dict(evaluation.tallies),
            already_executed=evaluation.already_executed,
            threshold=self._evaluator.threshold,
        )
        candidate = evaluation.selected
        if candidate is None:
            return CycleReport(outcome=CycleOutcome.IDLE)

        request = ExecutionRequest.from_candidate(candidate)
        log = log.bind(action_key=request.action_key)
        log.info(
            "quorum_action_selected",
            action=request.action_type.value,
            version=request.version,
            votes=votes,
            threshold=self._evaluator.threshold,
            origin=request.origin_signer_identity,
        )

        if self._dry_run:
            log.info("dry_run_execution_skipped")
            return CycleReport(
                outcome=CycleOutcome.DRY_RUN, action_key=request.action_key
            )

        try:
            await self._history.add(request.action_key, HistoryStatus.EXECUTING)
        except HistoryError as exc:
            log.error("history_write_failed", phase="executing", error=str(exc))
            if self._metrics:
                self._metrics.increment_history_write_failures()
            return CycleReport(
                outcome=CycleOutcome.ABORTED, action_key=request.action_key
            )

        interrupted: asyncio.CancelledError | None = None
        try:
            result = await self._execute(request)
        except asyncio.CancelledError as exc:
            log.warning("action_execution_cancelled")
            result = ExecutionResult.failed(EXECUTION_CANCELLED)
            if self._metrics:
                self._metrics.increment_actions_executed(
                    request.action_type.value, result.status.value
                )
            interrupted = exc

        commit = asyncio.ensure_future(self._commit(request, result))
        try:
            committed = await asyncio.shield(commit)
        except asyncio.CancelledError:
            await commit
            raise

        acknowledged = await self._acknowledge(request, result)
        if interrupted is not None:
            raise interrupted
        return CycleReport(
            outcome=CycleOutcome.EXECUTED,
            action_key=request.action_key,
            result=result,
            committed=committed,
            acknowledged=acknowledged,
        )

    async def _execute(self, request: ExecutionRequest) -> ExecutionResult:
        log = self._log_operation("execute", action_key=request.action_key)
        log.info(
            "action_execution_started",
            action=request.action_type.value,
            version=request.version,
        )
        try:
            result = await self._executor.execute(request)
        except Exception as exc:
            log.exception("action_execution_raised", error=str(exc))
            result = ExecutionResult.failed(f"{type(exc).__name__}: {exc}")

        if self._metrics:
            self._metrics.increment_actions_executed(
                request.action_type.value, result.status.value
            )
        if result.ok:
            log.info("action_execution_succeeded")
        else:
            log.warning("action_execution_failed", error=result.error)
        return result

    async def _commit(self, request: ExecutionRequest, result: ExecutionResult) -> bool:
        """Write the final History state and settle the action's votes."""
        log = self._log_operation("commit", action_key=request.action_key)
        key = request.action_key

        retry = not result.ok and self._failure_policy is FailurePolicy.RETRY
        try:
            if retry:
                await self._history.remove(key)
            else:
                status = HistoryStatus.SUCCESS if result.ok else HistoryStatus.FAILURE
                await self._history.add(key, status, error=result.error)
        except HistoryError as exc:
            log.error("history_write_failed", phase="final", error=str(exc))
            if self._metrics:
                self._metrics.increment_history_write_failures()
            return False

        if retry:
            log.info("action_released_for_retry")
            return True

        async with self._lock:
            cleared = self._ledger.clear_votes(key)
        log.info("action_votes_cleared", cleared=cleared)
        return True

    async def _acknowledge(
        self, request: ExecutionRequest, result: ExecutionResult
    ) -> bool:
        acknowledgement = Acknowledgement.for_execution(
            request, result, self._node_identity
        )
        log = self._log_operation("acknowledge", action_key=request.action_key)
        try:
            await self._publisher.publish(acknowledgement)
        except (AcknowledgementPublishError, OSError) as exc:
            log.warning("acknowledgement_publish_failed", error=str(exc))
            if self._metrics:
                self._metrics.increment_acknowledgements_failed()
            return False
        log.info("acknowledgement_published", status=acknowledgement.status.value)
        return True

    async def snapshot(self) -> TallySnapshot:
        """Consistent copy of the ledger for the status API."""
        async with self._lock:
            tallies = self._ledger.snapshot()
        candidates = []
        for tally in tallies:
            record = self._history.get(tally.candidate.key)
            candidates.append(
                CandidateStatus(
                    action_key=tally.candidate.key,
                    action_type=tally.candidate.action_type.value,
                    version=tally.candidate.version.raw,
                    origin_signer_identity=tally.candidate.origin_signer_identity,
                    votes=tally.votes,
                    voters=tally.voters,
                    history_status=record.status.value if record else None,
                )
            )
        return TallySnapshot(
            network=self._validator.network_scope,
            threshold=self._evaluator.threshold,
            candidates=tuple(candidates),
        )
