"""Action executor stub for testing."""

from __future__ import annotations

import asyncio

from qube_manager.domain.models.execution import ExecutionRequest, ExecutionResult


class ActionExecutorStub:
    """Stub implementation of ActionExecutorProtocol.

    Records every request. Outcomes are configurable: succeed (default),
    return a failure, or raise. ``block_until_released`` keeps execute()
    running until the returned event is set.
    """

    def __init__(self) -> None:
        self.requests: list[ExecutionRequest] = []
        self._failure: str | None = None
        self._raise: Exception | None = None
        self._gate: asyncio.Event | None = None
        self.started = asyncio.Event()

    def fail_with(self, error: str) -> None:
        self._failure = error

    def raise_on_execute(self, exc: Exception) -> None:
        self._raise = exc

    def block_until_released(self) -> asyncio.Event:
        """Make execute() wait until the returned event is set."""
        self._gate = asyncio.Event()
        return self._gate

    def succeed(self) -> None:
        self._failure = None
        self._raise = None
        self._gate = None

    @property
    def call_count(self) -> int:
        return len(self.requests)

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        self.requests.append(request)
        self.started.set()
        if self._gate is not None:
            await self._gate.wait()
        if self._raise is not None:
            raise self._raise
        if self._failure is not None:
            return ExecutionResult.failed(self._failure)
        return ExecutionResult.succeeded()
