"""Action executor port: performs the upgrade or reboot side effect."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from qube_manager.domain.models.execution import ExecutionRequest, ExecutionResult


@runtime_checkable
class ActionExecutorProtocol(Protocol):
    """Carries out a selected action.

    Implementations bound their own running time. They should report
    ordinary failures as a failed ExecutionResult; any exception that does
    escape is converted into one by the coordinator.
    """

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        """Execute the action described by the request.

        Args:
            request: The selected action.

        Returns:
            ExecutionResult with status SUCCESS or FAILURE.
        """
        ...
