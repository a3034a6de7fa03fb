"""Executor that announces the action in the log and reports success.

Used when no hook command is configured, so a node can take part in quorum
and acknowledge actions while the operator performs them by hand.
"""

from __future__ import annotations

import structlog

from qube_manager.domain.models.action import ActionType
from qube_manager.domain.models.execution import ExecutionRequest, ExecutionResult

logger = structlog.get_logger(__name__)


class LoggingActionExecutor:
    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        if request.action_type is ActionType.REBOOT:
            logger.warning(
                "reboot_action",
                version=request.version,
                genesis=request.genesis_reference,
                required_by=request.deadline,
            )
        else:
            logger.warning("upgrade_action", version=request.version)
        return ExecutionResult.succeeded()
