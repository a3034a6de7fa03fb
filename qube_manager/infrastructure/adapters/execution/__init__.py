"""Executor adapters."""

from qube_manager.infrastructure.adapters.execution.command_executor import (
    CommandActionExecutor,
    sha256_file,
)
from qube_manager.infrastructure.adapters.execution.logging_executor import (
    LoggingActionExecutor,
)

__all__ = ["CommandActionExecutor", "LoggingActionExecutor", "sha256_file"]
