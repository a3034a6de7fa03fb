"""Domain errors for qube-manager.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from QubeManagerError.
"""

from qube_manager.domain.errors.configuration import ConfigurationError
from qube_manager.domain.errors.execution import (
    BinaryHashMismatchError,
    ExecutionError,
    ExecutionTimeoutError,
)
from qube_manager.domain.errors.history import HistoryError, HistoryWriteError
from qube_manager.domain.errors.publication import AcknowledgementPublishError
from qube_manager.domain.errors.signal import InvalidSignalError, InvalidVersionError

__all__: list[str] = [
    "AcknowledgementPublishError",
    "BinaryHashMismatchError",
    "ConfigurationError",
    "ExecutionError",
    "ExecutionTimeoutError",
    "HistoryError",
    "HistoryWriteError",
    "InvalidSignalError",
    "InvalidVersionError",
]
