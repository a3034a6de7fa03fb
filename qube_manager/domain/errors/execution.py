"""Executor boundary errors."""

from __future__ import annotations

from qube_manager.domain.exceptions import QubeManagerError


class ExecutionError(QubeManagerError):
    """Raised by executors when an action could not be carried out.

    Attributes:
        action_key: The action that failed.
    """

    def __init__(self, action_key: str, message: str) -> None:
        self.action_key = action_key
        super().__init__(message)


class ExecutionTimeoutError(ExecutionError):
    """Raised when the executor hook exceeds its time budget."""

    def __init__(self, action_key: str, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(
            action_key,
            f"execution of {action_key} timed out after {timeout_seconds:.0f}s",
        )


class BinaryHashMismatchError(ExecutionError):
    """Raised when a staged binary does not match the signalled hash.

    Attributes:
        expected: Hash carried by the signal.
        actual: Hash computed from the staged binary.
    """

    def __init__(self, action_key: str, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            action_key,
            f"hash mismatch: expected {expected}, got {actual}",
        )
