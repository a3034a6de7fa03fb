"""Category-specific error handling for broadcast source loops.

A failing source must never take the daemon down. Errors raised while
reading a source are categorized to decide what the ingestion loop does:

- RETRY: transient errors (timeouts, connection drops, I/O hiccups);
  resubscribe after a decorrelated-jitter delay
- ABANDON: permanent errors (source missing, permission denied); stop
  reading this source, keep the others
- Unknown errors are retried up to ``max_attempts`` and then abandoned
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class ErrorCategory(Enum):
    """Categories of errors encountered while reading a source."""

    # Transient - may succeed on retry
    TIMEOUT = "timeout"
    NETWORK = "network"
    IO = "io"

    # Permanent - the source cannot be read
    SOURCE_MISSING = "source_missing"
    PERMISSION_DENIED = "permission_denied"
    INVALID_SOURCE = "invalid_source"

    # Unknown - requires investigation
    UNKNOWN = "unknown"


class ErrorAction(Enum):
    """Action to take when a source fails."""

    RETRY = "retry"  # Resubscribe after a delay
    ABANDON = "abandon"  # Stop reading this source


@dataclass(frozen=True)
class ErrorDecision:
    """Decision about how to handle a source error.

    Attributes:
        action: The action to take
        category: The error category
        log_level: Level the ingestion loop should log the error at
        retry_delay_seconds: Delay before resubscribing (if action is RETRY)
        context: Additional context for logging
    """

    action: ErrorAction
    category: ErrorCategory
    log_level: str = "warning"
    retry_delay_seconds: float = 1.0
    context: dict[str, Any] | None = None

    @property
    def is_terminal(self) -> bool:
        """Check if this decision ends the source loop."""
        return self.action is ErrorAction.ABANDON


# Error type to category mapping; first isinstance match wins
ERROR_CATEGORIES: dict[type[BaseException], ErrorCategory] = {}


def register_error_category(
    error_type: type[BaseException],
    category: ErrorCategory,
) -> None:
    """Register an error type with its category.

    Register subclasses before their bases (e.g. FileNotFoundError before
    OSError).
    """
    ERROR_CATEGORIES[error_type] = category


def categorize_error(error: BaseException) -> ErrorCategory:
    """Determine the category of an error."""
    for error_type, category in ERROR_CATEGORIES.items():
        if isinstance(error, error_type):
            return category

    error_name = type(error).__name__.lower()
    error_msg = str(error).lower()

    if "timeout" in error_name or "timed out" in error_msg:
        return ErrorCategory.TIMEOUT
    if any(p in error_name for p in ("connection", "network", "socket")):
        return ErrorCategory.NETWORK
    return ErrorCategory.UNKNOWN


class ErrorHandler:
    """Decides how a source loop reacts to an error.

    Usage:
        handler = ErrorHandler(max_attempts=5)
        attempt = 0
        while True:
            try:
                async for event in source.events():
                    attempt = 0
                    ...
            except Exception as exc:
                attempt += 1
                decision = handler.handle(exc, attempt)
                if decision.is_terminal:
                    break
                await asyncio.sleep(decision.retry_delay_seconds)
    """

    # Base retry delay per category
    RETRY_DELAYS: dict[ErrorCategory, float] = {
        ErrorCategory.TIMEOUT: 2.0,
        ErrorCategory.NETWORK: 1.0,
        ErrorCategory.IO: 1.0,
    }

    # Retried for as long as the daemon runs
    RETRYABLE_CATEGORIES: set[ErrorCategory] = {
        ErrorCategory.TIMEOUT,
        ErrorCategory.NETWORK,
        ErrorCategory.IO,
    }

    # Abandoned immediately
    PERMANENT_CATEGORIES: set[ErrorCategory] = {
        ErrorCategory.SOURCE_MISSING,
        ErrorCategory.PERMISSION_DENIED,
        ErrorCategory.INVALID_SOURCE,
    }

    def __init__(
        self,
        max_attempts: int = 5,
        base_delay_seconds: float = 1.0,
        max_delay_seconds: float = 60.0,
    ) -> None:
        """Initialize the error handler.

        Args:
            max_attempts: Attempts before an UNKNOWN error abandons the source
            base_delay_seconds: Base delay for categories without their own
            max_delay_seconds: Maximum delay cap
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self._max_attempts = max_attempts
        self._base_delay = base_delay_seconds
        self._max_delay = max_delay_seconds

    def handle(
        self,
        error: BaseException,
        attempt: int = 1,
        context: dict[str, Any] | None = None,
    ) -> ErrorDecision:
        """Handle an error and decide the action.

        Args:
            error: The exception that occurred
            attempt: Consecutive failure count for this source (1-based)
            context: Optional context for logging

        Returns:
            ErrorDecision with action and details
        """
        category = categorize_error(error)
        logger.debug(
            "source_error_categorized",
            category=category.value,
            attempt=attempt,
            error=str(error),
        )

        if category in self.PERMANENT_CATEGORIES:
            return ErrorDecision(
                action=ErrorAction.ABANDON,
                category=category,
                log_level="error",
                context=context,
            )

        if category in self.RETRYABLE_CATEGORIES or attempt < self._max_attempts:
            return ErrorDecision(
                action=ErrorAction.RETRY,
                category=category,
                log_level="warning",
                retry_delay_seconds=self._calculate_delay(category, attempt),
                context=context,
            )

        return ErrorDecision(
            action=ErrorAction.ABANDON,
            category=category,
            log_level="error",
            context=context,
        )

    def _calculate_delay(self, category: ErrorCategory, attempt: int) -> float:
        """Calculate retry delay with decorrelated jitter."""
        base = self.RETRY_DELAYS.get(category, self._base_delay)

        if attempt <= 1:
            return min(base, self._max_delay)

        previous = base * (2 ** (attempt - 2))
        delay = random.uniform(base, previous * 3)
        return min(delay, self._max_delay)


# Subclasses of OSError first
register_error_category(FileNotFoundError, ErrorCategory.SOURCE_MISSING)
register_error_category(NotADirectoryError, ErrorCategory.SOURCE_MISSING)
register_error_category(IsADirectoryError, ErrorCategory.INVALID_SOURCE)
register_error_category(PermissionError, ErrorCategory.PERMISSION_DENIED)
register_error_category(TimeoutError, ErrorCategory.TIMEOUT)
register_error_category(ConnectionError, ErrorCategory.NETWORK)
register_error_category(OSError, ErrorCategory.IO)
register_error_category(UnicodeDecodeError, ErrorCategory.INVALID_SOURCE)
