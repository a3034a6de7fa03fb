"""Bootstrap wiring for structured logging."""

from __future__ import annotations

from qube_manager.infrastructure.observability.logging import configure_structlog

DEVELOPMENT = "development"
PRODUCTION = "production"


def configure_logging(environment: str = PRODUCTION, verbose: bool = False) -> None:
    """Configure structlog for a CLI invocation.

    Args:
        environment: "production" (JSON lines) or "development" (console).
        verbose: Log at DEBUG instead of the LOG_LEVEL setting.
    """
    configure_structlog(
        environment=environment,
        level="DEBUG" if verbose else None,
    )
