"""Base service logging mixin.

Every application service logs through a structlog logger bound with the
service class name and component, and scopes each operation with
``_log_operation`` so entries carry the operation name and the current
correlation ID.

Usage:
    class MyService(LoggingMixin):
        def __init__(self, dependency: SomePort) -> None:
            self._dependency = dependency
            self._init_logger()

        async def do_something(self) -> None:
            log = self._log_operation("do_something", action_key="upgrade:v1.0.0")
            log.info("operation_started")
"""

import structlog

from qube_manager.infrastructure.observability.correlation import get_correlation_id


class LoggingMixin:
    """Mixin providing structured logging for services.

    Attributes:
        _log: The structlog BoundLogger for this service instance.
    """

    _log: structlog.BoundLogger

    def _init_logger(self, component: str = "quorum") -> None:
        """Initialize the logger with service name binding.

        Should be called in __init__ after setting up dependencies.

        Args:
            component: The component type for log categorization.
        """
        self._log = structlog.get_logger().bind(
            service=self.__class__.__name__,
            component=component,
        )

    def _log_operation(
        self,
        operation: str,
        **context: object,
    ) -> structlog.BoundLogger:
        """Create an operation-scoped logger with correlation ID.

        Args:
            operation: Name of the operation being performed.
            **context: Additional context to bind to the logger.

        Returns:
            BoundLogger with operation and correlation context.
        """
        return self._log.bind(
            operation=operation,
            correlation_id=get_correlation_id(),
            **context,
        )
