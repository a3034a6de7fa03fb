"""Configuration errors.

These are the only errors that are fatal, and only at startup.
"""

from __future__ import annotations

from qube_manager.domain.exceptions import QubeManagerError


class ConfigurationError(QubeManagerError):
    """Raised when the node configuration is missing or invalid.

    Attributes:
        source: Where the bad value came from (file path or variable name).
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        prefix = f"{source}: " if source else ""
        super().__init__(f"{prefix}{message}")
