"""Signal domain errors.

These errors describe broadcast signals that cannot become part of the vote
ledger. The validator reports rejections as values, so these are only raised
by model constructors and parsers; callers on the ingestion path never see
them escape.
"""

from __future__ import annotations

from qube_manager.domain.exceptions import QubeManagerError


class InvalidSignalError(QubeManagerError):
    """Raised when a Signal is constructed with inconsistent fields.

    Attributes:
        field: Name of the offending field.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"invalid signal field '{field}': {message}")


class InvalidVersionError(QubeManagerError):
    """Raised when a version string is not a semantic version.

    Attributes:
        text: The version string as received.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"not a semantic version: {text!r}")
