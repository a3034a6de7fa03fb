"""Health check response model."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response.

    Attributes:
        status: Health status string (e.g., "healthy").
        version: Running qube-manager version.
    """

    status: str
    version: str
