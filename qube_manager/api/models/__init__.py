"""Status API response models."""

from qube_manager.api.models.health import HealthResponse
from qube_manager.api.models.tally import CandidateTallyResponse, TallyResponse

__all__ = ["CandidateTallyResponse", "HealthResponse", "TallyResponse"]
