"""Live vote tally endpoint."""

from fastapi import APIRouter, Depends

from qube_manager.api.models.tally import TallyResponse
from qube_manager.application.services.quorum_coordinator import QuorumCoordinator
from qube_manager.bootstrap.coordinator import get_quorum_coordinator

router = APIRouter(prefix="/v1", tags=["tally"])


@router.get("/tally", response_model=TallyResponse)
async def get_tally(
    coordinator: QuorumCoordinator = Depends(get_quorum_coordinator),
) -> TallyResponse:
    """Return every candidate action with its endorsers and History status."""
    snapshot = await coordinator.snapshot()
    return TallyResponse.from_snapshot(snapshot)
