"""Tally response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from qube_manager.application.services.quorum_coordinator import TallySnapshot


class CandidateTallyResponse(BaseModel):
    """One candidate action and its current endorsers."""

    action_key: str
    action_type: str
    version: str
    origin: str
    votes: int = Field(..., ge=0)
    voters: list[str]
    reached_quorum: bool
    history_status: str | None = Field(
        None, description="History status if this node already acted on it"
    )


class TallyResponse(BaseModel):
    """The node's current view of every candidate action."""

    network: str
    threshold: int
    candidates: list[CandidateTallyResponse]

    @classmethod
    def from_snapshot(cls, snapshot: TallySnapshot) -> TallyResponse:
        return cls(
            network=snapshot.network,
            threshold=snapshot.threshold,
            candidates=[
                CandidateTallyResponse(
                    action_key=candidate.action_key,
                    action_type=candidate.action_type,
                    version=candidate.version,
                    origin=candidate.origin_signer_identity,
                    votes=candidate.votes,
                    voters=list(candidate.voters),
                    reached_quorum=candidate.votes >= snapshot.threshold,
                    history_status=candidate.history_status,
                )
                for candidate in snapshot.candidates
            ],
        )
