"""Application layer: ports, wire DTOs and the quorum coordinator."""
