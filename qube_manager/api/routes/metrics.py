"""Metrics endpoint for Prometheus scraping."""

from fastapi import APIRouter, Response

from qube_manager.bootstrap.metrics import get_metrics_exporter

router = APIRouter(prefix="/v1", tags=["metrics"])


@router.get(
    "/metrics",
    summary="Prometheus metrics endpoint",
    description="Returns daemon metrics in Prometheus exposition format.",
    response_class=Response,
    responses={
        200: {
            "description": "Metrics in Prometheus format",
            "content": {"text/plain": {}},
        }
    },
)
async def get_metrics() -> Response:
    """Get daemon metrics in Prometheus format."""
    exporter = get_metrics_exporter()
    return Response(
        content=exporter.generate_metrics(),
        media_type=exporter.content_type,
    )
