"""FastAPI application for the qube-manager status API."""

from fastapi import FastAPI

from qube_manager import __version__
from qube_manager.api.routes.health import router as health_router
from qube_manager.api.routes.metrics import router as metrics_router
from qube_manager.api.routes.tally import router as tally_router


def create_app() -> FastAPI:
    """Build the status application."""
    app = FastAPI(
        title="qube-manager status",
        description="Quorum tally and health of a qube-manager node",
        version=__version__,
    )
    app.include_router(health_router)
    app.include_router(tally_router)
    app.include_router(metrics_router)
    return app


app = create_app()
