"""uvicorn server hosting the status API inside the daemon's event loop."""

from __future__ import annotations

import contextlib
from collections.abc import Iterator

import uvicorn

from qube_manager.api.main import create_app


class _EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the daemon."""

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


class StatusServer:
    """Serves the status API until shut down."""

    def __init__(self, host: str, port: int) -> None:
        self.host = host
        self.port = port
        self._server = _EmbeddedServer(
            uvicorn.Config(
                create_app(),
                host=host,
                port=port,
                log_level="warning",
                access_log=False,
            )
        )

    async def serve(self) -> None:
        await self._server.serve()

    def shutdown(self) -> None:
        self._server.should_exit = True
