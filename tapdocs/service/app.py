"""FastAPI application serving the generated site for local preview."""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Callable, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from ..config import SiteConfig
from ..logging import get_logger, server_log_level
from ..watcher import ChangeWatcher

# Served explicitly rather than trusting the platform mime database.
MEDIA_TYPES = {
    ".json": "application/json",
    ".js": "text/javascript",
    ".css": "text/css",
    ".svg": "image/svg+xml",
}


class HealthResponse(BaseModel):
    status: str
    site_dir: str


def _register_media_types() -> None:
    for extension, media_type in MEDIA_TYPES.items():
        mimetypes.add_type(media_type, extension)


def create_app(site_dir: Path) -> FastAPI:
    """Create the preview application rooted at ``site_dir``."""
    site_dir = Path(site_dir)
    if not site_dir.is_dir():
        raise FileNotFoundError(f"Site directory not found: {site_dir}")
    _register_media_types()

    app = FastAPI(title="tapdocs preview", docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", site_dir=str(site_dir))

    app.mount("/", StaticFiles(directory=str(site_dir), html=True), name="site")
    return app


class PreviewServer:
    """Serves the output directory while a watcher keeps it fresh."""

    def __init__(
        self,
        config: SiteConfig,
        rebuild: Callable[[], object],
        *,
        host: Optional[str] = None,
        port: Optional[int] = None,
        watcher: ChangeWatcher | None = None,
    ) -> None:
        self.config = config
        self.host = host or config.server.host
        self.port = port or config.server.port
        self.rebuild = rebuild
        self.watcher = watcher or ChangeWatcher(config, rebuild)
        self.logger = get_logger("service")

    def serve(self) -> None:  # pragma: no cover - integration path
        self.logger.info("Building site...")
        self.rebuild()

        app = create_app(self.config.output_dir)
        self.logger.info("Server address: http://%s:%d", self.host, self.port)
        self.logger.info("Serving from: %s", self.config.output_dir)
        self.logger.info("Press Ctrl+C to stop")

        self.watcher.start()
        try:
            # uvicorn drains in-flight requests on interrupt before returning.
            uvicorn.run(app, host=self.host, port=self.port, log_level=server_log_level())
        finally:
            self.logger.info("Stopping server...")
            self.watcher.stop(timeout=5)


__all__ = ["HealthResponse", "MEDIA_TYPES", "PreviewServer", "create_app"]
