"""Front-end hosting: serve the built single-page app, or a plain banner in development."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse, PlainTextResponse

logger = logging.getLogger(__name__)


def build_web_router(static_dir: Path | None) -> APIRouter:
    """Return a router serving *static_dir* with an ``index.html`` fallback.

    When *static_dir* is ``None`` or missing, only ``GET /`` is served with a
    short status message (the front-end runs separately in development).
    """
    web_router = APIRouter(tags=["web"])

    if static_dir is None or not (static_dir / "index.html").is_file():
        if static_dir is not None:
            logger.warning("Static dir %s has no index.html; front-end hosting disabled", static_dir)

        @web_router.get("/", response_class=PlainTextResponse)
        def index() -> str:
            return "VisualGuard API is running (front-end runs separately in development)"

        return web_router

    root = static_dir.resolve()
    index_file = root / "index.html"

    @web_router.get("/{full_path:path}")
    def spa(full_path: str) -> FileResponse:
        if full_path.startswith("api/"):
            raise HTTPException(status_code=404, detail="Not found.")
        candidate = (root / full_path).resolve()
        if full_path and candidate.is_file() and candidate.is_relative_to(root):
            return FileResponse(candidate)
        return FileResponse(index_file)

    return web_router
