"""FastAPI app for VisualGuard: REST API and optional front-end hosting."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from visualguard.api.routes import router
from visualguard.api.web import build_web_router
from visualguard.pipeline import InspectionPipeline
from visualguard.settings import Settings, get_settings

logger = logging.getLogger(__name__)

try:
    from importlib.metadata import version

    VERSION = version("visualguard")
except Exception:
    VERSION = "0.0.0"


def create_app(settings: Settings | None = None, pipeline: InspectionPipeline | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    The pipeline is created at startup, so a missing inference credential
    stops the server from starting instead of failing individual requests.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(application: FastAPI) -> AsyncIterator[None]:
        owned = pipeline is None
        application.state.pipeline = pipeline or InspectionPipeline.from_settings(settings)
        logger.info("VisualGuard API ready (env=%s)", settings.env)
        try:
            yield
        finally:
            if owned:
                await application.state.pipeline.aclose()

    application = FastAPI(
        title="VisualGuard",
        description="AI visual QA for e-commerce storefront pages.",
        version=VERSION,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router)
    static_dir = Path(settings.api.static_dir) if settings.api.static_dir else None
    application.include_router(build_web_router(static_dir))
    return application


app = create_app()
