"""API routes for VisualGuard."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class AnalyzeRequest(BaseModel):
    """Body of ``POST /api/analyze``."""

    # Left untyped so a non-string value gets the same 400 body as a missing one.
    url: Any = Field(None, description="Storefront address; https:// is assumed when no scheme is given.")


class AnalyzeResponse(BaseModel):
    """Serialized ``InspectionResult``; ``report``/``screenshot`` only on success, ``error`` only on failure."""

    success: bool
    report: str | None = None
    screenshot: str | None = None
    error: str | None = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/api/analyze", response_model=AnalyzeResponse, response_model_exclude_none=True)
async def analyze_store(req: AnalyzeRequest, request: Request):
    """Capture the storefront's first screen and return the AI inspection report."""
    if not isinstance(req.url, str) or not req.url.strip():
        return JSONResponse(status_code=400, content={"success": False, "error": "Missing URL parameter"})

    pipeline = request.app.state.pipeline
    result = await pipeline.analyze(req.url)
    return AnalyzeResponse(**result.to_dict())
