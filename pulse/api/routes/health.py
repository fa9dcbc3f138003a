"""Health check endpoint."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from pulse.config import settings
from pulse.core.router import ModelRouter, get_model_router
from pulse.core.samples import SampleLibrary
from pulse.core.samples.loader import get_sample_library

router = APIRouter()


@router.get("/health")
async def health_check(
    model_router: ModelRouter = Depends(get_model_router),
    library: SampleLibrary = Depends(get_sample_library),
) -> dict[str, Any]:
    """Basic health check, plus whether the upstream model is configured."""
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
        "modelBackend": "configured" if model_router.backend is not None else "unconfigured",
        "sampleCount": library.total_samples,
    }
