# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-01-22
# Description: health.py
# -----------------------------------------------------------------------------
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_health_service
from api.schemas.health import DeepHealthResponse, HealthResponse
from services.HealthService import HealthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="ok", message="Voice RAG API running")


@router.get("/deep", response_model=DeepHealthResponse)
def deep_health_check(
    svc: HealthService = Depends(get_health_service),
    run_openai: bool = Query(False, description="Also send a short chat request to OpenAI"),
) -> DeepHealthResponse:
    logger.info("GET /health/deep called (run_openai=%s)", run_openai)
    try:
        result = svc.deep_health(run_openai=run_openai)
    except Exception as e:
        logger.exception("GET /health/deep failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Health check failed: {e}")

    logger.info("GET /health/deep completed (status=%s)", result.status)
    return result
