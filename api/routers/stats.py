# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-01-22
# Description: stats.py
# -----------------------------------------------------------------------------
import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_stats_service
from api.schemas.stats import DetailedStatsResponse, StatsResponse
from services.EmbeddingStatsService import EmbeddingStatsService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/rag/stats",
    tags=["stats"]
)


@router.get("", response_model=StatsResponse)
def get_stats(
    svc: EmbeddingStatsService = Depends(get_stats_service),
) -> StatsResponse:
    logger.info("Getting embedding stats")
    return StatsResponse(**svc.get_stats())


@router.get("/detailed", response_model=DetailedStatsResponse)
def get_detailed_stats(
    svc: EmbeddingStatsService = Depends(get_stats_service),
) -> DetailedStatsResponse:
    logger.info("Getting detailed embedding stats")
    return DetailedStatsResponse(**svc.get_embedding_stats())
