# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-21
# Updated: 2026-01-22
# Description: stats.py
# -----------------------------------------------------------------------------
from pydantic import BaseModel


class KindEmbedded(BaseModel):
    embedded: int


class StatsResponse(BaseModel):
    transcriptions: KindEmbedded
    enrichments: KindEmbedded


class KindDetailedStats(BaseModel):
    total: int
    embedded: int
    pending: int


class DetailedStatsResponse(BaseModel):
    transcriptions: KindDetailedStats
    enrichments: KindDetailedStats
