# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-01-22
# Description: dependencies.py
# -----------------------------------------------------------------------------
from functools import lru_cache

from api.AppContainer import AppContainer
from services.EmbedAllService import EmbedAllService
from services.EmbeddingStatsService import EmbeddingStatsService
from services.HealthService import HealthService
from services.RAGService import RAGService
from vectorstore.VoiceVectorStore import VoiceVectorStore


@lru_cache
def get_container() -> AppContainer:
    # built on first request so importing the app never touches Chroma / the DB
    return AppContainer()


def get_rag_service() -> RAGService:
    return get_container().rag_service


def get_embed_all_service() -> EmbedAllService:
    return get_container().embed_all_service


def get_stats_service() -> EmbeddingStatsService:
    return get_container().stats_service


def get_vector_store() -> VoiceVectorStore:
    return get_container().store


def get_health_service() -> HealthService:
    return get_container().health_service
