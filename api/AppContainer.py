# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-01-22
# Description: AppContainer.py
# -----------------------------------------------------------------------------
from typing import Optional

from chat.OpenAIChat import OpenAIChat
from config.Config import Config
from embedding.VoiceEmbedder import VoiceEmbedder
from health.TestRunner import TestRunner
from services.EmbedAllService import EmbedAllService
from services.EmbeddingStatsService import EmbeddingStatsService
from services.HealthService import HealthService
from services.RAGService import RAGService
from source.ContentEnumerator import ContentEnumerator
from source.SQLSourceRepository import SQLSourceRepository
from vectorstore.ChromaVoiceVectorStore import ChromaVoiceVectorStore


class AppContainer:
    """
    Owns heavy object instantiation and application wiring.
    One instance per process, provided via FastAPI dependencies / the CLI.
    """

    def __init__(self, cfg: Optional[Config] = None) -> None:
        # Configuration
        self.cfg = cfg or Config.from_env()
        self.cfg.validate("database_url")

        # Core infrastructure
        self.embedder = VoiceEmbedder(self.cfg)
        self.store = ChromaVoiceVectorStore(cfg=self.cfg)
        self.repository = SQLSourceRepository.from_url(self.cfg.database_url)
        self.enumerator = ContentEnumerator(repository=self.repository)
        self.openai_chat = OpenAIChat(cfg=self.cfg)

        # Health
        self.test_runner = TestRunner(
            cfg=self.cfg,
            store=self.store,
            repository=self.repository,
            chat=self.openai_chat,
        )
        self.health_service = HealthService(test_runner=self.test_runner)

        # Batch embedding pipeline
        self.embed_all_service = EmbedAllService(
            embedder=self.embedder,
            store=self.store,
            enumerator=self.enumerator,
        )

        self.stats_service = EmbeddingStatsService(
            store=self.store,
            enumerator=self.enumerator,
        )

        # Question answering / search
        self.rag_service = RAGService(
            embedder=self.embedder,
            store=self.store,
            repository=self.repository,
            completion=self.openai_chat,
        )
