# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-21
# Updated: 2026-01-22
# Description: EmbeddingStatsService.py
# -----------------------------------------------------------------------------
import logging
from typing import Dict, TypedDict

from source.ContentEnumerator import ContentEnumerator
from source.SourceItem import SourceKind
from utility.logging_utils import get_class_logger
from vectorstore.VoiceVectorStore import VoiceVectorStore


class KindEmbeddingStats(TypedDict):
    total: int
    embedded: int
    pending: int


class EmbeddingStatsService:
    """
    Stats service for the /rag/stats endpoints and the embed-all CLI.

    Responsibilities:
      - count stored embeddings per kind (vector store)
      - compare the source population against stored revisions (detailed view)
    """

    def __init__(
        self,
        *,
        store: VoiceVectorStore,
        enumerator: ContentEnumerator,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.enumerator = enumerator
        self.logger = logger or get_class_logger(self.__class__)

    def get_stats(self) -> Dict[str, Dict[str, int]]:
        counts = self.store.stats()
        stats = {kind.plural: {"embedded": int(counts.get(kind, 0))} for kind in SourceKind}
        self.logger.info("Embedding stats: %s", stats)
        return stats

    def get_embedding_stats(self) -> Dict[str, KindEmbeddingStats]:
        """
        Per kind: total source rows, stored embeddings and items whose current
        text has no matching stored revision. Walks every source row.
        """
        counts = self.store.stats()
        detailed: Dict[str, KindEmbeddingStats] = {}

        for kind in SourceKind:
            enumeration = self.enumerator.enumerate(kind)
            pending = 0
            for item in enumeration:
                if not item.text.strip():
                    continue
                if self.store.get_revision_hash(item.id, kind) != item.revision_hash:
                    pending += 1

            detailed[kind.plural] = KindEmbeddingStats(
                total=enumeration.total,
                embedded=int(counts.get(kind, 0)),
                pending=pending,
            )

        self.logger.info("Detailed embedding stats: %s", detailed)
        return detailed
