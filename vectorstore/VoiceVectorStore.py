# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-15
# Updated: 2026-01-22
# Description: VoiceVectorStore
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from embedding.EmbeddingRecord import EmbeddingRecord
from source.SourceItem import SourceKind

UpsertOutcome = Literal["inserted", "updated", "skipped"]


@dataclass(frozen=True)
class SearchHit:
    source_id: str
    kind: SourceKind
    score: float
    created_at: float
    parent_recording_id: Optional[str] = None


@runtime_checkable
class VoiceVectorStore(Protocol):
    def test_connection(self) -> bool:
        ...

    def upsert(
            self,
            source_id: str,
            kind: SourceKind,
            vector: Sequence[float] | np.ndarray,
            revision_hash: str,
            parent_recording_id: Optional[str] = None,
    ) -> UpsertOutcome:
        ...

    def get_revision_hash(self, source_id: str, kind: SourceKind) -> Optional[str]:
        ...

    def get_record(self, source_id: str, kind: SourceKind) -> Optional[EmbeddingRecord]:
        ...

    def search(
            self,
            query_vector: Sequence[float] | np.ndarray,
            kind: Optional[SourceKind] = None,
            top_k: int = 5,
            min_similarity: float = 0.0,
    ) -> List[SearchHit]:
        ...

    def stats(self) -> Dict[SourceKind, int]:
        ...

    def delete(self, source_id: str, kind: SourceKind) -> int:
        ...
