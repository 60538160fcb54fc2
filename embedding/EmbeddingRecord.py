# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-14
# Updated: 2026-01-22
# Description: EmbeddingRecord
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Optional

import numpy as np

from source.SourceItem import SourceKind


@dataclass
class EmbeddingRecord:
    """Embedding vector for one (source_id, kind) at a given text revision."""
    source_id: str
    kind: SourceKind
    vector: np.ndarray
    revision_hash: str
    created_at: float  # epoch seconds
    parent_recording_id: Optional[str] = None

    @property
    def dimensions(self) -> int:
        return int(self.vector.shape[-1])
