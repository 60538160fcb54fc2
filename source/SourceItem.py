# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: SourceItem
# -----------------------------------------------------------------------------
import enum
import hashlib
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


class SourceKind(enum.Enum):
    TRANSCRIPTION = "transcription"
    ENRICHMENT = "enrichment"

    @property
    def plural(self) -> str:
        """Result / stats key, e.g. 'transcriptions'."""
        return f"{self.value}s"

    @classmethod
    def parse(cls, value: "str | SourceKind") -> "SourceKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Invalid source kind {value!r}. Must be one of {[k.value for k in cls]}"
            ) from None


def revision_hash(text: str) -> str:
    """Stable fingerprint of the text content that gets embedded."""
    return hashlib.sha256((text or "").strip().encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class SourceItem:
    """A transcription or enrichment row that needs an embedding."""
    id: str
    kind: SourceKind
    text: str
    revision: Optional[datetime]
    parent_recording_id: Optional[str]
    created_at: datetime
    label: Optional[str] = None  # recording filename, used in prompts
    recording_created_at: Optional[datetime] = None

    @property
    def revision_hash(self) -> str:
        return revision_hash(self.text)

    @property
    def cursor(self) -> tuple:
        return (self.created_at, self.id)
