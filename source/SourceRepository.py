# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: SourceRepository
# -----------------------------------------------------------------------------
from datetime import datetime
from typing import List, Optional, Protocol, Tuple, runtime_checkable

from source.SourceItem import SourceItem, SourceKind

Cursor = Tuple[datetime, str]


@runtime_checkable
class SourceRepository(Protocol):
    def test_connection(self) -> bool:
        ...

    def count(self, kind: SourceKind, created_until: Optional[datetime] = None) -> int:
        ...

    def latest_created_at(self, kind: SourceKind) -> Optional[datetime]:
        ...

    def fetch_page(
            self,
            kind: SourceKind,
            *,
            after: Optional[Cursor] = None,
            created_until: Optional[datetime] = None,
            limit: int = 100,
    ) -> List[SourceItem]:
        """Items ordered by (created_at, id) ascending, strictly after the cursor."""
        ...

    def get_item(self, kind: SourceKind, source_id: str) -> Optional[SourceItem]:
        ...
