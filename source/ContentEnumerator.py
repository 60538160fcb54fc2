# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: ContentEnumerator
# -----------------------------------------------------------------------------
import logging
from datetime import datetime
from typing import Iterator, Optional

from settings import ENUMERATION_PAGE_SIZE
from source.SourceItem import SourceItem, SourceKind
from source.SourceRepository import Cursor, SourceRepository
from utility.logging_utils import get_class_logger


class Enumeration:
    """
    One pass over a kind, pinned to the rows that existed when it started.

    Iterating is lazy (keyset pages) and the position is exposed as `cursor`,
    so an interrupted pass can be resumed with ContentEnumerator.enumerate(after=...).
    """

    def __init__(
            self,
            *,
            repository: SourceRepository,
            kind: SourceKind,
            total: int,
            created_until: Optional[datetime],
            after: Optional[Cursor],
            page_size: int,
    ) -> None:
        self.repository = repository
        self.kind = kind
        self.total = total
        self.created_until = created_until
        self.start_after = after
        self.cursor: Optional[Cursor] = after
        self.page_size = page_size

    def __iter__(self) -> Iterator[SourceItem]:
        # Empty table at start -> nothing to pin to
        if self.created_until is None:
            return

        cursor = self.start_after
        while True:
            page = self.repository.fetch_page(
                self.kind,
                after=cursor,
                created_until=self.created_until,
                limit=self.page_size,
            )
            for item in page:
                cursor = item.cursor
                self.cursor = cursor
                yield item

            if len(page) < self.page_size:
                return


class ContentEnumerator:
    """
    Produces creation-ordered SourceItem sequences per kind.
    """

    def __init__(
            self,
            *,
            repository: SourceRepository,
            page_size: int = ENUMERATION_PAGE_SIZE,
            logger: logging.Logger | None = None,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.repository = repository
        self.page_size = page_size
        self.logger = logger or get_class_logger(self.__class__)

    def enumerate(self, kind: SourceKind, *, after: Optional[Cursor] = None) -> Enumeration:
        created_until = self.repository.latest_created_at(kind)
        total = self.repository.count(kind, created_until=created_until) if created_until else 0

        self.logger.info(
            "Enumerating %s: total=%d created_until=%s resume_after=%s",
            kind.plural,
            total,
            created_until,
            after,
        )
        return Enumeration(
            repository=self.repository,
            kind=kind,
            total=total,
            created_until=created_until,
            after=after,
            page_size=self.page_size,
        )
