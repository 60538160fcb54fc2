# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: EmbedAllService.py
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, Literal, Optional

from embedding.TextEmbedder import TextEmbedder
from exceptions import ConfigurationError, NotFoundError, UpstreamError
from settings import EMBED_ITEM_RETRIES, EMBED_MAX_WORKERS
from source.ContentEnumerator import ContentEnumerator
from source.SourceItem import SourceItem, SourceKind
from utility.logging_utils import get_class_logger
from vectorstore.VoiceVectorStore import VoiceVectorStore

ItemOutcome = Literal["embedded", "skipped"]


@dataclass
class KindResult:
    total: int = 0
    embedded: int = 0
    skipped: int = 0
    errors: int = 0


@dataclass
class EmbedAllResults:
    transcriptions: KindResult = field(default_factory=KindResult)
    enrichments: KindResult = field(default_factory=KindResult)
    interrupted: bool = False

    def for_kind(self, kind: SourceKind) -> KindResult:
        return getattr(self, kind.plural)

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {
            "transcriptions": asdict(self.transcriptions),
            "enrichments": asdict(self.enrichments),
        }


class EmbedAllService:
    """
    Owns the batch embedding pipeline:
      - enumerate transcriptions / enrichments (creation order)
      - skip items whose text revision is already embedded
      - embed
      - upsert into vector store
      - count total / embedded / skipped / errors per kind

    One failing item never aborts the run; it is logged and counted.
    """

    def __init__(
        self,
        *,
        embedder: TextEmbedder,
        store: VoiceVectorStore,
        enumerator: ContentEnumerator,
        max_workers: int = EMBED_MAX_WORKERS,
        item_retries: int = EMBED_ITEM_RETRIES,
        retry_delay: float = 0.8,
        stop_event: Optional[threading.Event] = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.embedder = embedder
        self.store = store
        self.enumerator = enumerator
        self.max_workers = max(1, max_workers)
        self.item_retries = max(0, item_retries)
        self.retry_delay = retry_delay
        self.stop_event = stop_event or threading.Event()
        self.logger = logger or get_class_logger(self.__class__)

    def _require_configured(self) -> None:
        if not self.embedder.is_configured():
            raise ConfigurationError("OpenAI API key is not configured (set OPENAI_API_KEY)")

    def embed_all(self, kinds: Optional[Iterable[SourceKind]] = None) -> EmbedAllResults:
        self._require_configured()

        selected = list(kinds) if kinds is not None else list(SourceKind)
        self.logger.info(
            "Starting full embedding process (kinds=%s, max_workers=%d)",
            [k.value for k in selected],
            self.max_workers,
        )

        results = EmbedAllResults()

        # Kinds are independent namespaces; items inside a kind stay sequential
        if self.max_workers > 1 and len(selected) > 1:
            with ThreadPoolExecutor(
                max_workers=min(self.max_workers, len(selected)),
                thread_name_prefix="embed-kind",
            ) as pool:
                futures = {kind: pool.submit(self.embed_kind, kind) for kind in selected}
                for kind, future in futures.items():
                    setattr(results, kind.plural, future.result())
        else:
            for kind in selected:
                setattr(results, kind.plural, self.embed_kind(kind))

        results.interrupted = self.stop_event.is_set()
        for kind in selected:
            self.logger.info("%s embedding complete: %s", kind.value.capitalize(), asdict(results.for_kind(kind)))
        if results.interrupted:
            self.logger.warning("Embedding run interrupted; remaining items left for the next run")

        return results

    def embed_kind(self, kind: SourceKind) -> KindResult:
        enumeration = self.enumerator.enumerate(kind)
        result = KindResult(total=enumeration.total)

        for item in enumeration:
            if self.stop_event.is_set():
                self.logger.warning(
                    "Stop requested; %s run halted after cursor=%s",
                    kind.plural,
                    enumeration.cursor,
                )
                break

            try:
                outcome = self._process_item(item)
            except Exception as e:
                result.errors += 1
                self.logger.error("Error embedding %s %s: %s", kind.value, item.id, e, exc_info=True)
                continue

            if outcome == "embedded":
                result.embedded += 1
            else:
                result.skipped += 1

        return result

    def embed_source(self, kind: SourceKind, source_id: str) -> ItemOutcome:
        """Embed one transcription/enrichment, e.g. right after it was created or edited."""
        self._require_configured()

        item = self.enumerator.repository.get_item(kind, source_id)
        if item is None:
            raise NotFoundError(f"{kind.value} '{source_id}' not found")
        return self._process_item(item)

    def _process_item(self, item: SourceItem) -> ItemOutcome:
        if not item.text or not item.text.strip():
            self.logger.warning("Empty content for %s:%s, skipping embedding", item.kind.value, item.id)
            return "skipped"

        rev = item.revision_hash
        if self.store.get_revision_hash(item.id, item.kind) == rev:
            return "skipped"

        vector = self._embed_with_retries(item)
        outcome = self.store.upsert(
            item.id,
            item.kind,
            vector,
            rev,
            parent_recording_id=item.parent_recording_id,
        )
        # A concurrent writer may have stored the same revision in the meantime
        return "skipped" if outcome == "skipped" else "embedded"

    def _embed_with_retries(self, item: SourceItem):
        delay = self.retry_delay
        attempts = self.item_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return self.embedder.embed(item.text)
            except UpstreamError as e:
                if attempt == attempts:
                    raise
                self.logger.warning(
                    "Embedding %s:%s failed (attempt %d/%d): %s",
                    item.kind.value,
                    item.id,
                    attempt,
                    attempts,
                    e,
                )
                # wait() returns early when a stop is requested
                if self.stop_event.wait(delay):
                    raise
                delay *= 1.7  # backoff
