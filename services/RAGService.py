# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: RAGService.py
# -----------------------------------------------------------------------------
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from chat.CompletionClient import CompletionClient, Message
from embedding.TextEmbedder import TextEmbedder
from exceptions import NotFoundError
from prompts import RAGPrompts
from settings import MAX_CONTEXT_CHARS, RAG_DEFAULTS, SEARCH_DEFAULTS, SIMILAR_MIN_SIMILARITY
from source.SourceItem import SourceItem, SourceKind
from source.SourceRepository import SourceRepository
from utility.logging_utils import get_class_logger
from vectorstore.VoiceVectorStore import SearchHit, VoiceVectorStore


@dataclass(frozen=True)
class Citation:
    source_id: str
    kind: SourceKind
    score: float
    recording_id: Optional[str] = None


@dataclass
class QueryResult:
    answer_text: str
    citations: List[Citation] = field(default_factory=list)
    has_context: bool = False
    model: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class SourceMatch:
    """A search hit joined with the source row it points at."""
    source_id: str
    kind: SourceKind
    score: float
    recording_id: Optional[str]
    label: Optional[str]
    text: str
    created_at: Optional[datetime] = None


def _validate_question(question: str) -> str:
    q = (question or "").strip()
    if not q:
        raise ValueError("question must not be empty")
    return q


class RAGService:
    """
    Retrieval-augmented answers over transcriptions and enrichments:
        - embeds the question
        - searches the vector store (both kinds by default)
        - resolves hit texts from the source repository
        - builds a grounded prompt and calls the completion client
        - returns the answer plus citations in rank order

    No matching source -> fixed "nothing found" answer, no completion call.
    """

    def __init__(
        self,
        *,
        embedder: TextEmbedder,
        store: VoiceVectorStore,
        repository: SourceRepository,
        completion: CompletionClient,
        max_context_chars: int = MAX_CONTEXT_CHARS,
        logger: logging.Logger | None = None,
    ) -> None:
        self.embedder = embedder
        self.store = store
        self.repository = repository
        self.completion = completion
        self.max_context_chars = max_context_chars
        self.logger = logger or get_class_logger(self.__class__)

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------
    def _search(
        self,
        query: str,
        *,
        top_k: int,
        min_similarity: float,
        kinds: Optional[Iterable[SourceKind]] = None,
    ) -> List[SearchHit]:
        return self._search_vector(
            self.embedder.embed(query), top_k=top_k, min_similarity=min_similarity, kinds=kinds
        )

    def _search_vector(
        self,
        vector: np.ndarray,
        *,
        top_k: int,
        min_similarity: float,
        kinds: Optional[Iterable[SourceKind]] = None,
    ) -> List[SearchHit]:
        selected = list(kinds) if kinds is not None else None
        if not selected or set(selected) == set(SourceKind):
            return self.store.search(vector, None, top_k=top_k, min_similarity=min_similarity)

        # Single kind -> filter in the store; several -> merge by score
        hits: List[SearchHit] = []
        for kind in selected:
            hits.extend(self.store.search(vector, kind, top_k=top_k, min_similarity=min_similarity))
        hits.sort(key=lambda h: (h.score, h.created_at), reverse=True)
        return hits[:top_k]

    def _resolve(self, hits: Sequence[SearchHit]) -> List[Tuple[SearchHit, SourceItem]]:
        resolved: List[Tuple[SearchHit, SourceItem]] = []
        for hit in hits:
            try:
                item = self.repository.get_item(hit.kind, hit.source_id)
                if item is None:
                    raise NotFoundError(f"{hit.kind.value} '{hit.source_id}' has an embedding but no source row")
            except NotFoundError as e:
                self.logger.warning("Dropping citation: %s", e)
                continue
            resolved.append((hit, item))
        return resolved

    def _build_context(self, resolved: Sequence[Tuple[SearchHit, SourceItem]], language: str) -> Tuple[str, int]:
        parts: List[str] = []
        total = 0
        for i, (hit, item) in enumerate(resolved, start=1):
            block = RAGPrompts.format_source(i, item, hit.score, language)
            if parts and total + len(block) > self.max_context_chars:
                self.logger.warning(
                    "Truncating context at %d sources / %d chars (limit=%d)",
                    len(parts),
                    total,
                    self.max_context_chars,
                )
                break
            parts.append(block)
            total += len(block)
        return "\n\n".join(parts), len(parts)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def answer(
        self,
        question: str,
        *,
        top_k: Optional[int] = None,
        min_similarity: Optional[float] = None,
        kinds: Optional[Iterable[SourceKind]] = None,
        language: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> QueryResult:
        q = _validate_question(question)
        top_k = RAG_DEFAULTS["top_k"] if top_k is None else top_k
        min_similarity = RAG_DEFAULTS["min_similarity"] if min_similarity is None else min_similarity
        lang = RAGPrompts.resolve_language(language or RAG_DEFAULTS["language"])

        self.logger.info("answer: question='%s' top_k=%d min_similarity=%.2f lang=%s", q[:120], top_k, min_similarity, lang)

        hits = self._search(q, top_k=top_k, min_similarity=min_similarity, kinds=kinds)
        self.logger.info("answer: retrieved hits=%d", len(hits))
        if not hits:
            return QueryResult(answer_text=RAGPrompts.no_context_answer(lang))

        resolved = self._resolve(hits)
        if not resolved:
            self.logger.warning("answer: none of %d hits could be resolved to a source", len(hits))
            return QueryResult(answer_text=RAGPrompts.no_context_answer(lang))

        context, used = self._build_context(resolved, lang)
        resolved = resolved[:used]
        messages: List[Message] = RAGPrompts.build_messages(q, context, lang)

        completion = self.completion.complete(
            messages,
            temperature=RAG_DEFAULTS["temperature"] if temperature is None else temperature,
            max_tokens=RAG_DEFAULTS["max_tokens"] if max_tokens is None else max_tokens,
        )

        citations = [
            Citation(
                source_id=hit.source_id,
                kind=hit.kind,
                score=hit.score,
                recording_id=item.parent_recording_id or hit.parent_recording_id,
            )
            for hit, item in resolved
        ]
        self.logger.info("answer: answer_chars=%d citations=%d (done)", len(completion.content), len(citations))

        return QueryResult(
            answer_text=completion.content,
            citations=citations,
            has_context=True,
            model=completion.model,
            usage=completion.usage,
        )

    def chat(
        self,
        question: str,
        history: Optional[Sequence[Message]] = None,
        **options: Any,
    ) -> QueryResult:
        """Multi-turn variant: follow-up questions are expanded with the last exchange before retrieval."""
        q = _validate_question(question)
        history = list(history or [])

        if history and RAGPrompts.is_follow_up(q):
            language = RAGPrompts.resolve_language(options.get("language") or RAG_DEFAULTS["language"])
            q = RAGPrompts.expand_follow_up(q, history, language)
            self.logger.info("chat: follow-up detected, expanded with %d history messages", min(len(history), 2))

        return self.answer(q, **options)

    def search(
        self,
        query: str,
        *,
        limit: Optional[int] = None,
        min_similarity: Optional[float] = None,
        kinds: Optional[Iterable[SourceKind]] = None,
    ) -> List[SourceMatch]:
        q = _validate_question(query)
        limit = SEARCH_DEFAULTS["limit"] if limit is None else limit
        min_similarity = SEARCH_DEFAULTS["min_similarity"] if min_similarity is None else min_similarity

        hits = self._search(q, top_k=limit, min_similarity=min_similarity, kinds=kinds)
        return [self._to_match(hit, item) for hit, item in self._resolve(hits)]

    def find_similar(self, transcription_id: str, *, limit: int = 5) -> List[SourceMatch]:
        item = self.repository.get_item(SourceKind.TRANSCRIPTION, transcription_id)
        if item is None:
            raise NotFoundError(f"transcription '{transcription_id}' not found")
        if not item.text.strip():
            return []

        # Reuse the stored vector when it matches the current text
        record = self.store.get_record(transcription_id, SourceKind.TRANSCRIPTION)
        if record is not None and record.revision_hash == item.revision_hash:
            vector = record.vector
        else:
            vector = self.embedder.embed(item.text)

        # Over-fetch so that dropping the recording's own sources still fills the limit
        hits = self._search_vector(vector, top_k=limit + 5, min_similarity=SIMILAR_MIN_SIMILARITY)
        others = [
            h for h in hits
            if not (h.kind is SourceKind.TRANSCRIPTION and h.source_id == transcription_id)
            and (item.parent_recording_id is None or h.parent_recording_id != item.parent_recording_id)
        ]
        return [self._to_match(hit, src) for hit, src in self._resolve(others[:limit])]

    @staticmethod
    def _to_match(hit: SearchHit, item: SourceItem) -> SourceMatch:
        return SourceMatch(
            source_id=hit.source_id,
            kind=hit.kind,
            score=hit.score,
            recording_id=item.parent_recording_id or hit.parent_recording_id,
            label=item.label,
            text=item.text,
            created_at=item.created_at,
        )
