# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-28
# Updated: 2026-01-22
# Description: rag router
# -----------------------------------------------------------------------------
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_embed_all_service, get_rag_service, get_vector_store
from api.schemas.rag import (
    AnswerRequest,
    AnswerResponse,
    ChatRequest,
    CitationOut,
    DeleteEmbeddingResponse,
    EmbedAllResponse,
    EmbedSourceResponse,
    SearchRequest,
    SearchResponse,
    SimilarResponse,
    SourceMatchOut,
)
from exceptions import ConfigurationError, NotFoundError, UpstreamError
from services.EmbedAllService import EmbedAllService
from services.RAGService import QueryResult, RAGService, SourceMatch
from source.SourceItem import SourceKind
from vectorstore.VoiceVectorStore import VoiceVectorStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rag", tags=["rag"])


def _raise_http(e: Exception, action: str) -> NoReturn:
    if isinstance(e, ConfigurationError):
        raise HTTPException(status_code=503, detail=f"RAG service not configured: {e}")
    if isinstance(e, UpstreamError):
        raise HTTPException(status_code=502, detail=f"{action} failed upstream: {e}")
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ValueError):
        raise HTTPException(status_code=400, detail=str(e))
    logger.exception("%s failed: %s", action, e)
    raise HTTPException(status_code=500, detail=f"{action} failed: {e}")


def _parse_kind(value: str) -> SourceKind:
    try:
        return SourceKind.parse(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _parse_kinds(values: Optional[List[str]]) -> Optional[List[SourceKind]]:
    if not values:
        return None
    return [_parse_kind(v) for v in values]


def _require_text(value: str, name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail=f"{name} must not be empty")
    return text


def _to_answer_response(result: QueryResult) -> AnswerResponse:
    return AnswerResponse(
        answer=result.answer_text,
        citations=[
            CitationOut(
                source_id=c.source_id,
                kind=c.kind.value,
                score=c.score,
                recording_id=c.recording_id,
            )
            for c in result.citations
        ],
        has_context=result.has_context,
        model=result.model,
        usage=result.usage,
    )


def _to_match_out(m: SourceMatch) -> SourceMatchOut:
    return SourceMatchOut(
        source_id=m.source_id,
        kind=m.kind.value,
        score=m.score,
        recording_id=m.recording_id,
        label=m.label,
        text=m.text,
        created_at=m.created_at,
    )


@router.post("/answer", response_model=AnswerResponse)
def post_answer(
        req: AnswerRequest,
        svc: RAGService = Depends(get_rag_service),
) -> AnswerResponse:
    question = _require_text(req.question, "question")
    kinds = _parse_kinds(req.kinds)

    logger.info("POST /rag/answer (start) question_len=%d top_k=%s", len(question), req.top_k)
    try:
        result = svc.answer(
            question,
            top_k=req.top_k,
            min_similarity=req.min_similarity,
            kinds=kinds,
            language=req.language,
        )
    except Exception as e:
        _raise_http(e, "answer")

    logger.info("POST /rag/answer (done) citations=%d has_context=%s", len(result.citations), result.has_context)
    return _to_answer_response(result)


@router.post("/chat", response_model=AnswerResponse)
def post_chat(
        req: ChatRequest,
        svc: RAGService = Depends(get_rag_service),
) -> AnswerResponse:
    question = _require_text(req.question, "question")
    options = req.options
    history = [m.model_dump() for m in req.history]

    logger.info("POST /rag/chat (start) question_len=%d history=%d", len(question), len(history))
    try:
        result = svc.chat(
            question,
            history,
            top_k=options.top_k if options else None,
            min_similarity=options.min_similarity if options else None,
            language=options.language if options else None,
        )
    except Exception as e:
        _raise_http(e, "chat")

    return _to_answer_response(result)


@router.post("/search", response_model=SearchResponse)
def post_search(
        req: SearchRequest,
        svc: RAGService = Depends(get_rag_service),
) -> SearchResponse:
    query = _require_text(req.query, "query")
    kinds = _parse_kinds(req.kinds)

    try:
        matches = svc.search(query, limit=req.limit, min_similarity=req.min_similarity, kinds=kinds)
    except Exception as e:
        _raise_http(e, "search")

    results = [_to_match_out(m) for m in matches]
    return SearchResponse(query=query, results=results, count=len(results))


@router.get("/similar/{transcription_id}", response_model=SimilarResponse)
def get_similar(
        transcription_id: str,
        limit: int = Query(5, ge=1, le=50),
        svc: RAGService = Depends(get_rag_service),
) -> SimilarResponse:
    try:
        matches = svc.find_similar(transcription_id, limit=limit)
    except Exception as e:
        _raise_http(e, "similar")

    similar = [_to_match_out(m) for m in matches]
    return SimilarResponse(transcription_id=transcription_id, similar=similar, count=len(similar))


@router.post("/embed-all", response_model=EmbedAllResponse)
def post_embed_all(
        svc: EmbedAllService = Depends(get_embed_all_service),
) -> EmbedAllResponse:
    logger.info("POST /rag/embed-all (start)")
    try:
        results = svc.embed_all()
    except Exception as e:
        _raise_http(e, "embed-all")

    logger.info("POST /rag/embed-all (done) %s", results.to_dict())
    return EmbedAllResponse(**results.to_dict(), interrupted=results.interrupted)


@router.post("/embeddings/{kind}/{source_id}", response_model=EmbedSourceResponse)
def post_embed_source(
        kind: str,
        source_id: str,
        svc: EmbedAllService = Depends(get_embed_all_service),
) -> EmbedSourceResponse:
    source_kind = _parse_kind(kind)
    try:
        status = svc.embed_source(source_kind, source_id)
    except Exception as e:
        _raise_http(e, "embed")

    return EmbedSourceResponse(kind=source_kind.value, source_id=source_id, status=status)


@router.delete("/embeddings/{kind}/{source_id}", response_model=DeleteEmbeddingResponse)
def delete_embedding(
        kind: str,
        source_id: str,
        store: VoiceVectorStore = Depends(get_vector_store),
) -> DeleteEmbeddingResponse:
    source_kind = _parse_kind(kind)
    try:
        deleted = store.delete(source_id, source_kind)
    except Exception as e:
        _raise_http(e, "delete")

    return DeleteEmbeddingResponse(kind=source_kind.value, source_id=source_id, deleted_count=deleted)
