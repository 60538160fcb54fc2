# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-28
# Updated: 2026-01-22
# Description: rag.py
# -----------------------------------------------------------------------------
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    # Accept both snake_case and the camelCase wire names
    model_config = ConfigDict(populate_by_name=True)


class AnswerRequest(CamelModel):
    question: str
    top_k: Optional[int] = Field(None, alias="topK", ge=1, le=50)
    min_similarity: Optional[float] = Field(None, alias="minSimilarity", ge=-1.0, le=1.0)
    kinds: Optional[List[str]] = None
    language: Optional[str] = None


class CitationOut(CamelModel):
    source_id: str = Field(..., alias="sourceId")
    kind: str
    score: float
    recording_id: Optional[str] = Field(None, alias="recordingId")


class AnswerResponse(CamelModel):
    answer: str
    citations: List[CitationOut]
    has_context: bool = Field(..., alias="hasContext")
    model: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatOptions(CamelModel):
    top_k: Optional[int] = Field(None, alias="topK", ge=1, le=50)
    min_similarity: Optional[float] = Field(None, alias="minSimilarity", ge=-1.0, le=1.0)
    language: Optional[str] = None


class ChatRequest(BaseModel):
    question: str
    history: List[ChatMessage] = Field(default_factory=list)
    options: Optional[ChatOptions] = None


class SearchRequest(CamelModel):
    query: str
    limit: int = Field(10, ge=1, le=50)
    min_similarity: float = Field(0.6, alias="minSimilarity", ge=-1.0, le=1.0)
    kinds: Optional[List[str]] = None


class SourceMatchOut(CamelModel):
    source_id: str = Field(..., alias="sourceId")
    kind: str
    score: float
    recording_id: Optional[str] = Field(None, alias="recordingId")
    label: Optional[str] = None
    text: str
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class SearchResponse(CamelModel):
    query: str
    results: List[SourceMatchOut]
    count: int


class SimilarResponse(CamelModel):
    transcription_id: str = Field(..., alias="transcriptionId")
    similar: List[SourceMatchOut]
    count: int


class KindResultOut(BaseModel):
    total: int
    embedded: int
    skipped: int
    errors: int


class EmbedAllResponse(BaseModel):
    transcriptions: KindResultOut
    enrichments: KindResultOut
    interrupted: bool = False


class EmbedSourceResponse(CamelModel):
    kind: str
    source_id: str = Field(..., alias="sourceId")
    status: Literal["embedded", "skipped"]


class DeleteEmbeddingResponse(CamelModel):
    kind: str
    source_id: str = Field(..., alias="sourceId")
    deleted_count: int = Field(..., alias="deletedCount")
