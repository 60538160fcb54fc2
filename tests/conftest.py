# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-12
# Updated: 2026-01-22
# Description: conftest.py
# -----------------------------------------------------------------------------

import hashlib
import os
import sys
import uuid
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional

# add project root to sys.path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

# keep test runs off disk and let caplog see records
os.environ.setdefault("VOICE_LOG_TO_FILE", "0")
os.environ.setdefault("VOICE_LOG_PROPAGATE", "1")

import chromadb  # noqa: E402
import numpy as np  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from chat.CompletionClient import Completion  # noqa: E402
from config.Config import Config  # noqa: E402
from exceptions import ConfigurationError, UpstreamError  # noqa: E402
from source.SQLSourceRepository import SQLSourceRepository  # noqa: E402
from source.SourceItem import SourceItem, SourceKind  # noqa: E402
from source.db_models import Base, EnrichmentModel, RecordingModel, TranscriptionModel  # noqa: E402
from vectorstore.ChromaVoiceVectorStore import ChromaVoiceVectorStore  # noqa: E402

DIM = 8
BASE_TIME = datetime(2026, 1, 20, 9, 0, 0)


def unit(*values: float) -> np.ndarray:
    """Pad to DIM and L2-normalise."""
    arr = np.zeros(DIM, dtype=np.float32)
    arr[: len(values)] = values
    return arr / np.linalg.norm(arr)


class StubEmbedder:
    """Deterministic embedder: exact-text lookup, else a hash-derived vector."""

    def __init__(self, vectors: Optional[Dict[str, np.ndarray]] = None, configured: bool = True):
        self.vectors = dict(vectors or {})
        self.configured = configured
        self.fail_on: set = set()
        self.calls: List[str] = []

    def is_configured(self) -> bool:
        return self.configured

    def embed(self, text: str) -> np.ndarray:
        if not self.configured:
            raise ConfigurationError("not configured")
        if not (text or "").strip():
            raise ValueError("Text cannot be empty")
        self.calls.append(text)
        if text in self.fail_on:
            raise UpstreamError(f"embedding failed for {text!r}")
        if text in self.vectors:
            return np.asarray(self.vectors[text], dtype=np.float32)
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        arr = np.frombuffer(digest[: DIM * 4], dtype=np.uint32).astype(np.float32) - 2**31
        return arr / np.linalg.norm(arr)


class StubCompletion:
    def __init__(self, content: str = "Stub answer [Source 1]"):
        self.content = content
        self.calls: List[List[Dict[str, str]]] = []
        self.error: Optional[Exception] = None

    def complete(self, messages, *, temperature: float = 0.3, max_tokens: int = 1500) -> Completion:
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return Completion(content=self.content, model="stub-model", usage={"total_tokens": 42})


class InMemorySourceRepository:
    """List-backed SourceRepository for service tests."""

    def __init__(self, items: Optional[List[SourceItem]] = None):
        self.items: List[SourceItem] = list(items or [])
        self.get_item_calls = 0

    def add(self, item: SourceItem) -> None:
        self.items = [i for i in self.items if not (i.kind is item.kind and i.id == item.id)]
        self.items.append(item)

    def remove(self, kind: SourceKind, source_id: str) -> None:
        self.items = [i for i in self.items if not (i.kind is kind and i.id == source_id)]

    def _of_kind(self, kind: SourceKind) -> List[SourceItem]:
        return sorted((i for i in self.items if i.kind is kind), key=lambda i: i.cursor)

    def test_connection(self) -> bool:
        return True

    def count(self, kind, created_until=None) -> int:
        return len([i for i in self._of_kind(kind) if created_until is None or i.created_at <= created_until])

    def latest_created_at(self, kind):
        items = self._of_kind(kind)
        return items[-1].created_at if items else None

    def fetch_page(self, kind, *, after=None, created_until=None, limit=100):
        out = [
            i for i in self._of_kind(kind)
            if (after is None or i.cursor > after) and (created_until is None or i.created_at <= created_until)
        ]
        return out[:limit]

    def get_item(self, kind, source_id):
        self.get_item_calls += 1
        for i in self.items:
            if i.kind is kind and i.id == source_id:
                return i
        return None


def make_item(
        source_id: str,
        kind: SourceKind = SourceKind.TRANSCRIPTION,
        text: str = "",
        minutes: int = 0,
        recording_id: Optional[str] = None,
        label: Optional[str] = None,
) -> SourceItem:
    created = BASE_TIME + timedelta(minutes=minutes)
    return SourceItem(
        id=source_id,
        kind=kind,
        text=text or f"text of {source_id}",
        revision=created,
        parent_recording_id=recording_id or f"rec-{source_id}",
        created_at=created,
        label=label,
    )


@pytest.fixture
def cfg() -> Config:
    return Config(openai_api_key="sk-test", database_url="sqlite://")


@pytest.fixture
def stub_embedder() -> StubEmbedder:
    return StubEmbedder()


@pytest.fixture
def stub_completion() -> StubCompletion:
    return StubCompletion()


@pytest.fixture
def memory_repo() -> InMemorySourceRepository:
    return InMemorySourceRepository()


@pytest.fixture
def chroma_store(cfg) -> ChromaVoiceVectorStore:
    # EphemeralClient state is shared per process -> unique collection per test
    return ChromaVoiceVectorStore(
        cfg=cfg,
        collection_name=f"test_{uuid.uuid4().hex}",
        client=chromadb.EphemeralClient(),
    )


@pytest.fixture
def sql_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seeded_sql_repo(sql_engine) -> SQLSourceRepository:
    """
    Two recordings, two transcriptions, three enrichments.
    t2 and e3 share created_at with a sibling to exercise the id tie-break.
    """
    with Session(sql_engine) as session:
        session.add_all([
            RecordingModel(id="r1", filename="r1.webm", original_filename="Meeting Monday.webm",
                           created_at=BASE_TIME, updated_at=BASE_TIME),
            RecordingModel(id="r2", filename="r2.webm", created_at=BASE_TIME, updated_at=BASE_TIME),
        ])
        session.flush()
        session.add_all([
            TranscriptionModel(id="t1", recording_id="r1", text="Budget planning for Q3",
                               created_at=BASE_TIME, updated_at=BASE_TIME),
            TranscriptionModel(id="t2", recording_id="r2", text="Hiring plan for the backend team",
                               created_at=BASE_TIME, updated_at=BASE_TIME),
        ])
        session.flush()
        session.add_all([
            EnrichmentModel(id="e1", transcription_id="t1", type="summary", content="Summary: budget",
                            created_at=BASE_TIME + timedelta(minutes=1), updated_at=BASE_TIME),
            EnrichmentModel(id="e2", transcription_id="t1", type="action_items", content="Action: approve budget",
                            created_at=BASE_TIME + timedelta(minutes=2), updated_at=BASE_TIME),
            EnrichmentModel(id="e3", transcription_id="t2", type="notes", content="Notes: hiring",
                            created_at=BASE_TIME + timedelta(minutes=2), updated_at=BASE_TIME),
        ])
        session.commit()

    return SQLSourceRepository(engine=sql_engine)
