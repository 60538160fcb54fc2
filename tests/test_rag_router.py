# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-01-22
# Description: test_rag_router.py
# -----------------------------------------------------------------------------
import pytest
from starlette.testclient import TestClient

from api import dependencies
from api.main import app
from conftest import InMemorySourceRepository, StubCompletion, StubEmbedder, make_item, unit
from exceptions import UpstreamError
from services.EmbedAllService import EmbedAllService
from services.EmbeddingStatsService import EmbeddingStatsService
from services.RAGService import RAGService
from source.ContentEnumerator import ContentEnumerator
from source.SourceItem import SourceKind

T = SourceKind.TRANSCRIPTION
E = SourceKind.ENRICHMENT

QUESTION = "What was decided about the budget?"


@pytest.fixture
def wiring(chroma_store):
    embedder = StubEmbedder({
        QUESTION: unit(1.0),
        "Budget planning for Q3": unit(1.0, 0.1),
        "Summary: budget approved": unit(1.0, 0.3),
        "Hiring plan": unit(0.0, 1.0),
    })
    repo = InMemorySourceRepository([
        make_item("t1", T, "Budget planning for Q3", minutes=0, recording_id="r1"),
        make_item("t2", T, "Hiring plan", minutes=1, recording_id="r2"),
        make_item("e1", E, "Summary: budget approved", minutes=2, recording_id="r1"),
    ])
    completion = StubCompletion("Budget approved [Quelle 1]")
    enumerator = ContentEnumerator(repository=repo)

    rag = RAGService(embedder=embedder, store=chroma_store, repository=repo, completion=completion)
    embed_all = EmbedAllService(embedder=embedder, store=chroma_store, enumerator=enumerator, max_workers=1)
    stats = EmbeddingStatsService(store=chroma_store, enumerator=enumerator)

    app.dependency_overrides[dependencies.get_rag_service] = lambda: rag
    app.dependency_overrides[dependencies.get_embed_all_service] = lambda: embed_all
    app.dependency_overrides[dependencies.get_stats_service] = lambda: stats
    app.dependency_overrides[dependencies.get_vector_store] = lambda: chroma_store
    try:
        yield {"embedder": embedder, "completion": completion, "store": chroma_store}
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client(wiring) -> TestClient:
    return TestClient(app)


def test_embed_all_then_answer(client, wiring):
    resp = client.post("/rag/embed-all")
    assert resp.status_code == 200
    assert resp.json() == {
        "transcriptions": {"total": 2, "embedded": 2, "skipped": 0, "errors": 0},
        "enrichments": {"total": 1, "embedded": 1, "skipped": 0, "errors": 0},
        "interrupted": False,
    }

    resp = client.post("/rag/answer", json={"question": QUESTION, "topK": 2})
    assert resp.status_code == 200
    data = resp.json()
    assert data["answer"] == "Budget approved [Quelle 1]"
    assert data["hasContext"] is True
    assert [(c["sourceId"], c["kind"]) for c in data["citations"]] == [("t1", "transcription"), ("e1", "enrichment")]
    assert data["citations"][0]["score"] >= data["citations"][1]["score"]


def test_answer_on_empty_store(client, wiring):
    resp = client.post("/rag/answer", json={"question": QUESTION})

    assert resp.status_code == 200
    assert resp.json()["citations"] == []
    assert resp.json()["hasContext"] is False
    assert wiring["completion"].calls == []


def test_answer_rejects_blank_question(client):
    assert client.post("/rag/answer", json={"question": "  "}).status_code == 400


def test_answer_not_configured_is_503(client, wiring):
    wiring["embedder"].configured = False
    assert client.post("/rag/answer", json={"question": QUESTION}).status_code == 503
    assert client.post("/rag/embed-all").status_code == 503


def test_answer_upstream_failure_is_502(client, wiring):
    client.post("/rag/embed-all")
    wiring["completion"].error = UpstreamError("completion timeout")

    assert client.post("/rag/answer", json={"question": QUESTION}).status_code == 502


def test_chat_with_history(client, wiring):
    client.post("/rag/embed-all")

    resp = client.post(
        "/rag/chat",
        json={
            "question": "And what about that?",
            "history": [
                {"role": "user", "content": "Budget?"},
                {"role": "assistant", "content": "Approved."},
            ],
            "options": {"topK": 1, "language": "en"},
        },
    )

    assert resp.status_code == 200
    assert len(resp.json()["citations"]) == 1
    assert wiring["embedder"].calls[-1].startswith("Context of the previous question: Budget? - Approved.")


def test_search_and_similar(client, wiring):
    client.post("/rag/embed-all")

    resp = client.post("/rag/search", json={"query": QUESTION, "minSimilarity": 0.6})
    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == 2
    assert [r["sourceId"] for r in data["results"]] == ["t1", "e1"]
    assert data["results"][0]["text"] == "Budget planning for Q3"
    assert data["results"][0]["recordingId"] == "r1"

    resp = client.get("/rag/similar/t2", params={"limit": 3})
    assert resp.status_code == 200
    assert resp.json()["transcriptionId"] == "t2"
    assert all(s["recordingId"] != "r2" for s in resp.json()["similar"])

    assert client.get("/rag/similar/missing").status_code == 404


def test_embed_and_delete_single_source(client, wiring):
    resp = client.post("/rag/embeddings/enrichment/e1")
    assert resp.status_code == 200
    assert resp.json() == {"kind": "enrichment", "sourceId": "e1", "status": "embedded"}

    assert client.post("/rag/embeddings/transcription/missing").status_code == 404
    assert client.post("/rag/embeddings/recording/e1").status_code == 400

    resp = client.delete("/rag/embeddings/enrichment/e1")
    assert resp.status_code == 200
    assert resp.json()["deletedCount"] == 1
    assert client.delete("/rag/embeddings/enrichment/e1").json()["deletedCount"] == 0
    assert client.delete("/rag/embeddings/bogus/e1").status_code == 400


def test_stats_endpoints(client, wiring):
    client.post("/rag/embeddings/transcription/t1")

    resp = client.get("/rag/stats")
    assert resp.status_code == 200
    assert resp.json() == {"transcriptions": {"embedded": 1}, "enrichments": {"embedded": 0}}

    detailed = client.get("/rag/stats/detailed").json()
    assert detailed["transcriptions"] == {"total": 2, "embedded": 1, "pending": 1}
    assert detailed["enrichments"] == {"total": 1, "embedded": 0, "pending": 1}


def test_health_liveness():
    resp = TestClient(app).get("/health/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
