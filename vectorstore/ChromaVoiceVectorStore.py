# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-16
# Updated: 2026-01-22
# Description: ChromaVoiceVectorStore
# -----------------------------------------------------------------------------
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import chromadb
import numpy as np
from chromadb import ClientAPI
from chromadb.api.models.Collection import Collection

from config.Config import Config
from embedding.EmbeddingRecord import EmbeddingRecord
from exceptions import DataError
from settings import VECTOR_COLLECTION_DEFAULT
from source.SourceItem import SourceKind
from utility.logging_utils import get_class_logger
from vectorstore.VoiceVectorStore import SearchHit, UpsertOutcome, VoiceVectorStore
from vectorstore.similarity import as_vector, rank


def record_id(source_id: str, kind: SourceKind) -> str:
    return f"{kind.value}:{source_id}"


@dataclass
class ChromaVoiceVectorStore(VoiceVectorStore):
    """
    One Chroma record per (source_id, kind).

    Chroma is the persistence layer; ranking is an exact cosine scan in numpy
    so ordering (score desc, created_at desc) is deterministic.
    """

    cfg: Config
    collection_name: str = VECTOR_COLLECTION_DEFAULT
    client: Optional[ClientAPI] = None
    logger: Any = None
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

        if self.client is None:
            self.client = self._build_client()

        self.collection: Collection = self.client.get_or_create_collection(
            name=self.collection_name,
            metadata={"hnsw:space": "cosine"},
            embedding_function=None,
        )
        self.logger.info("Chroma collection ready: '%s'", self.collection_name)

    def _build_client(self) -> ClientAPI:
        if self.cfg.chroma_path:
            self.logger.info("Initialising Chroma persistent client (path=%s)", self.cfg.chroma_path)
            return chromadb.PersistentClient(path=self.cfg.chroma_path)

        if self.cfg.uses_chroma_cloud():
            self.logger.info(
                "Initialising Chroma Cloud client "
                f"(tenant={self.cfg.chroma_tenant}, database={self.cfg.chroma_database})"
            )
            return chromadb.CloudClient(
                tenant=self.cfg.chroma_tenant,
                database=self.cfg.chroma_database,
                api_key=self.cfg.chroma_api_key,
            )

        self.logger.warning("No CHROMA_PATH / CHROMA_API_KEY set; using in-memory Chroma (not persisted)")
        return chromadb.EphemeralClient()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _get_metadata(self, rid: str) -> Optional[Dict[str, Any]]:
        res = self.collection.get(ids=[rid], include=["metadatas"])
        ids = res.get("ids") or []
        if not ids:
            return None
        metas = res.get("metadatas") or [None]
        return metas[0] or {}

    def _stored_dimensions(self) -> Optional[int]:
        res = self.collection.get(limit=1, include=["metadatas"])
        metas = res.get("metadatas") or []
        if not metas or not metas[0]:
            return None
        dims = metas[0].get("dimensions")
        return int(dims) if dims is not None else None

    @staticmethod
    def _parse_hit(rid: str, meta: Optional[Dict[str, Any]], score: float) -> SearchHit:
        if not isinstance(meta, dict):
            raise DataError(f"Stored record '{rid}' has no metadata")
        try:
            return SearchHit(
                source_id=str(meta["source_id"]),
                kind=SourceKind(meta["kind"]),
                score=score,
                created_at=float(meta["created_at"]),
                parent_recording_id=meta.get("parent_recording_id") or None,
            )
        except (KeyError, ValueError, TypeError) as e:
            raise DataError(f"Malformed stored record '{rid}': {e}") from e

    # ------------------------------------------------------------------
    # VoiceVectorStore
    # ------------------------------------------------------------------
    def test_connection(self) -> bool:
        """
        Simple health check: can we talk to Chroma and our collection?
        """
        try:
            # count() is cheap and exercises the connection + auth
            _ = self.collection.count()
            return True
        except Exception as e:
            self.logger.error("Chroma connection failed: %s", e)
            return False

    def get_revision_hash(self, source_id: str, kind: SourceKind) -> Optional[str]:
        with self._lock:
            meta = self._get_metadata(record_id(source_id, kind))
        if meta is None:
            return None
        return meta.get("revision_hash")

    def get_record(self, source_id: str, kind: SourceKind) -> Optional[EmbeddingRecord]:
        rid = record_id(source_id, kind)
        with self._lock:
            res = self.collection.get(ids=[rid], include=["embeddings", "metadatas"])

        if not (res.get("ids") or []):
            return None
        embeddings = res.get("embeddings")
        meta = (res.get("metadatas") or [None])[0]
        if embeddings is None or len(embeddings) == 0 or not isinstance(meta, dict):
            raise DataError(f"Malformed stored record '{rid}'")

        try:
            return EmbeddingRecord(
                source_id=source_id,
                kind=kind,
                vector=np.asarray(embeddings[0], dtype=np.float32),
                revision_hash=str(meta["revision_hash"]),
                created_at=float(meta["created_at"]),
                parent_recording_id=meta.get("parent_recording_id") or None,
            )
        except (KeyError, ValueError, TypeError) as e:
            raise DataError(f"Malformed stored record '{rid}': {e}") from e

    def upsert(
            self,
            source_id: str,
            kind: SourceKind,
            vector: Sequence[float] | np.ndarray,
            revision_hash: str,
            parent_recording_id: Optional[str] = None,
    ) -> UpsertOutcome:
        vec = as_vector(vector)
        rid = record_id(source_id, kind)

        with self._lock:
            existing = self._get_metadata(rid)
            if existing is not None and existing.get("revision_hash") == revision_hash:
                self.logger.debug("Upsert skipped for '%s' (revision unchanged)", rid)
                return "skipped"

            dims = self._stored_dimensions()
            if dims is not None and dims != vec.shape[0]:
                raise DataError(
                    f"Vector dimensionality mismatch for '{rid}': got {vec.shape[0]}, collection holds {dims}"
                )

            created_at = time.time()
            # Same key written twice within clock resolution: newest write stays newest
            if existing is not None and float(existing.get("created_at", 0.0)) >= created_at:
                created_at = float(existing["created_at"]) + 1e-6

            metadata: Dict[str, Any] = {
                "source_id": source_id,
                "kind": kind.value,
                "revision_hash": revision_hash,
                "created_at": created_at,
                "dimensions": int(vec.shape[0]),
            }
            if parent_recording_id:
                metadata["parent_recording_id"] = str(parent_recording_id)

            self.collection.upsert(
                ids=[rid],
                embeddings=[vec.tolist()],
                metadatas=[metadata],
            )

        outcome: UpsertOutcome = "updated" if existing is not None else "inserted"
        self.logger.debug("Upserted '%s' (%s, dim=%d)", rid, outcome, vec.shape[0])
        return outcome

    def search(
            self,
            query_vector: Sequence[float] | np.ndarray,
            kind: Optional[SourceKind] = None,
            top_k: int = 5,
            min_similarity: float = 0.0,
    ) -> List[SearchHit]:
        query = as_vector(query_vector, name="query_vector")
        where = {"kind": kind.value} if kind is not None else None

        self.logger.info(
            "Searching collection '%s' (kind=%s, top_k=%d, min_similarity=%.2f)",
            self.collection_name,
            kind.value if kind else "any",
            top_k,
            min_similarity,
        )

        with self._lock:
            res = self.collection.get(where=where, include=["embeddings", "metadatas"])

        ids: List[str] = list(res.get("ids") or [])
        if not ids:
            self.logger.info("Search complete: store holds no eligible records")
            return []

        embeddings = res.get("embeddings")
        metas = res.get("metadatas") or []
        if embeddings is None or len(embeddings) != len(ids) or len(metas) != len(ids):
            raise DataError("Chroma returned embeddings/metadatas that do not line up with ids")

        rows: List[np.ndarray] = []
        for rid, emb in zip(ids, embeddings):
            row = np.asarray(emb, dtype=np.float32)
            if row.ndim != 1 or row.shape[0] != query.shape[0]:
                raise DataError(
                    f"Vector dimensionality mismatch: query has {query.shape[0]}, "
                    f"record '{rid}' has {row.shape[-1] if row.ndim else 0}"
                )
            rows.append(row)

        created_at = []
        for rid, meta in zip(ids, metas):
            if not isinstance(meta, dict) or "created_at" not in meta:
                raise DataError(f"Malformed stored record '{rid}': missing created_at")
            created_at.append(float(meta["created_at"]))

        ranked = rank(query, np.vstack(rows), created_at, top_k=top_k, min_similarity=min_similarity)
        hits = [self._parse_hit(ids[i], metas[i], score) for i, score in ranked]

        self.logger.info("Search complete: returned %d results (requested %d)", len(hits), top_k)
        return hits

    def stats(self) -> Dict[SourceKind, int]:
        counts: Dict[SourceKind, int] = {}
        with self._lock:
            for kind in SourceKind:
                res = self.collection.get(where={"kind": kind.value}, include=["metadatas"])
                counts[kind] = len(res.get("ids") or [])
        return counts

    def delete(self, source_id: str, kind: SourceKind) -> int:
        rid = record_id(source_id, kind)
        self.logger.info("Deleting embedding '%s' from collection '%s'", rid, self.collection_name)

        with self._lock:
            if self._get_metadata(rid) is None:
                self.logger.info("No embedding found for '%s'", rid)
                return 0
            try:
                self.collection.delete(ids=[rid])
            except Exception as e:
                self.logger.error("Failed to delete '%s' from collection '%s': %s", rid, self.collection_name, e)
                raise
        return 1
