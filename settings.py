# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-09
# Updated: 2026-01-22
# Description: settings.py
# -----------------------------------------------------------------------------
import os
from typing import Any, Dict

from exceptions import ConfigurationError


def _env(name: str, default: str = "") -> str:
    """Read env var safely and strip whitespace."""
    return (os.getenv(name) or default).strip()


def _env_int(name: str, default: int) -> int:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return int(v)
    except ValueError as e:
        raise ConfigurationError(f"Env var {name} must be an int, got {v!r}") from e


def _env_float(name: str, default: float) -> float:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return float(v)
    except ValueError as e:
        raise ConfigurationError(f"Env var {name} must be a float, got {v!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    v = _env(name, "")
    if v == "":
        return default
    v = v.lower()
    if v in ("1", "true", "t", "yes", "y", "on"):
        return True
    if v in ("0", "false", "f", "no", "n", "off"):
        return False
    raise ConfigurationError(f"Env var {name} must be a boolean, got {v!r}")


# -----------------------------------------------------------------------------
# Vector storage (Chroma collection name)
# -----------------------------------------------------------------------------
VECTOR_COLLECTION_DEFAULT = _env("VOICE_VECTOR_COLLECTION", "voice_embeddings")


# -----------------------------------------------------------------------------
# Embeddings
# -----------------------------------------------------------------------------
EMBED_DIMENSIONS = _env_int("VOICE_EMBED_DIMENSIONS", 1536)

# text-embedding-3-small accepts ~8191 tokens; keep a conservative char cap
EMBED_MAX_INPUT_CHARS = _env_int("VOICE_EMBED_MAX_INPUT_CHARS", 24000)

# Batch run: kinds processed in parallel, items within a kind sequentially
EMBED_MAX_WORKERS = _env_int("VOICE_EMBED_MAX_WORKERS", 2)

# Per-item retries owned by the batch orchestrator (embedder never retries)
EMBED_ITEM_RETRIES = _env_int("VOICE_EMBED_ITEM_RETRIES", 0)

# Keyset page size used by the content enumerator
ENUMERATION_PAGE_SIZE = _env_int("VOICE_ENUMERATION_PAGE_SIZE", 100)


# -----------------------------------------------------------------------------
# answer()/chat() defaults (env-controlled)
# -----------------------------------------------------------------------------
RAG_DEFAULTS: Dict[str, Any] = {
    "top_k": _env_int("VOICE_RAG_TOP_K", 5),
    # 0.0 -> no threshold, rely on top-k only
    "min_similarity": _env_float("VOICE_RAG_MIN_SIMILARITY", 0.0),
    "temperature": _env_float("VOICE_RAG_TEMPERATURE", 0.3),
    "max_tokens": _env_int("VOICE_RAG_MAX_TOKENS", 1500),
    "language": _env("VOICE_RAG_LANGUAGE", "de"),
}

# Plain semantic search (no answer generation)
SEARCH_DEFAULTS: Dict[str, Any] = {
    "limit": _env_int("VOICE_SEARCH_LIMIT", 10),
    "min_similarity": _env_float("VOICE_SEARCH_MIN_SIMILARITY", 0.6),
}

# Similar-recording lookup
SIMILAR_MIN_SIMILARITY = _env_float("VOICE_SIMILAR_MIN_SIMILARITY", 0.6)

# Cap on prompt context length
MAX_CONTEXT_CHARS = _env_int("VOICE_MAX_CONTEXT_CHARS", 12000)


# -----------------------------------------------------------------------------
# Sanity checks (tunable)
# -----------------------------------------------------------------------------
if not VECTOR_COLLECTION_DEFAULT:
    raise ConfigurationError("VECTOR_COLLECTION_DEFAULT resolved to empty value")

if RAG_DEFAULTS["top_k"] < 1:
    raise ConfigurationError("VOICE_RAG_TOP_K must be >= 1")

if EMBED_MAX_WORKERS < 1:
    raise ConfigurationError("VOICE_EMBED_MAX_WORKERS must be >= 1")
