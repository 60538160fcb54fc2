# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: similarity.py
# -----------------------------------------------------------------------------
from typing import List, Sequence, Tuple

import numpy as np

from exceptions import DataError

# Scores closer than this are treated as ties and ordered by recency
SCORE_DECIMALS = 9


def as_vector(vector: Sequence[float] | np.ndarray, *, name: str = "vector") -> np.ndarray:
    arr = np.asarray(vector, dtype=np.float32)
    if arr.ndim != 1 or arr.shape[0] == 0:
        raise DataError(f"{name} must be a non-empty 1-d sequence, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise DataError(f"{name} contains NaN/inf values")
    return arr


def cosine_similarities(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """
    Cosine similarity of `query` (d,) against every row of `matrix` (n, d).
    Zero-length vectors score 0.0.
    """
    if matrix.ndim != 2:
        raise DataError(f"Stored vectors must form a 2-d matrix, got shape {matrix.shape}")
    if matrix.shape[1] != query.shape[0]:
        raise DataError(
            f"Vector dimensionality mismatch: query has {query.shape[0]}, stored vectors have {matrix.shape[1]}"
        )

    # float64 keeps mathematically equal scores equal once rounded
    query = np.asarray(query, dtype=np.float64)
    matrix = np.asarray(matrix, dtype=np.float64)

    q_norm = float(np.linalg.norm(query))
    row_norms = np.linalg.norm(matrix, axis=1)
    denom = row_norms * q_norm

    dots = matrix @ query
    with np.errstate(divide="ignore", invalid="ignore"):
        sims = np.where(denom > 0, dots / denom, 0.0)
    return sims


def rank(
        query: np.ndarray,
        matrix: np.ndarray,
        created_at: Sequence[float],
        *,
        top_k: int,
        min_similarity: float = 0.0,
) -> List[Tuple[int, float]]:
    """
    Return (row_index, score) for the top_k rows, highest score first,
    ties broken by most recent created_at first.
    """
    if top_k < 1:
        raise ValueError("top_k must be >= 1")
    if matrix.shape[0] == 0:
        return []

    sims = cosine_similarities(query, matrix)
    created = np.asarray(created_at, dtype=np.float64)

    # lexsort: last key is primary
    order = np.lexsort((-created, -np.round(sims, SCORE_DECIMALS)))

    ranked: List[Tuple[int, float]] = []
    for idx in order:
        score = float(sims[idx])
        if min_similarity > 0 and score < min_similarity:
            continue
        ranked.append((int(idx), score))
        if len(ranked) == top_k:
            break
    return ranked
