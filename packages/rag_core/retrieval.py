from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

import numpy as np

from .errors import DimensionMismatch
from .models import Chunk, EmbeddedChunk, ScoredChunk

_log = logging.getLogger(__name__)

DEFAULT_TOP_K = 5


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """
    Cosine similarity between two equal-length vectors.

    A zero vector on either side scores 0.0 instead of producing NaN.

    Raises:
        DimensionMismatch: If the vectors differ in length.
    """
    a = np.asarray(vec_a, dtype=np.float64)
    b = np.asarray(vec_b, dtype=np.float64)
    if a.shape[0] != b.shape[0]:
        raise DimensionMismatch(a.shape[0], b.shape[0])

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.clip(np.dot(a, b) / (norm_a * norm_b), -1.0, 1.0))


def _score_all(query: np.ndarray, items: List[EmbeddedChunk]) -> np.ndarray:
    dim = query.shape[0]
    for item in items:
        if item.dimension != dim:
            raise DimensionMismatch(dim, item.dimension)

    matrix = np.asarray([item.embedding for item in items], dtype=np.float64).reshape(len(items), dim)
    denominators = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query

    scores = np.zeros(len(items), dtype=np.float64)
    nonzero = denominators > 0
    scores[nonzero] = dots[nonzero] / denominators[nonzero]
    return np.clip(scores, -1.0, 1.0)


def rank(query: Sequence[float], base: Iterable[EmbeddedChunk]) -> List[ScoredChunk]:
    """
    Score every embedded chunk against the query, best match first.

    Ties keep insertion order so identical inputs always rank identically.
    """
    items = list(base)
    if not items:
        return []

    query_vec = np.asarray(query, dtype=np.float64)
    scores = _score_all(query_vec, items)
    order = np.argsort(-scores, kind="stable")

    return [ScoredChunk(chunk=items[i].to_chunk(), score=float(scores[i])) for i in order]


def top_k(
    query: Sequence[float],
    base: Iterable[EmbeddedChunk],
    k: int = DEFAULT_TOP_K,
) -> List[Chunk]:
    """
    Return the k chunks most similar to the query, best match first.

    Returns fewer than k chunks when the base is smaller, and [] for an empty
    base. Embeddings are stripped from the result.
    """
    if k < 0:
        raise ValueError("k must be non-negative")

    scored = rank(query, base)
    selected = [item.chunk for item in scored[:k]]
    _log.debug("Selected %d of %d chunks (k=%d)", len(selected), len(scored), k)
    return selected


__all__ = ["DEFAULT_TOP_K", "cosine_similarity", "rank", "top_k"]
