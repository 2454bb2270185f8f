"""
Face embedding math shared by the matching pipeline.

Every embedding is L2-normalized before it is persisted or queried, so the
Euclidean distance between two stored vectors orders matches exactly like
cosine distance would (d^2 = 2 - 2 * cos).
"""
from typing import List, Optional, Sequence, Tuple, TypeVar
import logging

import numpy as np

from ..domain.exceptions import InvalidEmbeddingError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Accepted deviation of a stored vector's norm from 1.0
NORM_TOLERANCE = 1e-6


def normalize_embedding(
    embedding: Sequence[float],
    expected_dimension: Optional[int] = None,
) -> List[float]:
    """
    Scale an embedding to unit Euclidean length.

    Raises InvalidEmbeddingError when the vector is empty, contains
    non-finite values, has the wrong dimensionality or has zero norm.
    Callers treat the face as unidentifiable and skip it.
    """
    vector = np.asarray(list(embedding), dtype=np.float64)
    if vector.ndim != 1 or vector.size == 0:
        raise InvalidEmbeddingError("Embedding is empty")
    if expected_dimension is not None and vector.size != expected_dimension:
        raise InvalidEmbeddingError(
            f"Embedding has {vector.size} dimensions, expected {expected_dimension}",
            details={"dimension": int(vector.size), "expected": expected_dimension},
        )
    if not np.all(np.isfinite(vector)):
        raise InvalidEmbeddingError("Embedding contains non-finite values")
    norm = float(np.linalg.norm(vector))
    if norm == 0.0:
        raise InvalidEmbeddingError("Embedding has zero norm")
    # Native Python floats for BSON
    return [float(x) for x in vector / norm]


def is_unit_length(embedding: Sequence[float], tolerance: float = NORM_TOLERANCE) -> bool:
    """True when the vector's L2 norm is 1 within tolerance."""
    if len(embedding) == 0:
        return False
    return abs(float(np.linalg.norm(np.asarray(embedding, dtype=np.float64))) - 1.0) <= tolerance


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance between two vectors of identical dimensionality."""
    if len(a) != len(b):
        raise InvalidEmbeddingError(
            f"Cannot compare embeddings of different dimensionality ({len(a)} vs {len(b)})"
        )
    return float(np.linalg.norm(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)))


def rank_by_distance(
    query: Sequence[float],
    candidates: Sequence[Tuple[T, Sequence[float]]],
    max_distance: float,
) -> List[Tuple[T, float]]:
    """
    Return (item, distance) pairs with distance <= max_distance, nearest first.

    Candidates whose dimensionality differs from the query are skipped.
    The sort is stable, so equal distances keep the candidates' scan order.
    """
    if not candidates:
        return []
    query_vec = np.asarray(query, dtype=np.float64)
    items: List[T] = []
    vectors: List[Sequence[float]] = []
    for item, vector in candidates:
        if len(vector) != query_vec.size:
            logger.warning("Skipping candidate with %d dimensions (query has %d)", len(vector), query_vec.size)
            continue
        items.append(item)
        vectors.append(vector)
    if not vectors:
        return []
    matrix = np.asarray(vectors, dtype=np.float64)
    distances = np.linalg.norm(matrix - query_vec, axis=1)
    order = np.argsort(distances, kind="stable")
    return [
        (items[i], float(distances[i]))
        for i in order
        if distances[i] <= max_distance
    ]


def find_best_match(
    query: Sequence[float],
    candidates: Sequence[Tuple[T, Sequence[float]]],
    max_distance: float,
) -> Optional[Tuple[T, float]]:
    """Nearest candidate within max_distance, or None."""
    ranked = rank_by_distance(query, candidates, max_distance)
    return ranked[0] if ranked else None
