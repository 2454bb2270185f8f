"""Utility modules for the EventPix backend."""

from .face_embedding import (
    normalize_embedding,
    euclidean_distance,
    rank_by_distance,
    find_best_match,
)
from .datetime_utils import utc_now, ensure_utc, to_iso

__all__ = [
    "normalize_embedding",
    "euclidean_distance",
    "rank_by_distance",
    "find_best_match",
    "utc_now",
    "ensure_utc",
    "to_iso",
]
