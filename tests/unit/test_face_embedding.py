"""
Unit tests for eventpix.utils.face_embedding
"""
import math

import numpy as np
import pytest

from eventpix.domain.exceptions import InvalidEmbeddingError
from eventpix.utils.face_embedding import (
    euclidean_distance,
    find_best_match,
    is_unit_length,
    normalize_embedding,
    rank_by_distance,
)


class TestNormalizeEmbedding:
    def test_result_has_unit_length(self):
        result = normalize_embedding([3.0, 4.0])
        assert result == pytest.approx([0.6, 0.8])
        assert is_unit_length(result)

    def test_returns_native_floats(self):
        result = normalize_embedding(np.array([1, 2, 2], dtype=np.float32))
        assert all(type(x) is float for x in result)

    @pytest.mark.parametrize("embedding", [[], [0.0, 0.0, 0.0], [1.0, float("nan")], [float("inf"), 1.0]])
    def test_degenerate_vectors_rejected(self, embedding):
        with pytest.raises(InvalidEmbeddingError):
            normalize_embedding(embedding)

    def test_dimension_mismatch_rejected(self):
        with pytest.raises(InvalidEmbeddingError) as exc_info:
            normalize_embedding([1.0, 0.0, 0.0], expected_dimension=4)
        assert exc_info.value.details == {"dimension": 3, "expected": 4}

    def test_matching_dimension_accepted(self):
        assert len(normalize_embedding([1.0, 1.0, 1.0, 1.0], expected_dimension=4)) == 4


class TestDistance:
    def test_orthogonal_unit_vectors(self):
        assert euclidean_distance([1.0, 0.0], [0.0, 1.0]) == pytest.approx(math.sqrt(2))

    def test_identical_vectors(self):
        assert euclidean_distance([0.6, 0.8], [0.6, 0.8]) == 0.0

    def test_different_dimensions_rejected(self):
        with pytest.raises(InvalidEmbeddingError):
            euclidean_distance([1.0], [1.0, 0.0])

    def test_is_unit_length_empty(self):
        assert is_unit_length([]) is False


class TestRankByDistance:
    def test_nearest_first_and_threshold_filters(self):
        query = [1.0, 0.0]
        candidates = [("far", [0.0, 1.0]), ("near", [0.8, 0.6]), ("same", [1.0, 0.0])]
        ranked = rank_by_distance(query, candidates, max_distance=1.0)
        assert [item for item, _ in ranked] == ["same", "near"]

    def test_threshold_is_inclusive(self):
        # distance between (1, 0) and (0.5, 0) is exactly 0.5
        ranked = rank_by_distance([1.0, 0.0], [("edge", [0.5, 0.0])], max_distance=0.5)
        assert [item for item, _ in ranked] == ["edge"]

    def test_equal_distances_keep_scan_order(self):
        candidates = [("b", [0.0, 1.0]), ("a", [0.0, -1.0]), ("c", [0.0, 1.0])]
        ranked = rank_by_distance([1.0, 0.0], candidates, max_distance=2.0)
        assert [item for item, _ in ranked] == ["b", "a", "c"]

    def test_mismatched_candidates_skipped(self):
        ranked = rank_by_distance([1.0, 0.0], [("bad", [1.0, 0.0, 0.0]), ("ok", [1.0, 0.0])], 0.1)
        assert [item for item, _ in ranked] == ["ok"]

    def test_empty_candidates(self):
        assert rank_by_distance([1.0, 0.0], [], 1.0) == []
        assert find_best_match([1.0, 0.0], [], 1.0) is None

    def test_find_best_match(self):
        best = find_best_match([1.0, 0.0], [("x", [0.0, 1.0]), ("y", [0.8, 0.6])], 1.0)
        assert best[0] == "y"
        assert best[1] == pytest.approx(math.sqrt(0.04 + 0.36))
