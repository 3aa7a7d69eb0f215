"""
Tests for similarity and distance measures.
"""

import math

import pytest

from wvhash.core.metrics import cosine_similarity, euclidean_distance, euclidean_norm


class TestMetrics:
    """Test vector measures."""

    def test_norm(self):
        """Test the Euclidean norm."""
        assert euclidean_norm([3.0, 4.0]) == pytest.approx(5.0)
        assert euclidean_norm([0.0, 0.0]) == 0.0

    def test_distance(self):
        """Test the Euclidean distance."""
        assert euclidean_distance([1.0, 2.0], [3.0, 4.0]) == pytest.approx(math.sqrt(8))
        assert euclidean_distance([1.0, 2.0], [1.0, 2.0]) == 0.0

    def test_cosine(self):
        """Test cosine similarity of known vectors."""
        assert cosine_similarity([1.0, 2.0], [3.0, 4.0]) == pytest.approx(11 / (5 * math.sqrt(5)))
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
        assert cosine_similarity([1.0, 1.0], [-1.0, -1.0]) == pytest.approx(-1.0)

    def test_cosine_with_zero_vector(self):
        """Test that cosine similarity is undefined for a zero vector."""
        assert math.isnan(cosine_similarity([1.0, 2.0], [0.0, 0.0]))

    def test_shape_mismatch(self):
        """Test that vectors of different length are rejected."""
        with pytest.raises(ValueError):
            euclidean_distance([1.0], [1.0, 2.0])
        with pytest.raises(ValueError):
            cosine_similarity([1.0], [1.0, 2.0])
