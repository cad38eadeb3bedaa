"""
Unit tests for homogeneous control point helpers.
"""

import pytest
import numpy as np
from numpy.testing import assert_array_almost_equal

from geoNURBS.discretization.control_point import (
    homogenize, dehomogenize, dehomogenize_point, check_weights, is_rational
)
from geoNURBS.errors import ConfigurationError


class TestHomogeneousPoints:
    """Tests for weighted control points."""

    def test_homogenize_default_weights(self):
        """Without weights every point gets w = 1."""
        Pw = homogenize(np.array([[1.0, 2.0], [3.0, 4.0]]))

        assert Pw.shape == (2, 3)
        assert_array_almost_equal(Pw, [[1.0, 2.0, 1.0], [3.0, 4.0, 1.0]])

    def test_homogenize_scales_by_weight(self):
        """Coordinates are multiplied by their weight."""
        Pw = homogenize(np.array([[1.0, 2.0, 3.0]]), np.array([2.0]))
        assert_array_almost_equal(Pw, [[2.0, 4.0, 6.0, 2.0]])

    def test_dehomogenize(self):
        """Projection recovers the Euclidean points and the weights."""
        points = np.array([[1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
        weights = np.array([1.0, np.sqrt(0.5), 1.0])

        recovered, w = dehomogenize(homogenize(points, weights))

        assert_array_almost_equal(recovered, points)
        assert_array_almost_equal(w, weights)

    def test_dehomogenize_point(self):
        assert_array_almost_equal(dehomogenize_point([2.0, 4.0, 2.0]), [1.0, 2.0])

    def test_weight_count_mismatch(self):
        with pytest.raises(ConfigurationError):
            homogenize(np.zeros((3, 2)), np.ones(2))

    def test_non_positive_weights(self):
        """Zero, negative or non-finite weights are rejected."""
        for bad in ([1.0, 0.0], [1.0, -1.0], [1.0, np.inf]):
            with pytest.raises(ConfigurationError):
                check_weights(np.array(bad))

        with pytest.raises(ConfigurationError):
            homogenize(np.zeros((2, 2)), np.array([1.0, -2.0]))

    def test_is_rational(self):
        assert not is_rational(np.ones(4))
        assert is_rational(np.array([1.0, 0.5, 1.0]))
