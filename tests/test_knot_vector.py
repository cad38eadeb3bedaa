"""
Unit tests for knot vector utilities.
"""

import pytest
import numpy as np
from numpy.testing import assert_array_equal, assert_array_almost_equal

from geoNURBS.discretization.knot_vector import (
    KnotVector, make_open_knot_vector, make_periodic_knot_vector,
    refine_curve_knots, insert_knot, compute_multiplicity
)
from geoNURBS.discretization.control_point import homogenize
from geoNURBS.errors import ConfigurationError, DomainError
from geoNURBS.geometry.nurbs import NURBSCurve


class TestKnotVector:
    """Tests for KnotVector class."""

    def test_open_knot_vector_creation(self):
        """Test creating an open (clamped) uniform knot vector."""
        kv = make_open_knot_vector(n_basis=5, degree=2, domain=(0.0, 1.0))

        # Check basic properties
        assert kv.degree == 2
        assert kv.n_basis == 5
        assert len(kv.knots) == 5 + 2 + 1  # n + p + 1
        assert kv.is_clamped

        # Check open knot vector structure: p+1 repeated at ends
        assert_array_equal(kv.knots[:3], [0.0, 0.0, 0.0])
        assert_array_equal(kv.knots[-3:], [1.0, 1.0, 1.0])

    def test_knot_vector_domain(self):
        """Test that domain is correctly computed."""
        kv = make_open_knot_vector(n_basis=4, degree=2, domain=(0.0, 1.0))
        assert kv.domain == (0.0, 1.0)

        kv2 = make_open_knot_vector(n_basis=4, degree=2, domain=(-1.0, 2.0))
        assert kv2.domain == (-1.0, 2.0)

    def test_n_elements(self):
        """Test counting number of elements (non-zero knot spans)."""
        # Degree 2, 4 basis functions: knots = [0,0,0,0.5,1,1,1]
        kv = make_open_knot_vector(n_basis=4, degree=2, domain=(0.0, 1.0))
        assert kv.n_elements == 2

        # Degree 2, 6 basis functions
        kv = make_open_knot_vector(n_basis=6, degree=2, domain=(0.0, 1.0))
        assert kv.n_elements == 4

    def test_elements_list(self):
        """Test that element intervals are correct."""
        kv = make_open_knot_vector(n_basis=4, degree=2, domain=(0.0, 1.0))
        elements = kv.elements

        assert len(elements) == 2
        assert elements[0] == (0.0, 0.5)
        assert elements[1] == (0.5, 1.0)

    def test_find_span_interior(self):
        """Test finding knot span for interior points."""
        kv = make_open_knot_vector(n_basis=4, degree=2, domain=(0.0, 1.0))

        # Point in first span
        assert kv.find_span(0.25) == 2

        # Point in second span
        assert kv.find_span(0.75) == 3

    def test_find_span_boundaries(self):
        """Test finding knot span at domain boundaries."""
        kv = make_open_knot_vector(n_basis=4, degree=2, domain=(0.0, 1.0))

        # At left boundary
        assert kv.find_span(0.0) == 2

        # At right boundary (should return last span)
        assert kv.find_span(1.0) == 3

        # On an internal knot the span to its right is used
        assert kv.find_span(0.5) == 3

    def test_find_span_outside_domain(self):
        """Values outside the domain clamp to the first/last span."""
        kv = make_open_knot_vector(n_basis=4, degree=2, domain=(0.0, 1.0))

        assert kv.find_span(-3.0) == 2
        assert kv.find_span(7.0) == 3

    def test_find_span_repeated_knots(self):
        """Test span lookup with a double internal knot."""
        kv = KnotVector(np.array([0.0, 0.0, 0.0, 0.5, 0.5, 1.0, 1.0, 1.0]), degree=2)

        assert kv.find_span(0.25) == 2
        assert kv.find_span(0.5) == 4
        assert kv.find_span(0.75) == 4
        assert kv.find_span(1.0) == 4

        # The returned span always satisfies knots[i] <= u < knots[i+1]
        for u in np.linspace(0.0, 0.999, 37):
            i = kv.find_span(u)
            assert kv.knots[i] <= u < kv.knots[i + 1]

    def test_unique_knots(self):
        """Test unique knots (breakpoints)."""
        kv = make_open_knot_vector(n_basis=4, degree=2, domain=(0.0, 1.0))
        unique = kv.unique_knots

        assert_array_almost_equal(unique, [0.0, 0.5, 1.0])

    def test_multiplicity(self):
        """Test knot multiplicity computation."""
        kv = make_open_knot_vector(n_basis=4, degree=2, domain=(0.0, 1.0))

        # Boundary knots have multiplicity p+1 = 3
        assert compute_multiplicity(kv, 0.0) == 3
        assert kv.multiplicity(1.0) == 3

        # Internal knot has multiplicity 1
        assert compute_multiplicity(kv, 0.5) == 1

        # Non-existent knot has multiplicity 0
        assert compute_multiplicity(kv, 0.25) == 0

    def test_invalid_knot_vector(self):
        """Test that invalid knot vectors raise errors."""
        # Too few knots
        with pytest.raises(ConfigurationError):
            KnotVector(np.array([0.0, 1.0]), degree=2)

        # Non-increasing knots
        with pytest.raises(ValueError):
            KnotVector(np.array([0.0, 0.0, 0.5, 0.3, 1.0, 1.0]), degree=1)

        # Degree zero
        with pytest.raises(ConfigurationError):
            KnotVector(np.array([0.0, 1.0]), degree=0)

        # Empty active domain
        with pytest.raises(ConfigurationError):
            KnotVector(np.array([0.0, 0.0, 0.0, 0.0, 1.0, 1.0]), degree=2)

    def test_knots_are_read_only(self):
        """Changing the knot array in place is rejected."""
        source = np.array([0.0, 0.0, 1.0, 1.0])
        kv = KnotVector(source, degree=1)

        with pytest.raises(ValueError):
            kv.knots[0] = -1.0

        # The input array is copied, not shared
        source[0] = -1.0
        assert kv.knots[0] == 0.0

    def test_degree_3(self):
        """Test with cubic (degree 3) basis."""
        kv = make_open_knot_vector(n_basis=6, degree=3, domain=(0.0, 1.0))

        assert kv.degree == 3
        assert kv.n_basis == 6
        assert kv.n_elements == 3

        # Check open structure
        assert_array_equal(kv.knots[:4], [0.0, 0.0, 0.0, 0.0])
        assert_array_equal(kv.knots[-4:], [1.0, 1.0, 1.0, 1.0])

    def test_periodic_knot_vector(self):
        """Test unclamped uniform knot vector."""
        kv = make_periodic_knot_vector(n_basis=5, degree=2)

        assert kv.n_basis == 5
        assert not kv.is_clamped
        assert_array_almost_equal(np.diff(kv.knots), np.full(7, 1.0 / 3.0))
        assert kv.domain[0] == pytest.approx(0.0)
        assert kv.domain[1] == pytest.approx(1.0)
        assert kv.n_elements == 3

    def test_uniform_constructor(self):
        """KnotVector.uniform dispatches on periodic."""
        assert KnotVector.uniform(3, 6).is_clamped
        assert not KnotVector.uniform(3, 6, periodic=True).is_clamped

        with pytest.raises(ConfigurationError):
            KnotVector.uniform(3, 3)


class TestKnotRefinement:
    """Tests for knot insertion and refinement."""

    def test_insert_into_line(self):
        """Inserting the midpoint into a linear segment adds its midpoint."""
        kv = KnotVector(np.array([0.0, 0.0, 1.0, 1.0]), degree=1)
        Pw = homogenize(np.array([[0.0, 0.0], [2.0, 2.0]]))

        kv_new, Qw = insert_knot(kv, Pw, 0.5)

        assert_array_equal(kv_new.knots, [0.0, 0.0, 0.5, 1.0, 1.0])
        assert_array_almost_equal(Qw, [[0.0, 0.0, 1.0], [1.0, 1.0, 1.0], [2.0, 2.0, 1.0]])

    def test_knot_insertion(self):
        """Test knot insertion utility."""
        kv = make_open_knot_vector(n_basis=4, degree=2, domain=(0.0, 1.0))
        Pw = homogenize(np.array([[0.0, 0.0], [0.5, 1.0], [1.0, 1.0], [1.5, 0.0]]))

        kv_new, Qw = insert_knot(kv, Pw, 0.25)

        assert kv_new.n_basis == kv.n_basis + 1
        assert Qw.shape == (5, 3)
        assert 0.25 in kv_new.knots

    def test_refinement_preserves_curve(self, planar_curve, tolerance):
        """Curve shape is unchanged by refinement."""
        kv = planar_curve.knots
        new_knots = [0.1, 0.5, 0.5, 0.9, 1.0 / 3.0]

        kv_new, Qw = refine_curve_knots(kv, planar_curve.control_points, new_knots)
        refined = NURBSCurve.from_homogeneous(kv_new, Qw)

        assert kv_new.n_basis == kv.n_basis + len(new_knots)
        for u in np.linspace(0.0, 1.0, 21):
            assert_array_almost_equal(refined.point_at(u), planar_curve.point_at(u), decimal=10)

    def test_refinement_preserves_rational_curve(self, quarter_circle):
        """Refining homogeneous points keeps a rational curve exact."""
        kv_new, Qw = refine_curve_knots(quarter_circle.knots,
                                        quarter_circle.control_points,
                                        [0.2, 0.5, 0.5, 0.7])
        refined = NURBSCurve.from_homogeneous(kv_new, Qw)

        for u in np.linspace(0.0, 1.0, 17):
            p = refined.point_at(u)
            assert np.linalg.norm(p) == pytest.approx(1.0, abs=1e-12)
            assert_array_almost_equal(p, quarter_circle.point_at(u), decimal=12)

    def test_insert_up_to_full_multiplicity(self, planar_curve):
        """A knot inserted p times is interpolated by a control point."""
        kv_new, Qw = insert_knot(planar_curve.knots, planar_curve.control_points, 0.4, times=3)

        assert kv_new.multiplicity(0.4) == 3
        refined = NURBSCurve.from_homogeneous(kv_new, Qw)
        points = refined.location_points
        distances = np.linalg.norm(points - planar_curve.point_at(0.4), axis=1)
        assert np.min(distances) < 1e-10

    def test_refinement_preserves_points_and_tangents(self, multi_span_curve):
        """Refining a multi-span curve keeps its points and tangents."""
        lo, hi = multi_span_curve.domain
        width = hi - lo
        new_knots = [lo + 0.1 * width, lo + 0.45 * width, lo + 0.45 * width,
                     lo + 0.8 * width, multi_span_curve.knots.unique_knots[1]]

        kv_new, Qw = refine_curve_knots(multi_span_curve.knots,
                                        multi_span_curve.control_points, new_knots)
        refined = NURBSCurve.from_homogeneous(kv_new, Qw)

        assert refined.domain == multi_span_curve.domain
        for u in np.linspace(lo, hi, 25):
            assert_array_almost_equal(refined.point_at(u),
                                      multi_span_curve.point_at(u), decimal=10)
            assert_array_almost_equal(refined.tangent_at(u),
                                      multi_span_curve.tangent_at(u), decimal=8)

    def test_insert_into_multi_span_curve(self, planar_curve):
        """Inserting into the middle span leaves the first span in place."""
        kv_new, Qw = insert_knot(planar_curve.knots, planar_curve.control_points, 0.4)
        refined = NURBSCurve.from_homogeneous(kv_new, Qw)

        assert_array_almost_equal(refined.point_at(0.1), planar_curve.point_at(0.1), decimal=12)
        assert_array_almost_equal(refined.point_at(0.1), [9.5, 8.85875, 0.0], decimal=10)

    def test_empty_refinement(self, planar_curve):
        """Refining with no knots returns an equal copy."""
        kv_new, Qw = refine_curve_knots(planar_curve.knots, planar_curve.control_points, [])

        assert_array_equal(kv_new.knots, planar_curve.knots.knots)
        assert_array_equal(Qw, planar_curve.control_points)

    def test_insert_outside_domain(self, planar_curve):
        """Knots outside the domain are rejected."""
        with pytest.raises(DomainError):
            insert_knot(planar_curve.knots, planar_curve.control_points, 1.5)

    def test_negative_insert_count(self, planar_curve):
        with pytest.raises(DomainError):
            insert_knot(planar_curve.knots, planar_curve.control_points, 0.5, times=-1)

    def test_mismatched_control_points(self, planar_curve):
        with pytest.raises(ConfigurationError):
            refine_curve_knots(planar_curve.knots, planar_curve.control_points[:-1], [0.5])
