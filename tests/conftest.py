"""
Pytest configuration and shared fixtures for geoNURBS tests.
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add the parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from geoNURBS.discretization.knot_vector import KnotVector, make_open_knot_vector
from geoNURBS.geometry.arc import Arc
from geoNURBS.geometry.nurbs import NURBSCurve
from geoNURBS.geometry.primitives import Plane


@pytest.fixture
def tolerance():
    """Default tolerance for floating point comparisons."""
    return 1e-12


@pytest.fixture
def loose_tolerance():
    """Looser tolerance for numerical integration tests."""
    return 1e-8


@pytest.fixture
def planar_curve():
    """Cubic B-spline in the xy-plane on a clamped uniform knot vector."""
    points = np.array([
        [5.0, 5.0, 0.0],
        [10.0, 10.0, 0.0],
        [20.0, 15.0, 0.0],
        [35.0, 15.0, 0.0],
        [45.0, 10.0, 0.0],
        [50.0, 5.0, 0.0],
    ])
    return NURBSCurve.from_points(points, degree=3)


@pytest.fixture
def quarter_circle():
    """Exact unit quarter circle as a single rational quadratic segment."""
    kv = KnotVector(np.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0]), degree=2)
    points = np.array([[1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    weights = np.array([1.0, np.sqrt(2.0) / 2.0, 1.0])
    return NURBSCurve(kv, points, weights)


@pytest.fixture(params=["planar", "arc_270", "shifted_domain"])
def multi_span_curve(request):
    """
    Curves with several knot spans:
    - planar: cubic B-spline, internal knots 1/3 and 2/3
    - arc_270: three-segment rational NURBS of a 270 degree arc
    - shifted_domain: 2D rational quadratic on [2, 5]
    """
    if request.param == "planar":
        return request.getfixturevalue("planar_curve")
    if request.param == "arc_270":
        return Arc(Plane.world_xy(), 2.0, 1.5 * np.pi).to_nurbs()

    kv = make_open_knot_vector(n_basis=5, degree=2, domain=(2.0, 5.0))
    points = np.array([[0.0, 0.0], [1.0, 2.0], [3.0, 2.5], [4.0, -1.0], [6.0, 0.5]])
    weights = np.array([1.0, 0.7, 1.3, 0.9, 1.0])
    return NURBSCurve(kv, points, weights)
