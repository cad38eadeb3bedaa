"""
geoNURBS - NURBS Curve Algebra

A small library for rational B-spline curves: evaluation, arc length,
exact circular arcs, and division (splitting, equal-length resampling and
rotation-minimized frames).

Key modules:
- geometry: NURBS curves, B-spline basis functions, arcs, primitives
- discretization: Knot vectors (span lookup, knot refinement), control points
- operation: Arc length analysis and curve division
- quadrature: Gauss-Legendre integration
- io: Numeric settings and their JSON configuration

Quick start:
    from geoNURBS.geometry.nurbs import NURBSCurve
    from geoNURBS.operation.divide import divide_by_count, perpendicular_frames

    # Cubic curve on a clamped uniform knot vector
    curve = NURBSCurve.from_points(
        [(5, 5, 0), (10, 10, 0), (20, 15, 0), (35, 15, 0), (45, 10, 0), (50, 5, 0)],
        degree=3,
    )

    # Seven pieces of equal arc length
    points, parameters = divide_by_count(curve, 7)

    # Frames that do not twist along the curve
    frames = perpendicular_frames(curve, parameters)

Quick start (arcs):
    import math
    from geoNURBS.geometry.arc import Arc
    from geoNURBS.geometry.primitives import Plane

    arc = Arc(Plane.world_xy(), radius=2.0, angle=math.pi)
    nurbs = arc.to_nurbs()          # exact degree-2 rational form
    left, right = nurbs.split(0.5)
"""

__version__ = "0.1.0"
__author__ = "Wataru Fukuda"

# Core imports for convenience
from .errors import GeometryError, ConfigurationError, DomainError, NumericalError
from .io.config import NumericSettings, DEFAULT_SETTINGS, load_config
from .geometry.primitives import Interval, Plane, BoundingBox, Transform
from .discretization.knot_vector import KnotVector, make_open_knot_vector
from .geometry.nurbs import Curve, NURBSCurve
from .geometry.arc import Arc
from .operation.divide import split_curve, divide_by_count, divide_by_length, perpendicular_frames
