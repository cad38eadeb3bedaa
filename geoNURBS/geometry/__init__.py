"""
Geometry module for NURBS curves and arcs.
"""

# primitives first: the knot vector module depends on it
from .primitives import Interval, Plane, BoundingBox, Transform
from .nurbs import Curve, NURBSCurve
from .arc import Arc, arc_to_nurbs
from .bspline import BSplineBasis, eval_basis_1d, eval_basis_ders_1d
