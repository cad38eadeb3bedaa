"""
Discretization module.

Provides:
- KnotVector: Knot vector representation, span lookup, refinement
- Homogeneous control point helpers
"""

from .knot_vector import (
    KnotVector,
    make_open_knot_vector,
    make_periodic_knot_vector,
    refine_curve_knots,
    insert_knot,
)
from .control_point import homogenize, dehomogenize
