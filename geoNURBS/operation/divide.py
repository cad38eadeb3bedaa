"""
Curve division: splitting, resampling and frames along a curve.

- split_curve: cut a curve in two at a parameter using knot refinement.
  Raising the multiplicity of the parameter to p+1 disconnects the
  spline there, so the refined knots and control points can be
  partitioned into two independent curves without any shape change.
- divide_by_count / divide_by_length: sample a curve at equal arc-length
  increments (not equal parameter increments) by inverting the arc
  length function.
- perpendicular_frames: rotation-minimized frames computed with the
  double reflection method (Wang, Juttler, Zheng & Liu, "Computation of
  rotation minimizing frames", 2008). Each frame is obtained from the
  previous one by two reflections instead of being rebuilt from local
  derivatives, so frames do not flip at inflections or on straight parts.

Every operation accepts any curve with degree, knots and control points
(an Arc is used through its NURBS form), works in the knot domain, and
returns new arrays; the input curve is never modified.
"""

import logging
import math

import numpy as np
from typing import List, Optional, Sequence, Tuple

from ..discretization.knot_vector import KnotVector, refine_curve_knots
from ..errors import DomainError, NumericalError
from ..geometry.nurbs import NURBSCurve
from ..geometry.primitives import Plane, as_point
from ..io.config import NumericSettings, resolve_settings
from .analyze import span_lengths, parameter_at_length

logger = logging.getLogger(__name__)


def as_nurbs_curve(curve) -> NURBSCurve:
    """
    Return the NURBS form of a curve.

    NURBSCurve instances are returned as is, objects with ``to_nurbs``
    (such as Arc) are converted with it, anything else is rebuilt from
    its degree, knots and homogeneous control points.
    """
    if isinstance(curve, NURBSCurve):
        return curve
    to_nurbs = getattr(curve, "to_nurbs", None)
    if callable(to_nurbs):
        return to_nurbs()

    knots = curve.knots
    if not isinstance(knots, KnotVector):
        knots = KnotVector(np.asarray(knots, dtype=np.float64), curve.degree)
    return NURBSCurve.from_homogeneous(knots, curve.control_points)


def split_curve(curve, t: float) -> List[NURBSCurve]:
    """
    Split a curve into two curves at parameter t.

    Parameters:
        curve: Curve to split
        t: Parameter strictly inside the curve domain

    Returns:
        [left, right]: left ends at t, right starts at t. Parameters are
        not renormalized, and t appears degree+1 times at the adjoining
        end of each knot vector.

    Raises:
        DomainError: if t is not strictly inside the domain
    """
    nurbs = as_nurbs_curve(curve)
    kv = nurbs.knots
    p = kv.degree
    lo, hi = kv.domain

    if not lo < t < hi:
        raise DomainError(f"Split parameter {t} must lie strictly inside ({lo}, {hi})")

    existing = int(np.count_nonzero(kv.knots == t))
    span = kv.find_span(t)
    n_insert = max(p + 1 - existing, 0)

    refined_kv, Qw = refine_curve_knots(kv, nurbs.control_points, [t] * n_insert)

    # Index of the first copy of t in the refined knots
    cut = span + 1 - existing

    left = NURBSCurve.from_homogeneous(
        KnotVector(refined_kv.knots[:cut + p + 1], p), Qw[:cut])
    right = NURBSCurve.from_homogeneous(
        KnotVector(refined_kv.knots[cut:], p), Qw[cut:])

    logger.debug("Split curve at t=%g: %d + %d control points",
                 t, left.n_control_points, right.n_control_points)

    return [left, right]


def _checked_length(nurbs: NURBSCurve, s: NumericSettings) -> Tuple[List[float], float]:
    lengths = span_lengths(nurbs, s)
    total = float(sum(lengths))
    if total <= s.epsilon:
        raise DomainError("Cannot divide a curve of zero length")
    return lengths, total


def _sample(nurbs: NURBSCurve, parameters: List[float],
            s: NumericSettings) -> Tuple[np.ndarray, np.ndarray]:
    parameters = np.array(parameters, dtype=np.float64)
    if np.any(np.diff(parameters) <= 0.0):
        raise NumericalError("Division produced non-increasing parameters")
    points = np.array([nurbs.point_at(u) for u in parameters])
    return points, parameters


def divide_by_count(curve, segments: int,
                    settings: Optional[NumericSettings] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Divide a curve into segments of equal arc length.

    Parameters:
        curve: Curve to divide
        segments: Number of segments (>= 1)
        settings: Numeric settings

    Returns:
        (points, parameters): segments+1 samples, parameters strictly
        increasing from the domain start to the domain end

    Raises:
        DomainError: if segments < 1 or the curve has zero length
    """
    if segments < 1:
        raise DomainError(f"Number of segments must be at least 1, got {segments}")

    s = resolve_settings(settings)
    nurbs = as_nurbs_curve(curve)
    lengths, total = _checked_length(nurbs, s)
    lo, hi = nurbs.domain

    parameters = [lo]
    for i in range(1, segments):
        target = total * i / segments
        parameters.append(parameter_at_length(nurbs, target, s, lengths))
    parameters.append(hi)

    logger.debug("Divided curve of length %g into %d segments", total, segments)

    return _sample(nurbs, parameters, s)


def divide_by_length(curve, length: float,
                     settings: Optional[NumericSettings] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Divide a curve into pieces of a given arc length.

    Samples are taken every ``length`` along the curve; there are
    floor(total_length / length) + 1 of them, and the last one is always
    the curve end. The remainder is absorbed by the final step, so it can
    be up to 2 * length long. When length exceeds the curve length the
    two end points are returned.

    Parameters:
        curve: Curve to divide
        length: Arc length between samples (> 0)
        settings: Numeric settings

    Returns:
        (points, parameters)

    Raises:
        DomainError: if length <= 0 or the curve has zero length
    """
    if not length > 0.0:
        raise DomainError(f"Division length must be positive, got {length}")

    s = resolve_settings(settings)
    nurbs = as_nurbs_curve(curve)
    lengths, total = _checked_length(nurbs, s)
    lo, hi = nurbs.domain

    # Tolerance keeps exact divisions (total / n) from losing their last step
    n_steps = max(int(math.floor(total / length + s.epsilon)), 1)

    parameters = [lo]
    for k in range(1, n_steps):
        parameters.append(parameter_at_length(nurbs, k * length, s, lengths))
    parameters.append(hi)

    logger.debug("Divided curve of length %g by %g: %d samples",
                 total, length, len(parameters))

    return _sample(nurbs, parameters, s)


def perpendicular_frames(curve, parameters: Sequence[float],
                         settings: Optional[NumericSettings] = None) -> List[Plane]:
    """
    Rotation-minimized frames along a curve (double reflection method).

    The first frame has its z_axis along the tangent at parameters[0] and
    an arbitrary orthonormal completion. Frame i+1 comes from frame i by
    reflecting across the plane bisecting the chord between consecutive
    curve points, then reflecting again to align the reflected tangent
    with the true tangent.

    Parameters:
        curve: Curve to frame (2D curves are treated as lying in z = 0)
        parameters: Ordered parameter values
        settings: Numeric settings

    Returns:
        One Plane per parameter: origin on the curve, z_axis = unit tangent

    Raises:
        NumericalError: if two consecutive samples coincide
    """
    s = resolve_settings(settings)
    nurbs = as_nurbs_curve(curve)

    points = [as_point(nurbs.point_at(u)) for u in parameters]
    tangents = [as_point(nurbs.tangent_at(u, s)) for u in parameters]
    if not points:
        return []

    frames = [Plane.from_normal(points[0], tangents[0])]

    for i in range(len(points) - 1):
        v1 = points[i + 1] - points[i]
        c1 = np.dot(v1, v1)
        if c1 <= s.epsilon * s.epsilon:
            raise NumericalError(
                f"Coincident curve points at parameters {parameters[i]} and {parameters[i + 1]}"
            )

        # First reflection: across the bisecting plane of the chord
        r_left = frames[i].x_axis - (2.0 / c1) * np.dot(v1, frames[i].x_axis) * v1
        t_left = tangents[i] - (2.0 / c1) * np.dot(v1, tangents[i]) * v1

        # Second reflection: maps the reflected tangent onto the true tangent
        v2 = tangents[i + 1] - t_left
        c2 = np.dot(v2, v2)
        if c2 > s.epsilon * s.epsilon:
            r_next = r_left - (2.0 / c2) * np.dot(v2, r_left) * v2
        else:
            r_next = r_left

        s_next = np.cross(tangents[i + 1], r_next)
        frames.append(Plane(points[i + 1], r_next, s_next))

    return frames
