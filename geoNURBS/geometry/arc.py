"""
Circular arcs and their exact NURBS representation.

An arc is a plane, a radius and an angular domain (radians). It runs
counterclockwise around the plane normal, starting from
origin + R * (cos t0 * X + sin t0 * Y).

The NURBS form is built once, when the arc is created, with the
rational Bezier construction of Piegl & Tiller ("The NURBS Book",
Algorithm A7.1):

- the sweep is cut into k <= 4 equal segments of at most 90 degrees
- each segment is a rational quadratic Bezier whose end points lie on
  the arc (weight 1) and whose middle control point is the intersection
  of the end tangents, with weight cos(segment_angle / 2)
- the knots are [0,0,0, 1/k,1/k, ..., 1,1,1], so consecutive segments
  join with matching tangents (G1) but not C1

Keeping every segment under 90 degrees keeps the middle weight in
[cos(pi/4), 1], which keeps the rational form well conditioned.
"""

import logging
import math
import numbers

import numpy as np
from typing import Optional, Tuple, Union

from ..discretization.knot_vector import KnotVector
from ..discretization.control_point import homogenize
from ..errors import ConfigurationError, NumericalError
from ..io.config import NumericSettings, DEFAULT_SETTINGS
from .nurbs import Curve, NURBSCurve
from .primitives import (
    TWO_PI, BoundingBox, Interval, Plane, Transform,
    angular_difference, as_point, intersect_line_line, unitize,
)

logger = logging.getLogger(__name__)

HALF_PI = 0.5 * math.pi


def _point_on_circle(plane: Plane, radius: float, theta: float) -> np.ndarray:
    return plane.origin + radius * (math.cos(theta) * plane.x_axis
                                    + math.sin(theta) * plane.y_axis)


def _circle_tangent(plane: Plane, theta: float) -> np.ndarray:
    return math.cos(theta) * plane.y_axis - math.sin(theta) * plane.x_axis


def arc_segment_count(angle: float) -> int:
    """Number of rational Bezier segments needed for a sweep (1 to 4)."""
    if angle <= HALF_PI:
        return 1
    elif angle <= 2.0 * HALF_PI:
        return 2
    elif angle <= 3.0 * HALF_PI:
        return 3
    return 4


def arc_to_nurbs(plane: Plane, radius: float,
                 domain: Interval) -> Tuple[KnotVector, np.ndarray, np.ndarray]:
    """
    Exact degree-2 NURBS representation of a circular arc.

    Parameters:
        plane: Arc plane (origin = center)
        radius: Arc radius
        domain: Angular domain in radians, 0 < length <= 2*pi

    Returns:
        (knot_vector, points, weights) with 2k+1 control points,
        k = arc_segment_count(domain.length)
    """
    angle = domain.length
    n_segments = arc_segment_count(angle)
    d_theta = angle / n_segments
    w_mid = math.cos(0.5 * d_theta)

    n_points = 2 * n_segments + 1
    points = np.zeros((n_points, 3))
    weights = np.ones(n_points)

    p0 = _point_on_circle(plane, radius, domain.t0)
    t0 = _circle_tangent(plane, domain.t0)
    points[0] = p0

    for i in range(1, n_segments + 1):
        theta = domain.t0 + i * d_theta
        p2 = _point_on_circle(plane, radius, theta)
        t2 = _circle_tangent(plane, theta)

        hit = intersect_line_line(p0, t0, p2, t2)
        if hit is None:
            raise NumericalError("Arc segment end tangents are parallel")

        points[2 * i - 1] = p0 + hit[0] * t0
        weights[2 * i - 1] = w_mid
        points[2 * i] = p2

        p0, t0 = p2, t2

    knots = [0.0, 0.0, 0.0]
    for i in range(1, n_segments):
        knots.extend([i / n_segments] * 2)
    knots.extend([1.0, 1.0, 1.0])

    return KnotVector(np.array(knots), 2), points, weights


class Arc(Curve):
    """
    Circular arc defined by a plane, a radius and an angular domain.

    The angular domain is normalized so that its length lies in (0, 2*pi];
    a longer sweep is wrapped. The NURBS fields (knots, control points,
    weights) are computed at construction and never change.

    point_at / tangent_at take an angle in radians. The NURBS form
    (to_nurbs) is parameterized over the knot domain [0, 1] instead.
    """

    def __init__(self, plane: Plane, radius: float,
                 angle: Union[float, Interval, Tuple[float, float]]):
        """
        Parameters:
            plane: Arc plane; its origin is the center
            radius: Radius (> 0)
            angle: Sweep in radians starting at 0, or an angular Interval
        """
        if isinstance(angle, numbers.Real):
            domain = Interval(0.0, float(angle))
        else:
            domain = Interval(float(angle[0]), float(angle[1]))

        if not math.isfinite(radius) or radius <= 0.0:
            raise ConfigurationError(f"Radius must be positive, got {radius}")
        if not (math.isfinite(domain.t0) and math.isfinite(domain.t1)):
            raise ConfigurationError("Angle domain must be finite")
        if domain.t1 < domain.t0:
            raise ConfigurationError("Angle domain must never be decreasing.")
        if domain.length == 0.0:
            raise ConfigurationError("Angle domain must not be empty.")

        if domain.length > TWO_PI:
            sweep = math.fmod(domain.length, TWO_PI)
            if sweep <= 1e-12:
                sweep = TWO_PI
            domain = Interval(domain.t0, domain.t0 + sweep)

        self._plane = plane
        self._radius = float(radius)
        self._domain = domain

        knots, points, weights = arc_to_nurbs(plane, self._radius, domain)
        control_points_w = homogenize(points, weights)
        for arr in (points, weights, control_points_w):
            arr.setflags(write=False)

        self._knots = knots
        self._location_points = points
        self._weights = weights
        self._control_points_w = control_points_w
        self._nurbs = NURBSCurve.from_homogeneous(knots, control_points_w)

        logger.debug("Arc radius=%g sweep=%g rad -> %d control points",
                     self._radius, domain.length, len(points))

    @classmethod
    def from_three_points(cls, pt1, pt2, pt3, tol: float = DEFAULT_SETTINGS.epsilon) -> 'Arc':
        """
        Arc starting at pt1, passing through pt2 and ending at pt3.

        Raises:
            ConfigurationError: if two points coincide or all are collinear
        """
        p1, p2, p3 = as_point(pt1), as_point(pt2), as_point(pt3)
        if (np.linalg.norm(p1 - p2) < tol or np.linalg.norm(p2 - p3) < tol
                or np.linalg.norm(p1 - p3) < tol):
            raise ConfigurationError("Points must not be coincident.")

        a = p1 - p3
        b = p2 - p3
        axb = np.cross(a, b)
        axb_sq = np.dot(axb, axb)
        if axb_sq < tol * tol * np.dot(a, a) * np.dot(b, b):
            raise ConfigurationError("Points must not be collinear.")

        center = p3 + np.cross(np.dot(a, a) * b - np.dot(b, b) * a, axb) / (2.0 * axb_sq)

        normal = unitize(np.cross(p2 - p1, p3 - p1))
        x_dir = p1 - center
        y_dir = np.cross(normal, x_dir)
        plane = Plane(center, x_dir, y_dir)

        u, v = plane.closest_parameters(p3)
        angle = math.atan2(v, u)
        if angle < 0.0:
            angle += TWO_PI

        return cls(plane, float(np.linalg.norm(x_dir)), Interval(0.0, angle))

    @classmethod
    def by_start_end_direction(cls, start, end, direction) -> 'Arc':
        """
        Arc from start to end whose tangent at start is direction.

        Raises:
            ConfigurationError: if start and end coincide, or direction is
                parallel to the chord
        """
        start, end = as_point(start), as_point(end)
        chord = end - start
        if np.linalg.norm(chord) == 0.0:
            raise ConfigurationError("Points must not be coincident.")

        vec0 = unitize(as_point(direction))
        vec1 = unitize(chord)
        bisector = vec0 + vec1
        if np.linalg.norm(bisector) < 1e-12:
            raise ConfigurationError("Direction must not point back along the chord.")
        vec2 = unitize(bisector)

        # Chord along the tangent/chord bisector ends on the arc
        vec3 = vec2 * (0.5 * np.linalg.norm(chord) / np.dot(vec2, vec0))
        return cls.from_three_points(start, start + vec3, end)

    @property
    def plane(self) -> Plane:
        return self._plane

    @property
    def radius(self) -> float:
        return self._radius

    @property
    def center(self) -> np.ndarray:
        return self._plane.origin

    @property
    def domain(self) -> Interval:
        """Angular domain in radians."""
        return self._domain

    @property
    def angle(self) -> float:
        """Sweep angle in radians."""
        return self._domain.length

    @property
    def start_point(self) -> np.ndarray:
        return self._location_points[0].copy()

    @property
    def mid_point(self) -> np.ndarray:
        return self.point_at(self._domain.mid)

    @property
    def end_point(self) -> np.ndarray:
        return self._location_points[-1].copy()

    @property
    def degree(self) -> int:
        return 2

    @property
    def knots(self) -> KnotVector:
        return self._knots

    @property
    def control_points(self) -> np.ndarray:
        return self._control_points_w.copy()

    @property
    def location_points(self) -> np.ndarray:
        return self._location_points.copy()

    @property
    def weights(self) -> np.ndarray:
        return self._weights.copy()

    def to_nurbs(self) -> NURBSCurve:
        """The arc as a NURBSCurve over the knot domain [0, 1]."""
        return self._nurbs

    def length(self, settings: Optional[NumericSettings] = None) -> float:
        return abs(self.angle * self._radius)

    def point_at(self, t: float) -> np.ndarray:
        """Point at angle t (radians)."""
        return _point_on_circle(self._plane, self._radius, t)

    def tangent_at(self, t: float) -> np.ndarray:
        """Unit tangent at angle t (radians)."""
        return _circle_tangent(self._plane, t)

    def _contains_angle(self, theta: float, tol: float = 1e-12) -> bool:
        offset = angular_difference(self._domain.t0, theta)
        return offset <= self.angle + tol or offset >= TWO_PI - tol

    @property
    def bounding_box(self) -> BoundingBox:
        """
        Axis-aligned bounding box.

        Along world axis k a point of the circle is
        c_k + R * (X_k cos(theta) + Y_k sin(theta)), which is extremal at
        theta = atan2(Y_k, X_k) and theta + pi. Those extremal angles that
        fall inside the sweep are added to the end points.
        """
        points = [self.start_point, self.end_point]
        x_axis, y_axis = self._plane.x_axis, self._plane.y_axis

        for k in range(3):
            if x_axis[k] == 0.0 and y_axis[k] == 0.0:
                continue
            theta = math.atan2(y_axis[k], x_axis[k])
            for extremal in (theta, theta + math.pi):
                if self._contains_angle(extremal):
                    points.append(self.point_at(extremal))

        return BoundingBox.from_points(points)

    def closest_point(self, point, tol: float = DEFAULT_SETTINGS.min_tolerance) -> np.ndarray:
        """Point on the arc closest to a test point."""
        u, v = self._plane.closest_parameters(point)
        if abs(u) < tol and abs(v) < tol:
            return self.point_at(self._domain.t0)

        t = math.atan2(v, u)
        if t < 0.0:
            t += TWO_PI

        t -= self._domain.t0
        t = math.fmod(t, TWO_PI)
        if t < 0.0:
            t += TWO_PI

        t1 = self.angle
        if t > t1:
            t = 0.0 if t > 0.5 * t1 + math.pi else t1

        return self.point_at(self._domain.t0 + t)

    def transform(self, xform: Transform) -> 'Arc':
        """Return the arc moved by a rigid transformation."""
        return Arc(self._plane.transform(xform), self._radius, self._domain)

    def epsilon_equals(self, other: 'Arc', tol: float = DEFAULT_SETTINGS.max_tolerance) -> bool:
        return (abs(self._radius - other._radius) < tol
                and abs(self._domain.t0 - other._domain.t0) < tol
                and abs(self._domain.t1 - other._domain.t1) < tol
                and self._plane.epsilon_equals(other._plane, tol))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Arc):
            return NotImplemented
        return self.epsilon_equals(other)

    __hash__ = None

    def __repr__(self) -> str:
        return f"Arc(radius={self._radius}, angle={math.degrees(self.angle)} deg)"
