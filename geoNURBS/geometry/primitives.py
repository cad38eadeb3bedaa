"""
Geometric primitives used by the curve code.

Points and vectors are plain numpy arrays of shape (3,). This module adds
the small value types built on top of them:
- Interval: ordered parameter (or angle) range
- Plane: origin plus an orthonormal frame (x_axis, y_axis, z_axis)
- BoundingBox: axis-aligned min/max corners
- Transform: 4x4 homogeneous transformation matrix

and the vector helpers the curve algorithms rely on (unitize,
perpendicular_to, line-line intersection).
"""

import math
import numpy as np
from typing import NamedTuple, Optional, Sequence, Tuple

from ..errors import ConfigurationError, NumericalError

TWO_PI = 2.0 * math.pi


def as_point(p, dim: int = 3) -> np.ndarray:
    """Convert a sequence to a float point of dimension ``dim`` (zero padded)."""
    arr = np.asarray(p, dtype=np.float64).ravel()
    if arr.size > dim:
        raise ConfigurationError(f"Expected at most {dim} coordinates, got {arr.size}")
    if arr.size < dim:
        arr = np.concatenate([arr, np.zeros(dim - arr.size)])
    return arr


def unitize(v: np.ndarray, tol: float = 1e-14) -> np.ndarray:
    """
    Return v scaled to unit length.

    Raises:
        NumericalError: if v has (near) zero length
    """
    v = np.asarray(v, dtype=np.float64)
    norm = np.linalg.norm(v)
    if norm <= tol:
        raise NumericalError("Cannot unitize a zero-length vector")
    return v / norm


def perpendicular_to(v: np.ndarray) -> np.ndarray:
    """
    Return a vector perpendicular to v (not normalized).

    The two largest components of v are swapped (one negated) and the
    smallest one is zeroed, which keeps the result well away from zero.
    """
    x, y, z = (float(c) for c in v)
    ax, ay, az = abs(x), abs(y), abs(z)
    result = np.zeros(3)

    if ay > ax:
        if az > ay:
            i, j, a, b = 2, 1, z, -y
        elif az >= ax:
            i, j, a, b = 1, 2, y, -z
        else:
            i, j, a, b = 1, 0, y, -x
    elif az > ax:
        i, j, a, b = 2, 0, z, -x
    elif az > ay:
        i, j, a, b = 0, 2, x, -z
    else:
        i, j, a, b = 0, 1, x, -y

    result[i] = b
    result[j] = a
    return result


def angular_difference(theta0: float, theta1: float) -> float:
    """Counterclockwise angle from theta0 to theta1, in (0, 2*pi]."""
    diff = math.fmod(theta1 - theta0, TWO_PI)
    if diff <= 0.0:
        diff += TWO_PI
    return diff


class Interval(NamedTuple):
    """
    Ordered pair (t0, t1) describing a parameter or angle range.

    Being a tuple, an Interval compares equal to (t0, t1).
    """
    t0: float
    t1: float

    @property
    def length(self) -> float:
        return self.t1 - self.t0

    @property
    def mid(self) -> float:
        return 0.5 * (self.t0 + self.t1)

    def contains(self, t: float, tol: float = 0.0) -> bool:
        """True if t lies in [t0 - tol, t1 + tol]."""
        lo, hi = min(self.t0, self.t1), max(self.t0, self.t1)
        return lo - tol <= t <= hi + tol

    def parameter_at(self, normalized: float) -> float:
        """Map a normalized value in [0, 1] into the interval."""
        return self.t0 + normalized * (self.t1 - self.t0)


def intersect_line_line(p0: np.ndarray, d0: np.ndarray,
                        p1: np.ndarray, d1: np.ndarray,
                        tol: float = 1e-12) -> Optional[Tuple[float, float]]:
    """
    Intersect two lines given in point/direction form.

    Computes the parameters of the closest points
    p0 + t0 * d0 and p1 + t1 * d1. For coplanar, non-parallel lines
    these coincide at the intersection point.

    Parameters:
        p0, d0: Point on and direction of the first line
        p1, d1: Point on and direction of the second line
        tol: Relative tolerance for parallel detection

    Returns:
        (t0, t1), or None when the lines are parallel
    """
    p0 = np.asarray(p0, dtype=np.float64)
    p1 = np.asarray(p1, dtype=np.float64)
    d0 = np.asarray(d0, dtype=np.float64)
    d1 = np.asarray(d1, dtype=np.float64)

    a = np.dot(d0, d0)
    b = np.dot(d0, d1)
    c = np.dot(d1, d1)
    w = p0 - p1
    d = np.dot(d0, w)
    e = np.dot(d1, w)

    denom = a * c - b * b
    if abs(denom) <= tol * a * c:
        return None

    t0 = (b * e - c * d) / denom
    t1 = (a * e - b * d) / denom
    return float(t0), float(t1)


class Plane:
    """
    A plane with an orthonormal frame.

    The frame is built like a right-handed coordinate system:
    x_axis = unit(x_dir), z_axis = unit(x_dir x y_dir),
    y_axis = z_axis x x_axis. The y direction passed in only needs to be
    non-parallel to the x direction.
    """

    def __init__(self, origin, x_dir, y_dir):
        origin = as_point(origin)
        x_dir = as_point(x_dir)
        y_dir = as_point(y_dir)

        normal = np.cross(x_dir, y_dir)
        if np.linalg.norm(normal) <= 1e-14 * max(np.linalg.norm(x_dir) * np.linalg.norm(y_dir), 1.0):
            raise ConfigurationError("Plane axes must not be parallel or zero")

        self._origin = origin
        self._x_axis = unitize(x_dir)
        self._z_axis = unitize(normal)
        self._y_axis = unitize(np.cross(self._z_axis, self._x_axis))
        for arr in (self._origin, self._x_axis, self._y_axis, self._z_axis):
            arr.setflags(write=False)

    @classmethod
    def world_xy(cls) -> 'Plane':
        return cls((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0))

    @classmethod
    def from_normal(cls, origin, normal) -> 'Plane':
        """Plane through origin with z_axis along normal and any x_axis."""
        normal = unitize(as_point(normal))
        x_dir = unitize(perpendicular_to(normal))
        y_dir = np.cross(normal, x_dir)
        return cls(origin, x_dir, y_dir)

    @property
    def origin(self) -> np.ndarray:
        return self._origin

    @property
    def x_axis(self) -> np.ndarray:
        return self._x_axis

    @property
    def y_axis(self) -> np.ndarray:
        return self._y_axis

    @property
    def z_axis(self) -> np.ndarray:
        return self._z_axis

    @property
    def normal(self) -> np.ndarray:
        return self._z_axis

    def point_at(self, u: float, v: float) -> np.ndarray:
        """Point at local coordinates (u, v)."""
        return self._origin + u * self._x_axis + v * self._y_axis

    def closest_parameters(self, point) -> Tuple[float, float]:
        """Local (u, v) coordinates of the projection of point onto the plane."""
        d = as_point(point) - self._origin
        return float(np.dot(d, self._x_axis)), float(np.dot(d, self._y_axis))

    def closest_point(self, point) -> np.ndarray:
        u, v = self.closest_parameters(point)
        return self.point_at(u, v)

    def transform(self, xform: 'Transform') -> 'Plane':
        """Return the plane moved by a transformation."""
        origin = xform.apply_to_point(self._origin)
        x_dir = xform.apply_to_vector(self._x_axis)
        y_dir = xform.apply_to_vector(self._y_axis)
        return Plane(origin, x_dir, y_dir)

    def epsilon_equals(self, other: 'Plane', tol: float = 1e-10) -> bool:
        return (np.allclose(self._origin, other._origin, atol=tol, rtol=0.0)
                and np.allclose(self._x_axis, other._x_axis, atol=tol, rtol=0.0)
                and np.allclose(self._y_axis, other._y_axis, atol=tol, rtol=0.0))

    def __repr__(self) -> str:
        return (f"Plane(origin={self._origin.tolist()}, x_axis={self._x_axis.tolist()}, "
                f"y_axis={self._y_axis.tolist()})")


class BoundingBox:
    """Axis-aligned bounding box given by its min and max corners."""

    def __init__(self, min_point, max_point):
        self._min = as_point(min_point)
        self._max = as_point(max_point)
        if np.any(self._min > self._max):
            raise ConfigurationError("BoundingBox min corner exceeds max corner")

    @classmethod
    def from_points(cls, points: Sequence) -> 'BoundingBox':
        pts = np.atleast_2d(np.asarray(points, dtype=np.float64))
        if pts.shape[0] == 0:
            raise ConfigurationError("Cannot bound an empty point set")
        return cls(pts.min(axis=0), pts.max(axis=0))

    @property
    def min(self) -> np.ndarray:
        return self._min.copy()

    @property
    def max(self) -> np.ndarray:
        return self._max.copy()

    @property
    def diagonal(self) -> np.ndarray:
        return self._max - self._min

    def contains(self, point, tol: float = 0.0) -> bool:
        p = as_point(point)
        return bool(np.all(p >= self._min - tol) and np.all(p <= self._max + tol))

    def union(self, other: 'BoundingBox') -> 'BoundingBox':
        return BoundingBox(np.minimum(self._min, other._min),
                           np.maximum(self._max, other._max))

    def __repr__(self) -> str:
        return f"BoundingBox(min={self._min.tolist()}, max={self._max.tolist()})"


class Transform:
    """
    Rigid (or affine) transformation as a 4x4 homogeneous matrix.

    Transforms compose with ``@``: (a @ b) applies b first, then a.
    """

    def __init__(self, matrix=None):
        if matrix is None:
            matrix = np.eye(4)
        matrix = np.array(matrix, dtype=np.float64)
        if matrix.shape != (4, 4):
            raise ConfigurationError(f"Transform matrix must be 4x4, got {matrix.shape}")
        matrix.setflags(write=False)
        self._matrix = matrix

    @classmethod
    def identity(cls) -> 'Transform':
        return cls()

    @classmethod
    def translation(cls, vector) -> 'Transform':
        m = np.eye(4)
        m[:3, 3] = as_point(vector)
        return cls(m)

    @classmethod
    def rotation(cls, angle: float, axis=(0.0, 0.0, 1.0), center=(0.0, 0.0, 0.0)) -> 'Transform':
        """Rotation by angle (radians) about an axis through center (Rodrigues)."""
        k = unitize(as_point(axis))
        K = np.array([[0.0, -k[2], k[1]],
                      [k[2], 0.0, -k[0]],
                      [-k[1], k[0], 0.0]])
        R = np.eye(3) + math.sin(angle) * K + (1.0 - math.cos(angle)) * (K @ K)
        c = as_point(center)
        m = np.eye(4)
        m[:3, :3] = R
        m[:3, 3] = c - R @ c
        return cls(m)

    @classmethod
    def scale(cls, factor: float, center=(0.0, 0.0, 0.0)) -> 'Transform':
        c = as_point(center)
        m = np.eye(4)
        m[:3, :3] *= factor
        m[:3, 3] = c - factor * c
        return cls(m)

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix.copy()

    def apply_to_point(self, point) -> np.ndarray:
        p = as_point(point)
        return self._matrix[:3, :3] @ p + self._matrix[:3, 3]

    def apply_to_vector(self, vector) -> np.ndarray:
        return self._matrix[:3, :3] @ as_point(vector)

    def apply_to_homogeneous(self, points_w: np.ndarray) -> np.ndarray:
        """Apply to (n, 4) homogeneous points (x*w, y*w, z*w, w)."""
        return np.asarray(points_w, dtype=np.float64) @ self._matrix.T

    def __matmul__(self, other: 'Transform') -> 'Transform':
        return Transform(self._matrix @ other._matrix)

    def __repr__(self) -> str:
        return f"Transform({self._matrix.tolist()})"
