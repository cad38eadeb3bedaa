"""
NURBS (Non-Uniform Rational B-Spline) curve representation.

NURBS extend B-splines by introducing weights for each control point,
enabling exact representation of conic sections (circles, arcs, ...).

A NURBS curve point is computed as:

    C(u) = sum_i (N_i(u) * w_i * P_i) / sum_i (N_i(u) * w_i)

where:
- N_i are B-spline basis functions
- w_i are weights (positive real numbers)
- P_i are control points

Internally the curve keeps homogeneous control points
Pw_i = (w_i * P_i, w_i): the numerator and denominator above are then a
single B-spline blend of Pw, followed by a projection.

This module provides:
- Curve: the interface every curve type implements (and the divide
  operations consume)
- NURBSCurve: rational B-spline curve in arbitrary dimension
"""

import math
import numpy as np
from typing import List, Optional, Tuple, TYPE_CHECKING
from abc import ABC, abstractmethod

from ..discretization.knot_vector import KnotVector, make_open_knot_vector
from ..discretization.control_point import (
    homogenize, dehomogenize, dehomogenize_point, check_weights, is_rational
)
from ..errors import ConfigurationError, DomainError
from ..io.config import NumericSettings, resolve_settings
from .bspline import BSplineBasis
from .primitives import Interval, Transform, as_point

if TYPE_CHECKING:
    from .primitives import Plane


class Curve(ABC):
    """
    Interface shared by all curve types.

    The divide operations only rely on these members, so any object that
    provides them can be split, resampled, or framed:
    - degree, knots, control_points (homogeneous)
    - point_at(t), tangent_at(t) (unit vector), length()
    """

    @property
    @abstractmethod
    def degree(self) -> int:
        """Polynomial degree."""
        pass

    @property
    @abstractmethod
    def knots(self) -> KnotVector:
        """Knot vector of the NURBS form."""
        pass

    @property
    @abstractmethod
    def control_points(self) -> np.ndarray:
        """Homogeneous control points as (n, d+1) array."""
        pass

    @abstractmethod
    def point_at(self, t: float) -> np.ndarray:
        """Evaluate the curve at a parameter value."""
        pass

    @abstractmethod
    def tangent_at(self, t: float) -> np.ndarray:
        """Unit tangent at a parameter value."""
        pass

    @abstractmethod
    def length(self, settings: Optional[NumericSettings] = None) -> float:
        """Arc length of the whole curve."""
        pass


class NURBSCurve(Curve):
    """
    NURBS curve in arbitrary dimensional space.

    A NURBS curve C(u) is defined by:
    - Knot vector defining the parametric domain
    - Control points P_i in R^d (d = physical dimension)
    - Weights w_i > 0

    Instances are immutable: array properties return copies.
    """

    def __init__(self, knot_vector: KnotVector,
                 points: np.ndarray,
                 weights: Optional[np.ndarray] = None):
        """
        Initialize a NURBS curve.

        Parameters:
            knot_vector: KnotVector defining the basis
            points: Euclidean control points, shape (n, d) where n = n_basis
            weights: Array of shape (n,), defaults to 1.0 (B-spline)
        """
        points = np.atleast_2d(np.asarray(points, dtype=np.float64))
        self._init_homogeneous(knot_vector, homogenize(points, weights))

    def _init_homogeneous(self, knot_vector: KnotVector, control_points_w: np.ndarray):
        control_points_w = np.array(control_points_w, dtype=np.float64)

        if control_points_w.ndim != 2 or control_points_w.shape[1] < 2:
            raise ConfigurationError(
                "Homogeneous control points must have shape (n, d+1) with d >= 1"
            )
        if control_points_w.shape[0] != knot_vector.n_basis:
            raise ConfigurationError(
                f"Number of control points ({control_points_w.shape[0]}) "
                f"must match number of basis functions ({knot_vector.n_basis})"
            )
        check_weights(control_points_w[:, -1])

        control_points_w.setflags(write=False)
        self._knot_vector = knot_vector
        self._basis = BSplineBasis(knot_vector)
        self._control_points_w = control_points_w

    @classmethod
    def from_homogeneous(cls, knot_vector: KnotVector,
                         control_points_w: np.ndarray) -> 'NURBSCurve':
        """
        Build a curve directly from homogeneous control points.

        Parameters:
            knot_vector: KnotVector defining the basis
            control_points_w: Array of shape (n, d+1) holding (w*P, w)
        """
        curve = cls.__new__(cls)
        curve._init_homogeneous(knot_vector, control_points_w)
        return curve

    @classmethod
    def from_points(cls, points: np.ndarray, degree: int,
                    weights: Optional[np.ndarray] = None) -> 'NURBSCurve':
        """
        Build a curve on a clamped uniform knot vector over [0, 1].

        Parameters:
            points: Euclidean control points, shape (n, d)
            degree: Polynomial degree (n >= degree + 1)
            weights: Optional weights, defaults to 1.0
        """
        points = np.atleast_2d(np.asarray(points, dtype=np.float64))
        kv = make_open_knot_vector(points.shape[0], degree)
        return cls(kv, points, weights)

    @property
    def n_dim_physical(self) -> int:
        return self._control_points_w.shape[1] - 1

    @property
    def n_control_points(self) -> int:
        return self._knot_vector.n_basis

    @property
    def degree(self) -> int:
        return self._knot_vector.degree

    @property
    def knots(self) -> KnotVector:
        return self._knot_vector

    @property
    def basis(self) -> BSplineBasis:
        return self._basis

    @property
    def control_points(self) -> np.ndarray:
        return self._control_points_w.copy()

    @property
    def location_points(self) -> np.ndarray:
        """Euclidean control points as (n, d) array."""
        points, _ = dehomogenize(self._control_points_w)
        return points

    @property
    def weights(self) -> np.ndarray:
        return self._control_points_w[:, -1].copy()

    @property
    def domain(self) -> Interval:
        return self._knot_vector.domain

    @property
    def is_rational(self) -> bool:
        return is_rational(self._control_points_w[:, -1])

    @property
    def start_point(self) -> np.ndarray:
        return self.point_at(self.domain.t0)

    @property
    def end_point(self) -> np.ndarray:
        return self.point_at(self.domain.t1)

    def point_at(self, t: float) -> np.ndarray:
        """
        Evaluate curve at parameter value.

        The homogeneous control points of the span are blended with the
        basis functions and the result is projected back by its weight.
        Values outside the domain extrapolate the first / last span.

        Parameters:
            t: Parameter value

        Returns:
            Point coordinates as (d,) array
        """
        span = self._knot_vector.find_span(t)
        N = self._basis.eval(t, span)

        start = span - self.degree
        Pw_local = self._control_points_w[start:start + self.degree + 1]

        return dehomogenize_point(np.dot(N, Pw_local))

    def derivatives_at(self, t: float, n_ders: int = 1) -> Tuple[np.ndarray, ...]:
        """
        Evaluate curve and derivatives at parameter value.

        Uses the formula for rational derivatives (Piegl & Tiller, Eq. 4.8):

            C^(k) = (A^(k) - sum_{j=1}^{k} C(k,j) * w^(j) * C^(k-j)) / w

        where A^(k) and w^(k) are the derivatives of the homogeneous
        numerator and of the weight function.

        Parameters:
            t: Parameter value
            n_ders: Number of derivatives

        Returns:
            Tuple (C, dC/dt, d2C/dt2, ...) of arrays
        """
        span = self._knot_vector.find_span(t)
        Nders = self._basis.eval_ders(t, n_ders, span)

        start = span - self.degree
        Pw_local = self._control_points_w[start:start + self.degree + 1]

        # Rows: derivatives of (A, w) = sum_i N_i^(k) * Pw_i
        Aw_ders = Nders @ Pw_local
        A_ders = Aw_ders[:, :-1]
        w_ders = Aw_ders[:, -1]

        C_ders = np.zeros_like(A_ders)
        for k in range(n_ders + 1):
            v = A_ders[k].copy()
            for j in range(1, k + 1):
                v -= math.comb(k, j) * w_ders[j] * C_ders[k - j]
            C_ders[k] = v / w_ders[0]

        return tuple(C_ders[k] for k in range(n_ders + 1))

    def tangent_at(self, t: float,
                   settings: Optional[NumericSettings] = None) -> np.ndarray:
        """
        Unit tangent vector at parameter value.

        Parameters:
            t: Parameter value
            settings: Numeric settings (zero-derivative tolerance)

        Raises:
            DomainError: if the first derivative vanishes at t
        """
        _, dC = self.derivatives_at(t, 1)
        norm = np.linalg.norm(dC)
        if norm <= resolve_settings(settings).epsilon:
            raise DomainError(f"Tangent undefined at t={t}: zero first derivative")
        return dC / norm

    def length(self, settings: Optional[NumericSettings] = None) -> float:
        """Arc length of the curve (Gauss-Legendre, span by span)."""
        from ..operation.analyze import curve_length
        return curve_length(self, settings)

    def length_at(self, t: float, settings: Optional[NumericSettings] = None) -> float:
        """Arc length from the domain start to parameter t."""
        from ..operation.analyze import length_at_parameter
        return length_at_parameter(self, t, settings)

    def parameter_at_length(self, length: float,
                            settings: Optional[NumericSettings] = None) -> float:
        """Parameter at which the arc length from the start equals length."""
        from ..operation.analyze import parameter_at_length
        return parameter_at_length(self, length, settings)

    def split(self, t: float) -> List['NURBSCurve']:
        """Split the curve in two at parameter t."""
        from ..operation.divide import split_curve
        return split_curve(self, t)

    def divide(self, segments: int, settings: Optional[NumericSettings] = None):
        """Divide into segments of equal arc length, returns (points, parameters)."""
        from ..operation.divide import divide_by_count
        return divide_by_count(self, segments, settings)

    def divide_by_length(self, length: float, settings: Optional[NumericSettings] = None):
        """Divide into pieces of a given arc length, returns (points, parameters)."""
        from ..operation.divide import divide_by_length
        return divide_by_length(self, length, settings)

    def perpendicular_frames(self, parameters,
                             settings: Optional[NumericSettings] = None) -> List['Plane']:
        """Rotation-minimized frames at the given parameters."""
        from ..operation.divide import perpendicular_frames
        return perpendicular_frames(self, parameters, settings)

    def transform(self, xform: Transform) -> 'NURBSCurve':
        """
        Return the curve moved by a transformation.

        Curves in fewer than three dimensions are lifted to z = 0 first.
        """
        points, weights = dehomogenize(self._control_points_w)
        points_3d = np.array([as_point(p) for p in points])
        moved = xform.apply_to_homogeneous(homogenize(points_3d, weights))
        return NURBSCurve.from_homogeneous(self._knot_vector, moved)

    def reverse(self) -> 'NURBSCurve':
        """Same geometry traversed in the opposite direction, same domain."""
        knots = self._knot_vector.knots
        reversed_knots = knots[0] + knots[-1] - knots[::-1]
        kv = KnotVector(reversed_knots, self.degree)
        return NURBSCurve.from_homogeneous(kv, self._control_points_w[::-1])

    def __repr__(self) -> str:
        return (f"NURBSCurve(degree={self.degree}, n_control_points={self.n_control_points}, "
                f"domain={tuple(self.domain)}, rational={self.is_rational})")
