"""
Knot vector utilities.

A knot vector is a non-decreasing sequence of real numbers that defines
the parametric domain and the span structure of a B-spline/NURBS curve.

Mathematical background:
- Clamped (open) knot vectors have p+1 repeated knots at each end
- The number of control points n = len(knots) - p - 1
- The active domain is [knots[p], knots[n]]
- Knot spans (elements) are intervals [u_i, u_{i+1}] with u_i < u_{i+1}
- A knot of multiplicity k makes the curve C^{p-k} there; multiplicity
  p+1 disconnects the curve, which is what splitting relies on

Knot refinement (inserting knots without changing the curve) follows
Piegl & Tiller, "The NURBS Book", Algorithm A5.4.
"""

import logging

import numpy as np
from typing import List, Tuple, Sequence
from dataclasses import dataclass

from ..errors import ConfigurationError, DomainError
from ..geometry.primitives import Interval

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class KnotVector:
    """
    Represents a univariate knot vector.

    The knot array is copied on construction and made read-only, so a
    KnotVector never changes once built.

    Attributes:
        knots: The knot values (non-decreasing sequence)
        degree: Polynomial degree p

    Properties computed:
        n_basis: Number of basis functions (= control points)
        n_elements: Number of non-zero measure knot spans in the domain
        elements: List of (start, end) parametric coordinates for each element
    """
    knots: np.ndarray
    degree: int

    def __post_init__(self):
        self.knots = np.array(self.knots, dtype=np.float64)
        self._validate()
        self.knots.setflags(write=False)
        self._compute_elements()

    def _validate(self):
        """Validate knot vector properties."""
        if self.knots.ndim != 1:
            raise ConfigurationError("Knot vector must be one-dimensional.")
        if self.degree < 1:
            raise ConfigurationError(f"Degree must be at least 1, got {self.degree}.")
        if len(self.knots) < 2 * (self.degree + 1):
            raise ConfigurationError(
                f"Knot vector too short for degree {self.degree}. "
                f"Need at least {2 * (self.degree + 1)} knots, got {len(self.knots)}."
            )
        if not np.all(np.isfinite(self.knots)):
            raise ConfigurationError("Knot values must be finite.")
        # Check non-decreasing
        if not np.all(np.diff(self.knots) >= 0):
            raise ConfigurationError("Knot vector must be non-decreasing.")
        if not self.knots[self.n_basis] > self.knots[self.degree]:
            raise ConfigurationError("Knot vector has an empty active domain.")

    def _compute_elements(self):
        """
        Compute unique knot spans (elements) inside the active domain.

        Elements are intervals [u_i, u_{i+1}] with non-zero measure.
        """
        active = self.knots[self.degree:self.n_basis + 1]
        unique_knots = np.unique(active)
        self._unique_knots = unique_knots
        self._elements = [
            (unique_knots[i], unique_knots[i + 1])
            for i in range(len(unique_knots) - 1)
        ]

    @classmethod
    def uniform(cls, degree: int, n_control_points: int,
                periodic: bool = False) -> 'KnotVector':
        """
        Create a uniform knot vector on the domain [0, 1].

        Parameters:
            degree: Polynomial degree p
            n_control_points: Number of control points n
            periodic: Unclamped (periodic) knots if True, clamped otherwise

        Returns:
            KnotVector of length n + p + 1
        """
        if periodic:
            return make_periodic_knot_vector(n_control_points, degree)
        return make_open_knot_vector(n_control_points, degree)

    @property
    def n_basis(self) -> int:
        """Number of basis functions."""
        return len(self.knots) - self.degree - 1

    @property
    def n_elements(self) -> int:
        """Number of non-zero measure knot spans (elements)."""
        return len(self._elements)

    @property
    def elements(self) -> List[Tuple[float, float]]:
        """List of element intervals as (u_start, u_end) tuples."""
        return self._elements.copy()

    @property
    def unique_knots(self) -> np.ndarray:
        """Unique knot values (breakpoints) of the active domain."""
        return self._unique_knots.copy()

    @property
    def domain(self) -> Interval:
        """Active parametric domain [knots[p], knots[n]]."""
        return Interval(float(self.knots[self.degree]),
                        float(self.knots[self.n_basis]))

    @property
    def is_clamped(self) -> bool:
        """True if both ends are repeated p+1 times."""
        p = self.degree
        return bool(np.all(self.knots[:p + 1] == self.knots[0])
                    and np.all(self.knots[-(p + 1):] == self.knots[-1]))

    def find_span(self, u: float) -> int:
        """
        Find the knot span index containing parameter value u.

        For u in [u_i, u_{i+1}), returns i.
        Uses the convention that the last span is closed: [u_{n-1}, u_n].
        Values outside the domain are clamped to the first or last span.

        Parameters:
            u: Parameter value

        Returns:
            Span index i such that u in [u_i, u_{i+1})
        """
        n = self.n_basis
        p = self.degree

        # Handle boundary cases
        if u >= self.knots[n]:
            # Last non-empty span ending at the domain end
            span = n - 1
            while self.knots[span] == self.knots[span + 1]:
                span -= 1
            return span
        if u <= self.knots[p]:
            # First non-empty span starting at the domain start
            span = p
            while self.knots[span] == self.knots[span + 1]:
                span += 1
            return span

        # Binary search
        low = p
        high = n
        mid = (low + high) // 2

        while u < self.knots[mid] or u >= self.knots[mid + 1]:
            if u < self.knots[mid]:
                high = mid
            else:
                low = mid
            mid = (low + high) // 2

        return mid

    def multiplicity(self, u: float, tol: float = 1e-14) -> int:
        """Number of times u appears in the knot vector."""
        return compute_multiplicity(self, u, tol)

    def __len__(self) -> int:
        return len(self.knots)

    def __getitem__(self, index):
        return self.knots[index]

    def __repr__(self) -> str:
        return f"KnotVector(degree={self.degree}, knots={self.knots.tolist()})"


def _check_counts(n_basis: int, degree: int):
    if degree < 1:
        raise ConfigurationError(f"Degree must be at least 1, got {degree}")
    if n_basis < degree + 1:
        raise ConfigurationError(
            f"Cannot create knot vector: n_basis={n_basis} too small for degree={degree}"
        )


def make_open_knot_vector(n_basis: int, degree: int,
                           domain: Tuple[float, float] = (0.0, 1.0)) -> KnotVector:
    """
    Create an open (clamped) uniform knot vector.

    Open knot vectors have the first and last knot repeated p+1 times,
    so the curve interpolates its first and last control points.

    Parameters:
        n_basis: Number of control points
        degree: Polynomial degree p
        domain: Parametric domain (start, end)

    Returns:
        KnotVector with uniform internal knots
    """
    _check_counts(n_basis, degree)

    p = degree
    n_internal = n_basis - p - 1
    a, b = domain

    # Start with p+1 repeated knots at start
    knots = [a] * (p + 1)

    # Add uniform internal knots
    if n_internal > 0:
        internal = np.linspace(a, b, n_internal + 2)[1:-1]
        knots.extend(internal)

    # End with p+1 repeated knots at end
    knots.extend([b] * (p + 1))

    return KnotVector(np.array(knots), degree)


def make_periodic_knot_vector(n_basis: int, degree: int) -> KnotVector:
    """
    Create a uniform unclamped (periodic) knot vector.

    Knots are equally spaced, (i - p) / (n - p) for i = 0 .. n + p,
    so the active domain [u_p, u_n] is [0, 1].

    Parameters:
        n_basis: Number of control points
        degree: Polynomial degree p

    Returns:
        KnotVector without repeated end knots
    """
    _check_counts(n_basis, degree)

    step = 1.0 / (n_basis - degree)
    knots = (np.arange(n_basis + degree + 1) - degree) * step
    return KnotVector(knots, degree)


def compute_multiplicity(kv: KnotVector, u: float, tol: float = 1e-14) -> int:
    """
    Compute the multiplicity of a knot value.

    Parameters:
        kv: Knot vector
        u: Knot value to check
        tol: Tolerance for equality

    Returns:
        Number of times u appears in the knot vector
    """
    return int(np.sum(np.abs(kv.knots - u) < tol))


def refine_curve_knots(kv: KnotVector,
                       control_points_w: np.ndarray,
                       knots_to_insert: Sequence[float]) -> Tuple[KnotVector, np.ndarray]:
    """
    Insert several knots into a curve without changing its shape.

    Boehm knot refinement, processed span by span from the right
    (Piegl & Tiller, Algorithm A5.4). Each new control point is an affine
    blend of at most two neighbouring old control points. Works on
    homogeneous (weighted) control points so rational curves are
    refined exactly.

    Parameters:
        kv: Original knot vector
        control_points_w: Homogeneous control points, shape (n, d+1)
        knots_to_insert: Knot values to insert (any order, repeats allowed)

    Returns:
        (new_knot_vector, new_control_points_w) with
        len(knots_to_insert) more knots and control points
    """
    Pw = np.asarray(control_points_w, dtype=np.float64)
    if Pw.ndim != 2 or Pw.shape[0] != kv.n_basis:
        raise ConfigurationError(
            f"Number of control points ({Pw.shape[0] if Pw.ndim else 0}) "
            f"must match number of basis functions ({kv.n_basis})"
        )

    X = np.sort(np.asarray(knots_to_insert, dtype=np.float64))
    if len(X) == 0:
        return KnotVector(kv.knots, kv.degree), Pw.copy()

    lo, hi = kv.domain
    if X[0] < lo or X[-1] > hi:
        raise DomainError(f"Knots to insert must lie in the domain [{lo}, {hi}]")

    p = kv.degree
    U = kv.knots
    n = kv.n_basis - 1
    m = n + p + 1
    r = len(X) - 1

    a = kv.find_span(X[0])
    b = kv.find_span(X[r]) + 1

    Ubar = np.zeros(m + r + 2)
    Qw = np.zeros((n + r + 2, Pw.shape[1]))

    # Unaffected control points and knots at both ends
    Qw[:a - p + 1] = Pw[:a - p + 1]
    Qw[b + r:n + r + 2] = Pw[b - 1:n + 1]
    Ubar[:a + 1] = U[:a + 1]
    Ubar[b + p + r + 1:m + r + 2] = U[b + p:m + 1]

    i = b + p - 1
    k = b + p + r
    for j in range(r, -1, -1):
        while X[j] <= U[i] and i > a:
            Qw[k - p - 1] = Pw[i - p - 1]
            Ubar[k] = U[i]
            k -= 1
            i -= 1

        Qw[k - p - 1] = Qw[k - p]
        for l in range(1, p + 1):
            ind = k - p + l
            alpha = Ubar[k + l] - X[j]
            if alpha == 0.0:
                Qw[ind - 1] = Qw[ind]
            else:
                alpha = alpha / (Ubar[k + l] - U[i - p + l])
                Qw[ind - 1] = alpha * Qw[ind - 1] + (1.0 - alpha) * Qw[ind]

        Ubar[k] = X[j]
        k -= 1

    new_kv = KnotVector(Ubar, p)
    if new_kv.n_basis != Qw.shape[0]:
        raise ConfigurationError(
            f"Refined knot vector ({len(Ubar)} knots) does not match "
            f"{Qw.shape[0]} control points for degree {p}"
        )

    logger.debug("Refined knot vector: inserted %d knot(s), %d -> %d control points",
                 len(X), Pw.shape[0], Qw.shape[0])

    return new_kv, Qw


def insert_knot(kv: KnotVector, control_points_w: np.ndarray,
                u: float, times: int = 1) -> Tuple[KnotVector, np.ndarray]:
    """
    Insert a knot value into a curve.

    Parameters:
        kv: Original knot vector
        control_points_w: Homogeneous control points, shape (n, d+1)
        u: Knot value to insert
        times: Number of times to insert

    Returns:
        (new_knot_vector, new_control_points_w)
    """
    if times < 0:
        raise DomainError(f"Insertion count must be non-negative, got {times}")
    return refine_curve_knots(kv, control_points_w, [u] * times)
