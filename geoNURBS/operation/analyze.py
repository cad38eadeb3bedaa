"""
Arc length analysis of NURBS curves.

The arc length from the domain start to u is

    L(u) = integral_{u_0}^{u} |C'(s)| ds

and is computed span by span: the integrand is smooth inside a knot span
but only C^{p-k} across a knot of multiplicity k, so integrating each span
separately keeps the Gauss-Legendre rule accurate.

L is monotone in u, which makes inverting it (parameter at a given
length) a bracketed 1-D root-finding problem on a single span. The root
is found with Brent's method (scipy.optimize.brentq) under an iteration
cap; failing to converge raises NumericalError.
"""

import logging

import numpy as np
from scipy.optimize import brentq
from typing import List, Optional, Sequence

from ..errors import DomainError, NumericalError
from ..io.config import NumericSettings, resolve_settings
from ..quadrature.gauss import integrate_1d

logger = logging.getLogger(__name__)


def _speed(curve, u: float) -> float:
    _, dC = curve.derivatives_at(u, 1)
    return float(np.linalg.norm(dC))


def span_lengths(curve, settings: Optional[NumericSettings] = None) -> List[float]:
    """
    Arc length of every knot span (element) of a curve.

    Parameters:
        curve: NURBSCurve (anything with ``knots`` and ``derivatives_at``)
        settings: Numeric settings (quadrature order)

    Returns:
        One length per element of ``curve.knots.elements``
    """
    s = resolve_settings(settings)
    return [integrate_1d(lambda u: _speed(curve, u), a, b, s.gauss_points)
            for a, b in curve.knots.elements]


def curve_length(curve, settings: Optional[NumericSettings] = None) -> float:
    """Total arc length of a curve."""
    return float(sum(span_lengths(curve, settings)))


def length_at_parameter(curve, t: float,
                        settings: Optional[NumericSettings] = None) -> float:
    """
    Arc length from the domain start to parameter t.

    Raises:
        DomainError: if t lies outside the curve domain
    """
    s = resolve_settings(settings)
    lo, hi = curve.knots.domain
    if not lo - s.epsilon <= t <= hi + s.epsilon:
        raise DomainError(f"Parameter {t} outside domain [{lo}, {hi}]")
    t = min(max(t, lo), hi)

    total = 0.0
    for a, b in curve.knots.elements:
        if t <= a:
            break
        total += integrate_1d(lambda u: _speed(curve, u), a, min(b, t), s.gauss_points)
    return total


def parameter_at_length(curve, length: float,
                        settings: Optional[NumericSettings] = None,
                        lengths: Optional[Sequence[float]] = None) -> float:
    """
    Parameter u at which the arc length from the domain start equals length.

    Lengths at or below zero map to the domain start, lengths at or above
    the curve length map to the domain end.

    Parameters:
        curve: NURBSCurve
        length: Target arc length
        settings: Numeric settings (quadrature order, tolerance, iteration cap)
        lengths: Optional precomputed ``span_lengths(curve, settings)``

    Returns:
        Parameter value in the curve domain

    Raises:
        NumericalError: if the root finder does not converge
    """
    s = resolve_settings(settings)
    elements = curve.knots.elements
    if lengths is None:
        lengths = span_lengths(curve, s)

    lo, hi = curve.knots.domain
    if length <= 0.0:
        return lo
    if length >= sum(lengths):
        return hi

    accumulated = 0.0
    for (a, b), span_length in zip(elements, lengths):
        if accumulated + span_length < length:
            accumulated += span_length
            continue

        remaining = length - accumulated
        if remaining <= 0.0:
            return a
        if remaining >= span_length:
            return b

        def residual(u):
            return integrate_1d(lambda x: _speed(curve, x), a, u, s.gauss_points) - remaining

        root, result = brentq(residual, a, b, xtol=s.epsilon,
                              maxiter=s.max_iterations,
                              full_output=True, disp=False)
        if not result.converged:
            raise NumericalError(
                f"Arc length inversion did not converge for length {length} "
                f"after {result.iterations} iterations"
            )
        logger.debug("Length %.12g -> parameter %.12g (%d iterations)",
                     length, root, result.iterations)
        return float(root)

    return hi
