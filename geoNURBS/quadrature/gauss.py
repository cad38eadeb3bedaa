"""
Gauss-Legendre quadrature for numerical integration.

Gauss quadrature provides optimal polynomial integration:
n points integrate exactly polynomials up to degree 2n-1.

Arc length integrands |C'(u)| are not polynomial (a square root of one,
and rational for NURBS), so curve length uses a high fixed order
(24 points by default) on every knot span separately; inside a span the
integrand is smooth, which keeps the rule accurate.

The reference domain is [0, 1]. Standard Gauss points on [-1, 1] are
mapped accordingly.

Usage:
    points, weights = gauss_legendre_1d(n)   # rule on [0, 1]
    value = integrate_1d(f, a, b, n)         # integral of f over [a, b]
"""

import numpy as np
from typing import Callable, Tuple
from functools import lru_cache

from ..errors import ConfigurationError


@lru_cache(maxsize=16)
def _gauss_legendre_cached(n: int) -> Tuple[np.ndarray, np.ndarray]:
    # Get standard Gauss points on [-1, 1]
    points_std, weights_std = np.polynomial.legendre.leggauss(n)

    # Map to [0, 1]: x = (xi + 1) / 2, dx = 1/2 * dxi
    points = 0.5 * (points_std + 1.0)
    weights = 0.5 * weights_std
    points.setflags(write=False)
    weights.setflags(write=False)
    return points, weights


def gauss_legendre_1d(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Gauss-Legendre quadrature points and weights on [0, 1].

    Parameters:
        n: Number of quadrature points

    Returns:
        (points, weights) where:
        - points: Array of n quadrature points in [0, 1]
        - weights: Array of n quadrature weights (sum to 1)
    """
    if n < 1:
        raise ConfigurationError("Need at least 1 quadrature point")

    points, weights = _gauss_legendre_cached(n)
    return points.copy(), weights.copy()


def integrate_1d(f: Callable[[float], float], a: float, b: float, n: int) -> float:
    """
    Integrate a scalar function over [a, b] with an n-point Gauss rule.

    Parameters:
        f: Integrand, called once per quadrature point
        a, b: Integration bounds (b < a gives the negated integral)
        n: Number of quadrature points

    Returns:
        Approximation of the integral of f from a to b
    """
    if n < 1:
        raise ConfigurationError("Need at least 1 quadrature point")
    if b == a:
        return 0.0

    points, weights = _gauss_legendre_cached(n)
    h = b - a
    total = 0.0
    for x, w in zip(points, weights):
        total += w * f(a + h * x)
    return h * total
