"""
Weighted (homogeneous) control points.

NURBS algorithms run on homogeneous control points

    Pw_i = (w_i * x_i, w_i * y_i, w_i * z_i, w_i)

so that rational curves can be evaluated and refined with the same
polynomial machinery as B-splines. The Euclidean control point is the
projection Pw_i[:-1] / Pw_i[-1]. A curve is non-rational iff all
weights are 1.

Arrays are shaped (n_points, d) for Euclidean points and
(n_points, d + 1) for homogeneous ones.
"""

import numpy as np
from typing import Optional, Tuple

from ..errors import ConfigurationError


def homogenize(points: np.ndarray, weights: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Build homogeneous control points from Euclidean points and weights.

    Parameters:
        points: Array of shape (n, d)
        weights: Array of shape (n,), defaults to 1.0

    Returns:
        Array of shape (n, d+1)
    """
    points = np.atleast_2d(np.asarray(points, dtype=np.float64))
    n = points.shape[0]

    if weights is None:
        weights = np.ones(n)
    else:
        weights = np.asarray(weights, dtype=np.float64).ravel()
        if len(weights) != n:
            raise ConfigurationError(
                f"Weights array length ({len(weights)}) must match "
                f"number of control points ({n})"
            )
    check_weights(weights)

    return np.hstack([points * weights[:, None], weights[:, None]])


def dehomogenize(points_w: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split homogeneous control points into Euclidean points and weights.

    Parameters:
        points_w: Array of shape (n, d+1)

    Returns:
        (points, weights) with shapes (n, d) and (n,)
    """
    points_w = np.atleast_2d(np.asarray(points_w, dtype=np.float64))
    weights = points_w[:, -1].copy()
    check_weights(weights)
    return points_w[:, :-1] / weights[:, None], weights


def dehomogenize_point(point_w: np.ndarray) -> np.ndarray:
    """Project a single homogeneous point to Euclidean space."""
    point_w = np.asarray(point_w, dtype=np.float64)
    return point_w[:-1] / point_w[-1]


def check_weights(weights: np.ndarray):
    """Raise ConfigurationError unless every weight is finite and positive."""
    if not np.all(np.isfinite(weights)) or np.any(weights <= 0):
        raise ConfigurationError("All weights must be positive")


def is_rational(weights: np.ndarray, tol: float = 1e-14) -> bool:
    """True if any weight differs from 1."""
    return bool(np.any(np.abs(np.asarray(weights) - 1.0) > tol))
