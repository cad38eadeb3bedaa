"""
Exceptions raised by geoNURBS.

All errors derive from GeometryError. Input validation errors also derive
from ValueError so callers can keep catching ValueError for bad input:

- ConfigurationError: an object cannot be built from the given data
  (knot vector length, degree, weights, radius, arc domain, coincident points)
- DomainError: an argument lies outside the valid domain of an operation
  (split parameter not interior, segments < 1, length <= 0, zero-length curve)
- NumericalError: an iterative procedure did not converge within its
  iteration cap, or hit a degenerate configuration
"""


class GeometryError(Exception):
    """Base class for all geoNURBS errors."""


class ConfigurationError(GeometryError, ValueError):
    """Invalid data passed to a constructor."""


class DomainError(GeometryError, ValueError):
    """Argument outside the domain of an operation."""


class NumericalError(GeometryError, ArithmeticError):
    """A numerical procedure failed to converge or degenerated."""
