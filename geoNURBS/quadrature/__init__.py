"""
Numerical quadrature rules.
"""

from .gauss import gauss_legendre_1d, integrate_1d
