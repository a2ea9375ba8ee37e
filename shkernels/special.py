"""
Scalar special functions consumed by the basis evaluator.

Both wrap SciPy and return the caller's working precision.
"""
from __future__ import annotations

import numpy as np
from scipy.special import factorial as _scipy_factorial
from scipy.special import lpmv


def associated_legendre(l, m, x, dtype=np.float64) -> np.ndarray:
    """
    Associated Legendre polynomial P_l^m(x) for m >= 0, l >= m, x in [-1, 1].

    Includes the Condon-Shortley phase (-1)^m, matching SciPy's lpmv.
    """
    dtype = np.dtype(dtype)
    x = np.asarray(x, dtype=dtype)
    return np.asarray(lpmv(m, l, x), dtype=dtype)


def factorial(n, dtype=np.float64) -> np.ndarray:
    """n! for non-negative integer n, returned in the requested precision."""
    return np.asarray(_scipy_factorial(np.asarray(n), exact=False), dtype=np.dtype(dtype))
