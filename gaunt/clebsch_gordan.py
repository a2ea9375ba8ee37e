"""
Clebsch-Gordan coefficients from Wigner 3j symbols.

    <j1 m1 j2 m2 | j3 m3> = (-1)^(j1 - j2 + m3) sqrt(2 j3 + 1) (j1 j2 j3; m1 m2 -m3)

The result is zero whenever m1 + m2 != m3, the triangle rule fails or an order
exceeds its degree, so callers can pass arbitrary index combinations.
"""
from __future__ import annotations

import numpy as np

from .wigner_3j import wigner_3j


def clebsch_gordan(j1, j2, j3, m1, m2, m3, backend: str = "sympy") -> np.ndarray:
    """Vectorized <j1 m1 j2 m2 | j3 m3> for integer angular momenta (float64)."""
    j1, j2, j3, m1, m2, m3 = np.broadcast_arrays(
        *(np.asarray(v, dtype=np.int64) for v in (j1, j2, j3, m1, m2, m3))
    )
    sign = np.where(((j1 - j2 + m3) % 2) == 0, 1.0, -1.0)
    return sign * np.sqrt(2.0 * j3 + 1.0) * wigner_3j(j1, j2, j3, m1, m2, -m3, backend=backend)
