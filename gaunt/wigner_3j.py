"""
Vectorized Wigner 3j symbols for integer angular momenta.

Inputs are broadcastable NumPy integer arrays. Entries that violate the
selection rules (m1 + m2 + m3 = 0, |m_i| <= j_i, triangle inequality) are zero
and never reach a backend; the remaining entries are evaluated once per
distinct symbol and scattered back.

Backends:
- "sympy": exact evaluation via sympy.physics.wigner, converted to float64
- "wigxjpf": WIGXJPF's C implementation via pywigxjpf (optional dependency)
"""
from __future__ import annotations

import logging

import numpy as np
from sympy.physics.wigner import wigner_3j as sympy_wigner_3j

logger = logging.getLogger(__name__)


def selection_mask(j1, j2, j3, m1, m2, m3) -> np.ndarray:
    """True where a 3j symbol can be non-zero."""
    return (
        ((m1 + m2 + m3) == 0)
        & (np.abs(m1) <= j1)
        & (np.abs(m2) <= j2)
        & (np.abs(m3) <= j3)
        & (j3 >= np.abs(j1 - j2))
        & (j3 <= j1 + j2)
    )


def _sympy_rows(rows: np.ndarray) -> np.ndarray:
    return np.array([float(sympy_wigner_3j(*row)) for row in rows.tolist()], dtype=np.float64)


def _wigxjpf_rows(rows: np.ndarray) -> np.ndarray:
    from .wigner_3j_wigxjpf import wigner_3j_rows

    return wigner_3j_rows(rows)


_BACKENDS = {
    "sympy": _sympy_rows,
    "wigxjpf": _wigxjpf_rows,
}


def wigner_3j(j1, j2, j3, m1, m2, m3, backend: str = "sympy") -> np.ndarray:
    """
    Wigner 3j symbol (j1 j2 j3; m1 m2 m3), broadcast over the inputs.

    Returns a float64 array with the broadcast shape.
    """
    if backend not in _BACKENDS:
        raise ValueError(f"Unknown 3j backend {backend!r}; expected one of {tuple(_BACKENDS)}")
    j1, j2, j3, m1, m2, m3 = np.broadcast_arrays(
        *(np.asarray(v, dtype=np.int64) for v in (j1, j2, j3, m1, m2, m3))
    )
    out = np.zeros(j1.shape, dtype=np.float64)
    mask = selection_mask(j1, j2, j3, m1, m2, m3)
    if not np.any(mask):
        return out

    rows = np.stack([j1[mask], j2[mask], j3[mask], m1[mask], m2[mask], m3[mask]], axis=-1)
    unique_rows, inverse = np.unique(rows, axis=0, return_inverse=True)
    logger.debug("wigner_3j backend=%s requested=%d allowed=%d distinct=%d",
                 backend, out.size, rows.shape[0], unique_rows.shape[0])
    values = _BACKENDS[backend](unique_rows)
    out[mask] = values[inverse.reshape(-1)]
    return out
