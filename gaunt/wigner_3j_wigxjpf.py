"""
'wigxjpf' backend for gaunt.wigner_3j.

Rows arrive already filtered by the selection rules and de-duplicated; each
is evaluated by WIGXJPF's wig3jj, which takes doubled (2j, 2m) arguments.
Tables are sized for the largest j in the batch and freed after it.
"""
from __future__ import annotations

from contextlib import contextmanager

import numpy as np

try:
    import pywigxjpf as wig
except ImportError as exc:  # pragma: no cover
    raise ImportError(
        "the 'wigxjpf' coupling backend needs the optional pywigxjpf package "
        "(pip install 'shkernels[wigxjpf]')"
    ) from exc

_THREE_J = 3


@contextmanager
def _tables(max_j: int):
    wig.wig_table_init(2 * max_j, _THREE_J)
    wig.wig_temp_init(2 * max_j)
    try:
        yield
    finally:
        try:
            wig.wig_temp_free()
        finally:
            wig.wig_table_free()


def wigner_3j_rows(rows: np.ndarray) -> np.ndarray:
    """[K, 6] (j1, j2, j3, m1, m2, m3) rows -> [K] float64 3j symbols."""
    rows = np.asarray(rows, dtype=np.int64).reshape(-1, 6)
    if rows.shape[0] == 0:
        return np.zeros(0, dtype=np.float64)
    doubled = (2 * rows).tolist()
    with _tables(int(rows[:, :3].max())):
        return np.array([wig.wig3jj(*row) for row in doubled], dtype=np.float64)
