"""
Flattened (l, m) indexing for real spherical-harmonic coefficient vectors.

Coefficient i holds degree l and order m with i = l(l+1) + m, so degree l
occupies the contiguous block [l^2, (l+1)^2). Scalars map to Python ints;
NumPy arrays map element-wise to int64 arrays.
"""
from __future__ import annotations

import math
from typing import Tuple, Union

import numpy as np

IntLike = Union[int, np.ndarray]


def coefficient_count(max_l: IntLike) -> IntLike:
    """Number of coefficients for all degrees 0..max_l."""
    return (max_l + 1) * (max_l + 1)


def maximum_degree(count: int) -> int:
    """Inverse of coefficient_count; only meaningful when count is (k+1)^2."""
    return math.isqrt(int(count)) - 1


def coefficient_index(l: IntLike, m: IntLike) -> IntLike:
    """Flat index of (l, m); requires -l <= m <= l."""
    return l * (l + 1) + m


def coefficient_lm(index: IntLike) -> Tuple[IntLike, IntLike]:
    """Decode a flat index into (l, m)."""
    if np.ndim(index) == 0:
        i = int(index)
        l = math.isqrt(i)
        return l, i - l * l - l
    index = np.asarray(index, dtype=np.int64)
    l = np.floor(np.sqrt(index)).astype(np.int64)
    # float sqrt can land one off near perfect squares
    l = np.where(l * l > index, l - 1, l)
    l = np.where((l + 1) * (l + 1) <= index, l + 1, l)
    return l, index - l * l - l
