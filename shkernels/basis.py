"""
Real spherical-harmonic basis functions.

Conventions (after Green, "Spherical Harmonic Lighting: The Gritty Details"):
theta is the azimuth in [0, 2pi), phi the polar angle in [0, pi], and

    y_l^m = sqrt(2) K_l^m cos(m theta)  P_l^m(cos phi)    m > 0
    y_l^m = sqrt(2) K_l^m sin(-m theta) P_l^-m(cos phi)   m < 0
    y_l^0 = K_l^0 P_l^0(cos phi)

with K_l^m = sqrt((2l+1)(l-|m|)! / (4pi (l+|m|)!)). Every function broadcasts
over NumPy arrays and evaluates in the floating precision of the angles.
"""
from __future__ import annotations

import numpy as np

from .indexing import coefficient_index, coefficient_lm
from .special import associated_legendre, factorial


def working_dtype(*values) -> np.dtype:
    """Floating precision implied by the angle inputs (integers promote to float64)."""
    dtype = np.result_type(*values)
    if not np.issubdtype(dtype, np.floating):
        return np.dtype(np.float64)
    return np.dtype(dtype)


def normalization(l, m, dtype=np.float64) -> np.ndarray:
    """K_l^m in the requested precision."""
    dtype = np.dtype(dtype)
    l = np.asarray(l, dtype=np.int64)
    abs_m = np.abs(np.asarray(m, dtype=np.int64))
    numerator = (2 * l + 1).astype(dtype) * factorial(l - abs_m, dtype)
    denominator = dtype.type(4.0 * np.pi) * factorial(l + abs_m, dtype)
    return np.sqrt(numerator / denominator)


def evaluate(l, m, theta, phi):
    """Value of y_l^m at (theta, phi)."""
    dtype = working_dtype(theta, phi)
    scalar = np.ndim(l) == 0 and np.ndim(m) == 0 and np.ndim(theta) == 0 and np.ndim(phi) == 0
    l = np.asarray(l, dtype=np.int64)
    m = np.asarray(m, dtype=np.int64)
    theta = np.asarray(theta, dtype=dtype)
    phi = np.asarray(phi, dtype=dtype)

    k = normalization(l, m, dtype)
    legendre = associated_legendre(l, np.abs(m), np.cos(phi), dtype)
    m_f = m.astype(dtype)
    azimuthal = np.where(m > 0, np.cos(m_f * theta), np.where(m < 0, np.sin(-m_f * theta), dtype.type(1)))
    scale = np.where(m == 0, dtype.type(1), dtype.type(np.sqrt(2.0)))
    value = (scale * k * azimuthal * legendre).astype(dtype, copy=False)
    return value[()] if scalar else value


def evaluate_index(index, theta, phi):
    """Value of the basis function stored at flat coefficient index `index`."""
    l, m = coefficient_lm(index)
    return evaluate(l, m, theta, phi)


def evaluate_sum(max_l: int, theta, phi, coefficients) -> np.ndarray:
    """
    Serial reference reconstruction sum_{l,m} y_l^m(theta, phi) * c[index(l, m)].

    The engines compute the same sum as a parallel reduction; this loop exists
    to validate them.
    """
    coefficients = np.asarray(coefficients)
    dtype = working_dtype(theta, phi)
    total = np.zeros(np.broadcast(np.asarray(theta), np.asarray(phi)).shape, dtype=dtype)
    for l in range(max_l + 1):
        for m in range(-l, l + 1):
            total = total + evaluate(l, m, theta, phi) * dtype.type(coefficients[coefficient_index(l, m)])
    total = np.asarray(total)
    return total[()] if total.ndim == 0 else total
