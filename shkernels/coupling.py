"""
Tensor product of spherical-harmonic coefficient vectors.

For every (lhs, rhs, out) coefficient triple the product adds

    sqrt((2 l1 + 1)(2 l2 + 1) / (4pi (2 l3 + 1)))
        * <l1 0 l2 0 | l3 0> <l1 m1 l2 m2 | l3 m3> * lhs[i1] * rhs[i2]

into out[i3] (Sakurai, Modern Quantum Mechanics, 2nd ed., p. 216). Selection
rules are left to the Clebsch-Gordan evaluator, which returns zero for
forbidden triples.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np
import torch

from gaunt import clebsch_gordan

from . import launch as substrate
from .config import CouplingConfig, LaunchConfig
from .indexing import coefficient_lm

logger = logging.getLogger(__name__)

DEFAULT_COUPLING_CONFIG = CouplingConfig()


def coupling_weight(l1, l2, l3, m1, m2, m3, backend: str = "sympy", dtype=np.float32) -> np.ndarray:
    """Weight with which lhs (l1, m1) times rhs (l2, m2) feeds out (l3, m3)."""
    dtype = np.dtype(dtype)
    l1 = np.asarray(l1, dtype=np.int64)
    l2 = np.asarray(l2, dtype=np.int64)
    l3 = np.asarray(l3, dtype=np.int64)
    zeros = np.zeros_like(l1)
    cg1 = clebsch_gordan(l1, l2, l3, zeros, zeros, zeros, backend=backend).astype(dtype)
    cg2 = clebsch_gordan(l1, l2, l3, m1, m2, m3, backend=backend).astype(dtype)
    ratio = ((2 * l1 + 1) * (2 * l2 + 1)).astype(dtype) / (dtype.type(4.0 * np.pi) * (2 * l3 + 1).astype(dtype))
    return np.sqrt(ratio) * cg1 * cg2


def _product_kernel(lhs_index, rhs_index, out_index, coefficient_count, lhs, rhs, out_coefficients, backend):
    valid = (lhs_index < coefficient_count) & (rhs_index < coefficient_count) & (out_index < coefficient_count)
    lhs_index = lhs_index[valid]
    rhs_index = rhs_index[valid]
    out_index = out_index[valid]

    lhs_l, lhs_m = coefficient_lm(lhs_index)
    rhs_l, rhs_m = coefficient_lm(rhs_index)
    out_l, out_m = coefficient_lm(out_index)
    dtype = substrate.numpy_dtype(out_coefficients.dtype)
    coupling = coupling_weight(lhs_l, rhs_l, out_l, lhs_m, rhs_m, out_m, backend=backend, dtype=dtype)

    contribution = (coupling * lhs[lhs_index] * rhs[rhs_index]).astype(dtype, copy=False)
    substrate.atomic_add(out_coefficients, out_index, contribution)


def product(
    coefficient_count: int,
    lhs,
    rhs,
    out: Optional[torch.Tensor] = None,
    config: Optional[CouplingConfig] = None,
    launch_config: Optional[LaunchConfig] = None,
) -> torch.Tensor:
    """
    Accumulate the coupled product of lhs and rhs into out.

    A caller-provided `out` must be zeroed beforehand; its dtype is the
    accumulator precision. A new one is allocated with
    config.accumulator_dtype.
    """
    config = config or DEFAULT_COUPLING_CONFIG
    if out is None:
        device = lhs.device if isinstance(lhs, torch.Tensor) else (launch_config or substrate.DEFAULT_LAUNCH_CONFIG).device
        out = torch.zeros(coefficient_count, dtype=config.accumulator_dtype, device=device)
    substrate.launch(
        _product_kernel,
        (coefficient_count, coefficient_count, coefficient_count),
        substrate.block_size_3d(launch_config),
        coefficient_count,
        substrate.to_numpy(lhs),
        substrate.to_numpy(rhs),
        out.view(-1),
        config.backend,
    )
    return out


def products(
    dimensions: Sequence[int],
    coefficient_count: int,
    lhs,
    rhs,
    out: Optional[torch.Tensor] = None,
    config: Optional[CouplingConfig] = None,
    launch_config: Optional[LaunchConfig] = None,
) -> torch.Tensor:
    """
    Coupled products for a volume of independent (lhs, rhs, out) triples.

    Instance i uses the slice [i*C, (i+1)*C) of lhs, rhs and out.
    """
    config = config or DEFAULT_COUPLING_CONFIG
    volume = substrate.volume_size(dimensions)
    expected = volume * coefficient_count
    if len(lhs) != expected or len(rhs) != expected:
        raise ValueError(
            f"lhs/rhs lengths ({len(lhs)}, {len(rhs)}) do not match a volume of {volume} x {coefficient_count}"
        )
    if out is None:
        device = lhs.device if isinstance(lhs, torch.Tensor) else (launch_config or substrate.DEFAULT_LAUNCH_CONFIG).device
        out = torch.zeros(expected, dtype=config.accumulator_dtype, device=device)
    flat = out.view(-1)

    logger.debug("products volume=%s coefficient_count=%d backend=%s",
                 substrate.as_dim3(dimensions), coefficient_count, config.backend)
    for _, _, _, volume_index in substrate.volume_partition(dimensions):
        offset = coefficient_count * volume_index
        product(
            coefficient_count,
            lhs[offset:offset + coefficient_count],
            rhs[offset:offset + coefficient_count],
            flat[offset:offset + coefficient_count],
            config=config,
            launch_config=launch_config,
        )
    return out
