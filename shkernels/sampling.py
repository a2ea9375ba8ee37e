"""
Sampling real spherical harmonics on a tessellated sphere.

A tessellation (X, Y) is a longitude x latitude grid. Vertex (lon, lat) sits at
theta = 2pi lon / X, phi = pi lat / (Y - 1) and is stored at lat + lon * Y as a
(value, theta, phi) record. Each vertex also owns six entries of the index
buffer: the two triangles of the quad spanned towards (lon + 1, lat + 1), with
both axes wrapping modulo the grid size.

Y must be at least 2; the latitude spacing divides by Y - 1 and is not guarded.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

import numpy as np
import torch

from . import launch as substrate
from .basis import evaluate, evaluate_index
from .config import LaunchConfig

logger = logging.getLogger(__name__)

Tessellation = Tuple[int, int]


def _grid_angles(longitude, latitude, tessellations: Tessellation, dtype: np.dtype):
    tx, ty = tessellations
    theta = dtype.type(2.0 * np.pi) * longitude.astype(dtype) / dtype.type(tx)
    phi = dtype.type(np.pi) * latitude.astype(dtype) / dtype.type(ty - 1)
    return theta, phi


def quad_indices(longitude, latitude, tessellations: Tessellation, base_index: int = 0) -> np.ndarray:
    """[n, 6] vertex indices of the two triangles owned by each (lon, lat) cell."""
    tx, ty = tessellations
    next_lon = (longitude + 1) % tx
    next_lat = (latitude + 1) % ty
    a = longitude * ty + latitude
    b = longitude * ty + next_lat
    c = next_lon * ty + next_lat
    d = next_lon * ty + latitude
    return base_index + np.stack([a, b, c, a, c, d], axis=-1)


def _index_slots(point_offset) -> np.ndarray:
    return (6 * point_offset[:, None] + np.arange(6, dtype=np.int64)).ravel()


def allocate_mesh(
    vertex_count: int,
    dtype: torch.dtype = torch.float64,
    device: str = "cpu",
    index_dtype: torch.dtype = torch.int64,
) -> Tuple[torch.Tensor, torch.Tensor]:
    """Zeroed point ([vertex_count, 3]) and index (6 * vertex_count) buffers."""
    points = torch.zeros((vertex_count, 3), dtype=dtype, device=device)
    indices = torch.zeros(6 * vertex_count, dtype=index_dtype, device=device)
    return points, indices


def _sample_kernel(longitude, latitude, _, l, m, tessellations, output_points, output_indices):
    tx, ty = tessellations
    valid = (longitude < tx) & (latitude < ty)
    longitude = longitude[valid]
    latitude = latitude[valid]

    point_offset = latitude + longitude * ty
    theta, phi = _grid_angles(longitude, latitude, tessellations, substrate.numpy_dtype(output_points.dtype))
    values = evaluate(l, m, theta, phi)

    substrate.store(output_points, point_offset, np.stack([values, theta, phi], axis=-1))
    substrate.store(output_indices, _index_slots(point_offset),
                    quad_indices(longitude, latitude, tessellations).ravel())


def sample(
    l: int,
    m: int,
    tessellations: Sequence[int],
    output_points: Optional[torch.Tensor] = None,
    output_indices: Optional[torch.Tensor] = None,
    config: Optional[LaunchConfig] = None,
) -> Tuple[torch.Tensor, torch.Tensor]:
    """Sample y_l^m on the grid; returns (points [X*Y, 3], indices [6*X*Y])."""
    tessellations = (int(tessellations[0]), int(tessellations[1]))
    vertex_count = tessellations[0] * tessellations[1]
    if output_points is None or output_indices is None:
        device = (config or substrate.DEFAULT_LAUNCH_CONFIG).device
        points, indices = allocate_mesh(vertex_count, device=device)
        output_points = points if output_points is None else output_points
        output_indices = indices if output_indices is None else output_indices
    substrate.launch(
        _sample_kernel,
        tessellations,
        substrate.block_size_2d(config),
        l,
        m,
        tessellations,
        output_points,
        output_indices,
    )
    return output_points, output_indices


def _sample_sum_kernel(
    longitude, latitude, coefficient_index,
    coefficient_count, tessellations, coefficients, output_points, output_indices, base_index,
):
    tx, ty = tessellations
    valid = (longitude < tx) & (latitude < ty) & (coefficient_index < coefficient_count)
    longitude = longitude[valid]
    latitude = latitude[valid]
    coefficient_index = coefficient_index[valid]

    dtype = substrate.numpy_dtype(output_points.dtype)
    point_offset = latitude + longitude * ty
    theta, phi = _grid_angles(longitude, latitude, tessellations, dtype)

    # Claim phase: the coefficient-0 work item of each vertex resets its value,
    # writes the angles and emits the vertex's index entries. It completes
    # before any work item of this launch accumulates.
    claim = coefficient_index == 0
    claimed = point_offset[claim]
    substrate.store(
        output_points,
        claimed,
        np.stack([np.zeros_like(theta[claim]), theta[claim], phi[claim]], axis=-1),
    )
    substrate.store(
        output_indices,
        _index_slots(claimed),
        quad_indices(longitude[claim], latitude[claim], tessellations, base_index).ravel(),
    )

    # Accumulation phase: one contribution per (vertex, coefficient).
    weights = coefficients[coefficient_index].astype(dtype, copy=False)
    values = evaluate_index(coefficient_index, theta, phi) * weights
    substrate.atomic_add(output_points.view(-1), 3 * point_offset, values)


def sample_sum(
    coefficient_count: int,
    tessellations: Sequence[int],
    coefficients,
    output_points: Optional[torch.Tensor] = None,
    output_indices: Optional[torch.Tensor] = None,
    base_index: int = 0,
    config: Optional[LaunchConfig] = None,
) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Reconstruct sum_c y_c * coefficients[c] on the grid.

    `base_index` is added to every emitted index so several meshes can share
    one concatenated vertex buffer.
    """
    tessellations = (int(tessellations[0]), int(tessellations[1]))
    vertex_count = tessellations[0] * tessellations[1]
    if output_points is None or output_indices is None:
        dtype = coefficients.dtype if isinstance(coefficients, torch.Tensor) else torch.float64
        device = (config or substrate.DEFAULT_LAUNCH_CONFIG).device
        points, indices = allocate_mesh(vertex_count, dtype=dtype, device=device)
        output_points = points if output_points is None else output_points
        output_indices = indices if output_indices is None else output_indices
    substrate.launch(
        _sample_sum_kernel,
        (tessellations[0], tessellations[1], coefficient_count),
        substrate.block_size_3d(config),
        coefficient_count,
        tessellations,
        substrate.to_numpy(coefficients),
        output_points,
        output_indices,
        int(base_index),
    )
    return output_points, output_indices


def sample_sums(
    dimensions: Sequence[int],
    coefficient_count: int,
    tessellations: Sequence[int],
    coefficients,
    output_points: Optional[torch.Tensor] = None,
    output_indices: Optional[torch.Tensor] = None,
    base_index: int = 0,
    config: Optional[LaunchConfig] = None,
) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Reconstruct a volume of meshes into one concatenated point/index buffer.

    Instance i reads coefficients[i*C:(i+1)*C], owns points [i*X*Y, (i+1)*X*Y)
    and indices [6*i*X*Y, 6*(i+1)*X*Y), and its indices are offset by
    base_index + i*X*Y so they address the shared vertex buffer.
    """
    tessellations = (int(tessellations[0]), int(tessellations[1]))
    vertex_count = tessellations[0] * tessellations[1]
    volume = substrate.volume_size(dimensions)
    if len(coefficients) != volume * coefficient_count:
        raise ValueError(
            f"{len(coefficients)} coefficients do not match a volume of {volume} x {coefficient_count}"
        )
    if output_points is None or output_indices is None:
        dtype = coefficients.dtype if isinstance(coefficients, torch.Tensor) else torch.float64
        device = (config or substrate.DEFAULT_LAUNCH_CONFIG).device
        points, indices = allocate_mesh(volume * vertex_count, dtype=dtype, device=device)
        output_points = points if output_points is None else output_points
        output_indices = indices if output_indices is None else output_indices

    logger.debug("sample_sums volume=%s tessellations=%s coefficient_count=%d",
                 substrate.as_dim3(dimensions), tessellations, coefficient_count)
    for _, _, _, volume_index in substrate.volume_partition(dimensions):
        coefficients_offset = volume_index * coefficient_count
        points_offset = volume_index * vertex_count
        indices_offset = 6 * points_offset
        sample_sum(
            coefficient_count,
            tessellations,
            coefficients[coefficients_offset:coefficients_offset + coefficient_count],
            output_points[points_offset:points_offset + vertex_count],
            output_indices[indices_offset:indices_offset + 6 * vertex_count],
            base_index=base_index + points_offset,
            config=config,
        )
    return output_points, output_indices
