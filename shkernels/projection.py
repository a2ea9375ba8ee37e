"""
Projection matrices: basis values for a batch of directions.

Directions are (value, theta, phi) records stored as a [N, 3] tensor; only the
angles are read. Matrices are flat and column-major by coefficient, i.e. the
entry for (direction v, coefficient c) lives at v + N * c.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import torch

from . import launch as substrate
from .basis import evaluate_index
from .config import LaunchConfig

logger = logging.getLogger(__name__)


def _calculate_matrix_kernel(vector_index, coefficient_index, _, vector_count, coefficient_count, angles, output_matrix):
    valid = (vector_index < vector_count) & (coefficient_index < coefficient_count)
    vector_index = vector_index[valid]
    coefficient_index = coefficient_index[valid]

    values = evaluate_index(coefficient_index, angles[vector_index, 1], angles[vector_index, 2])
    substrate.atomic_add(output_matrix, vector_index + vector_count * coefficient_index, values)


def calculate_matrix(
    vectors: torch.Tensor,
    coefficient_count: int,
    output_matrix: Optional[torch.Tensor] = None,
    config: Optional[LaunchConfig] = None,
) -> torch.Tensor:
    """
    Accumulate y_c(theta_v, phi_v) into output_matrix[v + N * c].

    A caller-provided output must be zeroed beforehand; a new one is allocated
    zeroed on the vectors' device with the vectors' dtype.
    """
    vector_count = int(vectors.shape[0])
    if output_matrix is None:
        output_matrix = torch.zeros(vector_count * coefficient_count, dtype=vectors.dtype, device=vectors.device)
    substrate.launch(
        _calculate_matrix_kernel,
        (vector_count, coefficient_count),
        substrate.block_size_2d(config),
        vector_count,
        coefficient_count,
        substrate.to_numpy(vectors),
        output_matrix.view(-1),
    )
    return output_matrix


def calculate_matrices(
    dimensions: Sequence[int],
    vectors: torch.Tensor,
    coefficient_count: int,
    output_matrices: Optional[torch.Tensor] = None,
    config: Optional[LaunchConfig] = None,
) -> torch.Tensor:
    """
    Projection matrices for a dimensions.x * y * z volume of direction batches.

    `vectors` holds every batch back to back ([volume * N, 3]); batch i writes
    the matrix slice starting at i * N * coefficient_count.
    """
    volume = substrate.volume_size(dimensions)
    total = int(vectors.shape[0])
    if volume == 0:
        raise ValueError(f"dimensions {tuple(dimensions)} describe an empty volume")
    if total % volume != 0:
        raise ValueError(f"{total} vectors do not split evenly into a volume of {volume} batches")
    vector_count = total // volume
    if output_matrices is None:
        output_matrices = torch.zeros(total * coefficient_count, dtype=vectors.dtype, device=vectors.device)
    flat = output_matrices.view(-1)

    logger.debug("calculate_matrices volume=%s vector_count=%d coefficient_count=%d",
                 substrate.as_dim3(dimensions), vector_count, coefficient_count)
    for _, _, _, volume_index in substrate.volume_partition(dimensions):
        vectors_offset = vector_count * volume_index
        matrix_offset = vectors_offset * coefficient_count
        calculate_matrix(
            vectors[vectors_offset:vectors_offset + vector_count],
            coefficient_count,
            flat[matrix_offset:matrix_offset + vector_count * coefficient_count],
            config=config,
        )
    return output_matrices
