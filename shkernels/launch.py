"""
Data-parallel launch substrate for the kernels.

A launch covers an extent (up to three axes) with a grid of ceil(extent / block)
blocks and hands the kernel the flattened global (x, y, z) coordinate of every
work item at once, so a kernel body is written against index arrays rather
than a single thread id. Work items past the extent are included; each kernel
discards them with its own bounds check.

Write-once kernels assign with `store`. Kernels where several work items hit
the same slot use `atomic_add`, a scatter-add that sums every contribution.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterator, Optional, Sequence, Tuple

import numpy as np
import torch

from .config import Dim3, LaunchConfig

logger = logging.getLogger(__name__)

DEFAULT_LAUNCH_CONFIG = LaunchConfig()


def block_size_2d(config: Optional[LaunchConfig] = None) -> Dim3:
    return (config or DEFAULT_LAUNCH_CONFIG).block_size_2d


def block_size_3d(config: Optional[LaunchConfig] = None) -> Dim3:
    return (config or DEFAULT_LAUNCH_CONFIG).block_size_3d


def as_dim3(extent: Sequence[int]) -> Dim3:
    """Pad a 1D/2D/3D extent to three axes."""
    dims = tuple(int(e) for e in extent)
    if len(dims) > 3:
        raise ValueError(f"extent has at most three axes, got {extent!r}")
    return dims + (1,) * (3 - len(dims))


def grid_size(extent: Sequence[int], block_size: Sequence[int]) -> Dim3:
    """Number of blocks per axis needed to cover the extent."""
    return tuple(-(-e // int(b)) for e, b in zip(as_dim3(extent), block_size))


def work_items(grid: Sequence[int], block_size: Sequence[int]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Global (x, y, z) coordinate of every work item in the launch, flattened."""
    axes = [np.arange(int(g) * int(b), dtype=np.int64) for g, b in zip(grid, block_size)]
    x, y, z = np.meshgrid(*axes, indexing="ij")
    return x.ravel(), y.ravel(), z.ravel()


def launch(kernel: Callable, extent: Sequence[int], block_size: Sequence[int], *args, **kwargs):
    """Run `kernel(x, y, z, *args, **kwargs)` over the work items covering `extent`."""
    grid = grid_size(extent, block_size)
    logger.debug(
        "launch %s extent=%s grid=%s block=%s",
        getattr(kernel, "__name__", repr(kernel)),
        as_dim3(extent),
        grid,
        tuple(block_size),
    )
    x, y, z = work_items(grid, block_size)
    return kernel(x, y, z, *args, **kwargs)


def volume_size(dimensions: Sequence[int]) -> int:
    dx, dy, dz = as_dim3(dimensions)
    return dx * dy * dz


def volume_partition(dimensions: Sequence[int]) -> Iterator[Tuple[int, int, int, int]]:
    """
    Yield (x, y, z, volume_index) for every instance of a batch volume.

    volume_index = z + dz * (y + dy * x); instance slices are laid out
    contiguously in that order.
    """
    dx, dy, dz = as_dim3(dimensions)
    for x in range(dx):
        for y in range(dy):
            for z in range(dz):
                yield x, y, z, z + dz * (y + dy * x)


def to_numpy(tensor) -> np.ndarray:
    """Host copy of a buffer; half-width floats (float16, bfloat16) widen to float32."""
    if isinstance(tensor, torch.Tensor):
        tensor = tensor.detach().cpu()
        if tensor.is_floating_point() and tensor.element_size() < 4:
            tensor = tensor.float()
        return tensor.numpy()
    return np.asarray(tensor)


def numpy_dtype(dtype: torch.dtype) -> np.dtype:
    """
    Precision a kernel evaluates in for a buffer of the given torch dtype.

    float64 stays float64 and every narrower float evaluates in float32; the
    store into the buffer rounds to its own dtype. NumPy has no bfloat16, and
    float16 factorials overflow from 9! on.
    """
    if dtype == torch.float64:
        return np.dtype(np.float64)
    return np.dtype(np.float32)


def store(buffer: torch.Tensor, index, values) -> None:
    """Write-once assignment buffer[index] = values."""
    index_t = torch.as_tensor(index, dtype=torch.int64, device=buffer.device)
    buffer[index_t] = torch.as_tensor(values).to(device=buffer.device, dtype=buffer.dtype)


def atomic_add(buffer: torch.Tensor, index, values) -> None:
    """buffer[index] += values with every duplicate index accumulated."""
    index_t = torch.as_tensor(index, dtype=torch.int64, device=buffer.device)
    values_t = torch.as_tensor(values).to(device=buffer.device, dtype=buffer.dtype)
    buffer.index_put_((index_t,), values_t, accumulate=True)
