from dataclasses import dataclass
from typing import Tuple

import torch

Dim3 = Tuple[int, int, int]

COUPLING_BACKENDS = ("sympy", "wigxjpf")


@dataclass(frozen=True)
class LaunchConfig:
    """Work-item block shapes and the device used for engine-allocated buffers."""
    block_size_2d: Dim3 = (16, 16, 1)  # matrix and flat sampling kernels
    block_size_3d: Dim3 = (8, 8, 8)    # weighted sampling and coupling kernels
    device: str = "cpu"  # target device for buffers the engines allocate: "cuda" or "cpu"

    def __post_init__(self) -> None:
        for name in ("block_size_2d", "block_size_3d"):
            block = getattr(self, name)
            if len(block) != 3 or any(int(b) < 1 for b in block):
                raise ValueError(f"{name} must be three positive integers, got {block!r}")


@dataclass(frozen=True)
class CouplingConfig:
    """Coupling-coefficient backend and the dtype of the product accumulator."""
    backend: str = "sympy"  # "sympy" or "wigxjpf"
    accumulator_dtype: torch.dtype = torch.float32

    def __post_init__(self) -> None:
        if self.backend not in COUPLING_BACKENDS:
            raise ValueError(f"Unknown coupling backend {self.backend!r}; expected one of {COUPLING_BACKENDS}")
        if not self.accumulator_dtype.is_floating_point:
            raise ValueError(f"accumulator_dtype must be a floating dtype, got {self.accumulator_dtype}")
