import numpy as np
import pytest
import torch

from shkernels import launch
from shkernels.config import CouplingConfig, LaunchConfig


def test_grid_covers_extent():
    assert launch.grid_size((17, 16), (16, 16, 1)) == (2, 1, 1)
    assert launch.grid_size((8, 9, 1), (8, 8, 8)) == (1, 2, 1)
    assert launch.grid_size((0, 4), (16, 16, 1)) == (0, 1, 1)


def test_launch_passes_padded_work_items():
    seen = {}

    def kernel(x, y, z, extent):
        valid = (x < extent[0]) & (y < extent[1])
        seen["total"] = x.size
        seen["valid"] = int(valid.sum())
        seen["pairs"] = set(zip(x[valid].tolist(), y[valid].tolist()))

    launch.launch(kernel, (5, 3), (4, 4, 1), (5, 3))
    assert seen["total"] == 8 * 4
    assert seen["valid"] == 15
    assert seen["pairs"] == {(i, j) for i in range(5) for j in range(3)}


def test_volume_partition_order():
    items = list(launch.volume_partition((2, 3, 2)))
    assert len(items) == launch.volume_size((2, 3, 2)) == 12
    assert [v for *_, v in items] == list(range(12))
    for x, y, z, v in items:
        assert v == z + 2 * (y + 3 * x)


def test_atomic_add_accumulates_duplicates():
    buffer = torch.zeros(4, dtype=torch.float64)
    launch.atomic_add(buffer, np.array([0, 2, 2, 2, 3]), np.array([1.0, 0.5, 0.25, 0.25, -1.0]))
    torch.testing.assert_close(buffer, torch.tensor([1.0, 0.0, 1.0, -1.0], dtype=torch.float64))


def test_atomic_add_into_slice_updates_base():
    base = torch.zeros(6, dtype=torch.float32)
    launch.atomic_add(base[3:], np.array([0, 0]), np.array([1.0, 2.0]))
    assert base[3].item() == 3.0


def test_invalid_configs():
    with pytest.raises(ValueError):
        LaunchConfig(block_size_2d=(0, 16, 1))
    with pytest.raises(ValueError):
        CouplingConfig(backend="tables")
    with pytest.raises(ValueError):
        CouplingConfig(accumulator_dtype=torch.int32)
    with pytest.raises(ValueError):
        launch.as_dim3((1, 1, 1, 1))


def test_half_width_buffers_evaluate_in_float32():
    assert launch.numpy_dtype(torch.float64) == np.float64
    assert launch.numpy_dtype(torch.float32) == np.float32
    assert launch.numpy_dtype(torch.bfloat16) == np.float32
    host = launch.to_numpy(torch.tensor([1.5, -2.0], dtype=torch.bfloat16))
    assert host.dtype == np.float32
    np.testing.assert_array_equal(host, [1.5, -2.0])
