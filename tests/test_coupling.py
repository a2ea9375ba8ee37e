import math

import pytest
import torch

from shkernels.config import CouplingConfig, LaunchConfig
from shkernels.coupling import coupling_weight, product, products
from shkernels.indexing import coefficient_count, coefficient_index


def test_constant_times_constant_normalization():
    lhs = torch.tensor([2.0], dtype=torch.float64)
    rhs = torch.tensor([3.0], dtype=torch.float64)
    out = product(1, lhs, rhs)
    assert out.dtype == torch.float32
    assert out.shape == (1,)
    assert out[0].item() == pytest.approx(6.0 / math.sqrt(4.0 * math.pi), rel=1e-6)


def test_constant_factor_scales_other_operand():
    count = coefficient_count(2)
    rhs = torch.randn(count, dtype=torch.float64, generator=torch.Generator().manual_seed(0))
    lhs = torch.zeros(count, dtype=torch.float64)
    lhs[0] = 1.5
    cfg = CouplingConfig(accumulator_dtype=torch.float64)
    expected = 1.5 / math.sqrt(4.0 * math.pi) * rhs
    torch.testing.assert_close(product(count, lhs, rhs, config=cfg), expected)
    torch.testing.assert_close(product(count, rhs, lhs, config=cfg), expected)


def test_dipole_squared_selection_rules():
    count = coefficient_count(2)
    y10 = torch.zeros(count, dtype=torch.float64)
    y10[coefficient_index(1, 0)] = 1.0
    out = product(count, y10, y10, config=CouplingConfig(accumulator_dtype=torch.float64))

    assert out[coefficient_index(0, 0)].item() == pytest.approx(1.0 / math.sqrt(4.0 * math.pi))
    assert out[coefficient_index(2, 0)].item() == pytest.approx(2.0 / math.sqrt(20.0 * math.pi))
    mask = torch.ones(count, dtype=torch.bool)
    mask[coefficient_index(0, 0)] = False
    mask[coefficient_index(2, 0)] = False
    assert torch.all(out[mask].abs() < 1e-12)


def test_coupling_weight_is_zero_outside_selection_rules():
    assert coupling_weight(1, 1, 1, 0, 0, 0) == 0.0  # parity
    assert coupling_weight(1, 1, 2, 1, 1, 0) == 0.0  # m1 + m2 != m3
    assert coupling_weight(0, 1, 3, 0, 0, 0) == 0.0  # triangle


def test_block_size_does_not_change_result():
    count = coefficient_count(2)
    gen = torch.Generator().manual_seed(1)
    lhs = torch.randn(count, dtype=torch.float64, generator=gen)
    rhs = torch.randn(count, dtype=torch.float64, generator=gen)
    reference = product(count, lhs, rhs)
    odd = product(count, lhs, rhs, launch_config=LaunchConfig(block_size_3d=(5, 2, 7)))
    torch.testing.assert_close(odd, reference, rtol=1e-5, atol=1e-6)


def test_unit_volume_matches_single_product():
    count = coefficient_count(1)
    gen = torch.Generator().manual_seed(2)
    lhs = torch.randn(count, dtype=torch.float64, generator=gen)
    rhs = torch.randn(count, dtype=torch.float64, generator=gen)
    torch.testing.assert_close(products((1, 1, 1), count, lhs, rhs), product(count, lhs, rhs))


def test_volume_slices_are_independent():
    count = coefficient_count(1)
    gen = torch.Generator().manual_seed(3)
    lhs = torch.randn(2 * count, dtype=torch.float64, generator=gen)
    rhs = torch.randn(2 * count, dtype=torch.float64, generator=gen)
    out = products((1, 1, 2), count, lhs, rhs)
    for i in range(2):
        sl = slice(i * count, (i + 1) * count)
        torch.testing.assert_close(out[sl], product(count, lhs[sl], rhs[sl]))


def test_volume_rejects_mismatched_lengths():
    with pytest.raises(ValueError):
        products((2, 1, 1), 4, torch.zeros(8), torch.zeros(4))


def test_wigxjpf_backend_matches_sympy():
    pytest.importorskip("pywigxjpf")
    count = coefficient_count(2)
    gen = torch.Generator().manual_seed(4)
    lhs = torch.randn(count, dtype=torch.float64, generator=gen)
    rhs = torch.randn(count, dtype=torch.float64, generator=gen)
    ref = product(count, lhs, rhs, config=CouplingConfig(backend="sympy", accumulator_dtype=torch.float64))
    fast = product(count, lhs, rhs, config=CouplingConfig(backend="wigxjpf", accumulator_dtype=torch.float64))
    torch.testing.assert_close(fast, ref)


@pytest.mark.parametrize("dtype", [torch.float16, torch.bfloat16])
def test_half_precision_accumulator(dtype):
    lhs = torch.tensor([2.0], dtype=torch.float64)
    rhs = torch.tensor([3.0], dtype=torch.float64)
    out = product(1, lhs, rhs, config=CouplingConfig(accumulator_dtype=dtype))
    assert out.dtype == dtype
    assert out[0].item() == pytest.approx(6.0 / math.sqrt(4.0 * math.pi), rel=1e-2)


def test_bfloat16_operands():
    count = coefficient_count(1)
    lhs = torch.tensor([1.0, 0.0, 0.5, 0.0], dtype=torch.bfloat16)
    rhs = torch.tensor([2.0, 0.0, 0.0, 0.0], dtype=torch.bfloat16)
    out = product(count, lhs, rhs, config=CouplingConfig(accumulator_dtype=torch.float64))
    expected = 2.0 / math.sqrt(4.0 * math.pi) * torch.tensor([1.0, 0.0, 0.5, 0.0], dtype=torch.float64)
    torch.testing.assert_close(out, expected)
