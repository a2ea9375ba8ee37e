import math

import torch

from shkernels.coefficients import is_zero, l1_distance, l2_distance


def test_distances_to_self_are_zero():
    torch.manual_seed(0)
    v = torch.randn(16, dtype=torch.float64)
    assert l1_distance(v, v) == 0.0
    assert l2_distance(v, v) == 0.0


def test_distance_values():
    lhs = torch.tensor([1.0, -2.0, 3.0, 0.5])
    rhs = torch.tensor([0.0, 2.0, 3.0, -0.5])
    assert math.isclose(l1_distance(lhs, rhs), 6.0)
    assert math.isclose(l2_distance(lhs, rhs), math.sqrt(18.0), rel_tol=1e-6)


def test_is_zero_matches_l1_to_zero_vector():
    zero = torch.zeros(9)
    assert is_zero(zero)
    assert l1_distance(zero, torch.zeros_like(zero)) == 0.0

    v = torch.zeros(9)
    v[4] = 1e-30
    assert not is_zero(v)
    assert l1_distance(v, torch.zeros_like(v)) != 0.0


def test_accepts_plain_sequences():
    assert is_zero([0.0, 0.0, -0.0, 0.0])
    assert l1_distance([1.0, 2.0], [1.0, 0.0]) == 2.0
