"""
Comparisons between coefficient vectors of equal length.
"""
import torch


def is_zero(coefficients) -> bool:
    """True iff every coefficient is exactly zero."""
    return int(torch.count_nonzero(torch.as_tensor(coefficients))) == 0


def l1_distance(lhs, rhs) -> float:
    """Sum of absolute per-coefficient differences."""
    diff = torch.as_tensor(lhs) - torch.as_tensor(rhs)
    return float(torch.sum(torch.abs(diff)))


def l2_distance(lhs, rhs) -> float:
    """
    Euclidean distance between coefficient vectors.

    For real SH coefficients this is the rotation-invariant shape-descriptor
    distance of Kazhdan et al.
    """
    diff = torch.as_tensor(lhs) - torch.as_tensor(rhs)
    return float(torch.sqrt(torch.sum(diff ** 2)))
