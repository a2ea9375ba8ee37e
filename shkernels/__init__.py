"""
Real spherical-harmonic kernels.

Modules:
- indexing: flat (l, m) coefficient indexing
- basis: real SH basis evaluation (special: Legendre/factorial collaborators)
- coefficients: zero test and L1/L2 distances between coefficient vectors
- projection: basis matrices for batches of directions
- sampling: tessellated-sphere sampling and coefficient reconstruction
- coupling: Clebsch-Gordan tensor product of coefficient vectors
- launch: index-space launcher, volume partitioning and scatter-add
- mesh: Cartesian conversion and trimesh export of sampled meshes
"""

from shkernels.basis import evaluate, evaluate_index, evaluate_sum
from shkernels.coefficients import is_zero, l1_distance, l2_distance
from shkernels.config import CouplingConfig, LaunchConfig
from shkernels.coupling import product, products
from shkernels.indexing import coefficient_count, coefficient_index, coefficient_lm, maximum_degree
from shkernels.projection import calculate_matrices, calculate_matrix
from shkernels.sampling import sample, sample_sum, sample_sums

__all__ = [
    "CouplingConfig",
    "LaunchConfig",
    "calculate_matrices",
    "calculate_matrix",
    "coefficient_count",
    "coefficient_index",
    "coefficient_lm",
    "evaluate",
    "evaluate_index",
    "evaluate_sum",
    "is_zero",
    "l1_distance",
    "l2_distance",
    "maximum_degree",
    "product",
    "products",
    "sample",
    "sample_sum",
    "sample_sums",
]
