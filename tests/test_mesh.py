import math

import numpy as np
import torch

from shkernels.mesh import to_cartesian, to_trimesh, triangles
from shkernels.sampling import sample


def test_constant_function_samples_a_sphere():
    points, _ = sample(0, 0, (12, 7))
    xyz = to_cartesian(points)
    radius = 0.5 / math.sqrt(math.pi)
    torch.testing.assert_close(torch.linalg.norm(xyz, dim=-1), torch.full((84,), radius, dtype=torch.float64))


def test_trimesh_keeps_vertex_order_and_values():
    points, indices = sample(2, -1, (10, 6))
    mesh = to_trimesh(points, indices)
    assert mesh.vertices.shape == (60, 3)
    assert mesh.faces.shape == (120, 3)
    np.testing.assert_array_equal(mesh.faces, triangles(indices).numpy())
    np.testing.assert_allclose(mesh.vertex_attributes["value"], points[:, 0].numpy())
    np.testing.assert_allclose(mesh.vertices, to_cartesian(points).numpy())
