"""
Turn sampled (value, theta, phi) vertices into renderable geometry.

Each vertex is placed along its direction at radius |value|, the usual polar
plot of a spherical-harmonic function. Signs are kept separately so callers
can color positive and negative lobes.
"""
from __future__ import annotations

import numpy as np
import torch
import trimesh


def to_cartesian(points: torch.Tensor) -> torch.Tensor:
    """[N, 3] (value, theta, phi) records -> [N, 3] xyz with radius |value|."""
    r = torch.abs(points[..., 0])
    theta = points[..., 1]
    phi = points[..., 2]
    sin_phi = torch.sin(phi)
    x = r * sin_phi * torch.cos(theta)
    y = r * sin_phi * torch.sin(theta)
    z = r * torch.cos(phi)
    return torch.stack([x, y, z], dim=-1)


def triangles(indices: torch.Tensor) -> torch.Tensor:
    """Flat index buffer -> [F, 3] faces."""
    return indices.reshape(-1, 3)


def to_trimesh(points: torch.Tensor, indices: torch.Tensor) -> trimesh.Trimesh:
    """
    Build a trimesh.Trimesh of a sampled function.

    Vertices are not merged (process=False) so vertex i still matches point i;
    the vertex attribute "value" carries the signed sample.
    """
    vertices = to_cartesian(points).detach().cpu().numpy()
    faces = triangles(indices).detach().cpu().numpy().astype(np.int64)
    mesh = trimesh.Trimesh(vertices=vertices, faces=faces, process=False)
    mesh.vertex_attributes["value"] = points[:, 0].detach().cpu().numpy()
    return mesh
