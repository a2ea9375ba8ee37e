"""
Render a gallery of real spherical-harmonic basis functions.

Each y_l^m up to --lmax is sampled on a longitude x latitude tessellation and
drawn as a polar surface (radius |y|), colored by sign.

Usage:
    python render_harmonics.py --lmax 3
    python render_harmonics.py --lmax 4 --tessellations 64 33 --out harmonics.png --no-show
"""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

ROOT = os.path.abspath(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from shkernels.logging_config import setup_logging
from shkernels.mesh import to_cartesian, triangles
from shkernels.sampling import sample

POSITIVE_COLOR = "#c55a11"
NEGATIVE_COLOR = "#4472c4"


def _draw_harmonic(ax, l: int, m: int, tessellations: tuple[int, int]) -> None:
    points, indices = sample(l, m, tessellations)
    xyz = to_cartesian(points).numpy()
    faces = triangles(indices).numpy()
    values = points[:, 0].numpy()

    face_vals = values[faces].mean(axis=1)
    colors = np.where(face_vals >= 0.0, POSITIVE_COLOR, NEGATIVE_COLOR)
    poly = Poly3DCollection(xyz[faces], linewidths=0.0, edgecolors="none")
    poly.set_facecolor(colors)
    ax.add_collection3d(poly)

    lim = max(float(np.max(np.abs(xyz))), 1e-6)
    ax.set_xlim(-lim, lim)
    ax.set_ylim(-lim, lim)
    ax.set_zlim(-lim, lim)
    ax.set_box_aspect((1, 1, 1))
    ax.set_axis_off()
    ax.set_title(f"({l},{m})", fontsize=8)


def render_gallery(lmax: int, tessellations: tuple[int, int]):
    """Figure with one row per degree and one column per order."""
    cols = 2 * lmax + 1
    fig = plt.figure(figsize=(1.6 * cols, 1.6 * (lmax + 1)), dpi=120)
    for l in range(lmax + 1):
        for m in range(-l, l + 1):
            ax = fig.add_subplot(lmax + 1, cols, l * cols + (m + lmax) + 1, projection="3d")
            _draw_harmonic(ax, l, m, tessellations)
    fig.tight_layout()
    return fig


def main() -> None:
    parser = argparse.ArgumentParser(description="Render real spherical-harmonic basis functions.")
    parser.add_argument("--lmax", type=int, default=3, help="Highest degree to draw.")
    parser.add_argument(
        "--tessellations", type=int, nargs=2, default=(48, 25), metavar=("LON", "LAT"),
        help="Longitude and latitude sample counts (LAT >= 2).",
    )
    parser.add_argument("--out", type=Path, default=None, help="Save the gallery to this image path.")
    parser.add_argument("--no-show", action="store_true", help="Do not open a window.")
    parser.add_argument("--verbose", action="store_true", help="Log every kernel launch.")
    args = parser.parse_args()

    if args.lmax < 0:
        parser.error("--lmax must be non-negative")
    if args.tessellations[0] < 1 or args.tessellations[1] < 2:
        parser.error("--tessellations needs LON >= 1 and LAT >= 2")
    if args.no_show and args.out is None:
        parser.error("--out is required with --no-show")

    logger = setup_logging(trace_launches=args.verbose)
    tessellations = (args.tessellations[0], args.tessellations[1])
    logger.info("Rendering degrees 0..%d on a %dx%d tessellation", args.lmax, *tessellations)

    fig = render_gallery(args.lmax, tessellations)
    if args.out is not None:
        fig.savefig(args.out, dpi=150)
        print(f"Harmonic gallery saved to {args.out}")
    if args.no_show:
        plt.close(fig)
    else:
        plt.show()


if __name__ == "__main__":
    main()
