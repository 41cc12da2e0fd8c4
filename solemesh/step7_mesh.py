"""
Step 7 – Delaunay mesh over the feature centroids.

Duplicate points are tolerated: they stay in ``Mesh.vertices`` but no
triangle references them, and their indices are listed in ``Mesh.unused``.

Standalone usage:
    python -m solemesh.step7_mesh --points points.csv --output mesh.npz
"""
from __future__ import annotations

import argparse

import numpy as np
from scipy.spatial import Delaunay, QhullError

from solemesh.errors import InsufficientPointsForMesh
from solemesh.io_utils import Mesh


def _as_array(points):
    return np.asarray([(p[0], p[1]) for p in points], dtype=np.float64).reshape(-1, 2)


def triangulate(points):
    """
    Triangulate *points* (iterable of (x, y)).

    Raises InsufficientPointsForMesh for fewer than 3 distinct points or for
    points that all lie on one line.
    """
    pts = _as_array(points)
    distinct = np.unique(pts, axis=0)
    if len(distinct) < 3:
        raise InsufficientPointsForMesh(
            f"need at least 3 distinct points, got {len(distinct)}")
    if np.linalg.matrix_rank(distinct - distinct.mean(axis=0)) < 2:
        raise InsufficientPointsForMesh(
            f"all {len(distinct)} points are collinear")

    try:
        tri = Delaunay(pts)
    except QhullError as exc:
        raise InsufficientPointsForMesh(f"triangulation failed: {exc}") from exc

    triangles = tri.simplices.astype(np.intp)
    used = set(np.unique(triangles).tolist())
    unused = tuple(i for i in range(len(pts)) if i not in used)
    return Mesh(vertices=pts, triangles=triangles, unused=unused)


# ── Standalone CLI ───────────────────────────────────────────────────────

def _cli():
    parser = argparse.ArgumentParser(description='Step 7: Mesh construction')
    parser.add_argument('--points', required=True, help='points.csv from step 6')
    parser.add_argument('--output', '-o', default='mesh_output.npz')
    args = parser.parse_args()

    points = np.loadtxt(args.points, delimiter=',', skiprows=1, ndmin=2)

    print("Running triangulation...")
    mesh = triangulate(points)
    print(f"Mesh: {len(mesh.vertices)} vertices, {len(mesh.triangles)} triangles, "
          f"{len(mesh.edges)} edges")

    from solemesh.io_utils import save_mesh
    save_mesh(args.output, mesh)
    print(f"Saved -> {args.output}")


if __name__ == '__main__':
    _cli()
