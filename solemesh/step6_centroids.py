"""
Step 6 – Feature centroids.

Uses each kept region's median pixel position rather than its centre of
mass.  For concave shapes the median can sit outside the shape; that is
tolerated only because the classifier keeps round features.

Standalone usage:
    python -m solemesh.step6_centroids --regions regions.pkl --output points.csv
"""
from __future__ import annotations

import argparse
import pickle

import numpy as np

from solemesh.io_utils import Point


def centroids(table):
    """One Point per kept region, in table order."""
    return [Point(r.median_x, r.median_y) for r in table.kept]


def centroid_array(table):
    """Kept centroids as an ``(N, 2)`` float array of (x, y)."""
    return np.asarray(centroids(table), dtype=np.float64).reshape(-1, 2)


# ── Standalone CLI ───────────────────────────────────────────────────────

def _cli():
    parser = argparse.ArgumentParser(description='Step 6: Centroid extraction')
    parser.add_argument('--regions', required=True, help='regions.pkl from step 4')
    parser.add_argument('--output', '-o', default='points.csv')
    args = parser.parse_args()

    with open(args.regions, 'rb') as f:
        table = pickle.load(f)

    from solemesh.io_utils import save_points
    points = centroids(table)
    print(f"Centroids: {len(points)}")
    save_points(args.output, points)
    print(f"Saved -> {args.output}")


if __name__ == '__main__':
    _cli()
