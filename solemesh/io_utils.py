"""
Shared I/O helpers and data classes used across pipeline steps.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple, Optional

import numpy as np
from skimage.util import img_as_float


# ── Data classes ─────────────────────────────────────────────────────────

class Point(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True, eq=False)
class Region:
    label: int
    coords: np.ndarray   # (N, 2) array of (row, col)
    pixel_count: int
    median_x: float
    median_y: float
    x_extent: int        # inclusive column span
    y_extent: int        # inclusive row span
    bbox_area: int
    fill_ratio: float
    suspect: bool = False

    @property
    def centroid(self):
        return Point(self.median_x, self.median_y)


@dataclass(frozen=True, eq=False)
class RegionTable:
    regions: tuple
    shape: tuple
    connectivity: int = 2

    def __len__(self):
        return len(self.regions)

    def __iter__(self):
        return iter(self.regions)

    @property
    def kept(self):
        return tuple(r for r in self.regions if not r.suspect)

    @property
    def suspects(self):
        return tuple(r for r in self.regions if r.suspect)


@dataclass(frozen=True, eq=False)
class Mesh:
    vertices: np.ndarray     # (N, 2) float, columns are x, y
    triangles: np.ndarray    # (M, 3) vertex indices, counter-clockwise
    unused: tuple = ()       # duplicate vertices referenced by no triangle

    @property
    def edges(self):
        """Unique undirected edges as an (E, 2) array of sorted index pairs."""
        tri = self.triangles
        if len(tri) == 0:
            return np.empty((0, 2), dtype=np.intp)
        pairs = np.concatenate([tri[:, [0, 1]], tri[:, [1, 2]], tri[:, [0, 2]]])
        pairs = np.sort(pairs, axis=1)
        return np.unique(pairs, axis=0)

    def edge_lengths(self):
        e = self.edges
        return np.linalg.norm(self.vertices[e[:, 0]] - self.vertices[e[:, 1]], axis=1)


@dataclass
class StageFailure:
    stage: str
    reason: str


@dataclass
class FingerprintResult:
    name: str = ""
    image: Optional[np.ndarray] = None
    offset: tuple = (0, 0)              # (row, col) of the ROI in the raw scan
    gray: Optional[np.ndarray] = None
    binary_mask: Optional[np.ndarray] = None
    clean_mask: Optional[np.ndarray] = None
    regions: Optional[RegionTable] = None
    feature_mask: Optional[np.ndarray] = None
    points: list = field(default_factory=list)
    mesh: Optional[Mesh] = None
    failure: Optional[StageFailure] = None

    @property
    def ok(self):
        return self.failure is None

    def raw_points(self):
        """Centroids shifted back into the coordinate frame of the raw scan."""
        r0, c0 = self.offset
        return [Point(p.x + c0, p.y + r0) for p in self.points]


# ── Image loading / saving ───────────────────────────────────────────────

IMAGE_EXTS = {'.tif', '.tiff', '.png', '.jpg', '.jpeg', '.bmp'}


def load_image(path, rotate=1):
    """Load a scan as float64 in [0, 1], rotated by ``rotate`` quarter turns."""
    p = Path(path)
    if p.suffix.lower() in ('.tif', '.tiff'):
        import tifffile
        img = tifffile.imread(str(p))
    else:
        from PIL import Image
        img = np.array(Image.open(p))
    if img.ndim == 3 and img.shape[-1] == 4:
        img = img[..., :3]
    elif img.ndim == 3 and img.shape[-1] == 2:
        img = img[..., 0]
    img = img_as_float(img)
    if rotate:
        img = np.rot90(img, k=rotate)
    return np.ascontiguousarray(img)


def list_images(directory):
    """Image files in *directory*, sorted by name."""
    directory = Path(directory)
    return sorted(p for p in directory.iterdir() if p.suffix.lower() in IMAGE_EXTS)


def save_points(path, points):
    arr = np.asarray([(p[0], p[1]) for p in points], dtype=np.float64).reshape(-1, 2)
    np.savetxt(path, arr, delimiter=',', header='x,y', comments='', fmt='%.3f')


def save_mesh(path, mesh):
    np.savez_compressed(
        path,
        vertices=mesh.vertices,
        triangles=mesh.triangles,
        edges=mesh.edges,
        unused=np.asarray(mesh.unused, dtype=np.intp),
    )
