"""
Step 4 – Region analysis & shape classification.

Labels connected components of the cleaned mask, measures each one, and
flags the ones that do not look like a single round feature.  The
classifier is any callable ``Region -> bool`` (True = suspect); the default
one encodes the round-dot assumption and is the piece to replace for other
outsole patterns.

Standalone usage:
    python -m solemesh.step4_regions --mask clean.npz --output regions.pkl
"""
from __future__ import annotations

import argparse
import pickle
from dataclasses import dataclass, replace

import numpy as np
from skimage.measure import label, regionprops

from solemesh.io_utils import Region, RegionTable


# ── Classifier ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FillRatioClassifier:
    """
    Suspect anything that fills too little of its bounding box or is too big.

    A disk covers about pi/4 of its bounding box, so a cutoff of 0.7 keeps
    round dots while rejecting merged blobs, rings and strokes; the extent
    cap rejects anything larger than a dot of ~100 px diameter can be.
    Extents are inclusive spans, so the cap applies to ``extent - 1``
    (max - min).
    """

    min_fill_ratio: float = 0.7
    max_extent: int = 130

    def __call__(self, region: Region) -> bool:
        return (
            region.fill_ratio < self.min_fill_ratio
            or region.x_extent - 1 > self.max_extent
            or region.y_extent - 1 > self.max_extent
        )


# ── Measurement ──────────────────────────────────────────────────────────

def measure_region(region_label, coords):
    """Build an unclassified Region from its ``(row, col)`` pixel coordinates."""
    coords = np.asarray(coords)
    rows, cols = coords[:, 0], coords[:, 1]
    x_extent = int(cols.max() - cols.min()) + 1
    y_extent = int(rows.max() - rows.min()) + 1
    bbox_area = x_extent * y_extent
    return Region(
        label=int(region_label),
        coords=coords,
        pixel_count=len(coords),
        median_x=float(np.median(cols)),
        median_y=float(np.median(rows)),
        x_extent=x_extent,
        y_extent=y_extent,
        bbox_area=bbox_area,
        fill_ratio=len(coords) / bbox_area,
    )


# ── Public entry point ───────────────────────────────────────────────────

def analyze(mask, classifier=None, connectivity=2):
    """
    Label *mask* and classify every connected component.

    Returns a RegionTable ordered by label (raster order of first pixel).
    """
    if classifier is None:
        classifier = FillRatioClassifier()
    mask = np.asarray(mask, dtype=bool)
    labeled = label(mask, connectivity=connectivity)

    regions = []
    for prop in regionprops(labeled):
        region = measure_region(prop.label, prop.coords)
        regions.append(replace(region, suspect=bool(classifier(region))))

    return RegionTable(
        regions=tuple(regions), shape=mask.shape, connectivity=connectivity,
    )


# ── Standalone CLI ───────────────────────────────────────────────────────

def _cli():
    parser = argparse.ArgumentParser(description='Step 4: Region analysis')
    parser.add_argument('--mask', required=True, help='clean.npz from step 3')
    parser.add_argument('--connectivity', type=int, choices=[1, 2], default=2)
    parser.add_argument('--min-fill-ratio', type=float, default=0.7)
    parser.add_argument('--max-extent', type=int, default=130)
    parser.add_argument('--output', '-o', default='regions_output.pkl')
    args = parser.parse_args()

    mask = np.load(args.mask)['clean_mask']

    print("Running region analysis...")
    classifier = FillRatioClassifier(args.min_fill_ratio, args.max_extent)
    table = analyze(mask, classifier, connectivity=args.connectivity)
    print(f"Regions: {len(table)} ({len(table.suspects)} suspect)")

    with open(args.output, 'wb') as f:
        pickle.dump(table, f)
    print(f"Saved -> {args.output}")


if __name__ == '__main__':
    _cli()
