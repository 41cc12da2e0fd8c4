"""
Step 3 – Morphological filter.

Closes the inverted mask with a disk (which opens the features, wiping
background specks smaller than the disk), flips back, and closes again to
fuse gaps inside each feature.  The disk radius must stay below the radius
of the smallest feature to keep, or real features vanish.

Standalone usage:
    python -m solemesh.step3_morphology --mask binary.npz --radius 10 --output clean.npz
"""
from __future__ import annotations

import argparse

import numpy as np
from scipy import ndimage
from skimage.morphology import disk

from solemesh.errors import DegenerateStructuringElement


# ── Helpers ──────────────────────────────────────────────────────────────

def disk_footprint(radius):
    """Boolean disk of the given integer radius, shape ``(2r+1, 2r+1)``."""
    if radius is None or radius <= 0 or int(radius) != radius:
        raise DegenerateStructuringElement(
            f"structuring element radius must be a positive integer, got {radius}",
            stage="morphology",
        )
    return disk(int(radius)).astype(bool)


def _close(mask, footprint):
    # out-of-image pixels count as background when growing and as
    # foreground when shrinking, so the pair stays an exact closing
    grown = ndimage.binary_dilation(mask, structure=footprint)
    return ndimage.binary_erosion(grown, structure=footprint, border_value=1)


# ── Public entry point ───────────────────────────────────────────────────

def clean(mask, radius=10):
    """Dilate→erode the inverted mask, re-invert, then dilate→erode again."""
    footprint = disk_footprint(radius)
    mask = np.asarray(mask, dtype=bool)
    background = _close(~mask, footprint)
    return _close(~background, footprint)


# ── Standalone CLI ───────────────────────────────────────────────────────

def _cli():
    parser = argparse.ArgumentParser(description='Step 3: Morphological filter')
    parser.add_argument('--mask', required=True, help='binary.npz from step 2')
    parser.add_argument('--radius', type=int, default=10)
    parser.add_argument('--output', '-o', default='clean_output.npz')
    args = parser.parse_args()

    mask = np.load(args.mask)['binary_mask']

    print("Running morphological filter...")
    cleaned = clean(mask, args.radius)
    print(f"Foreground: {int(mask.sum())} -> {int(cleaned.sum())} px")

    np.savez_compressed(args.output, clean_mask=cleaned)
    print(f"Saved -> {args.output}")


if __name__ == '__main__':
    _cli()
