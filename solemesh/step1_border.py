"""
Step 1 – Border (ruler strip) removal.

The calibration ruler along the scan edge is printed in yellow/red: strong
red and green, next to no blue.  Dividing the warm channels by the blue
channel blows up inside the strip, so the rows and columns dominated by
that blow-up are cut away and the rest is returned as grayscale.

Standalone usage:
    python -m solemesh.step1_border --image scan.tif --output roi.npz
"""
from __future__ import annotations

import argparse

import numpy as np
from skimage.color import rgb2gray
from skimage.util import img_as_float

from solemesh.errors import EmptyRegionAfterThreshold


# ── Helpers ──────────────────────────────────────────────────────────────

def border_signature(image):
    """Per-pixel ``(R + G) / 2B``; +inf where a lit pixel has no blue."""
    rgb = np.asarray(image, dtype=np.float64)[..., :3]
    warm = 0.5 * (rgb[..., 0] + rgb[..., 1])
    with np.errstate(divide='ignore', invalid='ignore'):
        return warm / rgb[..., 2]


def border_pixels(image, ratio=4.0):
    """Boolean map of ruler-coloured pixels (black pixels give NaN, never border)."""
    sig = border_signature(image)
    with np.errstate(invalid='ignore'):
        return np.isposinf(sig) | (sig > ratio)


def find_border_bbox(image, ratio=4.0, line_fraction=0.5):
    """
    Bounding box ``(r0, r1, c0, c1)`` of the region of interest.

    Rows and columns where at least *line_fraction* of the pixels carry the
    border colour are excluded.  Grayscale input and input without any
    border-coloured pixel give the full extent.
    """
    h, w = image.shape[:2]
    if image.ndim < 3 or image.shape[2] < 3:
        return 0, h, 0, w

    border = border_pixels(image, ratio)
    if not border.any():
        return 0, h, 0, w

    rows = np.flatnonzero(border.mean(axis=1) < line_fraction)
    cols = np.flatnonzero(border.mean(axis=0) < line_fraction)
    if rows.size == 0 or cols.size == 0:
        raise EmptyRegionAfterThreshold(
            "border colour covers the whole scan", stage="border")
    return int(rows[0]), int(rows[-1]) + 1, int(cols[0]), int(cols[-1]) + 1


def to_grayscale(image):
    image = np.asarray(image)
    if image.ndim == 3 and image.shape[2] >= 3:
        return rgb2gray(image[..., :3])
    if image.ndim == 3:
        # gray + alpha
        return img_as_float(image[..., 0])
    return img_as_float(image)


# ── Public entry point ───────────────────────────────────────────────────

def remove_border(image, ratio=4.0, line_fraction=0.5):
    """Crop the ruler strip off *image* and return the grayscale ROI."""
    r0, r1, c0, c1 = find_border_bbox(image, ratio, line_fraction)
    return to_grayscale(image[r0:r1, c0:c1])


# ── Standalone CLI ───────────────────────────────────────────────────────

def _cli():
    parser = argparse.ArgumentParser(description='Step 1: Border removal')
    parser.add_argument('--image', required=True, help='Path to raw scan')
    parser.add_argument('--rotate', type=int, default=1)
    parser.add_argument('--border-ratio', type=float, default=4.0)
    parser.add_argument('--line-fraction', type=float, default=0.5)
    parser.add_argument('--output', '-o', default='roi_output.npz')
    args = parser.parse_args()

    from solemesh.io_utils import load_image
    image = load_image(args.image, rotate=args.rotate)
    print(f"Image shape: {image.shape}")

    bbox = find_border_bbox(image, args.border_ratio, args.line_fraction)
    gray = remove_border(image, args.border_ratio, args.line_fraction)
    print(f"ROI rows {bbox[0]}:{bbox[1]}, cols {bbox[2]}:{bbox[3]} -> {gray.shape}")

    np.savez_compressed(args.output, gray=gray, bbox=np.asarray(bbox))
    print(f"Saved -> {args.output}")


if __name__ == '__main__':
    _cli()
