"""
Step 2 – Binarize & trim.

The scan holds two impressions side by side.  Each half is cropped to its
own content, a fixed margin of residual ruler fuzz is trimmed off the
edges of the half, the window is tightened again, thresholded, and opened
with a small square to drop specks.  All crops are tracked as offsets, so
the returned mask has the same shape as the grayscale input and is zero
outside retained content.

Standalone usage:
    python -m solemesh.step2_binarize --roi roi.npz --output binary.npz
"""
from __future__ import annotations

import argparse

import numpy as np
from scipy import ndimage
from skimage.filters import threshold_li, threshold_otsu


# ── Helpers ──────────────────────────────────────────────────────────────

def content_bbox(image, floor=0.0):
    """Bounding box ``(r0, r1, c0, c1)`` of pixels above *floor*, or None."""
    content = image > floor
    rows = np.flatnonzero(content.any(axis=1))
    if rows.size == 0:
        return None
    cols = np.flatnonzero(content.any(axis=0))
    return int(rows[0]), int(rows[-1]) + 1, int(cols[0]), int(cols[-1]) + 1


def compute_threshold(image, method='otsu', fixed=0.5):
    """Binarization cutoff; foreground is strictly brighter than it."""
    if method == 'otsu':
        try:
            return float(threshold_otsu(image))
        except ValueError:
            return fixed
    elif method == 'li':
        try:
            return float(threshold_li(image))
        except ValueError:
            return fixed
    elif method == 'fixed':
        return fixed
    raise ValueError(f"Unknown threshold method: {method}")


def _binarize_half(half, margin, floor, method, fixed, noise_kernel):
    out = np.zeros(half.shape, dtype=bool)

    # (a) crop to this half's content
    box = content_bbox(half, floor)
    if box is None:
        return out
    r0, r1, c0, c1 = box

    # (b) trim the fuzz margin along the half's own edges; content further
    # inside than the margin is never cut
    h, w = half.shape
    r0, r1 = max(r0, margin), min(r1, h - margin)
    c0, c1 = max(c0, margin), min(c1, w - margin)
    if r1 <= r0 or c1 <= c0:
        return out

    # (c) tighten to what is left
    box = content_bbox(half[r0:r1, c0:c1], floor)
    if box is None:
        return out
    a0, a1, b0, b1 = box
    r0, r1, c0, c1 = r0 + a0, r0 + a1, c0 + b0, c0 + b1

    # (d) threshold the window
    window = half[r0:r1, c0:c1]
    fg = np.zeros(half.shape, dtype=bool)
    fg[r0:r1, c0:c1] = window > compute_threshold(window, method, fixed)

    # (e) drop specks thinner than the kernel
    square = np.ones((noise_kernel, noise_kernel), dtype=bool)
    fg = ndimage.binary_opening(fg, structure=square)

    # (f) final crop
    box = content_bbox(fg)
    if box is None:
        return out
    r0, r1, c0, c1 = box
    out[r0:r1, c0:c1] = fg[r0:r1, c0:c1]
    return out


# ── Public entry point ───────────────────────────────────────────────────

def binarize_and_trim(
    image,
    margin=5,
    noise_kernel=3,
    threshold_method='otsu',
    fixed_threshold=0.5,
    content_floor=0.0,
    split_halves=True,
):
    """
    Threshold the grayscale ROI into a cleaned boolean mask.

    A half with no content after thresholding contributes an all-False
    block; the caller decides whether an entirely empty mask is an error.
    """
    image = np.asarray(image, dtype=np.float64)
    h, w = image.shape
    mask = np.zeros((h, w), dtype=bool)

    if split_halves and w >= 2:
        spans = [(0, w // 2), (w // 2, w)]
    else:
        spans = [(0, w)]

    for c0, c1 in spans:
        mask[:, c0:c1] = _binarize_half(
            image[:, c0:c1], margin, content_floor,
            threshold_method, fixed_threshold, noise_kernel,
        )
    return mask


# ── Standalone CLI ───────────────────────────────────────────────────────

def _cli():
    parser = argparse.ArgumentParser(description='Step 2: Binarize & trim')
    parser.add_argument('--roi', required=True, help='roi.npz from step 1')
    parser.add_argument('--margin', type=int, default=5)
    parser.add_argument('--noise-kernel', type=int, default=3)
    parser.add_argument('--threshold', choices=['otsu', 'li', 'fixed'], default='otsu')
    parser.add_argument('--fixed-threshold', type=float, default=0.5)
    parser.add_argument('--no-split', action='store_true')
    parser.add_argument('--output', '-o', default='binary_output.npz')
    args = parser.parse_args()

    gray = np.load(args.roi)['gray']

    print("Running binarization...")
    mask = binarize_and_trim(
        gray,
        margin=args.margin,
        noise_kernel=args.noise_kernel,
        threshold_method=args.threshold,
        fixed_threshold=args.fixed_threshold,
        split_halves=not args.no_split,
    )
    print(f"Foreground pixels: {int(mask.sum())}")

    np.savez_compressed(args.output, binary_mask=mask)
    print(f"Saved -> {args.output}")


if __name__ == '__main__':
    _cli()
