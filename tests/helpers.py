"""Synthetic scans shared by the test modules."""

import numpy as np
from skimage import draw

YELLOW = (1.0, 1.0, 0.0)
FUZZ = (0.6, 0.5, 0.35)


def make_scan(centers, radius=12, canvas_shape=(200, 300), strip=12, ring=2,
              bars=()):
    """
    Black canvas framed by a yellow ruler strip, with white disks.

    A thin dim ring just inside the strip stands in for the anti-aliased
    edge a real scanner leaves; ``ring=0`` gives a pure black canvas.
    *centers* are (x, y) in scan coordinates; *bars* are (x0, y0, x1, y1)
    white rectangles.
    """
    ch, cw = canvas_shape
    h, w = ch + 2 * strip, cw + 2 * strip
    scan = np.empty((h, w, 3), dtype=np.float64)
    scan[...] = YELLOW
    scan[strip:h - strip, strip:w - strip] = 0.0

    if ring:
        inner = scan[strip:h - strip, strip:w - strip]
        inner[:ring] = FUZZ
        inner[-ring:] = FUZZ
        inner[:, :ring] = FUZZ
        inner[:, -ring:] = FUZZ

    for x, y in centers:
        rr, cc = draw.disk((y, x), radius, shape=(h, w))
        scan[rr, cc] = 1.0
    for x0, y0, x1, y1 in bars:
        scan[y0:y1, x0:x1] = 1.0
    return scan
