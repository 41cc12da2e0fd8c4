"""
Per-image driver: runs steps 1-7 in order and tags the first failure.

Steps raise typed PipelineErrors; this is the one place that turns them
into a FingerprintResult so a batch can report the stage and reason and
move on to the next scan.
"""
from __future__ import annotations

import numpy as np

from solemesh.config import PipelineConfig
from solemesh.errors import EmptyRegionAfterThreshold, PipelineError
from solemesh.io_utils import FingerprintResult, StageFailure
from solemesh.step1_border import find_border_bbox, to_grayscale
from solemesh.step2_binarize import binarize_and_trim
from solemesh.step3_morphology import clean
from solemesh.step4_regions import analyze
from solemesh.step5_erase import erase
from solemesh.step6_centroids import centroids
from solemesh.step7_mesh import triangulate


def _require_foreground(mask, stage, what):
    if not mask.any():
        raise EmptyRegionAfterThreshold(f"no foreground left after {what}", stage=stage)


def _run_steps(image, cfg, result):
    # Step 1
    r0, r1, c0, c1 = find_border_bbox(image, cfg.border_ratio, cfg.border_line_fraction)
    result.offset = (r0, c0)
    result.gray = to_grayscale(image[r0:r1, c0:c1])

    # Step 2
    result.binary_mask = binarize_and_trim(
        result.gray,
        margin=cfg.trim_margin,
        noise_kernel=cfg.noise_kernel,
        threshold_method=cfg.threshold_method,
        fixed_threshold=cfg.fixed_threshold,
        content_floor=cfg.content_floor,
        split_halves=cfg.split_halves,
    )
    _require_foreground(result.binary_mask, "binarize", "thresholding")

    # Step 3
    result.clean_mask = clean(result.binary_mask, cfg.morph_radius)
    _require_foreground(result.clean_mask, "morphology", "the morphological filter")

    # Steps 4-5
    result.regions = analyze(
        result.clean_mask, cfg.classifier(), connectivity=cfg.connectivity)
    result.feature_mask = erase(result.clean_mask, result.regions.suspects)
    _require_foreground(result.feature_mask, "regions", "suspect removal")

    # Steps 6-7
    result.points = centroids(result.regions)
    result.mesh = triangulate(result.points)
    return result


def process_image(image, cfg=None, name=""):
    """
    Extract the centroid mesh from one raw scan.

    Never raises PipelineError: a failing step is recorded in
    ``result.failure`` and the intermediates computed so far are kept.
    """
    if cfg is None:
        cfg = PipelineConfig()
    result = FingerprintResult(name=name, image=np.asarray(image))
    try:
        return _run_steps(result.image, cfg, result)
    except PipelineError as exc:
        result.failure = StageFailure(stage=exc.stage, reason=exc.reason)
        return result
