"""
Central configuration for all pipeline hyperparameters.

Edit the defaults here or override them from run_pipeline.py.  Every size
below is in pixels of the rotated scan, so all of them need recalibrating
when the scan resolution changes.
"""
from __future__ import annotations

from dataclasses import dataclass

from solemesh.errors import DegenerateStructuringElement
from solemesh.step4_regions import FillRatioClassifier

THRESHOLD_METHODS = ("otsu", "li", "fixed")


@dataclass
class PipelineConfig:
    """All tuneable hyperparameters for the pipeline, in one place."""

    # ── I/O ──────────────────────────────────────────────────────────────
    images_dir: str = ""
    output_dir: str = "./solemesh_results"
    max_images: int | None = None
    rotate: int = 1                       # quarter turns applied on load
    save_figures: bool = True

    # ── Step 1: Border removal ───────────────────────────────────────────
    border_ratio: float = 4.0             # (R+G)/2B above this is ruler colour
    border_line_fraction: float = 0.5     # rows/cols this much border are cut

    # ── Step 2: Binarize & trim ──────────────────────────────────────────
    split_halves: bool = True             # scan holds two impressions
    trim_margin: int = 5                  # fuzz trimmed from each half
    content_floor: float = 0.0            # intensity counted as content
    threshold_method: str = "otsu"        # 'otsu', 'li', or 'fixed'
    fixed_threshold: float = 0.5
    noise_kernel: int = 3                 # opening square side

    # ── Step 3: Morphological filter ─────────────────────────────────────
    morph_radius: int = 10                # disk radius, < smallest feature

    # ── Step 4: Region classification ────────────────────────────────────
    connectivity: int = 2                 # 1 = 4-connected, 2 = 8-connected
    min_fill_ratio: float = 0.7
    max_extent: int = 130

    def __post_init__(self):
        if self.morph_radius is None or self.morph_radius <= 0:
            raise DegenerateStructuringElement(
                f"morph_radius must be positive, got {self.morph_radius}")
        if self.noise_kernel is None or self.noise_kernel <= 0:
            raise DegenerateStructuringElement(
                f"noise_kernel must be positive, got {self.noise_kernel}")
        if self.trim_margin < 0:
            raise ValueError(f"trim_margin must be >= 0, got {self.trim_margin}")
        if self.connectivity not in (1, 2):
            raise ValueError(f"connectivity must be 1 or 2, got {self.connectivity}")
        if self.threshold_method not in THRESHOLD_METHODS:
            raise ValueError(
                f"threshold_method must be one of {THRESHOLD_METHODS}, "
                f"got {self.threshold_method!r}")
        if not 0 < self.border_line_fraction <= 1:
            raise ValueError("border_line_fraction must be in (0, 1]")

    def classifier(self):
        return FillRatioClassifier(
            min_fill_ratio=self.min_fill_ratio, max_extent=self.max_extent)
