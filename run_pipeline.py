#!/usr/bin/env python
"""
Run the outsole feature-mesh pipeline over a directory of scans.

All hyperparameters live in the PipelineConfig at the top of this file.
Edit them there, or override via command-line flags.

Usage:
    python run_pipeline.py \
        --images /path/to/scans \
        --output ./results

Each pipeline step can also be run independently – see the individual
modules under ``solemesh/``.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np

from solemesh.config import PipelineConfig
from solemesh.io_utils import list_images, load_image, save_mesh, save_points
from solemesh.process import process_image
from solemesh.step8_visualize import plot_summary, run_visualization


# =====================================================================
#  HYPERPARAMETERS — edit defaults here or override via CLI
# =====================================================================
DEFAULT_CONFIG = PipelineConfig(
    # I/O
    images_dir="",
    output_dir="./solemesh_results",
    max_images=None,
    rotate=1,
    save_figures=True,
    # Step 1: Border removal
    border_ratio=4.0,
    border_line_fraction=0.5,
    # Step 2: Binarize & trim
    split_halves=True,
    trim_margin=5,
    content_floor=0.0,
    threshold_method="otsu",
    fixed_threshold=0.5,
    noise_kernel=3,
    # Step 3: Morphological filter
    morph_radius=10,
    # Step 4: Region classification
    connectivity=2,
    min_fill_ratio=0.7,
    max_extent=130,
)


# =====================================================================
#  CLI — command-line overrides for any config field
# =====================================================================
def _parse_args(argv=None) -> PipelineConfig:
    """Build config from DEFAULT_CONFIG + CLI overrides."""
    p = argparse.ArgumentParser(
        description="Border removal -> binarize -> morphology -> regions -> mesh")

    # I/O
    p.add_argument("--images", "-i", type=str, required=True)
    p.add_argument("--output", "-o", type=str, default=None)
    p.add_argument("--max-images", type=int, default=None)
    p.add_argument("--rotate", type=int, default=None)
    p.add_argument("--no-figures", action="store_true")

    # Step 1
    p.add_argument("--border-ratio", type=float, default=None)
    p.add_argument("--border-line-fraction", type=float, default=None)

    # Step 2
    p.add_argument("--no-split", action="store_true")
    p.add_argument("--trim-margin", type=int, default=None)
    p.add_argument("--content-floor", type=float, default=None)
    p.add_argument("--threshold", choices=["otsu", "li", "fixed"], default=None)
    p.add_argument("--fixed-threshold", type=float, default=None)
    p.add_argument("--noise-kernel", type=int, default=None)

    # Step 3
    p.add_argument("--morph-radius", type=int, default=None)

    # Step 4
    p.add_argument("--connectivity", type=int, choices=[1, 2], default=None)
    p.add_argument("--min-fill-ratio", type=float, default=None)
    p.add_argument("--max-extent", type=int, default=None)

    args = p.parse_args(argv)

    def pick(value, default):
        return value if value is not None else default

    # Start from DEFAULT_CONFIG, override only what the user passed
    d = DEFAULT_CONFIG
    cfg = PipelineConfig(
        images_dir=args.images,
        output_dir=pick(args.output, d.output_dir),
        max_images=pick(args.max_images, d.max_images),
        rotate=pick(args.rotate, d.rotate),
        save_figures=d.save_figures and not args.no_figures,
        border_ratio=pick(args.border_ratio, d.border_ratio),
        border_line_fraction=pick(args.border_line_fraction, d.border_line_fraction),
        split_halves=d.split_halves and not args.no_split,
        trim_margin=pick(args.trim_margin, d.trim_margin),
        content_floor=pick(args.content_floor, d.content_floor),
        threshold_method=pick(args.threshold, d.threshold_method),
        fixed_threshold=pick(args.fixed_threshold, d.fixed_threshold),
        noise_kernel=pick(args.noise_kernel, d.noise_kernel),
        morph_radius=pick(args.morph_radius, d.morph_radius),
        connectivity=pick(args.connectivity, d.connectivity),
        min_fill_ratio=pick(args.min_fill_ratio, d.min_fill_ratio),
        max_extent=pick(args.max_extent, d.max_extent),
    )
    return cfg


# =====================================================================
#  Pipeline runner
# =====================================================================
def run(cfg: PipelineConfig):
    """Execute the full pipeline for every scan in ``cfg.images_dir``."""
    output_dir = Path(cfg.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    # ── Find scans ───────────────────────────────────────────────────
    print("Listing scans...")
    images = list_images(cfg.images_dir)
    if not images:
        print("ERROR: No images found!")
        sys.exit(1)
    print(f"Found {len(images)} scans")
    if cfg.max_images:
        images = images[: cfg.max_images]

    print(
        f"\nSettings: margin={cfg.trim_margin}, noise={cfg.noise_kernel}, "
        f"radius={cfg.morph_radius}, threshold={cfg.threshold_method}, "
        f"fill>={cfg.min_fill_ratio}, extent<={cfg.max_extent}"
    )
    print("=" * 70)

    rows = []
    n_failed = 0

    for idx, img_path in enumerate(images):
        name = img_path.stem
        print(f"\n[{idx + 1}/{len(images)}] {name}")

        # ── Load ─────────────────────────────────────────────────────
        image = load_image(img_path, rotate=cfg.rotate)
        print(f"  Shape: {image.shape}")

        # ── Steps 1-7 ────────────────────────────────────────────────
        result = process_image(image, cfg, name=name)
        if result.gray is not None:
            print(f"  Step 1: ROI {result.gray.shape} at {result.offset}")
        if result.binary_mask is not None:
            print(f"  Step 2: {int(result.binary_mask.sum())} foreground px")
        if result.clean_mask is not None:
            print(f"  Step 3: {int(result.clean_mask.sum())} px after filter")
        if result.regions is not None:
            print(f"  Step 4: {len(result.regions)} regions, "
                  f"{len(result.regions.suspects)} suspect")

        row = {
            'name': name,
            'status': 'ok' if result.ok else 'failed',
            'stage': '' if result.ok else result.failure.stage,
            'n_regions': len(result.regions) if result.regions is not None else 0,
            'n_suspects': len(result.regions.suspects) if result.regions is not None else 0,
            'n_points': len(result.points),
            'n_triangles': len(result.mesh.triangles) if result.mesh is not None else 0,
        }
        rows.append(row)

        if not result.ok:
            n_failed += 1
            print(f"  FAILED at {result.failure.stage}: {result.failure.reason}")
            continue

        print(f"  Step 6-7: {len(result.points)} centroids, "
              f"{len(result.mesh.triangles)} triangles")

        # ── Save ─────────────────────────────────────────────────────
        save_points(output_dir / f"{name}_points.csv", result.raw_points())
        save_mesh(output_dir / f"{name}_mesh.npz", result.mesh)

        if cfg.save_figures:
            save_path = str(output_dir / f"{name}_analysis.png")
            print("  Step 8: Visualization...")
            run_visualization(result, name=name, save_path=save_path)
            print(f"  -> {save_path}")

    # ── Summary ──────────────────────────────────────────────────────
    print("\n" + "=" * 70)
    ok_rows = [r for r in rows if r['status'] == 'ok']
    if ok_rows:
        counts = [r['n_points'] for r in ok_rows]
        print(f"Centroids: {np.mean(counts):.1f} +/- {np.std(counts):.1f}")
    print(f"Processed: {len(ok_rows)} ok, {n_failed} failed")

    if cfg.save_figures:
        plot_summary(ok_rows, str(output_dir / "summary.png"))

    csv_path = output_dir / "summary.csv"
    with open(csv_path, "w") as f:
        f.write("image,status,stage,n_regions,n_suspects,n_points,n_triangles\n")
        for r in rows:
            f.write(
                f"{r['name']},{r['status']},{r['stage']},{r['n_regions']},"
                f"{r['n_suspects']},{r['n_points']},{r['n_triangles']}\n"
            )

    print(f"\nResults in: {output_dir}/")
    return rows


# =====================================================================
#  Entry point
# =====================================================================
if __name__ == "__main__":
    cfg = _parse_args()
    run(cfg)
