"""
Step 8 – Per-image 6-panel figure and batch summary plot.
"""
from __future__ import annotations

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches


KEPT_COLOR = np.array([0.2, 0.8, 0.2])
SUSPECT_COLOR = np.array([1.0, 0.2, 0.2])


def _mask_rgb(mask):
    return np.stack([mask.astype(np.float64)] * 3, axis=-1)


def region_overlay(mask, table):
    """Mask rendered gray with kept regions green and suspects red."""
    rgb = _mask_rgb(mask) * 0.3
    for region in table:
        color = SUSPECT_COLOR if region.suspect else KEPT_COLOR
        rgb[region.coords[:, 0], region.coords[:, 1]] = color
    return rgb


# ── 6-panel analysis figure ──────────────────────────────────────────────

def plot_full_analysis(result, title="", save_path=None):
    """
    6-panel pipeline figure:
      Row 1: Input scan | Grayscale ROI | Binary mask
      Row 2: Cleaned mask | Region classes | Centroid mesh
    """
    fig = plt.figure(figsize=(21, 14))
    gs = fig.add_gridspec(2, 3, hspace=0.25, wspace=0.1)

    # 1. Input
    ax = fig.add_subplot(gs[0, 0])
    ax.imshow(result.image, cmap=None if result.image.ndim == 3 else 'gray')
    if result.gray is not None:
        r0, c0 = result.offset
        h, w = result.gray.shape
        ax.add_patch(plt.Rectangle((c0, r0), w, h, linewidth=2,
                                   edgecolor='cyan', facecolor='none'))
    ax.set_title('1. Input scan (ROI in cyan)', fontweight='bold', fontsize=10)
    ax.axis('off')

    # 2. Grayscale ROI
    ax = fig.add_subplot(gs[0, 1])
    if result.gray is not None:
        ax.imshow(result.gray, cmap='gray')
        ax.set_title(f'2. Grayscale ROI\n{result.gray.shape[1]}x{result.gray.shape[0]}',
                     fontweight='bold', fontsize=10)
    ax.axis('off')

    # 3. Binary mask
    ax = fig.add_subplot(gs[0, 2])
    if result.binary_mask is not None:
        ax.imshow(result.binary_mask, cmap='gray')
        ax.set_title(f'3. Binary mask\n{int(result.binary_mask.sum())} pixels',
                     fontweight='bold', fontsize=10)
    ax.axis('off')

    # 4. Cleaned mask
    ax = fig.add_subplot(gs[1, 0])
    if result.clean_mask is not None:
        ax.imshow(result.clean_mask, cmap='gray')
        ax.set_title(f'4. Morphological filter\n{int(result.clean_mask.sum())} pixels',
                     fontweight='bold', fontsize=10)
    ax.axis('off')

    # 5. Region classes
    ax = fig.add_subplot(gs[1, 1])
    if result.regions is not None:
        ax.imshow(region_overlay(result.clean_mask, result.regions))
        ax.set_title(
            f'5. Regions\n{len(result.regions.kept)} kept (green), '
            f'{len(result.regions.suspects)} suspect (red)',
            fontweight='bold', fontsize=10)
    ax.axis('off')

    # 6. Mesh
    ax = fig.add_subplot(gs[1, 2])
    if result.feature_mask is not None:
        ax.imshow(result.feature_mask, cmap='gray')
    if result.mesh is not None:
        v = result.mesh.vertices
        ax.triplot(v[:, 0], v[:, 1], result.mesh.triangles,
                   color='orange', linewidth=1.0)
        ax.plot(v[:, 0], v[:, 1], 'o', color='yellow', markersize=4,
                markeredgecolor='black', markeredgewidth=0.5)
        ax.set_title(
            f'6. Mesh\n{len(v)} vertices, {len(result.mesh.triangles)} triangles',
            fontweight='bold', fontsize=10)
    ax.axis('off')

    legend_patches = [
        mpatches.Patch(color=KEPT_COLOR, label='Kept feature'),
        mpatches.Patch(color=SUSPECT_COLOR, label='Suspect region'),
        plt.Line2D([0], [0], marker='o', color='orange', markerfacecolor='yellow',
                   markeredgecolor='black', markersize=8, label='Centroid / mesh'),
    ]
    fig.legend(handles=legend_patches, loc='lower center', ncol=3,
               fontsize=11, frameon=True, fancybox=True, bbox_to_anchor=(0.5, -0.02))

    if title:
        fig.suptitle(title, fontsize=14, fontweight='bold', y=1.01)

    plt.tight_layout(rect=[0, 0.03, 1, 1])
    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight', facecolor='white')
        plt.close(fig)
    else:
        plt.show()


# ── Summary bar chart ────────────────────────────────────────────────────

def plot_summary(rows, save_path=None):
    """Bar chart of centroid counts; *rows* are dicts with 'name' and 'n_points'."""
    if not rows:
        return
    names = [r['name'] for r in rows]
    counts = [r['n_points'] for r in rows]
    x = np.arange(len(names))
    fig, ax = plt.subplots(figsize=(max(12, len(names) * 0.8), 6))
    ax.bar(x, counts, color='lightgreen', edgecolor='darkgreen')
    ax.set_ylabel('Centroids')
    ax.set_title('Centroids per Image', fontweight='bold')
    ax.set_xticks(x)
    ax.set_xticklabels(names, rotation=45, ha='right', fontsize=8)
    ax.axhline(np.mean(counts), color='green', linestyle='--', alpha=0.5)
    plt.tight_layout()
    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight', facecolor='white')
        plt.close(fig)


# ── Public entry point ───────────────────────────────────────────────────

def run_visualization(result, name, save_path):
    """Generate the 6-panel analysis figure for one processed scan."""
    plot_full_analysis(result, title=name, save_path=save_path)
