"""
Step 5 – Suspect region removal.

Standalone usage:
    python -m solemesh.step5_erase --mask clean.npz --regions regions.pkl --output features.npz
"""
from __future__ import annotations

import argparse
import pickle

import numpy as np


# ── Public entry points ──────────────────────────────────────────────────

def erase(mask, suspect_regions):
    """Return a copy of *mask* with every pixel of *suspect_regions* cleared."""
    out = np.array(mask, dtype=bool, copy=True)
    for region in suspect_regions:
        out[region.coords[:, 0], region.coords[:, 1]] = False
    return out


def keep_features(mask, table):
    """Erase the suspects recorded in *table* from the mask it was built from."""
    if tuple(np.shape(mask)) != tuple(table.shape):
        raise ValueError(
            f"mask shape {np.shape(mask)} does not match region table {table.shape}")
    return erase(mask, table.suspects)


# ── Standalone CLI ───────────────────────────────────────────────────────

def _cli():
    parser = argparse.ArgumentParser(description='Step 5: Suspect removal')
    parser.add_argument('--mask', required=True, help='clean.npz from step 3')
    parser.add_argument('--regions', required=True, help='regions.pkl from step 4')
    parser.add_argument('--output', '-o', default='features_output.npz')
    args = parser.parse_args()

    mask = np.load(args.mask)['clean_mask']
    with open(args.regions, 'rb') as f:
        table = pickle.load(f)

    features = keep_features(mask, table)
    print(f"Removed {len(table.suspects)} regions, "
          f"{int(mask.sum())} -> {int(features.sum())} px")

    np.savez_compressed(args.output, feature_mask=features)
    print(f"Saved -> {args.output}")


if __name__ == '__main__':
    _cli()
