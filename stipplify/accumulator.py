"""Per-site weighted centroid sums over the field's domain."""

from dataclasses import dataclass

import numpy as np

from .field import Field


@dataclass(frozen=True)
class Accumulation:
    position_sums: np.ndarray  # (N, 2): sum of w * (x, y) per site
    weight_sums: np.ndarray  # (N,): sum of w per site
    total_weight: float  # mass swept, equals weight_sums.sum() up to rounding


def raster_samples(field: Field, sample_offset: float = 0.5):
    """Coordinates and weights of the field's non-zero pixels, row-major order."""
    ys, xs = np.nonzero(field.weights)
    w = field.weights[ys, xs]
    coords = np.empty((w.size, 2), dtype=np.float64)
    coords[:, 0] = xs + sample_offset
    coords[:, 1] = ys + sample_offset
    return coords, w


def accumulate(field: Field, index, sample_offset: float = 0.5) -> Accumulation:
    """Sweep the field in raster order, binning each pixel's mass to its nearest site.

    Zero-weight pixels are skipped. Each lookup is seeded with the previous
    pixel's site, so a coherent index walks at most a few steps per pixel.
    """
    n = index.size
    coords, w = raster_samples(field, sample_offset)
    if w.size == 0:
        return Accumulation(np.zeros((n, 2)), np.zeros(n), 0.0)

    labels = index.nearest_many(coords)

    sums = np.empty((n, 2), dtype=np.float64)
    sums[:, 0] = np.bincount(labels, weights=w * coords[:, 0], minlength=n)
    sums[:, 1] = np.bincount(labels, weights=w * coords[:, 1], minlength=n)
    weight_sums = np.bincount(labels, weights=w, minlength=n)
    return Accumulation(position_sums=sums, weight_sums=weight_sums, total_weight=float(w.sum()))
