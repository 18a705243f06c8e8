"""Immutable density grid that drives the stipple distribution."""

from typing import Sequence, Union

import numpy as np

from .errors import InvalidField


class Field:
    """Row-major W x H grid of weights in [0, 1].

    The domain spans [0, width) x [0, height); pixel (x, y) covers
    [x, x + 1) x [y, y + 1). The weight array is copied on construction and
    marked read-only, so a Field can be shared by a run without defensive
    copies.
    """

    __slots__ = ("_weights",)

    def __init__(self, weights: np.ndarray):
        arr = np.array(weights, dtype=np.float64)
        if arr.ndim != 2 or arr.shape[0] <= 0 or arr.shape[1] <= 0:
            raise InvalidField(f"field must be a non-empty 2D grid, got shape {arr.shape}")
        if not np.all(np.isfinite(arr)):
            raise InvalidField("field weights must be finite")
        if arr.min() < 0.0 or arr.max() > 1.0:
            raise InvalidField(f"field weights must lie in [0, 1], got [{arr.min():g}, {arr.max():g}]")
        arr.setflags(write=False)
        self._weights = arr

    @classmethod
    def from_flat(cls, width: int, height: int, weights: Union[Sequence[float], np.ndarray]) -> "Field":
        """Build a field from a flat row-major sequence of ``width * height`` weights."""
        if int(width) != width or int(height) != height or width <= 0 or height <= 0:
            raise InvalidField(f"field dimensions must be positive integers, got {width}x{height}")
        flat = np.asarray(weights, dtype=np.float64).ravel()
        if flat.size != width * height:
            raise InvalidField(f"expected {width * height} weights for {width}x{height}, got {flat.size}")
        return cls(flat.reshape(int(height), int(width)))

    @property
    def weights(self) -> np.ndarray:
        return self._weights

    @property
    def width(self) -> int:
        return self._weights.shape[1]

    @property
    def height(self) -> int:
        return self._weights.shape[0]

    @property
    def total_weight(self) -> float:
        return float(self._weights.sum())

    def at(self, x, y):
        """Weight of the pixel containing (x, y); accepts scalars or arrays."""
        xi = np.clip(np.floor(x).astype(np.intp), 0, self.width - 1)
        yi = np.clip(np.floor(y).astype(np.intp), 0, self.height - 1)
        return self._weights[yi, xi]

    def __repr__(self):
        return f"Field({self.width}x{self.height}, total={self.total_weight:.3f})"
