"""One Lloyd step: move every site to the weighted centroid of its cell."""

from typing import Tuple

import numpy as np

from .accumulator import Accumulation, accumulate
from .field import Field


def relocate(positions: np.ndarray, acc: Accumulation) -> Tuple[np.ndarray, float, int]:
    """New positions, max squared displacement and stranded-site count.

    Sites whose cell holds no mass keep their exact previous position.
    """
    new = positions.copy()
    moved = acc.weight_sums > 0
    new[moved] = acc.position_sums[moved] / acc.weight_sums[moved, None]

    if positions.shape[0] == 0:
        return new, 0.0, 0
    disp = ((new - positions) ** 2).sum(axis=1)
    return new, float(disp.max()), int(positions.shape[0] - moved.sum())


def relax_once(field: Field, positions: np.ndarray, index_factory, sample_offset: float = 0.5):
    """Build an index over ``positions``, sweep ``field`` and relocate.

    Returns ``(new_positions, metric, stranded, accumulation)``; ``positions``
    is left untouched.
    """
    index = index_factory(positions)
    acc = accumulate(field, index, sample_offset)
    new, metric, stranded = relocate(positions, acc)
    return new, metric, stranded, acc
