"""Weighted initial placement of sites by rejection sampling."""

import logging
import warnings
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .errors import InvalidCount, SamplingExhausted
from .field import Field

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SampleResult:
    positions: np.ndarray  # (N, 2) float64, row i is site i
    exhausted: Tuple[int, ...]  # sites placed uniformly after running out of attempts


def sample_sites(field: Field, count: int, rng: np.random.Generator, max_attempts: int = 10_000) -> SampleResult:
    """Draw ``count`` sites with probability proportional to the field weight.

    Every pending site draws a candidate P and a threshold r per round and is
    accepted when ``r <= field(P)`` on a positive weight. Sites still pending
    after ``max_attempts`` rounds fall back to a uniform random position and a
    SamplingExhausted warning is issued carrying their indices.
    """
    if isinstance(count, bool) or not isinstance(count, (int, np.integer)) or count <= 0:
        raise InvalidCount(f"site count must be a positive integer, got {count!r}")
    count = int(count)
    W, H = field.width, field.height

    positions = np.empty((count, 2), dtype=np.float64)
    pending = np.arange(count)

    for _ in range(max_attempts):
        if pending.size == 0:
            break
        k = pending.size
        xs = rng.random(k) * W
        ys = rng.random(k) * H
        r = rng.random(k)
        w = field.at(xs, ys)
        accept = (w > 0.0) & (r <= w)
        positions[pending[accept], 0] = xs[accept]
        positions[pending[accept], 1] = ys[accept]
        pending = pending[~accept]

    if pending.size:
        k = pending.size
        positions[pending, 0] = rng.random(k) * W
        positions[pending, 1] = rng.random(k) * H
        log.warning("sampling budget of %d exhausted for %d of %d sites", max_attempts, k, count)
        warnings.warn(SamplingExhausted(pending.tolist()), stacklevel=2)

    return SampleResult(positions=positions, exhausted=tuple(pending.tolist()))
