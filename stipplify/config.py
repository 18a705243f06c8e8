"""Tunables for a relaxation run."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StippleConfig:
    # rejection-sampling draws per site before falling back to a uniform position
    max_sampling_attempts: int = 10_000
    # where inside a pixel its mass sits: 0.5 = pixel centre, 0.0 = top-left corner
    sample_offset: float = 0.5
    # stop once the max squared displacement drops below this; None runs until stopped
    convergence_threshold: Optional[float] = None
    # name in stipplify.site_index.SITE_INDEXES
    site_index: str = "delaunay"

    def __post_init__(self):
        if self.max_sampling_attempts < 1:
            raise ValueError("max_sampling_attempts must be at least 1")
        if not 0.0 <= self.sample_offset < 1.0:
            raise ValueError("sample_offset must be in [0, 1)")
        if self.convergence_threshold is not None and self.convergence_threshold < 0:
            raise ValueError("convergence_threshold must be non-negative")
