"""Exceptions and warnings raised by the relaxation engine."""

from typing import Sequence


class StippleError(Exception):
    """Base class for stipplify errors."""


class InvalidField(StippleError, ValueError):
    """Field dimensions, length or values are unusable."""


class InvalidCount(StippleError, ValueError):
    """Requested site count is not a positive integer."""


class StaleIteration(StippleError):
    """An iteration finished after its run was stopped or superseded."""

    def __init__(self, generation: int, current: int):
        super().__init__(f"iteration of run {generation} discarded (current run is {current})")
        self.generation = generation
        self.current = current


class SamplingExhausted(UserWarning):
    """Rejection sampling gave up on some sites and placed them uniformly.

    Raised as a warning, never as an error: the run continues with the
    fallback positions.
    """

    def __init__(self, site_indices: Sequence[int]):
        self.site_indices = tuple(int(i) for i in site_indices)
        shown = ", ".join(str(i) for i in self.site_indices[:8])
        if len(self.site_indices) > 8:
            shown += ", ..."
        super().__init__(
            f"{len(self.site_indices)} site(s) placed uniformly after exhausting "
            f"the sampling budget (low-density field): {shown}"
        )
