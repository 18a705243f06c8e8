"""Weighted Voronoi stippling by Lloyd relaxation."""

from .accumulator import Accumulation, accumulate
from .config import StippleConfig
from .driver import DriverState, IterationResult, RelaxationDriver, RunContext
from .errors import InvalidCount, InvalidField, SamplingExhausted, StaleIteration, StippleError
from .field import Field
from .relax import relax_once, relocate
from .sampler import SampleResult, sample_sites
from .site_index import SITE_INDEXES, DelaunaySiteIndex, KDTreeSiteIndex, build_site_index

__version__ = "0.1.0"
