"""Relaxation driver: owns a run's sites and iterates Lloyd steps cooperatively.

A run is started with ``start(field, count)``. Each call to ``start`` or
``stop`` bumps a generation counter; an iteration remembers the generation
it was launched under and drops its work if the counter has moved on by the
time it would commit. The host pulls iterations through ``iterations()``
(a generator) or lets ``schedule()`` pump them from an asyncio task that
yields to the event loop between steps.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Tuple

import numpy as np

from .config import StippleConfig
from .errors import InvalidCount, InvalidField, StaleIteration
from .field import Field
from .relax import relax_once
from .sampler import sample_sites
from .site_index import SITE_INDEXES

log = logging.getLogger(__name__)


class DriverState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class RunContext:
    """Everything one run owns: its field, its mutable sites and its token."""

    field: Field
    sites: np.ndarray
    generation: int
    degenerate_sites: Tuple[int, ...] = ()
    iteration: int = 0


@dataclass(frozen=True)
class IterationResult:
    positions: np.ndarray  # read-only (N, 2) snapshot
    convergence_metric: float  # max squared displacement this iteration
    iteration: int
    generation: int
    stranded: int = 0

    def __len__(self):
        return self.positions.shape[0]


class RelaxationDriver:
    def __init__(self, config: Optional[StippleConfig] = None, index_factory=None):
        self.config = config or StippleConfig()
        if index_factory is None:
            if self.config.site_index not in SITE_INDEXES:
                raise ValueError(
                    f"unknown site index {self.config.site_index!r}; choose from {sorted(SITE_INDEXES)}"
                )
            index_factory = SITE_INDEXES[self.config.site_index]
        self._index_factory = index_factory
        self._state = DriverState.IDLE
        self._generation = 0
        self._context: Optional[RunContext] = None

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def context(self) -> Optional[RunContext]:
        return self._context

    @property
    def degenerate_sites(self) -> Tuple[int, ...]:
        return self._context.degenerate_sites if self._context is not None else ()

    def start(self, field: Field, count: int, seed=None, rng=None) -> RunContext:
        """Replace any current run with a fresh one over ``field`` with ``count`` sites.

        Sites are drawn from ``rng`` when given, else from a generator seeded
        with ``seed``. Invalid input raises before the current run is touched.
        No iteration runs here: the caller drives the run through
        ``iterations()``, ``step()`` or ``schedule()``.
        """
        if not isinstance(field, Field):
            raise InvalidField(f"expected a Field, got {type(field).__name__}")
        if isinstance(count, bool) or not isinstance(count, (int, np.integer)) or count <= 0:
            raise InvalidCount(f"site count must be a positive integer, got {count!r}")

        # invalidate the previous run before its replacement exists
        self._generation += 1
        self._state = DriverState.IDLE
        self._context = None

        if rng is None:
            rng = np.random.default_rng(seed)
        sample = sample_sites(field, int(count), rng, self.config.max_sampling_attempts)
        self._context = RunContext(
            field=field,
            sites=sample.positions,
            generation=self._generation,
            degenerate_sites=sample.exhausted,
        )
        self._state = DriverState.RUNNING
        log.info(
            "run %d started: %dx%d field, %d sites", self._generation, field.width, field.height, int(count)
        )
        return self._context

    def stop(self) -> None:
        if self._state is DriverState.RUNNING:
            log.info("run %d stopped", self._generation)
        self._generation += 1
        self._state = DriverState.IDLE

    def _check_current(self, ctx: RunContext) -> None:
        if self._state is not DriverState.RUNNING or ctx.generation != self._generation:
            raise StaleIteration(ctx.generation, self._generation)

    def _iterate(self, ctx: RunContext) -> Optional[IterationResult]:
        cfg = self.config
        try:
            self._check_current(ctx)
            new, metric, stranded, _ = relax_once(
                ctx.field, ctx.sites, self._index_factory, cfg.sample_offset
            )
            self._check_current(ctx)
        except StaleIteration as e:
            log.debug("%s", e)
            return None

        ctx.sites[...] = new
        ctx.iteration += 1
        snapshot = ctx.sites.copy()
        snapshot.setflags(write=False)
        result = IterationResult(
            positions=snapshot,
            convergence_metric=metric,
            iteration=ctx.iteration,
            generation=ctx.generation,
            stranded=stranded,
        )
        log.debug("run %d iteration %d: max motion %.3f", ctx.generation, ctx.iteration, np.sqrt(metric))

        if cfg.convergence_threshold is not None and metric < cfg.convergence_threshold:
            log.info("run %d converged after %d iterations", ctx.generation, ctx.iteration)
            self.stop()
        return result

    def step(self) -> Optional[IterationResult]:
        """Run one iteration of the current run; None when idle."""
        if self._context is None:
            return None
        return self._iterate(self._context)

    def iterations(self) -> Iterator[IterationResult]:
        """Results of the run current at call time, one per iteration.

        The generator ends as soon as that run is stopped or replaced; a step
        that was in progress at that moment is discarded.
        """
        ctx = self._context
        if ctx is None or self._state is not DriverState.RUNNING:
            return iter(())
        return self._loop(ctx)

    def _loop(self, ctx: RunContext) -> Iterator[IterationResult]:
        while True:
            result = self._iterate(ctx)
            if result is None:
                return
            yield result
            if ctx.generation != self._generation:
                return

    def schedule(
        self,
        on_result: Callable[[IterationResult], None],
        max_iterations: Optional[int] = None,
    ) -> "asyncio.Task":
        """Pump the current run into ``on_result`` from an asyncio task.

        The run is bound now, not when the task first gets to execute, so a
        ``start`` issued before then leaves the task with nothing to emit.
        Must be called with an event loop running.
        """
        results = self.iterations()
        return asyncio.get_running_loop().create_task(self._pump(results, on_result, max_iterations))

    async def _pump(self, results, on_result, max_iterations) -> int:
        emitted = 0
        for result in results:
            on_result(result)
            emitted += 1
            if max_iterations is not None and emitted >= max_iterations:
                break
            await asyncio.sleep(0)
        return emitted
