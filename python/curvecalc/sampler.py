# CurveCalc - Sampler
# Copyright (c) 2024 CurveCalc Contributors. All rights reserved.

"""
Batch evaluation of a variable over 1-D and 2-D grids.

The sampler simplifies the requested variable once (with the sweep variables
left free), then binds each grid point into a private clone of the Context
and evaluates. Sweeps can be partitioned across a pool of workers; each
worker gets its own copy of the Context and the partitions are joined in
order, so the output is identical to a sequential run.

Example:
    >>> ctx = Context().let('y', var('x') * var('x'))
    >>> Sampler(ctx).sample_1d('y', (-1.0, 1.0), 2)
    [(-1.0, RealNumber(value=1.0)), (0.0, RealNumber(value=0.0)), (1.0, RealNumber(value=1.0))]
"""

from __future__ import annotations
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from typing import Callable, Optional
import logging

from .expr import Expr
from .term import Number, RealNumber
from .context import Context
from .config import Config
from .evaluate import Evaluator
from .grid import Axis, AxisLike, normalize_axis
from .exceptions import EvaluationBudgetExceeded


logger = logging.getLogger(__name__)

# (x, value) and (x, y, value); value is None where evaluation did not complete
Sample1D = tuple[float, Optional[Number]]
Sample2D = tuple[float, float, Optional[Number]]


def _evaluate_point(expr: Expr, context: Context, config: Config, coords: tuple) -> Optional[Number]:
    try:
        return Evaluator(context, config).evaluate(expr)
    except EvaluationBudgetExceeded as e:
        logger.warning("Sample at %s abandoned: %s", coords, e)
        return None


def _with_funcs(context: Context, funcs: dict) -> Context:
    ctx = context.clone()
    ctx.funcs.update(funcs)
    return ctx


def _sweep_1d(
    context: Context,
    expr: Expr,
    axis: Axis,
    indices: range,
    config: Config,
) -> list[Sample1D]:
    """Worker: evaluate expr at each point of one block of the axis."""
    results = []
    for x in axis.points(indices):
        point_ctx = context.clone()
        point_ctx.bind(axis.name, RealNumber(x))
        results.append((x, _evaluate_point(expr, point_ctx, config, (x,))))
    return results


def _sweep_2d(
    context: Context,
    name: str,
    x_axis: Axis,
    y_axis: Axis,
    indices: range,
    config: Config,
) -> list[Sample2D]:
    """Worker: for each x in one block, re-simplify with x bound, then sweep y."""
    results = []
    for x in x_axis.points(indices):
        x_ctx = context.clone()
        x_ctx.bind(x_axis.name, RealNumber(x))
        expr, funcs = x_ctx.simplify(name, free=(y_axis.name,), config=config)
        x_ctx = _with_funcs(x_ctx, funcs)
        for y in y_axis.points():
            point_ctx = x_ctx.clone()
            point_ctx.bind(y_axis.name, RealNumber(y))
            results.append((x, y, _evaluate_point(expr, point_ctx, config, (x, y))))
    return results


class Sampler:
    """
    Samples variables of a Context over grids.

    Args:
        context: Declarations to sample. Validated before each sweep.
        config: Evaluation budget and parallelism settings.
        logger: Logger for sweep progress; defaults to this module's logger.
    """

    def __init__(
        self,
        context: Context,
        config: Optional[Config] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.context = context
        self.config = config or Config()
        self._log = logger or logging.getLogger(__name__)

    def sample_1d(
        self,
        name: str,
        x_range: AxisLike,
        steps: Optional[int] = None,
        sweep: str = 'x',
        workers: Optional[int] = None,
    ) -> list[Sample1D]:
        """
        Evaluate variable ``name`` at ``steps + 1`` evenly spaced points.

        Args:
            name: Declared variable to sample.
            x_range: (start, end) tuple or an Axis.
            steps: Number of intervals (required for tuples).
            sweep: Name bound to each point.
            workers: Number of partitions; defaults to ``config.workers``.

        Returns:
            List of (x, value) in order of x index. value is None where the
            point could not be evaluated.

        Raises:
            DeclarationError: If the context fails its recursion check.
        """
        axis = normalize_axis(x_range, steps, sweep)
        expr, funcs = self.context.simplify(name, free=(axis.name,), config=self.config)
        base = _with_funcs(self.context, funcs)
        blocks = axis.partition(workers if workers is not None else self.config.workers)
        self._log.debug("sampling %r = %s over %r in %d block(s)", name, expr, axis, len(blocks))
        jobs = [(base.clone(), expr, axis, block, self.config) for block in blocks]
        return self._run(_sweep_1d, jobs)

    def sample_2d(
        self,
        name: str,
        x_range: AxisLike,
        x_steps: Optional[int],
        y_range: AxisLike,
        y_steps: Optional[int],
        sweep: tuple[str, str] = ('x', 'y'),
        workers: Optional[int] = None,
    ) -> list[Sample2D]:
        """
        Evaluate variable ``name`` over an x-by-y grid.

        For each x the context is re-simplified with x bound, so x is folded
        into the expression before the inner y sweep. Partitioning applies
        to the outer (x) dimension only.

        Returns:
            List of (x, y, value), x-major, in index order.
        """
        x_axis = normalize_axis(x_range, x_steps, sweep[0])
        y_axis = normalize_axis(y_range, y_steps, sweep[1])
        if x_axis.name == y_axis.name:
            raise ValueError(f"Sweep names must differ, got '{x_axis.name}' twice")
        self.context.get_var(name)
        self.context.validate()
        blocks = x_axis.partition(workers if workers is not None else self.config.workers)
        self._log.debug("sampling %r over %r x %r in %d block(s)", name, x_axis, y_axis, len(blocks))
        jobs = [(self.context.clone(), name, x_axis, y_axis, block, self.config) for block in blocks]
        return self._run(_sweep_2d, jobs)

    def _run(self, worker: Callable, jobs: list[tuple]) -> list:
        """Run jobs, in a pool if there is more than one, and concatenate in order."""
        if len(jobs) == 1:
            return worker(*jobs[0])
        pool_cls = ProcessPoolExecutor if self.config.executor == 'process' else ThreadPoolExecutor
        with pool_cls(max_workers=len(jobs)) as pool:
            futures = [pool.submit(worker, *job) for job in jobs]
            parts = [f.result() for f in futures]
        return [sample for part in parts for sample in part]


def sample_1d(
    context: Context,
    name: str,
    x_range: AxisLike,
    steps: Optional[int] = None,
    sweep: str = 'x',
    config: Optional[Config] = None,
) -> list[Sample1D]:
    """Sample ``name`` over one axis. See Sampler.sample_1d."""
    return Sampler(context, config).sample_1d(name, x_range, steps, sweep=sweep)


def sample_2d(
    context: Context,
    name: str,
    x_range: AxisLike,
    x_steps: Optional[int],
    y_range: AxisLike,
    y_steps: Optional[int],
    sweep: tuple[str, str] = ('x', 'y'),
    config: Optional[Config] = None,
) -> list[Sample2D]:
    """Sample ``name`` over an x-by-y grid. See Sampler.sample_2d."""
    return Sampler(context, config).sample_2d(name, x_range, x_steps, y_range, y_steps, sweep=sweep)
