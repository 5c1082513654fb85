# CurveCalc - Sample Grids
# Copyright (c) 2024 CurveCalc Contributors. All rights reserved.

"""
Sweep axes for sampling.

An Axis covers ``[start, end]`` inclusive with ``steps + 1`` evenly spaced
points. Points are computed from their index as ``start + i * step``, so a
partition of the index range yields exactly the same coordinates as the
whole axis.

Example:
    >>> ax = Axis('x', -1.0, 1.0, 2)
    >>> list(ax.points())
    [-1.0, 0.0, 1.0]
    >>> ax.partition(2)
    [range(0, 2), range(2, 3)]
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Optional, Union
import math


# Type for things that can be converted to an Axis
AxisLike = Union['Axis', tuple[float, float]]


@dataclass(frozen=True)
class Axis:
    """
    One sweep dimension.

    Attributes:
        name: Variable bound to each point.
        start: First point.
        end: Last point (included).
        steps: Number of intervals; the axis has steps + 1 points.
    """
    name: str
    start: float
    end: float
    steps: int

    def __post_init__(self):
        object.__setattr__(self, 'start', float(self.start))
        object.__setattr__(self, 'end', float(self.end))
        if not (math.isfinite(self.start) and math.isfinite(self.end)):
            raise ValueError(f"Invalid axis '{self.name}': bounds must be finite")
        if not isinstance(self.steps, int) or self.steps < 1:
            raise ValueError(f"Invalid axis '{self.name}': steps must be a positive integer, got {self.steps!r}")

    @property
    def step(self) -> float:
        return (self.end - self.start) / self.steps

    def __len__(self) -> int:
        return self.steps + 1

    def point(self, i: int) -> float:
        """Coordinate of the i-th point."""
        return self.start + i * self.step

    def points(self, indices: Optional[range] = None) -> Iterator[float]:
        """Coordinates in order, optionally restricted to an index range."""
        for i in (indices if indices is not None else range(len(self))):
            yield self.point(i)

    def partition(self, n: int) -> list[range]:
        """
        Split the point indices into at most n contiguous, non-overlapping
        blocks of near-equal size, in order.
        """
        if n < 1:
            raise ValueError(f"Cannot partition into {n} blocks")
        total = len(self)
        n = min(n, total)
        size, extra = divmod(total, n)
        blocks = []
        lo = 0
        for k in range(n):
            hi = lo + size + (1 if k < extra else 0)
            blocks.append(range(lo, hi))
            lo = hi
        return blocks

    def __repr__(self) -> str:
        return f"Axis('{self.name}', [{self.start}, {self.end}], steps={self.steps})"


def normalize_axis(axis: AxisLike, steps: Optional[int] = None, name: str = 'x') -> Axis:
    """
    Normalize an axis argument.

    Args:
        axis: An Axis (returned as-is) or a (start, end) tuple.
        steps: Number of intervals; required for tuples.
        name: Variable name for tuples.
    """
    if isinstance(axis, Axis):
        return axis
    elif isinstance(axis, tuple) and len(axis) == 2:
        if steps is None:
            raise ValueError("steps is required when the axis is given as a tuple")
        return Axis(name, axis[0], axis[1], steps)
    else:
        raise TypeError(f"Cannot normalize axis of type {type(axis).__name__}")
