# CurveCalc - Result Helpers
# Copyright (c) 2024 CurveCalc Contributors. All rights reserved.

"""
Helpers for handing sample sequences to callers.

Samples come out of the Sampler as tuples of coordinates plus an optional
term. These helpers turn them into text lines or numpy arrays for plotting
and export; persisting them is left to the caller.
"""

from __future__ import annotations
from typing import Optional, Sequence

import numpy as np

from .term import Number, ComplexNumber


def split_value(value: Optional[Number]) -> tuple[float, float]:
    """Return (re, im) of a sample value; (nan, nan) for a missing one."""
    if value is None:
        return (float('nan'), float('nan'))
    if isinstance(value, ComplexNumber):
        return (value.re, value.im)
    return (value.value, 0.0)


def format_sample(sample: tuple) -> str:
    """
    Format one sample as a whitespace-separated line.

    Example:
        >>> format_sample((0.5, RealNumber(2.0)))
        '0.5 2.0 0.0'
        >>> format_sample((0.5, 1.0, None))
        '0.5 1.0 nan nan'
    """
    *coords, value = sample
    re, im = split_value(value)
    return ' '.join(repr(float(c)) for c in (*coords, re, im))


def format_samples(samples: Sequence[tuple]) -> str:
    """Format samples one per line."""
    return '\n'.join(format_sample(s) for s in samples)


def samples_to_array(samples: Sequence[tuple]) -> np.ndarray:
    """
    Convert samples to a float array with one row per sample.

    Columns are the coordinates followed by the real and imaginary parts of
    the value: (x, re, im) for 1-D sweeps and (x, y, re, im) for 2-D sweeps.
    Missing values become NaN.
    """
    if not samples:
        return np.empty((0, 0), dtype=np.float64)
    rows = []
    for sample in samples:
        *coords, value = sample
        rows.append((*coords, *split_value(value)))
    width = len(rows[0])
    if any(len(r) != width for r in rows):
        raise ValueError("All samples must have the same number of coordinates")
    return np.asarray(rows, dtype=np.float64)
