# CurveCalc - Configuration
# Copyright (c) 2024 CurveCalc Contributors. All rights reserved.

"""Configuration settings for CurveCalc."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import os


EXECUTORS = ('process', 'thread')


@dataclass
class Config:
    """
    Configuration for simplification, evaluation and sampling.

    Attributes:
        max_eval_steps: Maximum nodes visited by one evaluation before it is
                        abandoned. Guards recursive functions that never bottom out.
        max_depth: Maximum nesting of function calls within one
                   evaluation. Variable lookups do not count.
        max_passes: Maximum rounds of flatten/reduce/identity rewriting.
        expand_small_powers: Rewrite x**2 .. x**5 as repeated multiplication.
        workers: Number of partitions for sampling. 1 means sequential;
                 None means one per CPU.
        executor: 'process' or 'thread' pool for parallel sampling.
    """
    max_eval_steps: int = 1_000_000
    max_depth: int = 64
    max_passes: int = 16
    expand_small_powers: bool = False
    workers: Optional[int] = 1
    executor: str = 'process'

    def __post_init__(self):
        if self.workers is None:
            self.workers = max(1, (os.cpu_count() or 2) - 1)
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        if self.executor not in EXECUTORS:
            raise ValueError(f"executor must be one of {EXECUTORS}, got {self.executor!r}")
        if self.max_eval_steps < 1 or self.max_depth < 1 or self.max_passes < 1:
            raise ValueError("max_eval_steps, max_depth and max_passes must be positive")

    @classmethod
    def sequential(cls) -> Config:
        """Single-worker configuration (default)."""
        return cls()

    @classmethod
    def parallel(cls, workers: Optional[int] = None, executor: str = 'process') -> Config:
        """Partition sampling across ``workers`` pool workers."""
        return cls(workers=workers, executor=executor)

    @classmethod
    def strict(cls) -> Config:
        """Small evaluation budget, for interactive use."""
        return cls(max_eval_steps=10_000, max_depth=16)

    def __repr__(self) -> str:
        return (
            f"Config(max_eval_steps={self.max_eval_steps}, "
            f"max_depth={self.max_depth}, "
            f"max_passes={self.max_passes}, "
            f"expand_small_powers={self.expand_small_powers}, "
            f"workers={self.workers}, "
            f"executor={self.executor!r})"
        )
