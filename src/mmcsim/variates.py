"""Random variates used to generate arrivals, services and priorities."""

from __future__ import annotations

import math
from typing import Union

import numpy as np

PRIORITY_LEVELS = (1, 2, 3)

SeedLike = Union[int, np.random.Generator, None]


def make_rng(seed: SeedLike = None) -> np.random.Generator:
    """Return a generator; an existing `Generator` is passed through untouched."""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed=seed)


def exponential(rate: float, rng: np.random.Generator) -> float:
    """Draw Exp(rate) by inversion: -ln(1 - U) / rate with U ~ U[0, 1)."""
    return -math.log(1.0 - rng.random()) / rate


def draw_priority(rng: np.random.Generator, enabled: bool = True) -> int:
    """Uniform draw over the priority levels, or the top level when disabled."""
    if not enabled:
        return PRIORITY_LEVELS[0]
    return int(rng.integers(PRIORITY_LEVELS[0], PRIORITY_LEVELS[-1] + 1))


def relative_error(sim_value: float, reference_value: float) -> float:
    """Return |sim-ref| / ref guarding division by zero."""
    if reference_value == 0:
        return 0.0 if sim_value == 0 else float("inf")
    return abs(sim_value - reference_value) / abs(reference_value)


def ci95_halfwidth(values) -> float:
    """Normal-approximation 95% half-width of the mean of `values`."""
    arr = np.asarray(values, dtype=float)
    n = len(arr)
    if n < 2:
        return 0.0
    return 1.96 * float(arr.std(ddof=1)) / math.sqrt(n)
