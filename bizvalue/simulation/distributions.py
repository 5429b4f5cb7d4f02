"""Vectorized driver sampling for the Monte Carlo simulator.

All randomness comes from the ``numpy.random.Generator`` passed in, so a
seeded generator reproduces a run exactly.
"""

from __future__ import annotations

import numpy as np

from bizvalue.models.enums import DistributionType


def box_muller(rng: np.random.Generator, size: int) -> np.ndarray:
    """Standard normal draws via the Box-Muller transform."""
    # 1 - U keeps u1 in (0, 1] so log(u1) is finite
    u1 = 1.0 - rng.random(size)
    u2 = rng.random(size)
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


def triangular_inverse_cdf(u: np.ndarray, low: float, mode: float, high: float) -> np.ndarray:
    """Map uniform draws onto a triangular(low, mode, high) distribution."""
    width = high - low
    if width <= 0:
        return np.full_like(u, mode, dtype=float)
    split = (mode - low) / width
    left = low + np.sqrt(u * width * (mode - low))
    right = high - np.sqrt((1.0 - u) * width * (high - mode))
    return np.where(u < split, left, right)


def sample_driver(
    rng: np.random.Generator,
    baseline: float,
    variance_percent: float,
    distribution: DistributionType,
    size: int,
) -> np.ndarray:
    """Draw ``size`` values around ``baseline``.

    The spread is ``baseline × variance_percent / 100``; the sampling range
    is [max(0, baseline - spread), baseline + spread]. Normal draws use a
    standard deviation of spread / 3 and are clamped at 0. A non-positive
    baseline or a zero spread is returned unchanged, without consuming
    any random numbers.
    """
    spread = baseline * variance_percent / 100
    if baseline <= 0 or spread == 0:
        return np.full(size, float(baseline))

    low = max(0.0, baseline - spread)
    high = baseline + spread

    if distribution == DistributionType.NORMAL:
        return np.maximum(0.0, baseline + box_muller(rng, size) * (spread / 3))
    if distribution == DistributionType.TRIANGULAR:
        return triangular_inverse_cdf(rng.random(size), low, baseline, high)
    if distribution == DistributionType.UNIFORM:
        return low + rng.random(size) * (high - low)
    raise ValueError(f"Unsupported distribution: {distribution}")
