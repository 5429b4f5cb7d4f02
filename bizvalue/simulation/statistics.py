"""Summary statistics over simulated samples."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_BUCKET_COUNT = 20
STANDARD_PERCENTILES = (10, 25, 50, 75, 90)


@dataclass(frozen=True)
class ConfidenceInterval:
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float
    mean: float
    std_dev: float
    min: float
    max: float
    # additional requested percentiles, keyed by level (0-100)
    percentiles: dict[float, float] = field(default_factory=dict)


@dataclass(frozen=True)
class HistogramBucket:
    range_start: float
    range_end: float
    count: int
    frequency: float  # percent of all samples


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Percentile by linear interpolation between order statistics."""
    n = len(sorted_values)
    if n == 0:
        raise ValueError("percentile of an empty sample")
    index = (p / 100) * (n - 1)
    lower = int(np.floor(index))
    upper = int(np.ceil(index))
    if upper >= n:
        return float(sorted_values[-1])
    if lower < 0:
        return float(sorted_values[0])
    weight = index - lower
    return float(sorted_values[lower] * (1 - weight) + sorted_values[upper] * weight)


def confidence_interval(
    values: np.ndarray, extra_levels: Sequence[float] = ()
) -> ConfidenceInterval:
    """Mean, population std dev, min/max and percentiles of a sample."""
    ordered = np.sort(np.asarray(values, dtype=float))
    levels = sorted(set(STANDARD_PERCENTILES) | {float(level) for level in extra_levels})
    points = {level: percentile(ordered, level) for level in levels}

    return ConfidenceInterval(
        p10=points[10],
        p25=points[25],
        p50=points[50],
        p75=points[75],
        p90=points[90],
        mean=float(np.mean(ordered)),
        std_dev=float(np.std(ordered)),
        min=float(ordered[0]),
        max=float(ordered[-1]),
        percentiles={float(level): points[level] for level in extra_levels},
    )


def histogram(values: np.ndarray, bucket_count: int = DEFAULT_BUCKET_COUNT) -> list[HistogramBucket]:
    """Fixed-count histogram spanning the sample's min to max.

    The last bucket is closed on the right. When every value is equal the
    range is zero and all samples land in the first bucket.
    """
    values = np.asarray(values, dtype=float)
    total = len(values)
    low = float(values.min())
    high = float(values.max())
    width = (high - low) / bucket_count

    if width == 0:
        logger.debug("Zero-range sample; all %d values in the first bucket", total)
        counts = np.zeros(bucket_count, dtype=int)
        counts[0] = total
    else:
        index = np.floor((values - low) / width).astype(int)
        counts = np.bincount(np.clip(index, 0, bucket_count - 1), minlength=bucket_count)

    return [
        HistogramBucket(
            range_start=low + i * width,
            range_end=low + (i + 1) * width,
            count=int(counts[i]),
            frequency=float(counts[i]) / total * 100,
        )
        for i in range(bucket_count)
    ]


def probability(mask: np.ndarray) -> float:
    """Share of True values in percent."""
    return float(np.count_nonzero(mask)) / len(mask) * 100
