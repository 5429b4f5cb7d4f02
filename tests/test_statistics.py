import numpy as np
import pytest

from bizvalue.simulation.statistics import (
    confidence_interval,
    histogram,
    percentile,
    probability,
)


class TestPercentile:
    def test_linear_interpolation(self):
        values = [10.0, 20.0, 30.0, 40.0, 50.0]
        assert percentile(values, 0) == 10.0
        assert percentile(values, 50) == 30.0
        assert percentile(values, 100) == 50.0
        # index 0.1 * 4 = 0.4 -> 10 + 0.4 * 10
        assert percentile(values, 10) == pytest.approx(14.0)

    def test_single_value(self):
        assert percentile([7.0], 90) == 7.0

    def test_empty_sample(self):
        with pytest.raises(ValueError):
            percentile([], 50)


class TestConfidenceInterval:
    def test_summary(self):
        ci = confidence_interval(np.array([5.0, 1.0, 3.0, 2.0, 4.0]))
        assert ci.min == 1.0
        assert ci.max == 5.0
        assert ci.p50 == 3.0
        assert ci.mean == pytest.approx(3.0)
        assert ci.std_dev == pytest.approx(np.sqrt(2.0))
        assert ci.percentiles == {}

    def test_extra_levels(self):
        ci = confidence_interval(np.arange(101, dtype=float), extra_levels=[5, 50, 99])
        assert ci.percentiles == pytest.approx({5.0: 5.0, 50.0: 50.0, 99.0: 99.0})


class TestHistogram:
    def test_counts_and_last_bucket_closed(self):
        buckets = histogram(np.array([0.0, 1.0, 2.0, 3.0, 4.0]), bucket_count=4)
        assert [b.count for b in buckets] == [1, 1, 1, 2]
        assert buckets[0].range_start == 0.0
        assert buckets[-1].range_end == pytest.approx(4.0)
        assert sum(b.frequency for b in buckets) == pytest.approx(100.0)

    def test_constant_sample(self):
        buckets = histogram(np.full(10, 42.0))
        assert len(buckets) == 20
        assert buckets[0].count == 10
        assert buckets[0].frequency == 100.0
        assert all(b.count == 0 for b in buckets[1:])


def test_probability_in_percent():
    assert probability(np.array([True, False, True, True])) == 75.0
