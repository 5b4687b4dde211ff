import math

import numpy as np
import pytest

from solplan.models.projection.stats import (
    box_muller,
    default_normal_source,
    lognormal_shock,
    percentile,
    percentile_bands,
)


def _interpolated(values, p):
    ordered = sorted(values)
    index = p / 100 * (len(ordered) - 1)
    lo, hi = math.floor(index), math.ceil(index)
    return ordered[lo] + (ordered[hi] - ordered[lo]) * (index - lo)


def test_percentile_interpolates_between_order_statistics():
    assert percentile([4, 1, 3, 2], 50) == pytest.approx(2.5)
    assert percentile([10, 20], 10) == pytest.approx(11)
    assert percentile([7], 90) == 7


def test_percentile_matches_explicit_rule():
    values = list(np.random.default_rng(3).normal(size=37))
    for p in range(0, 101, 5):
        assert percentile(values, p) == pytest.approx(_interpolated(values, p))


def test_percentile_of_empty_sample():
    with pytest.raises(ValueError):
        percentile([], 50)


def test_bands_are_column_wise():
    matrix = np.array([[1.0, 10.0], [2.0, 20.0], [3.0, 30.0]])
    bands = percentile_bands(matrix)
    assert bands["p50"] == pytest.approx([2.0, 20.0])
    assert bands["mean"] == pytest.approx([2.0, 20.0])
    assert "mean" not in percentile_bands(matrix, with_mean=False)


def test_box_muller_known_points():
    assert box_muller(1.0, 0.0) == 0.0
    assert box_muller(math.exp(-0.5), 0.0) == pytest.approx(1.0)
    assert box_muller(math.exp(-0.5), 0.5) == pytest.approx(-1.0)


def test_seeded_source_is_reproducible():
    a, b = default_normal_source(seed=11), default_normal_source(seed=11)
    assert [a() for _ in range(5)] == [b() for _ in range(5)]


def test_normal_source_moments():
    normal = default_normal_source(seed=5)
    draws = np.array([normal() for _ in range(20000)])
    assert abs(draws.mean()) < 0.05
    assert draws.std() == pytest.approx(1.0, abs=0.05)


def test_lognormal_shock_preserves_mean():
    normal = default_normal_source(seed=42)
    shocks = [lognormal_shock(0.5, normal()) for _ in range(10000)]
    assert sum(shocks) / len(shocks) == pytest.approx(1.0, abs=0.03)
    assert lognormal_shock(0.0, 3.0) == 1.0
