import math

import pytest

from solplan.models.errors import ConfigurationError, InvalidInputError
from solplan.models.projection.inflation import (
    InflationParams,
    cumulative_debasement_factor,
    cumulative_inflation_factor,
    to_hard_asset_value,
    to_present_value,
    yearly_inflation_rates,
)


@pytest.mark.parametrize("years", [0, 1, 10, 40])
def test_disabled_inflation_is_identity(years):
    params = InflationParams(enabled=False, rate=0.5)
    assert to_present_value(123456.0, years, params) == 123456.0


def test_linear_inflation_compounds():
    params = InflationParams(rate=0.035)
    assert cumulative_inflation_factor(10, params) == pytest.approx(1.035 ** 10)
    assert to_present_value(1000, 10, params) == pytest.approx(1000 / 1.035 ** 10)


def test_zero_years_leaves_value_unchanged():
    assert to_present_value(500, 0, InflationParams(type="cyclical")) == 500


def test_cyclical_follows_sine_and_floors_at_zero():
    params = InflationParams(type="cyclical", rate=0.01, amplitude=0.05, cycle_period=4)
    expected = 1.0
    for year in range(1, 13):
        rate = 0.01 + 0.05 * math.sin(2 * math.pi * year / 4)
        expected *= 1 + max(0.0, rate)
    assert cumulative_inflation_factor(12, params) == pytest.approx(expected)
    assert min(yearly_inflation_rates(12, params)) < 0


def test_cyclical_is_path_dependent():
    cyclical = cumulative_inflation_factor(10, InflationParams(type="cyclical", rate=0.035, amplitude=0.03))
    linear = cumulative_inflation_factor(10, InflationParams(rate=0.035))
    assert cyclical != pytest.approx(linear)


def test_debasement_is_separate_from_inflation():
    params = InflationParams(rate=0.035, debasement_rate=0.07)
    assert to_hard_asset_value(100, 10, params) == pytest.approx(100 / 1.07 ** 10)
    assert to_hard_asset_value(100, 10, InflationParams(enabled=False, debasement_rate=0.07)) == 100
    assert cumulative_debasement_factor(5, 0.0) == 1.0


def test_linear_rates_are_constant():
    assert yearly_inflation_rates(3, InflationParams(rate=0.02)) == [0.02, 0.02, 0.02]


def test_negative_years_rejected():
    with pytest.raises(InvalidInputError):
        cumulative_inflation_factor(-1, InflationParams())
    with pytest.raises(InvalidInputError):
        cumulative_debasement_factor(-1, 0.05)


def test_cyclical_needs_positive_period():
    with pytest.raises(InvalidInputError):
        cumulative_inflation_factor(3, InflationParams(type="cyclical", cycle_period=0))


def test_unknown_inflation_type():
    with pytest.raises(ConfigurationError):
        InflationParams(type="hyper")


def test_non_numeric_inputs_rejected():
    with pytest.raises(InvalidInputError):
        to_present_value("lots", 5, InflationParams())
    with pytest.raises(InvalidInputError):
        cumulative_inflation_factor(5, InflationParams(rate="high"))


def test_debasement_at_minus_one_rejected():
    with pytest.raises(InvalidInputError):
        to_hard_asset_value(100, 5, InflationParams(debasement_rate=-1.0))
