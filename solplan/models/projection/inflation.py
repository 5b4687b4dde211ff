# solplan/models/projection/inflation.py
"""
Nominal future dollars -> today's purchasing power.

Two separate adjustments, never combined in one call:
  • inflation  : consumer prices, linear or sinusoidal around a base rate
  • debasement : currency vs hard assets, constant compounding
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Union

from solplan.models.errors import is_number, parse_choice, require, require_numbers


class InflationType(str, Enum):
    LINEAR = "linear"
    CYCLICAL = "cyclical"


@dataclass
class InflationParams:
    enabled: bool = True
    type: Union[InflationType, str] = InflationType.LINEAR
    rate: float = 0.035           # base / average yearly rate
    amplitude: float = 0.02       # cyclical swing (±)
    cycle_period: float = 7.0     # cyclical years per cycle
    debasement_rate: float = 0.0  # M2-style currency debasement

    def __post_init__(self):
        self.type = parse_choice(InflationType, self.type, "inflation_type")


def cyclical_inflation_rate(year: int, base_rate: float, amplitude: float, cycle_period: float) -> float:
    return base_rate + amplitude * math.sin(2.0 * math.pi * year / cycle_period)


def _rate_for_year(year: int, params: InflationParams) -> float:
    if params.type == InflationType.LINEAR:
        return params.rate
    require(params.cycle_period > 0, "cycle_period must be positive for cyclical inflation")
    return cyclical_inflation_rate(year, params.rate, params.amplitude, params.cycle_period)


def cumulative_inflation_factor(years: int, params: InflationParams) -> float:
    """
    Multiplier turning today's dollars into year-`years` dollars. Walked year
    by year because the cyclical path makes compounding path-dependent;
    each year's rate is floored at 0 (no deflation).
    """
    require(is_number(years) and years >= 0, f"years must be >= 0, got {years}")
    if not params.enabled:
        return 1.0
    require_numbers(params, "rate", "amplitude", "cycle_period")

    factor = 1.0
    for year in range(1, int(years) + 1):
        factor *= 1.0 + max(0.0, _rate_for_year(year, params))
    return factor


def cumulative_debasement_factor(years: int, debasement_rate: float, enabled: bool = True) -> float:
    require(is_number(years) and years >= 0, f"years must be >= 0, got {years}")
    if not enabled or debasement_rate == 0:
        return 1.0
    require(is_number(debasement_rate) and debasement_rate > -1,
            f"debasement_rate must be > -1, got {debasement_rate}")
    return (1.0 + debasement_rate) ** years


def to_present_value(nominal: float, years: int, params: InflationParams) -> float:
    require(is_number(nominal), f"nominal must be a number, got {nominal!r}")
    return nominal / cumulative_inflation_factor(years, params)


def to_hard_asset_value(nominal: float, years: int, params: InflationParams) -> float:
    require(is_number(nominal), f"nominal must be a number, got {nominal!r}")
    return nominal / cumulative_debasement_factor(years, params.debasement_rate, params.enabled)


def yearly_inflation_rates(years: int, params: InflationParams) -> List[float]:
    """Unfloored yearly rates for charting."""
    return [_rate_for_year(year, params) for year in range(1, int(years) + 1)]
