# solplan/models/projection/growth_models.py
"""
Deterministic price curves for the accumulation phase.

  • cagr     : compound growth, optionally with an auto-decaying rate
  • powerlaw : log-log trend since genesis, normalized to today's price
  • scurve   : remaining upside to a ceiling decays with a half-life
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional, Tuple, Union

from solplan.models.errors import ConfigurationError, is_number, parse_choice, require

logger = logging.getLogger(__name__)


class GrowthModel(str, Enum):
    CAGR = "cagr"
    POWER_LAW = "powerlaw"
    S_CURVE = "scurve"


class DecayMode(str, Enum):
    NONE = "none"
    AUTO = "auto"


DEFAULT_CAGR = 0.25
CAGR_FLOOR = 0.03

# (first year of block, yearly decay of the rate itself)
AUTO_DECAY_SCHEDULE: Tuple[Tuple[int, float], ...] = (
    (1, 0.06),
    (6, 0.05),
    (11, 0.03),
    (16, 0.02),
    (21, 0.015),
    (26, 0.01),
)

GENESIS_DATE = date(2020, 3, 16)
POWER_LAW_INTERCEPT = -2.7
POWER_LAW_SLOPE_DEFAULT = 1.6

S_CURVE_HALF_LIFE_DEFAULT = 10.0
S_CURVE_MAX_PRICE_DEFAULT = 50000.0


@dataclass
class GrowthModelParams:
    """
    Flat parameter set; the selected GrowthModel decides which fields apply.
    None means "use the default" (an explicit 0.0 CAGR is kept).
    """
    cagr: Optional[float] = None
    cagr_decay: Union[DecayMode, str] = DecayMode.NONE
    power_law_slope: Optional[float] = None
    s_curve_years_to_half_remaining: Optional[float] = None
    s_curve_max_price: Optional[float] = None

    def __post_init__(self):
        self.cagr_decay = parse_choice(DecayMode, self.cagr_decay, "cagr_decay")


def parse_growth_model(value) -> GrowthModel:
    return parse_choice(GrowthModel, value, "growth_model")


def decay_rate_for_year(year: int, schedule: Tuple[Tuple[int, float], ...] = AUTO_DECAY_SCHEDULE) -> float:
    """Decay percentage of the 5-year block containing `year`."""
    for start_year, rate in reversed(schedule):
        if year >= start_year:
            return rate
    return schedule[0][1]


# ---------- CAGR ----------

def cagr_rate_schedule(rate: float, years: int) -> List[float]:
    """Growth rate applied in each of years 1..years under auto decay."""
    rates: List[float] = []
    current = float(rate)
    for year in range(1, int(years) + 1):
        rates.append(current)
        current = max(CAGR_FLOOR, current * (1.0 - decay_rate_for_year(year)))
    return rates


def cagr_price(current_price: float, years_from_now: float, cagr: float,
               decay: DecayMode = DecayMode.NONE) -> float:
    if decay == DecayMode.NONE:
        return current_price * (1.0 + cagr) ** years_from_now

    # auto decay steps whole years only
    price = current_price
    for r in cagr_rate_schedule(cagr, int(math.floor(years_from_now))):
        price *= 1.0 + r
    return price


# ---------- Power law ----------

def days_since_genesis(as_of: Optional[date] = None) -> int:
    as_of = as_of or date.today()
    return (as_of - GENESIS_DATE).days


def power_law_fair_value(days_from_genesis: float, slope: float = POWER_LAW_SLOPE_DEFAULT) -> float:
    return 10.0 ** (POWER_LAW_INTERCEPT + slope * math.log10(days_from_genesis))


def current_power_law_fair_value(slope: float = POWER_LAW_SLOPE_DEFAULT,
                                 as_of: Optional[date] = None) -> float:
    return power_law_fair_value(days_since_genesis(as_of), slope)


def future_power_law_fair_value(years_from_now: float, slope: float = POWER_LAW_SLOPE_DEFAULT,
                                as_of: Optional[date] = None) -> float:
    return power_law_fair_value(days_since_genesis(as_of) + years_from_now * 365, slope)


def power_law_price(current_price: float, years_from_now: float,
                    slope: float = POWER_LAW_SLOPE_DEFAULT,
                    as_of: Optional[date] = None) -> float:
    """
    Growth multiplier taken from the trend line, applied to the actual price,
    so a price above or below fair value projects relative to itself.
    """
    today_days = days_since_genesis(as_of)
    require(today_days > 0, "power law needs a valuation date after genesis")
    multiplier = (power_law_fair_value(today_days + years_from_now * 365, slope)
                  / power_law_fair_value(today_days, slope))
    return current_price * multiplier


def power_law_ceiling(current_price: float, years: float,
                      slope: float = POWER_LAW_SLOPE_DEFAULT,
                      as_of: Optional[date] = None) -> float:
    """S-curve ceiling derived from the normalized power-law price at the horizon."""
    projected = power_law_price(current_price, years, slope, as_of=as_of)
    return float(round(projected / 1000.0) * 1000)


# ---------- S-curve ----------

def s_curve_price(current_price: float, years_from_now: float,
                  years_to_half_remaining: float = S_CURVE_HALF_LIFE_DEFAULT,
                  max_price: float = S_CURVE_MAX_PRICE_DEFAULT) -> float:
    if current_price >= max_price:
        return max_price
    require(years_to_half_remaining > 0, "s-curve half-life must be positive")

    remaining = max_price - current_price
    k = math.log(2.0) / years_to_half_remaining
    return max_price - remaining * math.exp(-k * years_from_now)


# ---------- dispatcher ----------

def future_price(current_price: float, years_from_now: float,
                 model: Union[GrowthModel, str], params: Optional[GrowthModelParams] = None,
                 *, as_of: Optional[date] = None) -> float:
    """Price `years_from_now` years ahead under the selected model."""
    require(is_number(current_price) and current_price > 0, f"current_price must be positive, got {current_price!r}")
    require(is_number(years_from_now) and years_from_now >= 0,
            f"years_from_now must be >= 0, got {years_from_now!r}")
    params = params or GrowthModelParams()

    try:
        model = parse_growth_model(model)
    except ConfigurationError as e:
        logger.warning("%s; falling back to %.0f%% CAGR", e, DEFAULT_CAGR * 100)
        return cagr_price(current_price, years_from_now, DEFAULT_CAGR)

    if model == GrowthModel.CAGR:
        rate = DEFAULT_CAGR if params.cagr is None else params.cagr
        require(is_number(rate) and rate > -1, f"cagr must be > -1, got {rate!r}")
        return cagr_price(current_price, years_from_now, rate, params.cagr_decay)

    if model == GrowthModel.POWER_LAW:
        slope = params.power_law_slope or POWER_LAW_SLOPE_DEFAULT
        require(is_number(slope) and slope > 0, f"power_law_slope must be positive, got {slope!r}")
        return power_law_price(current_price, years_from_now, slope, as_of=as_of)

    half_life = params.s_curve_years_to_half_remaining or S_CURVE_HALF_LIFE_DEFAULT
    max_price = params.s_curve_max_price or S_CURVE_MAX_PRICE_DEFAULT
    require(is_number(half_life), f"s_curve_years_to_half_remaining must be a number, got {half_life!r}")
    require(is_number(max_price) and max_price > 0, f"s_curve_max_price must be positive, got {max_price!r}")
    return s_curve_price(current_price, years_from_now, half_life, max_price)


def yearly_prices(current_price: float, years: int, model: Union[GrowthModel, str],
                  params: Optional[GrowthModelParams] = None,
                  *, as_of: Optional[date] = None) -> List[float]:
    return [future_price(current_price, y, model, params, as_of=as_of) for y in range(1, int(years) + 1)]


def model_display_name(model: Union[GrowthModel, str]) -> str:
    names = {
        GrowthModel.CAGR: "CAGR",
        GrowthModel.POWER_LAW: "Power Law",
        GrowthModel.S_CURVE: "Asymptotic",
    }
    try:
        return names[parse_growth_model(model)]
    except ConfigurationError:
        return str(model)


def model_description(model: Union[GrowthModel, str]) -> str:
    descriptions = {
        GrowthModel.CAGR: "Constant annual growth rate - simple but unrealistic for crypto",
        GrowthModel.POWER_LAW: "Log-linear growth over time - based on Bitcoin's historical pattern",
        GrowthModel.S_CURVE: "Approaches max price asymptotically - fast early gains that slow over time",
    }
    try:
        return descriptions[parse_growth_model(model)]
    except ConfigurationError:
        return ""
