# solplan/models/projection/projection_calc.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from solplan.models.errors import parse_choice, require, require_numbers
from solplan.models.projection.growth_models import (
    GrowthModel,
    GrowthModelParams,
    future_price,
    parse_growth_model,
)

logger = logging.getLogger(__name__)


class DcaFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def contributions_per_year(self) -> int:
        return {"daily": 365, "weekly": 52, "monthly": 12, "yearly": 1}[self.value]


DEFAULT_YIELD_RATE = 0.075


@dataclass
class AccumulationInput:
    """
    Grow-phase inputs.

    contribution_amount is USD per contribution; frequency maps it to an
    annual amount. The optional yield (e.g. staking APR) compounds the
    asset balance once a year, after that year's purchases.
    """
    starting_balance: float
    starting_price: float
    years: int
    contribution_amount: float = 0.0
    frequency: Union[DcaFrequency, str] = DcaFrequency.MONTHLY
    growth_model: Union[GrowthModel, str] = GrowthModel.CAGR
    model_params: GrowthModelParams = field(default_factory=GrowthModelParams)
    yield_enabled: bool = False
    yield_rate: float = DEFAULT_YIELD_RATE
    as_of: Optional[date] = None  # power-law valuation date; today when None

    def __post_init__(self):
        self.frequency = parse_choice(DcaFrequency, self.frequency, "frequency")
        self.growth_model = parse_growth_model(self.growth_model)

    @property
    def annual_contribution(self) -> float:
        return float(self.contribution_amount) * self.frequency.contributions_per_year

    @property
    def effective_yield(self) -> float:
        return float(self.yield_rate) if self.yield_enabled else 0.0


@dataclass(frozen=True)
class YearlyProjectionPoint:
    year: int
    asset_balance: float
    asset_price: float
    portfolio_value_usd: float
    total_invested_usd: float
    gain_usd: float


@dataclass
class AccumulationResult:
    yearly_points: List[YearlyProjectionPoint]
    final_balance: float
    final_price: float
    final_value_usd: float
    total_invested_usd: float
    total_gain_usd: float


def validate_accumulation_input(inp: AccumulationInput) -> None:
    require_numbers(inp, "starting_balance", "starting_price", "years", "contribution_amount", "yield_rate")
    require(inp.starting_price > 0, f"starting_price must be positive, got {inp.starting_price}")
    require(inp.starting_balance >= 0, f"starting_balance must be >= 0, got {inp.starting_balance}")
    require(inp.years >= 0, f"years must be >= 0, got {inp.years}")
    require(inp.contribution_amount >= 0, f"contribution_amount must be >= 0, got {inp.contribution_amount}")
    require(inp.yield_rate >= 0, f"yield_rate must be >= 0, got {inp.yield_rate}")


def accumulate_along_path(inp: AccumulationInput, price_path: Sequence[float]) -> List[Tuple[float, float]]:
    """
    DCA through a yearly end-of-year price path.
    Returns (asset_balance, end_price) per year.

    Contributions execute at the mean of the year's start and end price.
    """
    annual = inp.annual_contribution
    growth = 1.0 + inp.effective_yield
    balance = float(inp.starting_balance)
    start_price = float(inp.starting_price)

    rows: List[Tuple[float, float]] = []
    for end_price in price_path:
        avg_price = (start_price + end_price) / 2.0
        if avg_price > 0:
            balance += annual / avg_price
        balance *= growth
        rows.append((balance, end_price))
        start_price = end_price
    return rows


def current_state_point(inp: AccumulationInput) -> YearlyProjectionPoint:
    value = inp.starting_balance * inp.starting_price
    return YearlyProjectionPoint(
        year=0,
        asset_balance=float(inp.starting_balance),
        asset_price=float(inp.starting_price),
        portfolio_value_usd=value,
        total_invested_usd=value,
        gain_usd=0.0,
    )


# 🔹 Deterministic accumulation projection
def project(inp: AccumulationInput) -> AccumulationResult:
    """
    Year-by-year roll-forward on the deterministic model price:
      • buy annual_contribution / avg(start, end) units
      • apply yield to the whole balance
      • invested starts at the value of the starting holdings
    A horizon under one year yields a single year-0 point for the current
    state, never an empty series.
    """
    validate_accumulation_input(inp)
    initial_value = inp.starting_balance * inp.starting_price
    years = int(inp.years)

    if years < 1:
        points = [current_state_point(inp)]
    else:
        path = [
            future_price(inp.starting_price, y, inp.growth_model, inp.model_params, as_of=inp.as_of)
            for y in range(1, years + 1)
        ]
        points = []
        invested = initial_value
        for year, (balance, end_price) in enumerate(accumulate_along_path(inp, path), start=1):
            invested += inp.annual_contribution
            value = balance * end_price
            points.append(YearlyProjectionPoint(
                year=year,
                asset_balance=balance,
                asset_price=end_price,
                portfolio_value_usd=value,
                total_invested_usd=invested,
                gain_usd=value - invested,
            ))

    last = points[-1]
    logger.debug("projection: %s years, model=%s, final value %.2f",
                 years, inp.growth_model.value, last.portfolio_value_usd)
    return AccumulationResult(
        yearly_points=points,
        final_balance=last.asset_balance,
        final_price=last.asset_price,
        final_value_usd=last.portfolio_value_usd,
        total_invested_usd=last.total_invested_usd,
        total_gain_usd=last.gain_usd,
    )
