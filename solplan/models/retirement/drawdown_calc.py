# solplan/models/retirement/drawdown_calc.py
"""
Monte Carlo for the spend (decumulation) phase.

Monthly steps: withdraw an inflation-escalating income in asset units, then
move the price by geometric Brownian motion. A path that starts a month with
no balance has failed for good; it is never refunded.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from solplan.models.errors import require, require_numbers
from solplan.models.projection.stats import (
    NormalSource,
    default_normal_source,
    percentile,
    percentile_bands,
)

logger = logging.getLogger(__name__)

SAMPLE_PATH_LIMIT = 10


@dataclass
class DrawdownInput:
    starting_balance: float            # asset units at retirement
    starting_price: float              # expected asset price at retirement
    monthly_income_today: float = 5000.0
    retirement_years: int = 35
    volatility: float = 0.25           # annual
    real_growth_rate: float = 0.08     # expected return above inflation
    inflation_rate: float = 0.035
    simulations: int = 500
    keep_all_paths: bool = False
    sample_limit: int = SAMPLE_PATH_LIMIT


@dataclass
class SimulationPath:
    id: int
    months: List[int] = field(default_factory=list)
    portfolio_value: List[float] = field(default_factory=list)
    asset_balance: List[float] = field(default_factory=list)
    asset_price: List[float] = field(default_factory=list)
    failed: bool = False
    failure_month: Optional[int] = None

    def record(self, month: int, balance: float, price: float) -> None:
        self.months.append(month)
        self.asset_balance.append(balance)
        self.asset_price.append(price)
        self.portfolio_value.append(balance * price)

    @property
    def ending_value(self) -> float:
        return self.portfolio_value[-1]


@dataclass(frozen=True)
class DrawdownPercentile:
    month: int
    p10: float
    p50: float
    p90: float


@dataclass
class DrawdownResult:
    success_rate: float
    median_ending_value: float
    percentiles: List[DrawdownPercentile]
    failed_paths: List[SimulationPath]
    successful_paths: List[SimulationPath]
    median_failure_month: Optional[int]
    simulation_count: int
    all_paths: List[SimulationPath] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return int(round((1.0 - self.success_rate) * self.simulation_count))


def monthly_rate(annual_rate: float) -> float:
    """Monthly rate that compounds to `annual_rate` over 12 months."""
    return (1.0 + annual_rate) ** (1.0 / 12.0) - 1.0


def validate_drawdown_input(inp: DrawdownInput) -> None:
    require_numbers(inp, "starting_balance", "starting_price", "monthly_income_today", "retirement_years",
                    "volatility", "real_growth_rate", "inflation_rate", "simulations")
    require(inp.starting_price > 0, f"starting_price must be positive, got {inp.starting_price}")
    require(inp.starting_balance >= 0, f"starting_balance must be >= 0, got {inp.starting_balance}")
    require(inp.retirement_years > 0, f"retirement_years must be positive, got {inp.retirement_years}")
    require(int(inp.simulations) > 0, f"simulations must be positive, got {inp.simulations}")
    require(inp.volatility >= 0, f"volatility must be >= 0, got {inp.volatility}")
    require(inp.monthly_income_today >= 0, f"monthly_income_today must be >= 0, got {inp.monthly_income_today}")
    # monthly_rate has no real root at or below -100%
    require(inp.real_growth_rate > -1, f"real_growth_rate must be > -1, got {inp.real_growth_rate}")
    require(inp.inflation_rate > -1, f"inflation_rate must be > -1, got {inp.inflation_rate}")


def simulate_path(path_id: int, inp: DrawdownInput, normal: NormalSource) -> SimulationPath:
    """
    One monthly trajectory over months 0..years*12 (inclusive).

    The month whose withdrawal empties the balance is still a live month;
    failure is recorded at the start of the following month.
    """
    total_months = int(inp.retirement_years) * 12
    monthly_vol = inp.volatility / math.sqrt(12.0)
    monthly_inflation = monthly_rate(inp.inflation_rate)
    drift = monthly_inflation + monthly_rate(inp.real_growth_rate)
    log_drift = drift - 0.5 * monthly_vol * monthly_vol

    path = SimulationPath(id=path_id)
    balance = float(inp.starting_balance)
    price = float(inp.starting_price)
    income = float(inp.monthly_income_today)

    for month in range(total_months + 1):
        path.record(month, balance, price)

        if balance <= 0:
            path.failed = True
            path.failure_month = month
            for m in range(month + 1, total_months + 1):
                path.record(m, 0.0, price)
            break

        if month == total_months:
            break

        withdrawal_units = income / price
        if withdrawal_units >= balance:
            balance = 0.0
        else:
            balance -= withdrawal_units

        price *= math.exp(log_drift + monthly_vol * normal())
        income *= 1.0 + monthly_inflation

    return path


def sample_paths(paths: List[SimulationPath], limit: int = SAMPLE_PATH_LIMIT):
    """First `limit` failed and first `limit` successful paths, for charting."""
    failed = [p for p in paths if p.failed][:limit]
    successful = [p for p in paths if not p.failed][:limit]
    return failed, successful


# 🔸 Spend-phase Monte Carlo
def run_drawdown_monte_carlo(inp: DrawdownInput,
                             normal_source: Optional[NormalSource] = None) -> DrawdownResult:
    validate_drawdown_input(inp)
    normal = normal_source or default_normal_source()

    n_sims = int(inp.simulations)
    total_months = int(inp.retirement_years) * 12
    values = np.zeros((n_sims, total_months + 1), dtype=float)

    kept: List[SimulationPath] = []
    failed_seen = success_seen = 0
    failure_months: List[int] = []
    ending_values: List[float] = []

    for s in range(n_sims):
        path = simulate_path(s, inp, normal)
        values[s, :] = path.portfolio_value

        if path.failed:
            failure_months.append(path.failure_month)
            failed_seen += 1
            keep = failed_seen <= inp.sample_limit
        else:
            ending_values.append(path.ending_value)
            success_seen += 1
            keep = success_seen <= inp.sample_limit

        # untracked paths only live on as a row of `values`
        if keep or inp.keep_all_paths:
            kept.append(path)

    success_rate = success_seen / n_sims
    bands = percentile_bands(values, with_mean=False)
    percentiles = [
        DrawdownPercentile(month=m, p10=bands["p10"][m], p50=bands["p50"][m], p90=bands["p90"][m])
        for m in range(total_months + 1)
    ]

    median_ending_value = percentile(ending_values, 50) if ending_values else 0.0
    median_failure_month = sorted(failure_months)[len(failure_months) // 2] if failure_months else None

    failed_paths, successful_paths = sample_paths(kept, inp.sample_limit)

    logger.debug("drawdown MC: %d sims x %d months, success %.1f%%, median failure month %s",
                 n_sims, total_months, success_rate * 100.0, median_failure_month)

    return DrawdownResult(
        success_rate=success_rate,
        median_ending_value=median_ending_value,
        percentiles=percentiles,
        failed_paths=failed_paths,
        successful_paths=successful_paths,
        median_failure_month=median_failure_month,
        simulation_count=n_sims,
        all_paths=kept if inp.keep_all_paths else [],
    )
