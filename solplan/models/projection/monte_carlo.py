# solplan/models/projection/monte_carlo.py
"""
Monte Carlo around the deterministic growth curve.

The model price is the expected price each year; each simulation perturbs it
with log-normal noise and runs the same DCA/yield accumulation as the
deterministic projector on the noisy path.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import numpy as np

from solplan.models.errors import parse_choice, require, require_numbers
from solplan.models.projection.growth_models import DecayMode, decay_rate_for_year, future_price
from solplan.models.projection.projection_calc import (
    AccumulationInput,
    accumulate_along_path,
    validate_accumulation_input,
)
from solplan.models.projection.stats import (
    PRICE_FLOOR,
    NormalSource,
    default_normal_source,
    lognormal_shock,
    percentile,
    percentile_bands,
)

logger = logging.getLogger(__name__)

VOLATILITY_FLOOR = 0.25

VOLATILITY_DECAY_SCHEDULE: Tuple[Tuple[int, float], ...] = (
    (1, 0.05),
    (6, 0.04),
    (11, 0.025),
    (16, 0.015),
    (21, 0.01),
    (26, 0.005),
)


@dataclass
class MonteCarloParams:
    volatility: float = 0.8
    volatility_decay: Union[DecayMode, str] = DecayMode.AUTO
    simulation_count: int = 500

    def __post_init__(self):
        self.volatility_decay = parse_choice(DecayMode, self.volatility_decay, "volatility_decay")


@dataclass(frozen=True)
class MonteCarloPercentile:
    year: int
    p10: float
    p50: float
    p90: float
    mean: float


@dataclass
class MonteCarloResult:
    percentiles: List[MonteCarloPercentile]
    final_p10: float
    final_p50: float
    final_p90: float
    final_mean: float
    final_balance_p10: float
    final_balance_p50: float
    final_balance_p90: float
    simulation_count: int


def volatility_schedule(base_volatility: float, years: int, decay: DecayMode = DecayMode.AUTO) -> List[float]:
    """Volatility used in each of years 1..years (decay is applied from year 1)."""
    if decay == DecayMode.NONE:
        return [float(base_volatility)] * int(years)

    out: List[float] = []
    current = float(base_volatility)
    for year in range(1, int(years) + 1):
        current = max(VOLATILITY_FLOOR, current * (1.0 - decay_rate_for_year(year, VOLATILITY_DECAY_SCHEDULE)))
        out.append(current)
    return out


def random_price_path(expected_path: List[float], volatilities: List[float],
                      normal: NormalSource) -> List[float]:
    return [
        max(PRICE_FLOOR, expected * lognormal_shock(vol, normal()))
        for expected, vol in zip(expected_path, volatilities)
    ]


def run_accumulation_monte_carlo(inp: AccumulationInput, mc: MonteCarloParams,
                                 normal_source: Optional[NormalSource] = None) -> MonteCarloResult:
    validate_accumulation_input(inp)
    require_numbers(mc, "volatility", "simulation_count")
    require(int(mc.simulation_count) > 0, f"simulation_count must be positive, got {mc.simulation_count}")
    require(mc.volatility >= 0, f"volatility must be >= 0, got {mc.volatility}")

    n_sims = int(mc.simulation_count)
    years = int(inp.years)

    if years < 1:
        value = inp.starting_balance * inp.starting_price
        balance = float(inp.starting_balance)
        return MonteCarloResult(
            percentiles=[MonteCarloPercentile(year=0, p10=value, p50=value, p90=value, mean=value)],
            final_p10=value, final_p50=value, final_p90=value, final_mean=value,
            final_balance_p10=balance, final_balance_p50=balance, final_balance_p90=balance,
            simulation_count=n_sims,
        )

    normal = normal_source or default_normal_source()
    # expected path and volatility schedule are identical across simulations
    expected = [
        future_price(inp.starting_price, y, inp.growth_model, inp.model_params, as_of=inp.as_of)
        for y in range(1, years + 1)
    ]
    vols = volatility_schedule(mc.volatility, years, mc.volatility_decay)

    values = np.zeros((n_sims, years), dtype=float)
    balances = np.zeros((n_sims, years), dtype=float)

    for s in range(n_sims):
        path = random_price_path(expected, vols, normal)
        for idx, (balance, end_price) in enumerate(accumulate_along_path(inp, path)):
            balances[s, idx] = balance
            values[s, idx] = balance * end_price

    bands = percentile_bands(values)
    percentiles = [
        MonteCarloPercentile(year=i + 1, p10=bands["p10"][i], p50=bands["p50"][i],
                             p90=bands["p90"][i], mean=bands["mean"][i])
        for i in range(years)
    ]

    final_values = values[:, -1]
    final_balances = balances[:, -1]
    logger.debug("accumulation MC: %d sims x %d years, vol=%.2f (%s decay)",
                 n_sims, years, mc.volatility, mc.volatility_decay.value)

    return MonteCarloResult(
        percentiles=percentiles,
        final_p10=percentile(final_values, 10),
        final_p50=percentile(final_values, 50),
        final_p90=percentile(final_values, 90),
        final_mean=float(final_values.mean()),
        final_balance_p10=percentile(final_balances, 10),
        final_balance_p50=percentile(final_balances, 50),
        final_balance_p90=percentile(final_balances, 90),
        simulation_count=n_sims,
    )
