# solplan/models/projection/frames.py
from __future__ import annotations

from dataclasses import asdict
from typing import Optional

import pandas as pd

from solplan.models.projection.inflation import InflationParams, to_present_value
from solplan.models.projection.monte_carlo import MonteCarloResult
from solplan.models.projection.projection_calc import AccumulationResult
from solplan.models.retirement.drawdown_calc import DrawdownResult


def projection_frame(result: AccumulationResult,
                     inflation: Optional[InflationParams] = None) -> pd.DataFrame:
    """One row per year; adds a today's-dollars column when inflation is given."""
    df = pd.DataFrame([asdict(p) for p in result.yearly_points])
    if inflation is not None:
        df["portfolio_value_today_usd"] = [
            to_present_value(v, int(y), inflation)
            for v, y in zip(df["portfolio_value_usd"], df["year"])
        ]
    return df.set_index("year")


def monte_carlo_frame(result: MonteCarloResult) -> pd.DataFrame:
    return pd.DataFrame([asdict(p) for p in result.percentiles]).set_index("year")


def drawdown_percentile_frame(result: DrawdownResult) -> pd.DataFrame:
    df = pd.DataFrame([asdict(p) for p in result.percentiles]).set_index("month")
    df["year"] = df.index // 12
    return df
