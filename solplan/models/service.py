# solplan/models/service.py
from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Union

from solplan.models.errors import ProjectionError
from solplan.models.projection.growth_models import GrowthModel, GrowthModelParams, future_price
from solplan.models.projection.inflation import InflationParams, to_present_value
from solplan.models.projection.monte_carlo import (
    MonteCarloParams,
    MonteCarloResult,
    run_accumulation_monte_carlo,
)
from solplan.models.projection.projection_calc import AccumulationInput, AccumulationResult, project
from solplan.models.projection.stats import NormalSource
from solplan.models.retirement.drawdown_calc import DrawdownInput, DrawdownResult, run_drawdown_monte_carlo

logger = logging.getLogger(__name__)


class ProjectionService:
    """
    Stateless facade for callers that want "no result" instead of an error.

    Each method delegates to the engine function of the same purpose; a
    ProjectionError (bad inputs or config) is logged and returned as None,
    which the UI reads as "insufficient inputs to project".
    """

    def __init__(self, normal_source: Optional[NormalSource] = None):
        self.normal_source = normal_source

    def future_price(self, price: float, years: float, model: Union[GrowthModel, str],
                     params: Optional[GrowthModelParams] = None,
                     as_of: Optional[date] = None) -> Optional[float]:
        try:
            return future_price(price, years, model, params, as_of=as_of)
        except ProjectionError as e:
            logger.warning("future_price rejected: %s", e)
            return None

    def project(self, inp: AccumulationInput) -> Optional[AccumulationResult]:
        try:
            return project(inp)
        except ProjectionError as e:
            logger.warning("projection rejected: %s", e)
            return None

    def accumulation_monte_carlo(self, inp: AccumulationInput,
                                 mc: MonteCarloParams) -> Optional[MonteCarloResult]:
        try:
            return run_accumulation_monte_carlo(inp, mc, self.normal_source)
        except ProjectionError as e:
            logger.warning("accumulation Monte Carlo rejected: %s", e)
            return None

    def drawdown_monte_carlo(self, inp: DrawdownInput) -> Optional[DrawdownResult]:
        try:
            return run_drawdown_monte_carlo(inp, self.normal_source)
        except ProjectionError as e:
            logger.warning("drawdown Monte Carlo rejected: %s", e)
            return None

    def present_value(self, nominal: float, years: int, params: InflationParams) -> Optional[float]:
        try:
            return to_present_value(nominal, years, params)
        except ProjectionError as e:
            logger.warning("present value rejected: %s", e)
            return None
