# solplan/models/__init__.py
from solplan.models.errors import ConfigurationError, InvalidInputError, ProjectionError
from solplan.models.projection.growth_models import DecayMode, GrowthModel, GrowthModelParams, future_price
from solplan.models.projection.inflation import InflationParams, InflationType, to_present_value
from solplan.models.projection.monte_carlo import MonteCarloParams, MonteCarloResult, run_accumulation_monte_carlo
from solplan.models.projection.projection_calc import (
    AccumulationInput,
    AccumulationResult,
    DcaFrequency,
    YearlyProjectionPoint,
    project,
)
from solplan.models.retirement.drawdown_calc import (
    DrawdownInput,
    DrawdownResult,
    SimulationPath,
    run_drawdown_monte_carlo,
)
from solplan.models.service import ProjectionService

__all__ = [
    "ConfigurationError", "InvalidInputError", "ProjectionError",
    "DecayMode", "GrowthModel", "GrowthModelParams", "future_price",
    "InflationParams", "InflationType", "to_present_value",
    "MonteCarloParams", "MonteCarloResult", "run_accumulation_monte_carlo",
    "AccumulationInput", "AccumulationResult", "DcaFrequency", "YearlyProjectionPoint", "project",
    "DrawdownInput", "DrawdownResult", "SimulationPath", "run_drawdown_monte_carlo",
    "ProjectionService",
]
