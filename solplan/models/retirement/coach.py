# solplan/models/retirement/coach.py
from __future__ import annotations

import math
from typing import Any, Dict, Optional

from solplan.models.retirement.drawdown_calc import DrawdownInput, DrawdownResult

BASE_SAFE_RATE = 0.04
BASE_SAFE_YEARS = 30
SAFE_RATE_MIN = 0.025
SAFE_RATE_MAX = 0.08

# success-rate thresholds for the rating label
EXCELLENT = 0.9
GOOD = 0.7


# ---------- small utilities ----------

def format_usd(value: float) -> str:
    if value >= 1_000_000:
        return f"${value / 1_000_000:.2f}M"
    if value >= 1_000:
        return f"${value / 1_000:.1f}K"
    return f"${value:.0f}"


def format_month(month: int) -> str:
    """12 -> '1 year', 5 -> '5 months', 30 -> '2y 6m'."""
    years, months = divmod(int(month), 12)
    if years == 0:
        return f"{months} month{'s' if months != 1 else ''}"
    if months == 0:
        return f"{years} year{'s' if years != 1 else ''}"
    return f"{years}y {months}m"


def annual_withdrawal_rate(monthly_income: float, starting_value: float) -> float:
    if starting_value <= 0:
        return 0.0
    return monthly_income * 12.0 / starting_value


def safe_withdrawal_rate(retirement_years: float) -> float:
    """4% rule scaled by sqrt(30 / years), kept within 2.5%–8%."""
    adjustment = math.sqrt(BASE_SAFE_YEARS / retirement_years)
    return min(SAFE_RATE_MAX, max(SAFE_RATE_MIN, BASE_SAFE_RATE * adjustment))


def safe_monthly_withdrawal(starting_value: float, retirement_years: float) -> int:
    return int(round(starting_value * safe_withdrawal_rate(retirement_years) / 12.0))


def success_rating(success_rate: float) -> str:
    if success_rate >= EXCELLENT:
        return "Excellent"
    if success_rate >= GOOD:
        return "Good"
    return "Risky"


# ---------- guidance ----------

def withdrawal_guidance(inp: DrawdownInput, result: DrawdownResult) -> Dict[str, Any]:
    """
    Summary cards for a drawdown run:
      • requested vs duration-adjusted safe withdrawal rate
      • rating of the success rate and number of failed paths
      • a reduction suggestion when the plan is below 90% and asks for
        materially more than the safe amount
    """
    starting_value = inp.starting_balance * inp.starting_price
    safe_rate = safe_withdrawal_rate(inp.retirement_years)
    safe_monthly = safe_monthly_withdrawal(starting_value, inp.retirement_years)

    suggestion: Optional[str] = None
    if result.success_rate < EXCELLENT:
        meaningful = safe_monthly >= 500 and inp.monthly_income_today > safe_monthly * 1.2
        if meaningful:
            suggestion = (
                f"Consider reducing monthly income to {format_usd(safe_monthly)} "
                "for higher success rate."
            )

    failure_label = None
    if result.median_failure_month is not None:
        failure_label = format_month(result.median_failure_month)

    return {
        "starting_value": starting_value,
        "annual_withdrawal_rate": annual_withdrawal_rate(inp.monthly_income_today, starting_value),
        "safe_withdrawal_rate": safe_rate,
        "safe_monthly_withdrawal": safe_monthly,
        "success_rate": result.success_rate,
        "rating": success_rating(result.success_rate),
        "failed_count": result.failed_count,
        "median_failure": failure_label,
        "suggestion": suggestion,
    }
