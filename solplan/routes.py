# solplan/routes.py
import logging
import math
import re
from dataclasses import asdict
from typing import Optional

from dateutil.parser import isoparse
from flask import Blueprint, Response, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from solplan.models.errors import ConfigurationError, InvalidInputError, ProjectionError, is_number
from solplan.models.projection.dca_schedule import calculate_dca_schedule, days_since
from solplan.models.projection.frames import drawdown_percentile_frame, monte_carlo_frame, projection_frame
from solplan.models.projection.growth_models import (
    GrowthModel,
    GrowthModelParams,
    model_description,
    model_display_name,
    parse_growth_model,
    power_law_ceiling,
)
from solplan.models.projection.inflation import InflationParams, to_present_value
from solplan.models.projection.monte_carlo import MonteCarloParams
from solplan.models.projection.projection_calc import AccumulationInput
from solplan.models.retirement.coach import withdrawal_guidance
from solplan.models.retirement.drawdown_calc import DrawdownInput
from solplan.models.service import ProjectionService

bp_projection = Blueprint("projection", __name__, url_prefix="/api")
logger = logging.getLogger(__name__)

NO_RESULT = "insufficient inputs to project"


# -------------------------
# Canonicalization helpers
# -------------------------
RATE_KEYS = {
    "cagr", "yield_rate", "volatility", "real_growth_rate",
    "inflation_rate", "rate", "amplitude", "debasement_rate",
}

# horizons stay floats here; whole-year callers truncate with _whole()
INT_LIKE = re.compile(r"(simulations|simulation_count|sample_limit)$", re.I)

# bare numbers in [bound, 1000] on a rate key are whole percents
WHOLE_PERCENT_MIN = 2.0
WHOLE_PERCENT_MAX = 1000.0
WHOLE_PERCENT_MIN_BY_KEY = {"cagr": 5.0, "volatility": 5.0}

DEFAULTS = {
    "accumulation": {
        "starting_balance": 0.0,
        "years": 30,
        "contribution_amount": 200.0,
        "frequency": "weekly",
        "growth_model": "cagr",
        "model_params": {
            "cagr": 0.25,
            "cagr_decay": "auto",
            "power_law_slope": 1.6,
            "s_curve_years_to_half_remaining": 12,
        },
        "yield_enabled": False,
        "yield_rate": 0.075,
    },
    "inflation": {
        "enabled": True,
        "type": "linear",
        "rate": 0.035,
        "amplitude": 0.02,
        "cycle_period": 7,
        "debasement_rate": 0.0,
    },
    "monte_carlo": {
        "volatility": 0.8,
        "volatility_decay": "auto",
        "simulation_count": 500,
    },
    "drawdown": {
        "monthly_income_today": 5000.0,
        "retirement_years": 35,
        "volatility": 0.25,
        "real_growth_rate": 0.08,
        "inflation_rate": 0.035,
        "simulations": 500,
    },
}


def _clean_number(x):
    if isinstance(x, bool):
        return x
    if isinstance(x, (int, float)):
        return float(x)
    try:
        s = str(x).replace(",", "").replace("$", "").strip()
        if s.endswith("%"):
            return float(s[:-1]) / 100.0
        return float(s)
    except (TypeError, ValueError):
        return x


def _coerce_types(d: dict) -> dict:
    """Coerce numeric strings; ints for count/horizon keys; floats elsewhere."""
    out = {}
    for k, v in (d or {}).items():
        if isinstance(v, dict):
            out[k] = _coerce_types(v)
            continue
        v2 = _clean_number(v)
        if isinstance(v2, (int, float)) and not isinstance(v2, bool):
            out[k] = int(round(v2)) if INT_LIKE.search(k) and math.isfinite(v2) else float(v2)
        else:
            out[k] = v2
    return out


def _is_whole_percent(key: str, value: float) -> bool:
    return WHOLE_PERCENT_MIN_BY_KEY.get(key, WHOLE_PERCENT_MIN) <= value <= WHOLE_PERCENT_MAX


def _normalize_rates(d: dict) -> dict:
    """Whole percents (e.g. 25) -> decimals (0.25) for rate-like keys."""
    out = dict(d)
    for k, v in list(out.items()):
        if isinstance(v, dict):
            out[k] = _normalize_rates(v)
        elif k in RATE_KEYS and isinstance(v, float) and _is_whole_percent(k, v):
            out[k] = v / 100.0
    return out


def to_canonical_inputs(raw: dict) -> dict:
    return _normalize_rates(_coerce_types(raw or {}))


def _payload() -> dict:
    return to_canonical_inputs(request.get_json(silent=True) or {})


def _require_keys(d: dict, *keys: str) -> None:
    missing = [k for k in keys if d.get(k) is None]
    if missing:
        raise InvalidInputError(f"missing required field(s): {', '.join(missing)}")


def _whole(value, field: str) -> int:
    """Whole-number horizon or count (truncated); non-numbers are input errors."""
    if not is_number(value) or not math.isfinite(value):
        raise InvalidInputError(f"{field} must be a number, got {value!r}")
    return int(value)


def _service() -> ProjectionService:
    return ProjectionService()


def _no_result():
    return jsonify({"error": NO_RESULT}), 422


# -------------------------
# Payload -> engine inputs
# -------------------------
def _growth_params(d: Optional[dict], model: GrowthModel,
                   price: Optional[float] = None, years: Optional[float] = None) -> GrowthModelParams:
    p = dict(DEFAULTS["accumulation"]["model_params"])
    p.update(d or {})
    params = GrowthModelParams(
        cagr=p.get("cagr"),
        cagr_decay=p.get("cagr_decay", "none"),
        power_law_slope=p.get("power_law_slope"),
        s_curve_years_to_half_remaining=p.get("s_curve_years_to_half_remaining"),
        s_curve_max_price=p.get("s_curve_max_price"),
    )
    # ceiling follows the power-law price at the horizon unless given
    known = is_number(price) and price > 0 and is_number(years) and years > 0 \
        and is_number(params.power_law_slope or 1.6)
    if model == GrowthModel.S_CURVE and params.s_curve_max_price is None and known:
        params.s_curve_max_price = power_law_ceiling(price, years, params.power_law_slope or 1.6)
    return params


def _accumulation_input(d: dict) -> AccumulationInput:
    _require_keys(d, "starting_price")
    merged = {k: v for k, v in DEFAULTS["accumulation"].items() if k != "model_params"}
    merged.update({k: v for k, v in d.items() if k in merged or k == "starting_price"})
    return AccumulationInput(
        starting_balance=merged["starting_balance"],
        starting_price=merged["starting_price"],
        years=_whole(merged["years"], "years"),
        contribution_amount=merged["contribution_amount"],
        frequency=merged["frequency"],
        growth_model=merged["growth_model"],
        model_params=_growth_params(d.get("model_params"), parse_growth_model(merged["growth_model"]),
                                    merged["starting_price"], merged["years"]),
        yield_enabled=bool(merged["yield_enabled"]),
        yield_rate=merged["yield_rate"],
    )


def _monte_carlo_params(d: dict) -> MonteCarloParams:
    p = dict(DEFAULTS["monte_carlo"])
    p["simulation_count"] = current_app.config.get("DEFAULT_SIMULATIONS", p["simulation_count"])
    p.update({k: v for k, v in (d or {}).items() if k in p})
    p["simulation_count"] = _clamp_simulations(_whole(p["simulation_count"], "simulation_count"))
    return MonteCarloParams(**p)


def _drawdown_input(d: dict) -> DrawdownInput:
    _require_keys(d, "starting_balance", "starting_price")
    p = dict(DEFAULTS["drawdown"])
    p["simulations"] = current_app.config.get("DEFAULT_SIMULATIONS", p["simulations"])
    p.update({k: v for k, v in d.items() if k in p})
    return DrawdownInput(
        starting_balance=d["starting_balance"],
        starting_price=d["starting_price"],
        monthly_income_today=p["monthly_income_today"],
        retirement_years=_whole(p["retirement_years"], "retirement_years"),
        volatility=p["volatility"],
        real_growth_rate=p["real_growth_rate"],
        inflation_rate=p["inflation_rate"],
        simulations=_clamp_simulations(_whole(p["simulations"], "simulations")),
        sample_limit=int(current_app.config.get("SAMPLE_PATH_LIMIT", 10)),
    )


def _inflation_params(d: Optional[dict]) -> InflationParams:
    p = dict(DEFAULTS["inflation"])
    p.update({k: v for k, v in (d or {}).items() if k in p})
    return InflationParams(**p)


def _clamp_simulations(n: int) -> int:
    cap = int(current_app.config.get("MAX_SIMULATIONS", 5000))
    if n > cap:
        current_app.logger.warning("simulation count %s clamped to %s", n, cap)
        return cap
    return n


# -------------------------
# Error handling
# -------------------------
@bp_projection.errorhandler(ProjectionError)
def handle_projection_error(e):
    status = 400 if isinstance(e, ConfigurationError) else 422
    logger.warning("rejected request to %s: %s", request.path, e)
    return jsonify({"error": str(e)}), status


@bp_projection.errorhandler(Exception)
def handle_unexpected(e):
    if isinstance(e, HTTPException):
        return e
    current_app.logger.exception("%s failed: %s", request.path, e)
    return jsonify({"error": "internal error"}), 500


# -------------------------
# Routes
# -------------------------
@bp_projection.route("/defaults", methods=["GET"])
def defaults():
    models = {m: {"name": model_display_name(m), "description": model_description(m)}
              for m in ("cagr", "powerlaw", "scurve")}
    conventions = {
        "rate_keys": sorted(RATE_KEYS),
        "whole_percent_min": {"default": WHOLE_PERCENT_MIN, **WHOLE_PERCENT_MIN_BY_KEY},
        "whole_percent_max": WHOLE_PERCENT_MAX,
        "note": "bare numbers in [min, max] on a rate key are read as whole percents; "
                "'200%' strings are always exact",
    }
    return jsonify({**DEFAULTS, "growth_models": models, "input_conventions": conventions})


@bp_projection.route("/future-price", methods=["POST"])
def future_price_route():
    d = _payload()
    _require_keys(d, "price", "years")
    model = parse_growth_model(d.get("growth_model", "cagr"))
    params = _growth_params(d.get("model_params"), model, d["price"], d["years"])
    price = _service().future_price(d["price"], d["years"], model, params)
    if price is None:
        return _no_result()
    return jsonify({"price": price, "years": d["years"], "growth_model": model.value})


def _csv_response(df, filename: str) -> Response:
    return Response(df.to_csv(), mimetype="text/csv",
                    headers={"Content-Disposition": f"attachment; filename={filename}"})


def _projection_payload(d: dict):
    inp = _accumulation_input(d)
    result = _service().project(inp)
    inflation = _inflation_params(d["inflation"]) if d.get("inflation") else None
    return inp, result, inflation


@bp_projection.route("/projection", methods=["POST"])
def projection():
    _, result, inflation = _projection_payload(_payload())
    if result is None:
        return _no_result()

    out = asdict(result)
    if inflation is not None:
        out["today_values_usd"] = [
            to_present_value(p.portfolio_value_usd, p.year, inflation) for p in result.yearly_points
        ]
        out["final_value_today_usd"] = out["today_values_usd"][-1]
    return jsonify(out)


@bp_projection.route("/projection.csv", methods=["POST"])
def projection_csv():
    _, result, inflation = _projection_payload(_payload())
    if result is None:
        return _no_result()
    return _csv_response(projection_frame(result, inflation), "projection.csv")


def _monte_carlo_result(d: dict):
    inp = _accumulation_input(d)
    mc = _monte_carlo_params(d.get("monte_carlo"))
    return _service().accumulation_monte_carlo(inp, mc)


@bp_projection.route("/monte-carlo", methods=["POST"])
def monte_carlo():
    result = _monte_carlo_result(_payload())
    if result is None:
        return _no_result()
    return jsonify(asdict(result))


@bp_projection.route("/monte-carlo.csv", methods=["POST"])
def monte_carlo_csv():
    result = _monte_carlo_result(_payload())
    if result is None:
        return _no_result()
    return _csv_response(monte_carlo_frame(result), "monte_carlo.csv")


@bp_projection.route("/drawdown", methods=["POST"])
def drawdown():
    inp = _drawdown_input(_payload())
    result = _service().drawdown_monte_carlo(inp)
    if result is None:
        return _no_result()

    out = asdict(result)
    out.pop("all_paths", None)
    out["guidance"] = withdrawal_guidance(inp, result)
    return jsonify(out)


@bp_projection.route("/drawdown.csv", methods=["POST"])
def drawdown_csv():
    result = _service().drawdown_monte_carlo(_drawdown_input(_payload()))
    if result is None:
        return _no_result()
    return _csv_response(drawdown_percentile_frame(result), "drawdown.csv")


@bp_projection.route("/present-value", methods=["POST"])
def present_value():
    d = _payload()
    _require_keys(d, "nominal", "years")
    years = _whole(d["years"], "years")
    params = _inflation_params(d.get("inflation"))
    value = _service().present_value(d["nominal"], years, params)
    if value is None:
        return _no_result()
    return jsonify({"present_value": value, "nominal": d["nominal"], "years": years})


@bp_projection.route("/dca-schedule", methods=["POST"])
def dca_schedule():
    raw = request.get_json(silent=True) or {}
    _require_keys(raw, "activated_at", "frequency", "amount")
    try:
        activated_at = isoparse(raw["activated_at"])
        now = isoparse(raw["now"]) if raw.get("now") else None
        amount = float(raw["amount"])
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"bad schedule input: {e}") from e

    sched = calculate_dca_schedule(activated_at, raw["frequency"], amount, now)
    return jsonify({
        "next_dca_date": sched.next_dca_date.isoformat(),
        "missed_count": sched.missed_count,
        "missed_total": sched.missed_total,
        "total_due_count": sched.total_due_count,
        "completed_estimate": sched.completed_estimate,
        "all_due_dates": [d.isoformat() for d in sched.all_due_dates],
        "days_active": days_since(activated_at, now),
    })
