import pytest

from solplan.routes import to_canonical_inputs


def _accumulation(**overrides):
    body = {
        "starting_balance": 1,
        "starting_price": 100,
        "years": 3,
        "contribution_amount": 100,
        "frequency": "monthly",
        "growth_model": "cagr",
        "model_params": {"cagr": 0.1, "cagr_decay": "none"},
    }
    body.update(overrides)
    return body


def test_defaults(client):
    resp = client.get("/api/defaults")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["growth_models"]["scurve"]["name"] == "Asymptotic"
    assert data["monte_carlo"]["volatility"] == 0.8


@pytest.mark.parametrize("cagr", [0.25, "25%", 25])
def test_future_price_accepts_percent_forms(client, cagr):
    resp = client.post("/api/future-price", json={
        "price": "$100", "years": 1, "growth_model": "cagr",
        "model_params": {"cagr": cagr, "cagr_decay": "none"},
    })
    assert resp.status_code == 200
    assert resp.get_json()["price"] == pytest.approx(125)


def test_future_price_unknown_model_is_bad_request(client):
    resp = client.post("/api/future-price", json={"price": 100, "years": 1, "growth_model": "rainbow"})
    assert resp.status_code == 400
    assert "growth_model" in resp.get_json()["error"]


def test_future_price_missing_fields(client):
    resp = client.post("/api/future-price", json={"price": 100})
    assert resp.status_code == 422
    assert "years" in resp.get_json()["error"]


def test_future_price_non_positive_price_has_no_result(client):
    resp = client.post("/api/future-price", json={"price": 0, "years": 1})
    assert resp.status_code == 422
    assert resp.get_json()["error"] == "insufficient inputs to project"


def test_projection_with_today_values(client):
    resp = client.post("/api/projection", json=_accumulation(inflation={"rate": 0.05}))
    assert resp.status_code == 200
    data = resp.get_json()
    assert len(data["yearly_points"]) == 3
    assert len(data["today_values_usd"]) == 3
    assert data["final_value_today_usd"] == pytest.approx(data["final_value_usd"] / 1.05 ** 3)


def test_projection_zero_price(client):
    resp = client.post("/api/projection", json=_accumulation(starting_price=0))
    assert resp.status_code == 422


def test_projection_s_curve_uses_dynamic_ceiling(client):
    resp = client.post("/api/projection", json=_accumulation(growth_model="scurve", model_params={}))
    assert resp.status_code == 200
    prices = [p["asset_price"] for p in resp.get_json()["yearly_points"]]
    assert prices == sorted(prices)


def test_projection_csv(client):
    resp = client.post("/api/projection.csv", json=_accumulation())
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    header = resp.get_data(as_text=True).splitlines()[0]
    assert header.startswith("year,")
    assert "portfolio_value_usd" in header


def test_monte_carlo_clamps_simulations(client):
    resp = client.post("/api/monte-carlo", json=_accumulation(
        years=2, monte_carlo={"volatility": 60, "simulation_count": 1000}))
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["simulation_count"] == 200
    assert [p["year"] for p in data["percentiles"]] == [1, 2]


def test_monte_carlo_uses_configured_default_count(client):
    resp = client.post("/api/monte-carlo", json=_accumulation(years=1))
    assert resp.get_json()["simulation_count"] == 50


def test_drawdown_empty_portfolio(client):
    resp = client.post("/api/drawdown", json={
        "starting_balance": 0, "starting_price": 100000, "retirement_years": 2, "simulations": 20,
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["success_rate"] == 0
    assert data["median_failure_month"] == 0
    assert "all_paths" not in data
    assert len(data["failed_paths"]) == 10
    assert data["guidance"]["rating"] == "Risky"
    assert len(data["percentiles"]) == 25


def test_drawdown_missing_balance(client):
    resp = client.post("/api/drawdown", json={"starting_price": 100000})
    assert resp.status_code == 422
    assert "starting_balance" in resp.get_json()["error"]


def test_present_value(client):
    resp = client.post("/api/present-value", json={"nominal": 1000, "years": 10, "inflation": {"enabled": False}})
    assert resp.status_code == 200
    assert resp.get_json()["present_value"] == pytest.approx(1000)


def test_present_value_unknown_inflation_type(client):
    resp = client.post("/api/present-value", json={"nominal": 1000, "years": 10, "inflation": {"type": "hyper"}})
    assert resp.status_code == 400


def test_dca_schedule(client):
    resp = client.post("/api/dca-schedule", json={
        "activated_at": "2024-01-31T00:00:00", "frequency": "monthly", "amount": 250,
        "now": "2024-04-15T00:00:00",
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["missed_count"] == 2
    assert data["missed_total"] == 500
    assert data["next_dca_date"] == "2024-04-30T00:00:00"


def test_dca_schedule_bad_date(client):
    resp = client.post("/api/dca-schedule", json={"activated_at": "someday", "frequency": "weekly", "amount": 5})
    assert resp.status_code == 422


def test_future_price_keeps_fractional_years(client):
    resp = client.post("/api/future-price", json={
        "price": 100, "years": 2.5, "growth_model": "cagr",
        "model_params": {"cagr": 0.25, "cagr_decay": "none"},
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["years"] == 2.5
    assert data["price"] == pytest.approx(100 * 1.25 ** 2.5)


def test_projection_truncates_fractional_horizon(client):
    resp = client.post("/api/projection", json=_accumulation(years=2.9))
    assert len(resp.get_json()["yearly_points"]) == 2


@pytest.mark.parametrize("path, body", [
    ("/api/projection", _accumulation(starting_balance="lots")),
    ("/api/projection", _accumulation(years="forever")),
    ("/api/monte-carlo", _accumulation(monte_carlo={"simulation_count": "many"})),
    ("/api/drawdown", {"starting_balance": 10, "starting_price": 100, "inflation_rate": -150,
                       "simulations": 5}),
    ("/api/drawdown", {"starting_balance": 10, "starting_price": 100, "retirement_years": "long"}),
    ("/api/future-price", {"price": 100, "years": 1, "model_params": {"cagr": -1.5, "cagr_decay": "none"}}),
    ("/api/present-value", {"nominal": "lots", "years": 3}),
])
def test_malformed_inputs_are_unprocessable_not_server_errors(client, path, body):
    resp = client.post(path, json=body)
    assert resp.status_code == 422


def test_dca_schedule_mixed_timezones(client):
    resp = client.post("/api/dca-schedule", json={
        "activated_at": "2024-01-01T00:00:00Z", "now": "2024-02-01T00:00:00",
        "frequency": "monthly", "amount": 50,
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["missed_count"] == 1
    assert data["next_dca_date"] == "2024-03-01T00:00:00+00:00"
    assert data["days_active"] == 31


def test_monte_carlo_csv(client):
    resp = client.post("/api/monte-carlo.csv", json=_accumulation(monte_carlo={"simulation_count": 20}))
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    lines = resp.get_data(as_text=True).splitlines()
    assert lines[0] == "year,p10,p50,p90,mean"
    assert len(lines) == 4


def test_drawdown_csv(client):
    resp = client.post("/api/drawdown.csv", json={
        "starting_balance": 10, "starting_price": 1000, "retirement_years": 1, "simulations": 10,
    })
    assert resp.status_code == 200
    lines = resp.get_data(as_text=True).splitlines()
    assert lines[0] == "month,p10,p50,p90,year"
    assert len(lines) == 14


def test_high_volatility_and_cagr_are_not_read_as_percents():
    canonical = to_canonical_inputs({
        "volatility": 2.0,
        "inflation_rate": 3,
        "model_params": {"cagr": 3.0},
        "monte_carlo": {"volatility": 80, "simulation_count": "250"},
    })
    assert canonical["volatility"] == 2.0
    assert canonical["inflation_rate"] == 0.03
    assert canonical["model_params"]["cagr"] == 3.0
    assert canonical["monte_carlo"]["volatility"] == 0.8
    assert canonical["monte_carlo"]["simulation_count"] == 250
    assert to_canonical_inputs({"volatility": "200%"})["volatility"] == 2.0


def test_defaults_document_percent_convention(client):
    conventions = client.get("/api/defaults").get_json()["input_conventions"]
    assert conventions["whole_percent_min"]["volatility"] == 5.0
    assert conventions["whole_percent_min"]["default"] == 2.0
