import datetime

import pytest

from aggregation import monthly_baseline
from forecast_settings import normalize_forecast_settings
from records import normalize_transactions
from strategies import (
    DEFAULT_SEASONAL_FACTORS,
    FORECAST_COLUMNS,
    exponential_forecast,
    linear_forecast,
    resolve_seasonal_factors,
    seasonal_forecast,
)

TODAY = datetime.date(2025, 1, 10)


def _baseline():
    income = [
        {"amount": 3000.0, "frequency": "monthly", "start_date": datetime.date(2024, 1, 1), "end_date": None, "is_active": True}
    ]
    bills = [{"amount": 1000.0, "billing_cycle": "monthly", "due_date": datetime.date(2024, 1, 1), "is_active": True}]
    return monthly_baseline(income, bills, normalize_transactions([]), TODAY)


def _analysis() -> dict:
    return {"seasonal_factors": [1.0] * 12, "avg_monthly_spending": 0.0}


def test_linear_first_month_is_the_unadjusted_baseline() -> None:
    out = linear_forecast(_baseline(), _analysis(), normalize_forecast_settings({}))
    assert list(out.columns) == FORECAST_COLUMNS
    assert out["PredictedIncome"].iloc[0] == 3000.0
    assert out["PredictedExpenses"].iloc[0] == 1000.0
    assert out["PredictedIncome"].iloc[1] == pytest.approx(3000 * (1 + 0.024 / 12))
    assert out["PredictedExpenses"].iloc[2] == pytest.approx(1000 * (1 + 2 * 0.036 / 12))


def test_linear_uses_manual_growth_rate() -> None:
    settings = normalize_forecast_settings({"growth_method": "manual", "manual_growth_rate": 12})
    out = linear_forecast(_baseline(), _analysis(), settings)
    assert out["PredictedIncome"].iloc[1] == pytest.approx(3030.0)


def test_exponential_compounds_monthly() -> None:
    out = exponential_forecast(_baseline(), _analysis(), normalize_forecast_settings({}))
    assert out["PredictedIncome"].iloc[0] == 3000.0
    assert out["PredictedIncome"].iloc[6] == pytest.approx(3000 * (1 + 0.024 / 12) ** 6)
    assert out["PredictedExpenses"].iloc[11] == pytest.approx(1000 * (1 + 0.036 / 12) ** 11)


def test_seasonal_applies_calendar_factors() -> None:
    out = seasonal_forecast(_baseline(), _analysis(), normalize_forecast_settings({}))
    december = out[out["Month"] == "2025-12"].iloc[0]
    assert december["PredictedExpenses"] == pytest.approx(1000 * 1.15)
    assert december["PredictedIncome"] == pytest.approx(3000 * (2 - 1.15 * 0.5))
    assert out["PredictedIncome"].iloc[0] == pytest.approx(4500.0)


def test_seasonal_uses_manual_percentages() -> None:
    manual = [100.0] * 12
    manual[2] = 150.0
    settings = normalize_forecast_settings({"expenses_method": "manual", "manual_seasonal_factors": manual})
    out = seasonal_forecast(_baseline(), _analysis(), settings)
    march = out[out["Month"] == "2025-03"].iloc[0]
    assert march["PredictedExpenses"] == pytest.approx(1500.0)
    assert out["PredictedExpenses"].iloc[0] == pytest.approx(1000.0)


def test_resolve_seasonal_factors_sources() -> None:
    learned = {"seasonal_factors": [0.5] * 12}
    assert resolve_seasonal_factors({"expenses_method": "seasonal"}, learned) == [0.5] * 12
    assert resolve_seasonal_factors({"expenses_method": "ai"}, learned) == DEFAULT_SEASONAL_FACTORS
    assert resolve_seasonal_factors({"expenses_method": "manual", "manual_seasonal_factors": [1, 2]}) == DEFAULT_SEASONAL_FACTORS


@pytest.mark.parametrize("strategy", [linear_forecast, exponential_forecast, seasonal_forecast])
def test_savings_is_income_minus_expenses(strategy) -> None:
    out = strategy(_baseline(), _analysis(), normalize_forecast_settings({}))
    assert (out["PredictedSavings"] == out["PredictedIncome"] - out["PredictedExpenses"]).all()
    components = out["ExpenseRecurring"] + out["ExpenseOneTime"] + out["TransactionSpending"]
    assert components.to_numpy() == pytest.approx(out["PredictedExpenses"].to_numpy())
