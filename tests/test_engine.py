import datetime
import logging
import math

import pandas as pd
import pytest

from engine import drop_past_months, forecast_records, generate_forecast, resolve_method

TODAY = datetime.date(2025, 6, 15)


def _income() -> list[dict]:
    return [
        {"name": "Salary", "amount": 4000, "frequency": "monthly", "category": "salary", "start_date": "2024-01-01"},
        {"name": "Contract", "amount": 1500, "frequency": "one-time", "category": "freelance", "start_date": "2025-08-10"},
    ]


def _bills() -> list[dict]:
    return [
        {"name": "Rent", "amount": 1500, "billing_cycle": "monthly", "due_date": "2024-01-01", "categories": ["Housing"]},
        {"name": "Insurance", "amount": 600, "billing_cycle": "quarterly", "due_date": "2025-03-01", "categories": ["Insurance"]},
    ]


def _transactions() -> list[dict]:
    rows = []
    for month in range(1, 6):
        rows.append({"date": f"2025-{month:02d}-05", "amount": 4000, "transaction_type": "income"})
        rows.append({"date": f"2025-{month:02d}-12", "amount": -(400 + 50 * month), "transaction_type": "expense"})
    return rows


def test_resolve_method_aliases_and_rejects_unknown() -> None:
    assert resolve_method("ai") == "ai-ensemble"
    assert resolve_method("Moving_Average") == "moving-average"
    assert resolve_method("linear") == "linear"
    with pytest.raises(ValueError, match="Unsupported forecast method"):
        resolve_method("prophet")


def test_unknown_method_fails_before_any_work() -> None:
    with pytest.raises(ValueError):
        generate_forecast(_income(), _bills(), _transactions(), method="crystal-ball", today=TODAY)


def test_ensemble_forecast_shape_and_weights() -> None:
    result = generate_forecast(_income(), _bills(), _transactions(), method="ai", today=TODAY)
    forecast = result["forecast"]
    assert result["method"] == "ai-ensemble"
    assert len(forecast) == 12
    assert forecast["Month"].iloc[0] == "2025-06"
    assert result["history_months"] == 5
    assert sum(result["weights"].values()) == pytest.approx(1.0)
    # Salary is a growth signal and the freelance contract a seasonal one.
    assert result["weights"]["exponential"] == pytest.approx(0.25)
    assert result["weights"]["movingAvg"] == pytest.approx(0.55)


@pytest.mark.parametrize("method", ["linear", "exponential", "moving-average", "ai-ensemble"])
def test_savings_is_always_derived(method) -> None:
    forecast = generate_forecast(_income(), _bills(), _transactions(), method=method, today=TODAY)["forecast"]
    assert (forecast["PredictedSavings"] == forecast["PredictedIncome"] - forecast["PredictedExpenses"]).all()
    assert (forecast["PredictedExpenses"] >= 0).all()


def test_linear_first_month_matches_schedule() -> None:
    result = generate_forecast(_income(), _bills(), _transactions(), method="linear", today=TODAY)
    first = result["forecast"].iloc[0]
    assert first["PredictedIncome"] == 4000.0
    # Rent, quarterly insurance due in June, and the Mar/May spending average.
    assert first["ExpenseRecurring"] == 2100.0
    assert first["TransactionSpending"] == pytest.approx((600 + 650 + 550) / 3)
    assert result["weights"] is None


def test_same_inputs_give_identical_output() -> None:
    first = generate_forecast(_income(), _bills(), _transactions(), today=TODAY)
    second = generate_forecast(_income(), _bills(), _transactions(), today=TODAY)
    pd.testing.assert_frame_equal(first["forecast"], second["forecast"], check_exact=True)
    pd.testing.assert_frame_equal(first["insights"], second["insights"], check_exact=True)
    assert first["weights"] == second["weights"]


def test_malformed_items_are_skipped_not_fatal(caplog) -> None:
    caplog.set_level(logging.WARNING)
    income = _income() + [
        {"name": "Broken", "amount": "abc", "frequency": "monthly"},
        {"name": "Odd", "amount": 20, "frequency": "fortnightly"},
    ]
    bills = _bills() + [{"name": "Mystery", "amount": "?", "billing_cycle": "monthly"}]
    result = generate_forecast(income, bills, _transactions() + [{"date": "nope", "amount": -5}], today=TODAY)
    assert len(result["forecast"]) == 12
    assert "Broken" in caplog.text
    assert "Mystery" in caplog.text


@pytest.mark.parametrize("method", ["linear", "ai-ensemble"])
def test_non_finite_amounts_do_not_poison_the_forecast(method) -> None:
    income = _income() + [{"name": "Overflow", "amount": "1e400", "frequency": "monthly"}]
    bills = _bills() + [{"name": "Runaway", "amount": "inf", "billing_cycle": "monthly"}]
    transactions = _transactions() + [{"date": "2025-05-20", "amount": "-inf", "transaction_type": "expense"}]
    result = generate_forecast(income, bills, transactions, method=method, today=TODAY)

    values = result["forecast"].drop(columns=["Month"]).astype(float)
    assert values.abs().lt(math.inf).all().all()
    assert math.isfinite(result["analysis"]["avg_monthly_spending"])
    assert math.isfinite(result["analysis"]["volatility"])
    first = result["insights"].iloc[0]
    assert "nan" not in first["Description"]


def test_empty_inputs_still_forecast() -> None:
    result = generate_forecast([], [], [], method="linear", today=TODAY)
    assert len(result["forecast"]) == 12
    assert (result["forecast"]["PredictedIncome"] == 0).all()
    assert result["insights"].iloc[0]["Title"] == "Below Target Savings Rate"


def test_drop_past_months() -> None:
    df = pd.DataFrame({"Month": ["2025-04", "2025-05", "2025-06"], "PredictedIncome": [1.0, 2.0, 3.0]})
    out = drop_past_months(df, datetime.date(2025, 5, 20))
    assert list(out["Month"]) == ["2025-05", "2025-06"]


def test_forecast_records_for_storage() -> None:
    result = generate_forecast(_income(), _bills(), _transactions(), today=TODAY)
    rows = forecast_records(result)
    assert len(rows) == 3
    first = rows[0]
    assert first["forecast_date"] == "2025-06-01"
    assert first["forecast_method"] == "ai_ensemble"
    assert first["confidence_score"] == 0.85
    assert first["predicted_savings"] == pytest.approx(first["predicted_income"] - first["predicted_expenses"])
    assert set(first["insights"]["expense_breakdown"]) == {"recurring", "one_time", "transaction_spending"}
    assert first["insights"]["generated_at"] == "2025-06-15"


def test_forecast_records_without_ensemble_have_no_confidence() -> None:
    result = generate_forecast(_income(), _bills(), _transactions(), method="exponential", today=TODAY)
    rows = forecast_records(result, limit=1)
    assert len(rows) == 1
    assert rows[0]["confidence_score"] is None
    assert rows[0]["forecast_method"] == "exponential"
