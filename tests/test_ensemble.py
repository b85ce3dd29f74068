import datetime
import itertools

import pytest

from aggregation import monthly_baseline
from ensemble import (
    BASE_WEIGHTS,
    LONG_HISTORY_WEIGHTS,
    SHORT_HISTORY_WEIGHTS,
    adjust_transaction_spending,
    ensemble_forecast,
    normalize_weights,
    select_weights,
)
from forecast_settings import normalize_forecast_settings
from records import normalize_transactions

SALARY = {"frequency": "monthly", "is_active": True, "category": "salary"}
GIG = {"frequency": "one-time", "is_active": True, "category": "freelance"}


def _neutral_analysis(**overrides) -> dict:
    analysis = {
        "avg_monthly_spending": 0.0,
        "spending_trend": 0.0,
        "volatility": 0.0,
        "seasonal_factors": [1.0] * 12,
        "recent_growth_rate": 0.0,
        "months_analyzed": 0,
    }
    analysis.update(overrides)
    return analysis


def test_select_weights_by_history_length() -> None:
    assert select_weights(1, []) == SHORT_HISTORY_WEIGHTS
    assert select_weights(4, []) == BASE_WEIGHTS
    assert select_weights(6, []) == LONG_HISTORY_WEIGHTS


def test_select_weights_applies_income_signals() -> None:
    out = select_weights(2, [SALARY, GIG])
    assert out["linear"] == pytest.approx(0.5)
    assert out["exponential"] == pytest.approx(0.15)
    assert out["movingAvg"] == pytest.approx(0.35)


def test_inactive_or_one_time_income_is_not_a_growth_signal() -> None:
    out = select_weights(4, [dict(SALARY, is_active=False), dict(GIG, category="gift")])
    assert out == BASE_WEIGHTS


@pytest.mark.parametrize(
    "history_length, has_growth, has_seasonal",
    list(itertools.product([0, 2, 3, 5, 6, 24], [False, True], [False, True])),
)
def test_weights_stay_normalized_for_every_combination(history_length, has_growth, has_seasonal) -> None:
    sources = ([SALARY] if has_growth else []) + ([GIG] if has_seasonal else [])
    weights = select_weights(history_length, sources)
    assert 0.95 <= sum(weights.values()) <= 1.05
    assert all(value >= 0 for value in weights.values())


def test_normalize_weights_clamps_and_rescales() -> None:
    out = normalize_weights({"linear": -0.1, "exponential": 0.5, "movingAvg": 0.5})
    assert out == {"linear": 0.0, "exponential": 0.5, "movingAvg": 0.5}
    assert normalize_weights({"linear": 0.0, "exponential": 0.0, "movingAvg": 0.0}) == BASE_WEIGHTS


def test_adjustment_is_identity_for_neutral_history() -> None:
    assert adjust_transaction_spending(450.0, _neutral_analysis(), 6, 0) == 450.0


def test_holiday_months_get_uplift() -> None:
    assert adjust_transaction_spending(100.0, _neutral_analysis(), 12, 0) == pytest.approx(115.0)
    assert adjust_transaction_spending(100.0, _neutral_analysis(), 11, 3) == pytest.approx(115.0)


def test_spending_never_drops_below_half_the_average() -> None:
    analysis = _neutral_analysis(avg_monthly_spending=400.0)
    assert adjust_transaction_spending(0.0, analysis, 6, 0) == pytest.approx(200.0)


def test_trend_is_applied_relative_to_average_and_decays() -> None:
    analysis = _neutral_analysis(avg_monthly_spending=1000.0, spending_trend=50.0)
    assert adjust_transaction_spending(1000.0, analysis, 6, 0) == pytest.approx(1000.0)
    assert adjust_transaction_spending(1000.0, analysis, 6, 1) == pytest.approx(1045.0)
    assert adjust_transaction_spending(1000.0, analysis, 6, 2) == pytest.approx(1000 * (1 + 0.05 * 0.81))


def test_volatility_factor_is_capped() -> None:
    analysis = _neutral_analysis(avg_monthly_spending=100.0, volatility=500.0)
    assert adjust_transaction_spending(100.0, analysis, 6, 1) == pytest.approx(120.0)


def test_recent_growth_decays_with_horizon() -> None:
    analysis = _neutral_analysis(recent_growth_rate=0.2)
    assert adjust_transaction_spending(100.0, analysis, 6, 3) == pytest.approx(100 * (1 + 0.2 * 0.8))
    assert adjust_transaction_spending(100.0, _neutral_analysis(recent_growth_rate=0.04), 6, 3) == 100.0


def test_ensemble_blends_income_and_bills_but_not_spending() -> None:
    today = datetime.date(2025, 1, 10)
    income = [{"amount": 3000.0, "frequency": "monthly", "start_date": datetime.date(2024, 1, 1), "end_date": None, "is_active": True}]
    bills = [{"amount": 1000.0, "billing_cycle": "monthly", "due_date": datetime.date(2024, 1, 1), "is_active": True}]
    tx = normalize_transactions([{"date": "2024-12-05", "amount": -200, "transaction_type": "expense"}])
    baseline = monthly_baseline(income, bills, tx, today)

    out = ensemble_forecast(baseline, _neutral_analysis(), normalize_forecast_settings({}), weights=BASE_WEIGHTS)
    first = out.iloc[0]
    # Seasonal income factor for a neutral January is 1.5.
    assert first["PredictedIncome"] == pytest.approx(0.3 * 3000 + 0.2 * 3000 + 0.5 * 4500)
    assert first["ExpenseRecurring"] == pytest.approx(1000.0)
    assert first["TransactionSpending"] == pytest.approx(200.0)
    assert first["PredictedExpenses"] == pytest.approx(1200.0)
    assert (out["PredictedSavings"] == out["PredictedIncome"] - out["PredictedExpenses"]).all()
    assert len(out) == 12
