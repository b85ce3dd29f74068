"""Forecast entry point: dispatches to a projection method and attaches insights."""

from __future__ import annotations

import datetime
import logging
from typing import Any, Callable, Iterable

import pandas as pd

from aggregation import historical_monthly_data, monthly_baseline
from ensemble import ensemble_forecast, select_weights
from forecast_settings import normalize_forecast_settings
from insights import generate_insights
from records import normalize_bills, normalize_income_sources, normalize_transactions
from schedules import month_label
from spending_patterns import analyze_spending_patterns
from strategies import exponential_forecast, linear_forecast, seasonal_forecast

logger = logging.getLogger(__name__)

FORECAST_MONTHS = 12
PERSISTED_MONTHS = 3
ENSEMBLE_CONFIDENCE = 0.85

Strategy = Callable[[pd.DataFrame, dict[str, Any], dict[str, Any]], pd.DataFrame]

FORECAST_METHODS: dict[str, Strategy] = {
    "linear": linear_forecast,
    "exponential": exponential_forecast,
    "moving-average": seasonal_forecast,
    "ai-ensemble": ensemble_forecast,
}

_METHOD_ALIASES = {
    "ai": "ai-ensemble",
    "ai_ensemble": "ai-ensemble",
    "ensemble": "ai-ensemble",
    "moving_average": "moving-average",
    "seasonal": "moving-average",
}


def resolve_method(method: str) -> str:
    key = str(method or "").strip().lower()
    key = _METHOD_ALIASES.get(key, key)
    if key not in FORECAST_METHODS:
        raise ValueError(
            f"Unsupported forecast method: {method!r}. Supported: {', '.join(FORECAST_METHODS)}."
        )
    return key


def drop_past_months(forecast: pd.DataFrame, today: datetime.date) -> pd.DataFrame:
    """Remove forecast rows labelled before today's month."""
    current = month_label(today.year, today.month)
    return forecast[forecast["Month"] >= current].reset_index(drop=True)


def generate_forecast(
    income_sources: Iterable[dict] | None,
    bills: Iterable[dict] | None,
    transactions: pd.DataFrame | Iterable[dict] | None,
    settings: dict[str, Any] | None = None,
    method: str = "ai-ensemble",
    today: datetime.date | None = None,
    months: int = FORECAST_MONTHS,
) -> dict[str, Any]:
    """Project monthly cash flow and evaluate insights.

    The result holds the forecast DataFrame, the insight DataFrame, the
    blend weights (ensemble only) and the historical spending analysis.
    Identical inputs and `today` give identical output.
    """
    if today is None:
        today = datetime.date.today()
    method = resolve_method(method)

    clean_settings = normalize_forecast_settings(settings or {})
    income = normalize_income_sources(income_sources)
    bill_items = normalize_bills(bills)
    tx = normalize_transactions(transactions)

    baseline = monthly_baseline(income, bill_items, tx, today, months=months)
    analysis = analyze_spending_patterns(tx, today)
    history = historical_monthly_data(tx)

    weights = None
    if method == "ai-ensemble":
        weights = select_weights(len(history), income)
        forecast = ensemble_forecast(baseline, analysis, clean_settings, weights=weights)
    else:
        forecast = FORECAST_METHODS[method](baseline, analysis, clean_settings)

    forecast = drop_past_months(forecast, today)
    insights = generate_insights(forecast, clean_settings)

    logger.info(
        "Generated %s forecast for %s: %d months, %d insights (%d income sources, %d bills, %d transactions)",
        method,
        month_label(today.year, today.month),
        len(forecast),
        len(insights),
        len(income),
        len(bill_items),
        len(tx),
    )
    return {
        "method": method,
        "generated_for": today,
        "forecast": forecast,
        "insights": insights,
        "weights": weights,
        "analysis": analysis,
        "history_months": int(len(history)),
        "settings": clean_settings,
    }


def forecast_records(result: dict[str, Any], limit: int = PERSISTED_MONTHS) -> list[dict[str, Any]]:
    """Rows a caller can store for the first forecast months."""
    forecast: pd.DataFrame = result["forecast"]
    method = str(result.get("method", "ai-ensemble"))
    generated_for = result.get("generated_for")
    generated_at = generated_for.isoformat() if isinstance(generated_for, datetime.date) else None

    rows = []
    for _, row in forecast.head(int(limit)).iterrows():
        rows.append(
            {
                "forecast_date": f"{row['Month']}-01",
                "predicted_income": float(row["PredictedIncome"]),
                "predicted_expenses": float(row["PredictedExpenses"]),
                "predicted_savings": float(row["PredictedSavings"]),
                "confidence_score": ENSEMBLE_CONFIDENCE if method == "ai-ensemble" else None,
                "forecast_method": method.replace("-", "_"),
                "insights": {
                    "method": method,
                    "weights": result.get("weights"),
                    "income_breakdown": {
                        "recurring": float(row["IncomeRecurring"]),
                        "one_time": float(row["IncomeOneTime"]),
                    },
                    "expense_breakdown": {
                        "recurring": float(row["ExpenseRecurring"]),
                        "one_time": float(row["ExpenseOneTime"]),
                        "transaction_spending": float(row["TransactionSpending"]),
                    },
                    "spending_analysis": result.get("analysis"),
                    "generated_at": generated_at,
                },
            }
        )
    return rows
