"""Weighted blend of the projection strategies with history-based spending adjustments."""

from __future__ import annotations

import logging
from typing import Any, Iterable

import pandas as pd

from strategies import FORECAST_COLUMNS, exponential_forecast, linear_forecast, seasonal_forecast

logger = logging.getLogger(__name__)

BASE_WEIGHTS = {"linear": 0.3, "exponential": 0.2, "movingAvg": 0.5}
SHORT_HISTORY_WEIGHTS = {"linear": 0.6, "exponential": 0.1, "movingAvg": 0.3}
LONG_HISTORY_WEIGHTS = {"linear": 0.2, "exponential": 0.3, "movingAvg": 0.5}

SEASONAL_INCOME_CATEGORIES = {"freelance", "business"}
HOLIDAY_MONTHS = {11, 12}
HOLIDAY_UPLIFT = 1.15
TREND_DECAY = 0.9
GROWTH_DECAY = 0.8
VOLATILITY_CAP = 1.2
SPENDING_FLOOR_RATIO = 0.5


def select_weights(history_length: int, income_sources: Iterable[dict[str, Any]]) -> dict[str, float]:
    """Blend weights from data volume and income-mix signals.

    Adjustments are additive and unclamped; see normalize_weights.
    """
    if history_length < 3:
        weights = dict(SHORT_HISTORY_WEIGHTS)
    elif history_length >= 6:
        weights = dict(LONG_HISTORY_WEIGHTS)
    else:
        weights = dict(BASE_WEIGHTS)

    sources = list(income_sources)
    has_growth_income = any(
        item.get("frequency") != "one-time" and item.get("is_active", True) for item in sources
    )
    has_seasonal_income = any(
        str(item.get("category") or "").strip().lower() in SEASONAL_INCOME_CATEGORIES for item in sources
    )

    if has_growth_income:
        weights["exponential"] += 0.1
        weights["linear"] -= 0.05
        weights["movingAvg"] -= 0.05
    if has_seasonal_income:
        weights["movingAvg"] += 0.1
        weights["linear"] -= 0.05
        weights["exponential"] -= 0.05
    return weights


def normalize_weights(weights: dict[str, float]) -> dict[str, float]:
    """Clamp negative weights to zero and rescale to a sum of one."""
    clamped = {name: max(float(value), 0.0) for name, value in weights.items()}
    total = sum(clamped.values())
    if total <= 0:
        logger.warning("Degenerate ensemble weights %s; falling back to base weights", weights)
        return dict(BASE_WEIGHTS)
    return {name: value / total for name, value in clamped.items()}


def adjust_transaction_spending(
    spending: float, analysis: dict[str, Any], month_number: int, months_ahead: int
) -> float:
    """Apply seasonal, trend, volatility, growth and holiday adjustments to discretionary spend.

    The spending trend is applied as a fraction of average monthly spending
    (slope / average), not as the raw currency slope.
    """
    factors = analysis.get("seasonal_factors") or [1.0] * 12
    adjusted = float(spending) * (float(factors[month_number - 1]) or 1.0)

    avg = float(analysis.get("avg_monthly_spending", 0.0) or 0.0)
    trend = float(analysis.get("spending_trend", 0.0) or 0.0)
    volatility = float(analysis.get("volatility", 0.0) or 0.0)
    growth = float(analysis.get("recent_growth_rate", 0.0) or 0.0)

    if months_ahead > 0 and avg > 0:
        # Slope is in currency per month; scale it to a fraction of average spend.
        relative_trend = trend / avg
        if abs(relative_trend) > 0.01:
            adjusted *= 1 + relative_trend * TREND_DECAY**months_ahead
        if volatility > 0:
            adjusted *= min(1 + (volatility / avg) * 0.1, VOLATILITY_CAP)

    if months_ahead > 0 and abs(growth) > 0.05:
        adjusted *= 1 + growth * GROWTH_DECAY ** (months_ahead / 3)

    if month_number in HOLIDAY_MONTHS:
        adjusted *= HOLIDAY_UPLIFT

    return max(adjusted, avg * SPENDING_FLOOR_RATIO, 0.0)


def ensemble_forecast(
    baseline: pd.DataFrame,
    analysis: dict[str, Any],
    settings: dict[str, Any],
    weights: dict[str, float] | None = None,
) -> pd.DataFrame:
    """Blend linear, exponential and seasonal projections.

    Income and scheduled bills are weighted averages of the three
    strategies. Transaction spending is taken from the baseline and
    adjusted from the historical analysis instead of being blended.
    """
    weights = normalize_weights(weights or BASE_WEIGHTS)
    projections = {
        "linear": linear_forecast(baseline, analysis, settings),
        "exponential": exponential_forecast(baseline, analysis, settings),
        "movingAvg": seasonal_forecast(baseline, analysis, settings),
    }

    def blend(column: str) -> pd.Series:
        return sum(projections[name][column] * weights.get(name, 0.0) for name in projections)

    out = pd.DataFrame({"Month": baseline["Month"].reset_index(drop=True)})
    out["PredictedIncome"] = blend("PredictedIncome")
    out["IncomeRecurring"] = blend("IncomeRecurring")
    out["IncomeOneTime"] = blend("IncomeOneTime")
    out["ExpenseRecurring"] = blend("ExpenseRecurring")
    out["ExpenseOneTime"] = blend("ExpenseOneTime")
    out["TransactionSpending"] = [
        adjust_transaction_spending(row.TransactionSpending, analysis, int(row.MonthNumber), int(row.MonthsAhead))
        for row in baseline.itertuples(index=False)
    ]
    out["PredictedExpenses"] = out["ExpenseRecurring"] + out["ExpenseOneTime"] + out["TransactionSpending"]
    out["PredictedSavings"] = out["PredictedIncome"] - out["PredictedExpenses"]
    logger.debug("Ensemble blended %d months with weights %s", len(out), weights)
    return out[FORECAST_COLUMNS]
