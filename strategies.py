"""Linear, exponential and seasonal projection of the monthly baseline."""

from __future__ import annotations

from typing import Any

import pandas as pd

# Shared by linear and exponential projections; exponential does not use a
# separate 6% growth default.
DEFAULT_ANNUAL_GROWTH_RATE = 2.4
DEFAULT_ANNUAL_INFLATION_RATE = 3.6

DEFAULT_SEASONAL_FACTORS = [1.0, 1.02, 1.05, 1.03, 1.0, 0.98, 0.97, 0.98, 1.0, 1.03, 1.08, 1.15]

FORECAST_COLUMNS = [
    "Month",
    "PredictedIncome",
    "PredictedExpenses",
    "PredictedSavings",
    "IncomeRecurring",
    "IncomeOneTime",
    "ExpenseRecurring",
    "ExpenseOneTime",
    "TransactionSpending",
]


def monthly_rates(settings: dict[str, Any]) -> tuple[float, float]:
    """Monthly income growth and expense inflation as fractions."""
    if settings.get("growth_method") == "manual":
        annual_growth = float(settings.get("manual_growth_rate", DEFAULT_ANNUAL_GROWTH_RATE))
    else:
        annual_growth = DEFAULT_ANNUAL_GROWTH_RATE
    if settings.get("inflation_method") == "manual":
        annual_inflation = float(settings.get("manual_inflation_rate", DEFAULT_ANNUAL_INFLATION_RATE))
    else:
        annual_inflation = DEFAULT_ANNUAL_INFLATION_RATE
    return annual_growth / 12 / 100, annual_inflation / 12 / 100


def resolve_seasonal_factors(settings: dict[str, Any], analysis: dict[str, Any] | None = None) -> list[float]:
    """Pick manual, learned or built-in seasonal expense factors."""
    method = settings.get("expenses_method")
    if method == "manual":
        manual = settings.get("manual_seasonal_factors")
        if isinstance(manual, (list, tuple)) and len(manual) == 12:
            try:
                return [float(value) / 100 for value in manual]
            except (TypeError, ValueError):
                pass
    elif method == "seasonal" and analysis:
        learned = analysis.get("seasonal_factors")
        if isinstance(learned, (list, tuple)) and len(learned) == 12:
            return [float(value) for value in learned]
    return list(DEFAULT_SEASONAL_FACTORS)


def project_baseline(baseline: pd.DataFrame, income_factor: pd.Series, expense_factor: pd.Series) -> pd.DataFrame:
    """Scale baseline components and derive totals and savings."""
    out = pd.DataFrame({"Month": baseline["Month"]})
    out["IncomeRecurring"] = baseline["IncomeRecurring"] * income_factor
    out["IncomeOneTime"] = baseline["IncomeOneTime"] * income_factor
    out["ExpenseRecurring"] = baseline["ExpenseRecurring"] * expense_factor
    out["ExpenseOneTime"] = baseline["ExpenseOneTime"] * expense_factor
    out["TransactionSpending"] = baseline["TransactionSpending"] * expense_factor
    out["PredictedIncome"] = baseline["IncomeTotal"] * income_factor
    out["PredictedExpenses"] = baseline["ExpenseTotal"] * expense_factor
    out["PredictedSavings"] = out["PredictedIncome"] - out["PredictedExpenses"]
    return out[FORECAST_COLUMNS].reset_index(drop=True)


def linear_forecast(baseline: pd.DataFrame, analysis: dict[str, Any], settings: dict[str, Any]) -> pd.DataFrame:
    """Income and expenses drift by a fixed amount per month ahead."""
    growth, inflation = monthly_rates(settings)
    ahead = baseline["MonthsAhead"].astype(float)
    income_factor = (1 + ahead * growth).where(ahead > 0, 1.0)
    expense_factor = (1 + ahead * inflation).where(ahead > 0, 1.0)
    return project_baseline(baseline, income_factor, expense_factor)


def exponential_forecast(baseline: pd.DataFrame, analysis: dict[str, Any], settings: dict[str, Any]) -> pd.DataFrame:
    """Same rates as the linear strategy, compounded monthly."""
    growth, inflation = monthly_rates(settings)
    ahead = baseline["MonthsAhead"].astype(float)
    income_factor = ((1 + growth) ** ahead).where(ahead > 0, 1.0)
    expense_factor = ((1 + inflation) ** ahead).where(ahead > 0, 1.0)
    return project_baseline(baseline, income_factor, expense_factor)


def seasonal_forecast(baseline: pd.DataFrame, analysis: dict[str, Any], settings: dict[str, Any]) -> pd.DataFrame:
    """Apply calendar-month factors to expenses and a dampened mirror to income."""
    factors = resolve_seasonal_factors(settings, analysis)
    expense_factor = baseline["MonthNumber"].apply(lambda m: factors[int(m) - 1]).astype(float)
    income_factor = 2 - expense_factor * 0.5
    return project_baseline(baseline, income_factor, expense_factor)
