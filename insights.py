"""Rule-based insights over a finished forecast, with a plain-text brief."""

from __future__ import annotations

import math
from typing import Any

import pandas as pd

INSIGHT_COLUMNS = ["Type", "Title", "Description", "Metric", "Value", "Trend"]

EMERGENCY_FUND_MIN_MONTHS = 3.0
EXPENSE_TREND_THRESHOLD = 0.1
RECURRING_INCOME_MIN_RATIO = 0.5


def format_currency(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"


def savings_rate(savings: float, income: float) -> float | None:
    """Savings as a percentage of income; None when income is not positive."""
    if income <= 0:
        return None
    return savings / income * 100.0


def emergency_coverage_months(emergency_fund: float, monthly_expenses: float) -> float:
    if monthly_expenses <= 0:
        return math.inf
    return emergency_fund / monthly_expenses


def _insight(
    kind: str,
    title: str,
    description: str,
    metric: str | None = None,
    value: float | None = None,
    trend: str | None = None,
) -> dict[str, object]:
    return {
        "Type": kind,
        "Title": title,
        "Description": description,
        "Metric": metric,
        "Value": value,
        "Trend": trend,
    }


def generate_insights(forecast: pd.DataFrame, settings: dict[str, Any]) -> pd.DataFrame:
    """Evaluate every insight rule against the forecast; all matching rules fire."""
    if forecast is None or forecast.empty:
        return pd.DataFrame(columns=INSIGHT_COLUMNS)

    target_rate = float(settings.get("target_savings_rate", 20.0))
    emergency_fund = float(settings.get("emergency_fund", 0.0))

    avg_income = float(forecast["PredictedIncome"].mean())
    avg_expenses = float(forecast["PredictedExpenses"].mean())
    avg_savings = float(forecast["PredictedSavings"].mean())
    rate = savings_rate(avg_savings, avg_income)

    rows: list[dict[str, object]] = []

    if rate is None:
        rows.append(
            _insight(
                "warning",
                "Below Target Savings Rate",
                f"No income is projected, so nothing can be saved toward your {target_rate:g}% target.",
                "Savings Rate",
                None,
                "down",
            )
        )
    elif rate < target_rate:
        rows.append(
            _insight(
                "warning",
                "Below Target Savings Rate",
                f"You're projected to save {rate:.1f}% of income, "
                f"{target_rate - rate:.1f}% below your {target_rate:g}% target.",
                "Savings Rate",
                rate,
                "down",
            )
        )
    else:
        rows.append(
            _insight(
                "success",
                "Meeting Savings Target",
                f"Excellent! You're saving {rate:.1f}% of income, meeting your {target_rate:g}% target.",
                "Savings Rate",
                rate,
                "up",
            )
        )

    one_time = forecast.loc[forecast["IncomeOneTime"] > 0, "IncomeOneTime"]
    if not one_time.empty:
        total_one_time = float(one_time.sum())
        rows.append(
            _insight(
                "info",
                "One-Time Income Detected",
                f"You have {format_currency(total_one_time)} in one-time income across {len(one_time)} "
                "forecast month(s). Plan accordingly as this won't repeat.",
                "One-Time Income",
                total_one_time,
                "stable",
            )
        )

    coverage = emergency_coverage_months(emergency_fund, avg_expenses)
    if coverage < EMERGENCY_FUND_MIN_MONTHS:
        rows.append(
            _insight(
                "warning",
                "Build Your Emergency Fund",
                f"Your emergency fund covers only {coverage:.1f} months of expenses. Aim for 3-6 months.",
                "Emergency Coverage",
                coverage,
                "stable",
            )
        )

    expense_trend = float(forecast["PredictedExpenses"].iloc[-1] - forecast["PredictedExpenses"].iloc[0])
    if expense_trend > avg_expenses * EXPENSE_TREND_THRESHOLD:
        rows.append(
            _insight(
                "info",
                "Rising Expenses Detected",
                f"Your expenses are projected to increase by {format_currency(expense_trend)} "
                "over the forecast window. Consider reviewing your budget.",
                "Expense Growth",
                expense_trend,
                "up",
            )
        )

    deficit_months = int((forecast["PredictedSavings"] < 0).sum())
    if deficit_months > 0:
        rows.append(
            _insight(
                "warning",
                "Deficit Months Ahead",
                f"{deficit_months} month(s) show expenses exceeding income. Review these periods carefully.",
                "Deficit Months",
                float(deficit_months),
                "down",
            )
        )

    first = forecast.iloc[0]
    first_income = float(first["PredictedIncome"])
    if first_income > 0 and float(first["IncomeRecurring"]) / first_income < RECURRING_INCOME_MIN_RATIO:
        rows.append(
            _insight(
                "tip",
                "Income Stability Risk",
                "Over 50% of your income is from one-time sources. Consider building more recurring income streams.",
                trend="stable",
            )
        )

    return pd.DataFrame(rows, columns=INSIGHT_COLUMNS)


def build_forecast_brief(result: dict[str, Any]) -> str:
    """Deterministic text summary of a forecast result."""
    forecast: pd.DataFrame = result.get("forecast", pd.DataFrame())
    insights: pd.DataFrame = result.get("insights", pd.DataFrame())

    lines = [
        "Cash-Flow Forecast Brief",
        "",
        f"- Method: {result.get('method', 'unknown')}",
    ]
    if forecast is None or forecast.empty:
        lines.append("- No forecast months available.")
        return "\n".join(lines)

    total_income = float(forecast["PredictedIncome"].sum())
    total_expenses = float(forecast["PredictedExpenses"].sum())
    rate = savings_rate(total_income - total_expenses, total_income)
    lines.extend(
        [
            f"- Months: {forecast['Month'].iloc[0]} to {forecast['Month'].iloc[-1]} ({len(forecast)})",
            f"- Projected income: {format_currency(total_income)}",
            f"- Projected expenses: {format_currency(total_expenses)}",
            f"- Projected savings: {format_currency(total_income - total_expenses)}",
            f"- Savings rate: {'N/A' if rate is None else f'{rate:.1f}%'}",
        ]
    )

    weights = result.get("weights")
    if weights:
        mix = ", ".join(f"{name} {value:.2f}" for name, value in weights.items())
        lines.append(f"- Blend weights: {mix}")

    lines.append("")
    lines.append("Insights:")
    if insights is None or insights.empty:
        lines.append("- No insights triggered.")
    else:
        for _, row in insights.iterrows():
            lines.append(f"- [{row['Type']}] {row['Title']}: {row['Description']}")

    lines.append("")
    lines.append("Monthly outlook:")
    for _, row in forecast.iterrows():
        lines.append(
            f"- {row['Month']}: income {format_currency(float(row['PredictedIncome']))}, "
            f"expenses {format_currency(float(row['PredictedExpenses']))}, "
            f"savings {format_currency(float(row['PredictedSavings']))}"
        )
    return "\n".join(lines)
