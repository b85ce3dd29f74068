"""Trend, volatility and seasonality of historical expense transactions."""

from __future__ import annotations

import datetime

import pandas as pd

from aggregation import monthly_expense_totals
from schedules import add_months, month_label

TRAILING_MONTHS = 6
MIN_TREND_MONTHS = 3


def trailing_spending_series(
    transactions: pd.DataFrame, today: datetime.date, months: int = TRAILING_MONTHS
) -> pd.Series:
    """Expense totals for the trailing months up to and including today's month.

    Months without spending are left out of the series.
    """
    totals = monthly_expense_totals(transactions)
    labels = []
    values = []
    for offset in range(months - 1, -1, -1):
        year, month = add_months(today.year, today.month, -offset)
        label = month_label(year, month)
        spent = float(totals.get(label, 0.0))
        if spent > 0:
            labels.append(label)
            values.append(spent)
    return pd.Series(values, index=labels, dtype=float)


def least_squares_slope(values: pd.Series) -> float:
    """Slope of values against their position 0..n-1."""
    y = values.reset_index(drop=True).astype(float)
    n = len(y)
    if n < 2:
        return 0.0
    x = pd.Series(range(n), dtype=float)
    denominator = n * float((x**2).sum()) - float(x.sum()) ** 2
    if denominator == 0:
        return 0.0
    return (n * float((x * y).sum()) - float(x.sum()) * float(y.sum())) / denominator


def seasonal_factors(transactions: pd.DataFrame) -> list[float]:
    """Per-calendar-month spending factor relative to the overall monthly average.

    Each factor is the month's average expense transaction divided by the
    yearly spending spread evenly over 12 months. Months with no expense
    transactions stay neutral at 1.0.
    """
    factors = [1.0] * 12
    if transactions is None or transactions.empty:
        return factors
    expenses = transactions[transactions["TransactionType"] == "expense"]
    if expenses.empty:
        return factors

    amounts = expenses["Amount"].abs()
    by_month = amounts.groupby(expenses["Date"].dt.month).agg(["sum", "count"])
    avg_monthly = float(by_month["sum"].sum()) / 12.0
    if avg_monthly <= 0:
        return factors

    for month_number, row in by_month.iterrows():
        if float(row["sum"]) > 0 and int(row["count"]) > 0:
            factors[int(month_number) - 1] = float(row["sum"]) / int(row["count"]) / avg_monthly
    return factors


def analyze_spending_patterns(transactions: pd.DataFrame, today: datetime.date) -> dict[str, object]:
    """Summarize historical spending for forecast adjustments."""
    analysis: dict[str, object] = {
        "avg_monthly_spending": 0.0,
        "spending_trend": 0.0,
        "volatility": 0.0,
        "seasonal_factors": seasonal_factors(transactions),
        "recent_growth_rate": 0.0,
        "months_analyzed": 0,
    }

    series = trailing_spending_series(transactions, today)
    if series.empty:
        return analysis

    avg = float(series.mean())
    analysis["avg_monthly_spending"] = avg
    analysis["months_analyzed"] = int(len(series))
    if len(series) >= MIN_TREND_MONTHS:
        analysis["spending_trend"] = least_squares_slope(series)
    analysis["volatility"] = float(series.std(ddof=0)) if len(series) > 1 else 0.0

    if len(series) >= TRAILING_MONTHS:
        previous_avg = float(series.head(3).mean())
        recent_avg = float(series.tail(3).mean())
        analysis["recent_growth_rate"] = (recent_avg - previous_avg) / previous_avg if previous_avg > 0 else 0.0

    return analysis
