"""Monthly income and expense aggregation over schedules and transactions."""

from __future__ import annotations

import datetime
from typing import Any, Iterable

import pandas as pd

from schedules import add_months, bill_contribution, month_label, monthly_contribution

RECENT_SPENDING_MONTHS = 3

BASELINE_COLUMNS = [
    "Month",
    "Year",
    "MonthNumber",
    "MonthsAhead",
    "IncomeRecurring",
    "IncomeOneTime",
    "IncomeTotal",
    "ExpenseRecurring",
    "ExpenseOneTime",
    "TransactionSpending",
    "ExpenseTotal",
]


def monthly_expense_totals(transactions: pd.DataFrame) -> pd.Series:
    """Absolute expense-transaction totals keyed by YYYY-MM."""
    if transactions is None or transactions.empty:
        return pd.Series(dtype=float)
    expenses = transactions[transactions["TransactionType"] == "expense"]
    if expenses.empty:
        return pd.Series(dtype=float)
    months = expenses["Date"].dt.to_period("M").astype(str)
    return expenses["Amount"].abs().groupby(months).sum().sort_index()


def historical_monthly_data(transactions: pd.DataFrame) -> pd.DataFrame:
    """Income, expenses and savings for every month that has transactions."""
    columns = ["Month", "Income", "Expenses", "Savings"]
    if transactions is None or transactions.empty:
        return pd.DataFrame(columns=columns)
    work = transactions.copy()
    work["Month"] = work["Date"].dt.to_period("M").astype(str)
    work["IncomeAmount"] = work["Amount"].abs().where(work["TransactionType"] == "income", 0.0)
    work["ExpenseAmount"] = work["Amount"].abs().where(work["TransactionType"] == "expense", 0.0)
    out = (
        work.groupby("Month")
        .agg(Income=("IncomeAmount", "sum"), Expenses=("ExpenseAmount", "sum"))
        .sort_index()
        .reset_index()
    )
    out["Savings"] = out["Income"] - out["Expenses"]
    return out[columns]


def recent_spending_average(
    expense_totals: pd.Series, today: datetime.date, lookback_months: int = RECENT_SPENDING_MONTHS
) -> float:
    """Average of the complete months before today's month that have spending.

    The current month is excluded because it is usually partial.
    """
    values = []
    for offset in range(1, lookback_months + 1):
        year, month = add_months(today.year, today.month, -offset)
        spent = float(expense_totals.get(month_label(year, month), 0.0))
        if spent > 0:
            values.append(spent)
    if not values:
        return 0.0
    return sum(values) / len(values)


def transaction_spending_for_month(
    expense_totals: pd.Series, year: int, month: int, today: datetime.date
) -> float:
    """Actual spending for past months, recent average for current/future ones."""
    if (year, month) < (today.year, today.month):
        return float(expense_totals.get(month_label(year, month), 0.0))
    return recent_spending_average(expense_totals, today)


def income_for_month(income_sources: Iterable[dict[str, Any]], year: int, month: int) -> dict[str, float]:
    recurring = 0.0
    one_time = 0.0
    for item in income_sources:
        share = monthly_contribution(item, year, month)
        if share["is_one_time"]:
            one_time += share["total"]
        else:
            recurring += share["total"]
    return {"total": recurring + one_time, "recurring": recurring, "one_time": one_time}


def expenses_for_month(
    bills: Iterable[dict[str, Any]],
    transactions: pd.DataFrame,
    year: int,
    month: int,
    today: datetime.date,
    expense_totals: pd.Series | None = None,
) -> dict[str, float]:
    """Bill schedule for the month plus transaction spending."""
    recurring = 0.0
    one_time = 0.0
    for bill in bills:
        share = bill_contribution(bill, year, month)
        if share["is_one_time"]:
            one_time += share["total"]
        else:
            recurring += share["total"]

    if expense_totals is None:
        expense_totals = monthly_expense_totals(transactions)
    spending = transaction_spending_for_month(expense_totals, year, month, today)
    return {
        "total": recurring + one_time + spending,
        "recurring": recurring,
        "one_time": one_time,
        "transaction_spending": spending,
    }


def monthly_baseline(
    income_sources: list[dict[str, Any]],
    bills: list[dict[str, Any]],
    transactions: pd.DataFrame,
    today: datetime.date,
    months: int = 12,
) -> pd.DataFrame:
    """Unadjusted income/expense snapshot for each month starting at today's month."""
    expense_totals = monthly_expense_totals(transactions)
    rows = []
    for offset in range(int(months)):
        year, month = add_months(today.year, today.month, offset)
        income = income_for_month(income_sources, year, month)
        expenses = expenses_for_month(bills, transactions, year, month, today, expense_totals)
        rows.append(
            {
                "Month": month_label(year, month),
                "Year": year,
                "MonthNumber": month,
                "MonthsAhead": offset,
                "IncomeRecurring": income["recurring"],
                "IncomeOneTime": income["one_time"],
                "IncomeTotal": income["total"],
                "ExpenseRecurring": expenses["recurring"],
                "ExpenseOneTime": expenses["one_time"],
                "TransactionSpending": expenses["transaction_spending"],
                "ExpenseTotal": expenses["total"],
            }
        )
    return pd.DataFrame(rows, columns=BASELINE_COLUMNS)
