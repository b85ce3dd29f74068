"""Per-month contribution of recurring and one-time income or bill items."""

from __future__ import annotations

import calendar
import datetime
from typing import Any

# Average occurrences per calendar month. Quarterly and annual items fire on
# aligned months instead.
MONTHLY_MULTIPLIERS = {
    "monthly": 1.0,
    "biweekly": 26 / 12,
    "weekly": 52 / 12,
}

CYCLE_MONTHS = {
    "quarterly": 3,
    "annual": 12,
}


def month_bounds(year: int, month: int) -> tuple[datetime.date, datetime.date]:
    """First and last calendar day of a 1-based month."""
    last_day = calendar.monthrange(year, month)[1]
    return datetime.date(year, month, 1), datetime.date(year, month, last_day)


def add_months(year: int, month: int, offset: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def months_between(start: datetime.date, year: int, month: int) -> int:
    """Whole calendar months from start's month to (year, month)."""
    return (year - start.year) * 12 + (month - start.month)


def month_label(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def overlap_days(
    start: datetime.date, end: datetime.date, window_start: datetime.date, window_end: datetime.date
) -> int:
    """Inclusive day count shared by [start, end] and the window; 0 when disjoint."""
    days = (min(end, window_end) - max(start, window_start)).days + 1
    return max(days, 0)


def is_cycle_month(start: datetime.date, year: int, month: int, cycle_months: int) -> bool:
    diff = months_between(start, year, month)
    return diff >= 0 and diff % cycle_months == 0


def prorated_amount(
    amount: float, start: datetime.date, end: datetime.date, year: int, month: int
) -> float:
    """Share of a lump amount spread over [start, end] that lands in the month."""
    month_start, month_end = month_bounds(year, month)
    if start > month_end:
        return 0.0
    total_days = (end - start).days + 1
    if total_days <= 0:
        return 0.0
    days = overlap_days(start, end, month_start, month_end)
    if days <= 0:
        return 0.0
    return amount * days / total_days


def scheduled_amount(
    amount: float,
    frequency: str,
    start: datetime.date | None,
    end: datetime.date | None,
    year: int,
    month: int,
) -> dict[str, Any]:
    """Contribution of one schedule to a calendar month.

    One-time items without an end date count in full in the month that
    contains their start date; with an end date the amount is prorated by
    day overlap. Recurring items count only between start and end:
    monthly, biweekly and weekly through a fixed multiplier, quarterly and
    annual in full on the months aligned with the start month.
    """
    month_start, month_end = month_bounds(year, month)

    if frequency == "one-time":
        if start is None:
            return {"total": 0.0, "is_one_time": True}
        if end is not None:
            return {"total": prorated_amount(amount, start, end, year, month), "is_one_time": True}
        total = amount if month_start <= start <= month_end else 0.0
        return {"total": total, "is_one_time": True}

    if start is not None and start > month_end:
        return {"total": 0.0, "is_one_time": False}
    if end is not None and end < month_start:
        return {"total": 0.0, "is_one_time": False}

    if frequency in CYCLE_MONTHS:
        if start is None or not is_cycle_month(start, year, month, CYCLE_MONTHS[frequency]):
            return {"total": 0.0, "is_one_time": False}
        return {"total": amount, "is_one_time": False}

    return {"total": amount * MONTHLY_MULTIPLIERS.get(frequency, 0.0), "is_one_time": False}


def monthly_contribution(item: dict[str, Any], year: int, month: int) -> dict[str, Any]:
    """Contribution of a normalized income source to a month."""
    if not item.get("is_active", True):
        return {"total": 0.0, "is_one_time": item.get("frequency") == "one-time"}
    return scheduled_amount(
        float(item.get("amount", 0.0) or 0.0),
        str(item.get("frequency", "")),
        item.get("start_date"),
        item.get("end_date"),
        year,
        month,
    )


def bill_contribution(bill: dict[str, Any], year: int, month: int) -> dict[str, Any]:
    """Contribution of a normalized bill to a month; bills recur from their due date."""
    if not bill.get("is_active", True):
        return {"total": 0.0, "is_one_time": bill.get("billing_cycle") == "one-time"}
    return scheduled_amount(
        float(bill.get("amount", 0.0) or 0.0),
        str(bill.get("billing_cycle", "")),
        bill.get("due_date"),
        None,
        year,
        month,
    )
