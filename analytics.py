"""Analytics helpers for budget planning views."""

from __future__ import annotations

import math
from typing import Any, Iterable

import pandas as pd

from records import normalize_bills

# Monthly-equivalent share of one bill payment; one-time bills are excluded.
MONTHLY_EQUIVALENT = {
    "monthly": 1.0,
    "biweekly": 26 / 12,
    "weekly": 52 / 12,
    "quarterly": 1 / 3,
    "annual": 1 / 12,
    "one-time": 0.0,
}

MIN_CATEGORY_SHARE_PCT = 5.0


def bill_category_breakdown(bills: Iterable[dict[str, Any]]) -> pd.DataFrame:
    """Monthly-equivalent bill spending per category with shares."""
    columns = ["Category", "MonthlyAmount", "SharePct"]
    totals: dict[str, float] = {}
    for bill in normalize_bills(bills):
        if not bill["is_active"]:
            continue
        monthly = bill["amount"] * MONTHLY_EQUIVALENT.get(bill["billing_cycle"], 0.0)
        if monthly <= 0:
            continue
        categories = bill["categories"] or ["Other"]
        per_category = monthly / len(categories)
        for category in categories:
            totals[category] = totals.get(category, 0.0) + per_category

    if not totals:
        return pd.DataFrame(columns=columns)

    out = pd.Series(totals, dtype=float).sort_values(ascending=False).reset_index()
    out.columns = ["Category", "MonthlyAmount"]
    total = float(out["MonthlyAmount"].sum())
    out["SharePct"] = out["MonthlyAmount"].apply(lambda x: (x / total * 100.0) if total else 0.0)

    small = (out["SharePct"] < MIN_CATEGORY_SHARE_PCT) | (out["Category"] == "Other")
    if small.any():
        other_total = float(out.loc[small, "MonthlyAmount"].sum())
        out = out.loc[~small].copy()
        if other_total > 0:
            other = pd.DataFrame(
                [{"Category": "Other", "MonthlyAmount": other_total, "SharePct": other_total / total * 100.0}]
            )
            out = pd.concat([out, other], ignore_index=True)
    return out.sort_values("MonthlyAmount", ascending=False).reset_index(drop=True)[columns]


def months_to_goal(target: float, saved: float, monthly_savings: float) -> float:
    """Whole months until a goal is funded; inf when nothing is being saved."""
    remaining = max(float(target) - float(saved), 0.0)
    if remaining == 0:
        return 0
    if monthly_savings <= 0:
        return math.inf
    return math.ceil(remaining / monthly_savings)


def goals_progress(goal_config: dict[str, Any], monthly_savings: float) -> pd.DataFrame:
    """Progress and time-to-target for user-defined savings goals."""
    columns = ["Goal", "Target", "Saved", "Remaining", "ProgressPct", "MonthsToGoal"]
    rows = []
    for name, payload in goal_config.items():
        if isinstance(payload, dict):
            target = float(payload.get("target", 0) or 0)
            saved = float(payload.get("saved", 0) or 0)
        else:
            target = float(payload or 0)
            saved = 0.0
        progress = (saved / target * 100.0) if target else 0.0
        rows.append(
            {
                "Goal": str(name),
                "Target": target,
                "Saved": saved,
                "Remaining": max(target - saved, 0.0),
                "ProgressPct": min(progress, 100.0),
                "MonthsToGoal": months_to_goal(target, saved, monthly_savings),
            }
        )
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows, columns=columns).sort_values("Remaining").reset_index(drop=True)
