"""Normalization of income, bill and transaction snapshots."""

from __future__ import annotations

import datetime
import json
import logging
import math
from typing import Any, Iterable

import pandas as pd

logger = logging.getLogger(__name__)

FREQUENCIES = ("weekly", "biweekly", "monthly", "quarterly", "annual", "one-time")
TRANSACTION_TYPES = ("income", "expense", "transfer")

_FREQUENCY_ALIASES = {
    "onetime": "one-time",
    "one_time": "one-time",
    "once": "one-time",
    "bi-weekly": "biweekly",
    "yearly": "annual",
    "annually": "annual",
}


def parse_amount(value: Any) -> float | None:
    """Return a finite float amount or None when the value is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip().replace(" ", "").replace("'", "").replace(",", "").replace("$", "")
    amount = pd.to_numeric(text, errors="coerce")
    if pd.isna(amount) or not math.isfinite(float(amount)):
        return None
    return float(amount)


def parse_date(value: Any) -> datetime.date | None:
    """Return a calendar date or None for empty/unparseable values."""
    if value is None or value == "":
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    stamp = pd.to_datetime(str(value), errors="coerce")
    if pd.isna(stamp):
        return None
    return stamp.date()


def parse_frequency(value: Any) -> str | None:
    text = str(value or "").strip().lower()
    text = _FREQUENCY_ALIASES.get(text, text)
    return text if text in FREQUENCIES else None


def parse_categories(value: Any) -> list[str]:
    """Accept a list or a JSON-encoded list of category names."""
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if str(item).strip()]
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            return []
        if isinstance(parsed, list):
            return [str(item) for item in parsed if str(item).strip()]
    return []


def _parse_active(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() not in {"false", "0", "no", "off", ""}
    return bool(value)


def _clean_amount(raw: dict, name: str, kind: str) -> float | None:
    amount = parse_amount(raw.get("amount"))
    if amount is None:
        logger.warning("Skipping %s %r: amount %r is not numeric", kind, name, raw.get("amount"))
        return None
    if amount < 0:
        logger.warning("Skipping %s %r: negative amount %s", kind, name, amount)
        return None
    return amount


def normalize_income_sources(raw_sources: Iterable[Any] | None) -> list[dict[str, Any]]:
    """Clean income source snapshots, dropping items that cannot be scheduled."""
    out: list[dict[str, Any]] = []
    for raw in raw_sources or []:
        if not isinstance(raw, dict):
            logger.warning("Skipping income source of type %s", type(raw).__name__)
            continue
        name = str(raw.get("name") or "").strip()
        amount = _clean_amount(raw, name, "income source")
        if amount is None:
            continue
        frequency = parse_frequency(raw.get("frequency"))
        if frequency is None:
            logger.warning("Skipping income source %r: unknown frequency %r", name, raw.get("frequency"))
            continue

        start_date = parse_date(raw.get("start_date"))
        end_date = parse_date(raw.get("end_date"))
        if raw.get("end_date") and end_date is None:
            logger.warning("Income source %r has unreadable end_date %r; treating as open-ended", name, raw.get("end_date"))

        out.append(
            {
                "name": name,
                "amount": amount,
                "frequency": frequency,
                "category": str(raw.get("category") or "").strip().lower(),
                "start_date": start_date,
                "end_date": end_date,
                "is_active": _parse_active(raw.get("is_active")),
            }
        )
    return out


def normalize_bills(raw_bills: Iterable[Any] | None) -> list[dict[str, Any]]:
    """Clean bill snapshots, dropping items that cannot be scheduled."""
    out: list[dict[str, Any]] = []
    for raw in raw_bills or []:
        if not isinstance(raw, dict):
            logger.warning("Skipping bill of type %s", type(raw).__name__)
            continue
        name = str(raw.get("name") or "").strip()
        amount = _clean_amount(raw, name, "bill")
        if amount is None:
            continue
        billing_cycle = parse_frequency(raw.get("billing_cycle"))
        if billing_cycle is None:
            logger.warning("Skipping bill %r: unknown billing cycle %r", name, raw.get("billing_cycle"))
            continue

        categories = parse_categories(raw.get("categories"))
        if not categories and str(raw.get("category") or "").strip():
            categories = [str(raw["category"]).strip()]

        out.append(
            {
                "name": name,
                "amount": amount,
                "billing_cycle": billing_cycle,
                "due_date": parse_date(raw.get("due_date")),
                "categories": categories,
                "is_active": _parse_active(raw.get("is_active")),
            }
        )
    return out


def normalize_transactions(raw: pd.DataFrame | Iterable[dict] | None) -> pd.DataFrame:
    """Return transactions with Date, Amount, TransactionType and Category columns."""
    columns = ["Date", "Amount", "TransactionType", "Category"]
    if raw is None:
        return pd.DataFrame(columns=columns)
    df = raw.copy() if isinstance(raw, pd.DataFrame) else pd.DataFrame(list(raw))
    if df.empty:
        return pd.DataFrame(columns=columns)

    renames = {"date": "Date", "amount": "Amount", "transaction_type": "TransactionType", "category": "Category"}
    df = df.rename(columns={src: dst for src, dst in renames.items() if src in df.columns and dst not in df.columns})

    for col in ["Date", "Amount"]:
        if col not in df.columns:
            df[col] = None
    df["Date"] = pd.to_datetime(df["Date"].map(parse_date), errors="coerce")
    df["Amount"] = pd.to_numeric(df["Amount"].map(parse_amount), errors="coerce")

    invalid = df["Date"].isna() | ~df["Amount"].abs().lt(math.inf)
    if invalid.any():
        logger.warning("Dropping %d transaction(s) without a usable date or amount", int(invalid.sum()))
        df = df.loc[~invalid].copy()

    if "TransactionType" in df.columns:
        df["TransactionType"] = df["TransactionType"].fillna("").astype(str).str.strip().str.lower()
    else:
        df["TransactionType"] = ""
    inferred = df["Amount"].apply(lambda v: "income" if v > 0 else "expense")
    df["TransactionType"] = df["TransactionType"].where(df["TransactionType"].isin(TRANSACTION_TYPES), inferred)

    if "Category" not in df.columns:
        df["Category"] = ""
    df["Category"] = df["Category"].fillna("").astype(str)

    return df[columns].sort_values("Date").reset_index(drop=True)
