#!/usr/bin/env python3
"""Run a cash-flow forecast from a JSON snapshot of income, bills and transactions."""

from __future__ import annotations

import argparse
import datetime as dt
import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from analytics import bill_category_breakdown
from engine import FORECAST_METHODS, forecast_records, generate_forecast
from forecast_settings import DEFAULT_FORECAST_SETTINGS_PATH, load_forecast_settings
from insights import build_forecast_brief
from metric_guide import METRIC_GUIDE

logger = logging.getLogger(__name__)


def load_snapshot(path: str) -> dict[str, Any]:
    """Read income_sources, bills and transactions lists from a JSON file."""
    target = Path(path).expanduser()
    if not target.exists():
        raise FileNotFoundError(f"Snapshot does not exist: {target}")
    payload = json.loads(target.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Snapshot must be a JSON object: {target}")
    return {
        "income_sources": list(payload.get("income_sources") or []),
        "bills": list(payload.get("bills") or []),
        "transactions": list(payload.get("transactions") or []),
    }


def _frame_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    if df is None or df.empty:
        return []
    clean = df.astype(object).where(df.notna(), None)
    return clean.to_dict(orient="records")


def result_to_json(result: dict[str, Any], bills: list[dict[str, Any]]) -> str:
    payload = {
        "method": result["method"],
        "generated_for": result["generated_for"].isoformat(),
        "weights": result["weights"],
        "history_months": result["history_months"],
        "analysis": result["analysis"],
        "forecast": _frame_records(result["forecast"]),
        "insights": _frame_records(result["insights"]),
        "bill_categories": _frame_records(bill_category_breakdown(bills)),
        "records": forecast_records(result),
    }
    return json.dumps(payload, indent=2, default=str)


def _parse_today(value: str) -> dt.date:
    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"--today must be YYYY-MM-DD, got {value!r}") from exc


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Project 12 months of cash flow from a budget snapshot.")
    parser.add_argument("--snapshot", help="JSON file with income_sources, bills and transactions.")
    parser.add_argument(
        "--settings",
        default=DEFAULT_FORECAST_SETTINGS_PATH,
        help="Forecast settings JSON (defaults are used when the file is missing).",
    )
    parser.add_argument(
        "--method",
        default="ai-ensemble",
        choices=sorted(list(FORECAST_METHODS) + ["ai"]),
        help="Projection method.",
    )
    parser.add_argument("--today", type=_parse_today, default=None, help="Override the current date (YYYY-MM-DD).")
    parser.add_argument("--json", action="store_true", help="Print machine-readable JSON instead of a brief.")
    parser.add_argument("--metric-guide", action="store_true", help="Print metric definitions and exit.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)
    if not args.metric_guide and not args.snapshot:
        parser.error("--snapshot is required unless --metric-guide is given")
    return args


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.metric_guide:
        print(pd.DataFrame(METRIC_GUIDE).to_string(index=False))
        return

    snapshot = load_snapshot(str(args.snapshot))
    settings = load_forecast_settings(str(args.settings))
    result = generate_forecast(
        snapshot["income_sources"],
        snapshot["bills"],
        snapshot["transactions"],
        settings=settings,
        method=str(args.method),
        today=args.today,
    )

    if args.json:
        print(result_to_json(result, snapshot["bills"]))
        return
    print(build_forecast_brief(result))


if __name__ == "__main__":
    main()
