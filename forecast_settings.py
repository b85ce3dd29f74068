"""Persistence and validation of per-user forecast settings."""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_FORECAST_SETTINGS_PATH = "data/forecast_settings.json"

GROWTH_METHODS = ("manual", "ai", "historical")
INFLATION_METHODS = ("manual", "ai", "historical")
EXPENSES_METHODS = ("manual", "ai", "seasonal")

DEFAULT_FORECAST_SETTINGS: dict[str, Any] = {
    "target_savings_rate": 20.0,
    "emergency_fund": 0.0,
    "growth_method": "ai",
    "inflation_method": "ai",
    "expenses_method": "ai",
    "manual_growth_rate": 3.0,
    "manual_inflation_rate": 3.0,
    "manual_seasonal_factors": [100.0] * 12,
}


def _number(raw: Any, key: str, minimum: float | None = None) -> float:
    fallback = float(DEFAULT_FORECAST_SETTINGS[key])
    try:
        value = float(raw)
    except (TypeError, ValueError):
        if raw is not None:
            logger.warning("Invalid %s %r; using %s", key, raw, fallback)
        return fallback
    if not math.isfinite(value) or (minimum is not None and value < minimum):
        logger.warning("Out-of-range %s %r; using %s", key, raw, fallback)
        return fallback
    return value


def _choice(raw: Any, key: str, options: tuple[str, ...]) -> str:
    value = str(raw or "").strip().lower()
    if value in options:
        return value
    if raw is not None:
        logger.warning("Unknown %s %r; using %s", key, raw, DEFAULT_FORECAST_SETTINGS[key])
    return str(DEFAULT_FORECAST_SETTINGS[key])


def _seasonal_percentages(raw: Any) -> list[float]:
    fallback = list(DEFAULT_FORECAST_SETTINGS["manual_seasonal_factors"])
    if not isinstance(raw, (list, tuple)) or len(raw) != 12:
        if raw is not None:
            logger.warning("manual_seasonal_factors must list 12 percentages; using defaults")
        return fallback
    try:
        values = [float(item) for item in raw]
    except (TypeError, ValueError):
        logger.warning("manual_seasonal_factors contains non-numeric values; using defaults")
        return fallback
    if any(not math.isfinite(value) or value < 0 for value in values):
        logger.warning("manual_seasonal_factors contains invalid values; using defaults")
        return fallback
    return values


def normalize_forecast_settings(raw: Any) -> dict[str, Any]:
    """Fill in defaults and drop invalid values field by field."""
    payload = raw if isinstance(raw, dict) else {}
    return {
        "target_savings_rate": _number(payload.get("target_savings_rate"), "target_savings_rate"),
        "emergency_fund": _number(payload.get("emergency_fund"), "emergency_fund", minimum=0.0),
        "growth_method": _choice(payload.get("growth_method"), "growth_method", GROWTH_METHODS),
        "inflation_method": _choice(payload.get("inflation_method"), "inflation_method", INFLATION_METHODS),
        "expenses_method": _choice(payload.get("expenses_method"), "expenses_method", EXPENSES_METHODS),
        "manual_growth_rate": _number(payload.get("manual_growth_rate"), "manual_growth_rate"),
        "manual_inflation_rate": _number(payload.get("manual_inflation_rate"), "manual_inflation_rate"),
        "manual_seasonal_factors": _seasonal_percentages(payload.get("manual_seasonal_factors")),
    }


def load_forecast_settings(path: str) -> dict[str, Any]:
    """Load forecast settings from disk; a missing file yields the defaults."""
    target = Path(path).expanduser()
    if not target.exists():
        return normalize_forecast_settings({})
    payload = json.loads(target.read_text(encoding="utf-8"))
    return normalize_forecast_settings(payload)


def save_forecast_settings(path: str, settings: dict[str, Any]) -> Path:
    """Save normalized forecast settings to disk and return saved path."""
    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = normalize_forecast_settings(settings)
    target.write_text(json.dumps(payload, indent=2, ensure_ascii=True), encoding="utf-8")
    return target
