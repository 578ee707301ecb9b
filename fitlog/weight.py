"""
FitLog Analytics — Body weight

Deduplicates weight logs (last write per date wins), converts units and
builds the rolling-average trend shown next to strength progress.
"""
import numpy as np
import pandas as pd

from fitlog.config import LB_TO_KG, KG_TO_LB, WEIGHT_ROLLING_DAYS, RECENT_ENTRIES
from fitlog.dates import normalize_dates, drop_missing_dates

UNIT_FACTORS = {"kg": 1.0, "lb": KG_TO_LB}


def _unit_factor(unit: str) -> float:
    if unit not in UNIT_FACTORS:
        raise ValueError(f"Unknown weight unit: {unit!r} (expected 'kg' or 'lb')")
    return UNIT_FACTORS[unit]


def dedupe_weight_logs(df: pd.DataFrame) -> pd.DataFrame:
    """
    One entry per date, weight in kg.

    When a date was logged more than once, the entry with the latest
    created_at wins; entries without created_at count as oldest, and exact
    ties keep the one that came last in the input.
    """
    if df.empty or "date" not in df.columns:
        return pd.DataFrame()
    logs = df.copy()
    if "weight" not in logs.columns and "body_weight" in logs.columns:
        logs = logs.rename(columns={"body_weight": "weight"})
    if "weight" not in logs.columns:
        return pd.DataFrame()

    logs["weight"] = pd.to_numeric(logs["weight"], errors="coerce")
    logs = drop_missing_dates(logs[logs["weight"] > 0]).copy()
    if logs.empty:
        return pd.DataFrame()
    logs["date"] = normalize_dates(logs["date"])

    units = logs["unit"].fillna("kg") if "unit" in logs.columns else pd.Series("kg", index=logs.index)
    logs["weight_kg"] = np.where(units == "lb", logs["weight"] * LB_TO_KG, logs["weight"])

    if "created_at" in logs.columns:
        logs["_created"] = pd.to_datetime(logs["created_at"], errors="coerce", utc=True)
    else:
        logs["_created"] = pd.NaT
    logs = (
        logs.sort_values(["date", "_created"], na_position="first", kind="mergesort")
        .drop_duplicates("date", keep="last")
        .drop(columns=["_created"])
        .reset_index(drop=True)
    )
    return logs


def weight_trend(df: pd.DataFrame, window: int = WEIGHT_ROLLING_DAYS, unit: str = "kg") -> pd.DataFrame:
    """Deduped weights, oldest first, with a trailing `window`-entry average."""
    factor = _unit_factor(unit)
    logs = dedupe_weight_logs(df)
    if logs.empty:
        return pd.DataFrame(columns=["date", "weight", "rolling_avg"])
    keep = [c for c in ("id", "date", "notes") if c in logs.columns]
    trend = logs[keep].copy()
    trend["weight"] = (logs["weight_kg"] * factor).round(1)
    trend["rolling_avg"] = trend["weight"].rolling(window, min_periods=1).mean().round(1)
    return trend


def weight_summary(trend: pd.DataFrame) -> dict:
    if trend.empty:
        return {"entries": 0, "current": 0.0, "first": 0.0, "change": 0.0}
    current = float(trend["weight"].iloc[-1])
    first = float(trend["weight"].iloc[0])
    return {
        "entries": len(trend),
        "current": current,
        "first": first,
        "change": round(current - first, 1),
    }


def recent_entries(trend: pd.DataFrame, n: int = RECENT_ENTRIES) -> list[dict]:
    """Newest `n` entries, newest first."""
    if trend.empty:
        return []
    return trend.tail(n).iloc[::-1].to_dict("records")


def attach_strength_overlay(trend: pd.DataFrame, one_rm_df: pd.DataFrame, unit: str = "kg") -> pd.DataFrame:
    """
    Add `overlay_1rm`: the best e1RM (kg input) logged on each weigh-in date.

    Dates without a lift stay NaN so charts leave a gap.
    """
    factor = _unit_factor(unit)
    out = trend.copy()
    if out.empty or one_rm_df.empty or not {"date", "one_rm"}.issubset(one_rm_df.columns):
        out["overlay_1rm"] = np.nan
        return out
    lifts = drop_missing_dates(one_rm_df).copy()
    lifts["date"] = normalize_dates(lifts["date"])
    lifts["one_rm"] = pd.to_numeric(lifts["one_rm"], errors="coerce")
    best = lifts.groupby("date")["one_rm"].max()
    out["overlay_1rm"] = (out["date"].map(best) * factor).round(1)
    return out
