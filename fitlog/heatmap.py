"""
FitLog Analytics — Calendar heat map

Buckets sessions by calendar day, scores each day 0–4 relative to the
busiest day in view, and rolls the same sessions up into weekly summaries.
"""
import numpy as np
import pandas as pd

from fitlog.config import INTENSITY_THRESHOLDS, CALENDAR_SUMMARY_WEEKS
from fitlog.dates import normalize_dates, drop_missing_dates, week_starts


def _prepare_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Set-level rows with numeric fields, normalized dates and set volume."""
    if df.empty or not {"date", "session_id"}.issubset(df.columns):
        return pd.DataFrame()
    rows = drop_missing_dates(df).copy()
    if rows.empty:
        return pd.DataFrame()
    for col in ("weight", "reps", "duration_min"):
        if col not in rows.columns:
            rows[col] = np.nan
        rows[col] = pd.to_numeric(rows[col], errors="coerce")
    for col in ("exercise_id", "body_part"):
        if col not in rows.columns:
            rows[col] = None
    # Each logged exercise entry counts, even the same exercise twice
    if "workout_exercise_id" not in rows.columns:
        rows["workout_exercise_id"] = rows["exercise_id"]
    rows["date"] = normalize_dates(rows["date"])
    valid = (rows["weight"] > 0) & (rows["reps"] > 0)
    rows["volume"] = np.where(valid, rows["weight"] * rows["reps"], 0.0)
    # Exercises logged without any set still come through as one row
    rows["is_set"] = rows["set_id"].notna() if "set_id" in rows.columns else True
    return rows


def day_buckets(df: pd.DataFrame) -> pd.DataFrame:
    """
    One row per training day: volume, duration, body_parts, exercise_count,
    set_count, sessions. Several sessions on one day add up.
    """
    rows = _prepare_rows(df)
    if rows.empty:
        return pd.DataFrame(columns=["volume", "duration", "body_parts", "exercise_count", "set_count", "sessions"])

    per_session = rows.groupby("session_id").agg(
        date=("date", "first"),
        duration=("duration_min", "first"),
        volume=("volume", "sum"),
        set_count=("is_set", "sum"),
        exercise_count=("workout_exercise_id", "nunique"),
    )
    per_session["duration"] = per_session["duration"].fillna(0)

    days = per_session.groupby("date").agg(
        volume=("volume", "sum"),
        duration=("duration", "sum"),
        exercise_count=("exercise_count", "sum"),
        set_count=("set_count", "sum"),
        sessions=("volume", "size"),
    ).sort_index()
    days["volume"] = days["volume"].round(0).astype(int)
    days["set_count"] = days["set_count"].astype(int)

    parts = (
        rows.dropna(subset=["body_part"])
        .groupby("date")["body_part"]
        .apply(lambda s: sorted(s.unique()))
        .to_dict()
    )
    days["body_parts"] = [parts.get(d, []) for d in days.index]
    return days[["volume", "duration", "body_parts", "exercise_count", "set_count", "sessions"]]


def intensity_level(volume: float, max_volume: float) -> int:
    if max_volume <= 0:
        return 0
    ratio = volume / max_volume
    for threshold, level in INTENSITY_THRESHOLDS:
        if ratio >= threshold:
            return level
    return 0


def add_intensity(days: pd.DataFrame) -> pd.DataFrame:
    """Add `level` (0–4) relative to the busiest day; max volume floors at 1."""
    if days.empty:
        out = days.copy()
        out["level"] = pd.Series(dtype=int)
        return out
    out = days.copy()
    max_volume = max(float(out["volume"].max()), 1.0)
    out["level"] = [intensity_level(v, max_volume) for v in out["volume"]]
    out["level"] = out["level"].astype(int)
    return out


def month_grid(days: pd.DataFrame, year: int, month: int) -> list[dict]:
    """One cell per calendar day of the month, including days without sessions."""
    if "level" not in days.columns:
        days = add_intensity(days)
    first = pd.Timestamp(year=year, month=month, day=1)
    last = first + pd.offsets.MonthEnd(0)
    cells = []
    for day in pd.date_range(first, last, freq="D"):
        has_session = day in days.index
        row = days.loc[day] if has_session else None
        cells.append({
            "date": day,
            "day": day.day,
            "has_session": has_session,
            "volume": int(row["volume"]) if has_session else 0,
            "level": int(row["level"]) if has_session else 0,
        })
    return cells


def month_calendar(days: pd.DataFrame, year: int, month: int) -> dict:
    """
    Calendar grid for one month.

    `leading_blanks` is the number of empty cells before day 1 in a
    Sunday-first week row.
    """
    first = pd.Timestamp(year=year, month=month, day=1)
    return {
        "year": year,
        "month": month,
        "leading_blanks": (first.dayofweek + 1) % 7,
        "days": month_grid(days, year, month),
    }


def weekly_summaries(df: pd.DataFrame, weeks: int = CALENDAR_SUMMARY_WEEKS) -> pd.DataFrame:
    """Sessions (distinct days), sets and volume per Sunday week; last `weeks` weeks, oldest first."""
    rows = _prepare_rows(df)
    if rows.empty:
        return pd.DataFrame(columns=["week_start", "sessions", "total_sets", "total_volume"])
    rows["week_start"] = week_starts(rows["date"])
    weekly = (
        rows.groupby("week_start")
        .agg(
            sessions=("date", "nunique"),
            total_sets=("is_set", "sum"),
            total_volume=("volume", "sum"),
        )
        .sort_index()
        .tail(weeks)
        .reset_index()
    )
    weekly["total_sets"] = weekly["total_sets"].astype(int)
    weekly["total_volume"] = weekly["total_volume"].round(0).astype(int)
    return weekly


def month_summary(days: pd.DataFrame, year: int = None, month: int = None) -> dict:
    if year is not None and month is not None and not days.empty:
        idx = pd.DatetimeIndex(days.index)
        days = days[(idx.year == year) & (idx.month == month)]
    if days.empty:
        return {"total_sessions": 0, "total_volume": 0, "avg_duration": 0.0}
    return {
        "total_sessions": len(days),
        "total_volume": int(days["volume"].sum()),
        "avg_duration": round(float(days["duration"].mean()), 1),
    }
