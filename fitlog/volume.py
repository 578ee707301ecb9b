"""
FitLog Analytics — Body-part volume

Weekly volume (weight × reps) per body-part bucket, the share of each
bucket over a shorter trailing window, and plain-language insights from
week-over-week changes.
"""
import numpy as np
import pandas as pd

from fitlog.config import (
    BODY_PART_RULES,
    UNCLASSIFIED_BUCKET,
    VOLUME_COLUMNS,
    VOLUME_WINDOW_WEEKS,
    DISTRIBUTION_WINDOW_WEEKS,
    INSIGHT_CHANGE_PCT,
    DOMINANT_SHARE_PCT,
    BALANCED_SHARE_PCT,
    BALANCED_MIN_BUCKETS,
    DEFAULT_INSIGHT,
    get_bucket_color,
)
from fitlog.dates import normalize_dates, drop_missing_dates, week_starts, to_day, today as _today


def normalize_body_part(name, fallback: str = UNCLASSIFIED_BUCKET) -> str:
    """Map a free-text body-part name onto the bucket vocabulary."""
    if not isinstance(name, str) or not name.strip():
        return fallback
    lowered = name.lower()
    for bucket, needles in BODY_PART_RULES:
        if any(needle in lowered for needle in needles):
            return bucket
    return fallback


def add_volume_columns(df: pd.DataFrame, fallback: str = UNCLASSIFIED_BUCKET) -> pd.DataFrame:
    """
    Keep only sets usable for volume and add volume/bucket/week_start.

    Sets without a positive weight and reps, or without a body part,
    are dropped.
    """
    if df.empty or not {"date", "weight", "reps", "body_part"}.issubset(df.columns):
        return pd.DataFrame()
    sets = df.copy()
    sets["weight"] = pd.to_numeric(sets["weight"], errors="coerce")
    sets["reps"] = pd.to_numeric(sets["reps"], errors="coerce")
    has_part = sets["body_part"].notna() & (sets["body_part"].astype(str).str.strip() != "")
    sets = drop_missing_dates(sets[(sets["weight"] > 0) & (sets["reps"] > 0) & has_part]).reset_index(drop=True)
    if sets.empty:
        return sets
    sets["date"] = normalize_dates(sets["date"])
    sets["week_start"] = week_starts(sets["date"])
    sets["volume"] = sets["weight"] * sets["reps"]
    sets["bucket"] = sets["body_part"].map(lambda name: normalize_body_part(name, fallback))
    return sets


def _window(sets: pd.DataFrame, today, weeks: int) -> pd.DataFrame:
    anchor = to_day(today) if today is not None else _today()
    return sets[sets["date"] >= anchor - pd.Timedelta(weeks=weeks)]


def weekly_body_part_volume(
    df: pd.DataFrame,
    today=None,
    weeks: int = VOLUME_WINDOW_WEEKS,
    fallback: str = UNCLASSIFIED_BUCKET,
) -> pd.DataFrame:
    """
    Week start × bucket volume matrix, oldest week first.

    Every bucket is a column (zero when untrained); only weeks with at
    least one set inside the window appear as rows.
    """
    sets = add_volume_columns(df, fallback)
    if sets.empty:
        return pd.DataFrame(columns=VOLUME_COLUMNS)
    sets = _window(sets, today, weeks)
    if sets.empty:
        return pd.DataFrame(columns=VOLUME_COLUMNS)
    weekly = (
        sets.pivot_table(
            index="week_start", columns="bucket", values="volume",
            aggfunc="sum", fill_value=0,
        )
        .reindex(columns=VOLUME_COLUMNS, fill_value=0)
        .sort_index()
        .round(0)
        .astype(int)
    )
    weekly.columns.name = None
    return weekly


def volume_distribution(
    df: pd.DataFrame,
    today=None,
    weeks: int = DISTRIBUTION_WINDOW_WEEKS,
    fallback: str = UNCLASSIFIED_BUCKET,
) -> list[dict]:
    """
    Share of total volume per bucket over the trailing window.

    Shares are whole percentages (half-up), zero shares are left out and
    the list is sorted by share, largest first.
    """
    sets = add_volume_columns(df, fallback)
    if sets.empty:
        return []
    sets = _window(sets, today, weeks)
    totals = sets.groupby("bucket")["volume"].sum().reindex(VOLUME_COLUMNS).dropna()
    total = float(totals.sum())
    if total <= 0:
        return []
    rows = []
    for bucket, volume in totals.items():
        share = int(np.floor(volume / total * 100 + 0.5))
        if share <= 0:
            continue
        rows.append({
            "body_part": bucket,
            "name": bucket.capitalize(),
            "share": share,
            "volume": round(float(volume)),
            "color": get_bucket_color(bucket),
        })
    return sorted(rows, key=lambda r: r["share"], reverse=True)


def _change_insights(weekly: pd.DataFrame) -> list[str]:
    if len(weekly) < 2:
        return []
    recent = weekly.iloc[-1]
    previous = weekly.iloc[-2]
    insights = []
    for bucket in weekly.columns:
        prev_vol = previous[bucket]
        if prev_vol <= 0:
            continue
        change = (recent[bucket] - prev_vol) / prev_vol * 100
        if abs(change) >= INSIGHT_CHANGE_PCT:
            direction = "increased" if change > 0 else "decreased"
            insights.append(f"{bucket.capitalize()} volume {direction} {abs(change):.0f}% this week")
    return insights


def _distribution_insights(distribution: list[dict]) -> list[str]:
    if not distribution:
        return []
    insights = []
    dominant = distribution[0]
    if dominant["share"] >= DOMINANT_SHARE_PCT:
        insights.append(f"{dominant['name']} training is dominant at {dominant['share']}% of total volume")
    balanced = sum(1 for d in distribution if d["share"] >= BALANCED_SHARE_PCT)
    if balanced >= BALANCED_MIN_BUCKETS:
        insights.append("Training appears well-balanced across body parts")
    return insights


def volume_insights(weekly: pd.DataFrame, distribution: list[dict]) -> list[str]:
    """Human-readable notes; falls back to encouragement and never raises."""
    try:
        insights = _change_insights(weekly) + _distribution_insights(distribution)
    except Exception as e:
        print(f"⚠️  Insight generation failed: {e}")
        insights = []
    return insights or [DEFAULT_INSIGHT]


def body_part_report(df: pd.DataFrame, today=None, fallback: str = UNCLASSIFIED_BUCKET) -> dict:
    weekly = weekly_body_part_volume(df, today=today, fallback=fallback)
    distribution = volume_distribution(df, today=today, fallback=fallback)
    return {
        "weekly": weekly,
        "distribution": distribution,
        "insights": volume_insights(weekly, distribution),
    }
