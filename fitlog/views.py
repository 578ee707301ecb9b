"""
FitLog Analytics — Analytics views

Each view runs one fetch-then-aggregate cycle for an explicit user id and
returns a plain dict. Nothing is cached between calls.

A missing user id means the view does not run (empty state, no fetch).
A failed fetch is printed and the view falls back to its empty state with
`error` set; aggregation itself never swallows errors.
"""
import pandas as pd
import requests

from fitlog import store as _store
from fitlog.config import (
    UNCLASSIFIED_BUCKET,
    VOLUME_WINDOW_WEEKS,
    CALENDAR_SUMMARY_WEEKS,
)
from fitlog.dates import to_day, week_start, today as _today
from fitlog.streaks import streak_stats
from fitlog.records import (
    strength_progression,
    strength_summary,
    cardio_progression,
    cardio_records,
    cardio_summary,
    pr_records,
)
from fitlog.volume import body_part_report, volume_insights
from fitlog.heatmap import day_buckets, add_intensity, month_calendar, weekly_summaries, month_summary
from fitlog.weight import weight_trend, weight_summary, recent_entries, attach_strength_overlay

FETCH_ERRORS = (requests.exceptions.RequestException, _store.StoreConfigError)


def _fetch(label: str, fn, *args):
    """Run a fetcher; returns (rows, error_message)."""
    try:
        return fn(*args), None
    except FETCH_ERRORS as e:
        print(f"❌ {label} fetch failed: {e}")
        return None, str(e)


# ═══════════════════════════════════════════════════════════════════════
# 1. STREAKS
# ═══════════════════════════════════════════════════════════════════════

def streak_view(user_id: str, today=None, store=_store) -> dict:
    result = {"user_id": user_id, **streak_stats([], today), "error": None}
    if not user_id:
        return result
    dates, error = _fetch("Workout dates", store.fetch_session_dates, user_id)
    if error:
        return {**result, "error": error}
    return {**result, **streak_stats(dates, today)}


# ═══════════════════════════════════════════════════════════════════════
# 2. STRENGTH & CARDIO
# ═══════════════════════════════════════════════════════════════════════

def _default_exercise(exercises: pd.DataFrame) -> str | None:
    if exercises.empty:
        return None
    if "category" in exercises.columns:
        strength = exercises[exercises["category"] == "strength"]
        if not strength.empty:
            return strength.iloc[0]["id"]
    return exercises.iloc[0]["id"]


def strength_view(user_id: str, exercise_id: str = None, store=_store) -> dict:
    """
    e1RM progression for one exercise. Without `exercise_id` the first
    strength exercise the user has logged is picked.
    """
    result = {
        "user_id": user_id,
        "exercises": [],
        "exercise_id": exercise_id,
        "progression": pd.DataFrame(),
        "summary": strength_summary(pd.DataFrame()),
        "prs": [],
        "error": None,
    }
    if not user_id:
        return result

    rows, error = _fetch("Exercises", store.fetch_user_exercises, user_id)
    if error:
        return {**result, "error": error}
    exercises = _store.exercises_to_dataframe(rows)
    result["exercises"] = exercises.to_dict("records")
    exercise_id = exercise_id or _default_exercise(exercises)
    result["exercise_id"] = exercise_id
    if not exercise_id:
        return result

    rows, error = _fetch("Strength sets", store.fetch_strength_sets, user_id, exercise_id)
    if error:
        return {**result, "error": error}
    progression = strength_progression(_store.sets_to_dataframe(rows))
    return {
        **result,
        "progression": progression,
        "summary": strength_summary(progression),
        "prs": pr_records(progression, exercise_id),
    }


def cardio_view(user_id: str, store=_store) -> dict:
    result = {
        "user_id": user_id,
        "progression": pd.DataFrame(),
        "records": cardio_records(pd.DataFrame()),
        "summary": cardio_summary(pd.DataFrame()),
        "prs": [],
        "error": None,
    }
    if not user_id:
        return result
    rows, error = _fetch("Cardio sets", store.fetch_cardio_sets, user_id)
    if error:
        return {**result, "error": error}
    progression = cardio_progression(_store.sets_to_dataframe(rows))
    return {
        **result,
        "progression": progression,
        "records": cardio_records(progression),
        "summary": cardio_summary(progression),
        "prs": pr_records(progression),
    }


# ═══════════════════════════════════════════════════════════════════════
# 3. BODY PARTS
# ═══════════════════════════════════════════════════════════════════════

def body_part_view(
    user_id: str,
    today=None,
    fallback: str = UNCLASSIFIED_BUCKET,
    store=_store,
) -> dict:
    anchor = to_day(today) if today is not None else _today()
    empty_weekly = pd.DataFrame()
    result = {
        "user_id": user_id,
        "weekly": empty_weekly,
        "distribution": [],
        "insights": volume_insights(empty_weekly, []),
        "error": None,
    }
    if not user_id:
        return result
    since = anchor - pd.Timedelta(weeks=VOLUME_WINDOW_WEEKS)
    rows, error = _fetch("Body-part sets", store.fetch_body_part_sets, user_id, since)
    if error:
        return {**result, "error": error}
    report = body_part_report(_store.sets_to_dataframe(rows), today=anchor, fallback=fallback)
    return {**result, **report}


# ═══════════════════════════════════════════════════════════════════════
# 4. CALENDAR
# ═══════════════════════════════════════════════════════════════════════

def calendar_view(user_id: str, year: int = None, month: int = None, today=None, store=_store) -> dict:
    """
    Heat map for one month plus the four weekly summaries leading up to
    the month's last day (or today, for the current month).
    """
    anchor_today = to_day(today) if today is not None else _today()
    year = year or anchor_today.year
    month = month or anchor_today.month
    month_start = pd.Timestamp(year=year, month=month, day=1)
    month_end = month_start + pd.offsets.MonthEnd(0)
    anchor = min(anchor_today, month_end)
    summary_start = week_start(anchor) - pd.Timedelta(weeks=CALENDAR_SUMMARY_WEEKS - 1)
    fetch_start = min(month_start, summary_start)

    result = {
        "user_id": user_id,
        "calendar": month_calendar(add_intensity(day_buckets(pd.DataFrame())), year, month),
        "summary": month_summary(pd.DataFrame()),
        "weekly": weekly_summaries(pd.DataFrame()),
        "error": None,
    }
    if not user_id:
        return result
    rows, error = _fetch("Calendar sessions", store.fetch_calendar_sessions, user_id, fetch_start, month_end)
    if error:
        return {**result, "error": error}

    sets = _store.calendar_to_dataframe(rows)
    days = day_buckets(sets)
    if not days.empty:
        idx = pd.DatetimeIndex(days.index)
        days = days[(idx >= month_start) & (idx <= month_end)]
    days = add_intensity(days)

    trailing = pd.DataFrame()
    if not sets.empty:
        sets_days = pd.to_datetime(sets["date"])
        trailing = sets[(sets_days >= summary_start) & (sets_days <= anchor)]
    return {
        **result,
        "calendar": month_calendar(days, year, month),
        "summary": month_summary(days),
        "weekly": weekly_summaries(trailing),
    }


# ═══════════════════════════════════════════════════════════════════════
# 5. BODY WEIGHT
# ═══════════════════════════════════════════════════════════════════════

def _lift_one_rms(rows: list[dict]) -> pd.DataFrame:
    sets = _store.sets_to_dataframe(rows)
    if sets.empty:
        return pd.DataFrame()
    progression = strength_progression(sets)
    if progression.empty:
        return pd.DataFrame()
    return progression[["date", "one_rm_raw"]].rename(columns={"one_rm_raw": "one_rm"})


def weight_view(user_id: str, unit: str = "kg", overlay_lift: str = "squat", store=_store) -> dict:
    """Weight trend; the overlay lift is optional and its failure is not fatal."""
    empty = weight_trend(pd.DataFrame(), unit=unit)
    result = {
        "user_id": user_id,
        "unit": unit,
        "trend": empty,
        "summary": weight_summary(empty),
        "recent": [],
        "error": None,
    }
    if not user_id:
        return result
    rows, error = _fetch("Weight logs", store.fetch_weight_logs, user_id)
    if error:
        return {**result, "error": error}
    trend = weight_trend(_store.weight_logs_to_dataframe(rows), unit=unit)

    if overlay_lift and not trend.empty:
        lift_rows, lift_error = _fetch("Overlay lift", store.fetch_lift_sets, user_id, overlay_lift)
        if not lift_error:
            trend = attach_strength_overlay(trend, _lift_one_rms(lift_rows), unit=unit)

    return {
        **result,
        "trend": trend,
        "summary": weight_summary(trend),
        "recent": recent_entries(trend),
    }
