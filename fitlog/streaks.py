"""
FitLog Analytics — Training streaks

Consecutive-day and consecutive-week streaks from the dates a user trained.
A run continues only while adjacent distinct days (or week starts) are
exactly one unit apart. The current run counts only if it reaches today or
yesterday (this week or last week for weekly streaks).
"""
import pandas as pd

from fitlog.dates import to_day, week_start, today as _today


def _unique_desc(days) -> list[pd.Timestamp]:
    return sorted(set(days), reverse=True)


def _streak_runs(keys: list[pd.Timestamp], unit_days: int, anchor: pd.Timestamp) -> tuple[int, int]:
    """
    Walk unique keys (newest first) and return (current, best).

    `anchor` is today's key; the current run must start at the anchor or
    one unit before it.
    """
    if not keys:
        return 0, 0

    gaps = [(newer - older).days for newer, older in zip(keys, keys[1:])]

    current = 0
    if (anchor - keys[0]).days in (0, unit_days):
        current = 1
        for gap in gaps:
            if gap != unit_days:
                break
            current += 1

    best = 0
    run = 1
    for gap in gaps:
        if gap == unit_days:
            run += 1
        else:
            best = max(best, run)
            run = 1
    best = max(best, run, current)
    return current, best


def daily_streaks(dates, today=None) -> tuple[int, int]:
    """(current, best) consecutive training days."""
    anchor = to_day(today) if today is not None else _today()
    days = _unique_desc(to_day(d) for d in dates)
    return _streak_runs(days, 1, anchor)


def weekly_streaks(dates, today=None) -> tuple[int, int]:
    """(current, best) consecutive training weeks (Sunday week starts)."""
    anchor = week_start(today if today is not None else _today())
    weeks = _unique_desc(week_start(d) for d in dates)
    return _streak_runs(weeks, 7, anchor)


def streak_stats(dates, today=None) -> dict:
    """
    Full streak summary for one user's workout dates.

    Dates may repeat and arrive unsorted; malformed values raise
    InvalidDateError instead of being counted as zero.
    """
    dates = list(dates)
    current_daily, best_daily = daily_streaks(dates, today)
    current_weekly, best_weekly = weekly_streaks(dates, today)
    return {
        "current_daily": current_daily,
        "best_daily": best_daily,
        "current_weekly": current_weekly,
        "best_weekly": best_weekly,
    }
