"""
FitLog Analytics — Date bucketing

All analytics compare dates at day granularity with naive local dates.
No timezone conversion happens: an aware timestamp keeps its wall-clock
date and simply drops the offset. Weeks start on Sunday.
"""
from datetime import date

import numpy as np
import pandas as pd


class InvalidDateError(ValueError):
    """A value that cannot be interpreted as a calendar day."""


def to_day(value) -> pd.Timestamp:
    """Normalize a str/date/datetime/Timestamp to a naive midnight Timestamp."""
    if value is None or value is pd.NaT:
        raise InvalidDateError("Missing date")
    if not isinstance(value, (str, date, np.datetime64)):
        raise InvalidDateError(f"Unsupported date value: {value!r}")
    if isinstance(value, str) and not value.strip():
        raise InvalidDateError("Empty date string")
    try:
        ts = pd.Timestamp(value)
    except (ValueError, TypeError, OverflowError) as e:
        raise InvalidDateError(f"Invalid date: {value!r}") from e
    if pd.isna(ts):
        raise InvalidDateError(f"Invalid date: {value!r}")
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.normalize()


def today() -> pd.Timestamp:
    return pd.Timestamp.today().normalize()


def week_start(value) -> pd.Timestamp:
    """Sunday on or before the given day."""
    day = to_day(value)
    # dayofweek: Monday=0 ... Sunday=6
    return day - pd.Timedelta(days=(day.dayofweek + 1) % 7)


def day_key(value) -> str:
    return to_day(value).strftime("%Y-%m-%d")


def week_key(value) -> str:
    return week_start(value).strftime("%Y-%m-%d")


def days_between(later, earlier) -> int:
    return (to_day(later) - to_day(earlier)).days


def weeks_between(later, earlier) -> int:
    """Whole weeks between the week starts of two days."""
    return (week_start(later) - week_start(earlier)).days // 7


def drop_missing_dates(df: pd.DataFrame, column: str = "date") -> pd.DataFrame:
    """
    Drop rows whose date is null or blank.

    Aggregators skip date-less records like any other incomplete record;
    a present but unparseable date still raises InvalidDateError later.
    """
    if df.empty or column not in df.columns:
        return df
    dates = df[column]
    missing = dates.isna() | (dates.astype(str).str.strip() == "")
    return df[~missing]


def normalize_dates(values) -> pd.Series:
    """Vectorised to_day; keeps the index when given a Series."""
    s = values if isinstance(values, pd.Series) else pd.Series(list(values), dtype=object)
    if s.empty:
        return pd.Series([], index=s.index, dtype="datetime64[ns]")
    return pd.to_datetime(s.map(to_day))


def week_starts(days: pd.Series) -> pd.Series:
    """Vectorised week_start over an already-normalized datetime Series."""
    if days.empty:
        return days
    return days - pd.to_timedelta((days.dt.dayofweek + 1) % 7, unit="D")
