"""
FitLog Analytics — Personal records & e1RM

Strength: per-session Epley e1RM and top set, with running bests.
Cardio: fastest mile / fastest 5K pace and longest distance, each tracked
independently so one effort can set several records at once.

Sets with missing or zero weight/reps (or distance/duration) are skipped,
never counted as zero-volume sets.
"""
import numpy as np
import pandas as pd

from fitlog.config import (
    MILE_KM,
    FIVE_K_KM,
    PR_ONE_RM,
    PR_TOP_SET,
    PR_FASTEST_MILE,
    PR_FASTEST_5K,
    PR_LONGEST_DISTANCE,
    CARDIO_PR_ORDER,
    get_pr_label,
)
from fitlog.dates import normalize_dates, drop_missing_dates, day_key


def _epley(weight, reps):
    # Scalars or Series alike
    return weight * (1 + reps / 30)


def epley_1rm(weight: float, reps: float) -> float:
    """Epley estimate: weight × (1 + reps/30). 0 when either input is missing."""
    if weight is None or reps is None or pd.isna(weight) or pd.isna(reps):
        return 0.0
    if weight <= 0 or reps <= 0:
        return 0.0
    return _epley(weight, reps)


# ═══════════════════════════════════════════════════════════════════════
# 1. STRENGTH
# ═══════════════════════════════════════════════════════════════════════

def _clean_strength_sets(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty or not {"date", "weight", "reps"}.issubset(df.columns):
        return pd.DataFrame()
    sets = df.copy()
    sets["weight"] = pd.to_numeric(sets["weight"], errors="coerce")
    sets["reps"] = pd.to_numeric(sets["reps"], errors="coerce")
    # NaN compares False, so null weight/reps drop out here too
    sets = sets[(sets["weight"] > 0) & (sets["reps"] > 0)]
    sets = drop_missing_dates(sets).reset_index(drop=True)
    if sets.empty:
        return sets
    sets["date"] = normalize_dates(sets["date"])
    sets["set_volume"] = sets["weight"] * sets["reps"]
    formula = _epley(sets["weight"], sets["reps"])
    if "estimated_1rm" in sets.columns:
        # A stored estimate from the logger wins over the formula
        stored = pd.to_numeric(sets["estimated_1rm"], errors="coerce")
        sets["set_1rm"] = np.where(stored > 0, stored, formula)
    else:
        sets["set_1rm"] = formula
    return sets


def strength_progression(df: pd.DataFrame) -> pd.DataFrame:
    """
    One row per session date for a single exercise, oldest first.

    A session is a PR when its e1RM or its top-set volume (weight × reps)
    strictly beats every earlier session. Ties are not PRs. The comparison
    uses unrounded values; `one_rm` is rounded to 0.1 for display.
    """
    sets = _clean_strength_sets(df)
    if sets.empty:
        return pd.DataFrame()

    top_idx = sets.groupby("date")["set_volume"].idxmax()
    top = (
        sets.loc[top_idx, ["date", "weight", "reps", "set_volume"]]
        .rename(columns={
            "weight": "top_set_weight",
            "reps": "top_set_reps",
            "set_volume": "top_set_volume",
        })
        .set_index("date")
    )
    sessions = (
        sets.groupby("date")
        .agg(
            one_rm_raw=("set_1rm", "max"),
            volume=("set_volume", "sum"),
            n_sets=("set_volume", "size"),
        )
        .join(top)
        .reset_index()
        .sort_values("date")
        .reset_index(drop=True)
    )

    best_1rm = 0.0
    best_top = 0.0
    running_1rm, running_top, kinds_col = [], [], []
    for one_rm, top_vol in zip(sessions["one_rm_raw"], sessions["top_set_volume"]):
        kinds = []
        if one_rm > best_1rm:
            kinds.append(PR_ONE_RM)
            best_1rm = one_rm
        if top_vol > best_top:
            kinds.append(PR_TOP_SET)
            best_top = top_vol
        running_1rm.append(round(best_1rm, 1))
        running_top.append(round(best_top, 1))
        kinds_col.append(tuple(kinds))

    sessions["one_rm"] = sessions["one_rm_raw"].round(1)
    sessions["top_set_weight"] = sessions["top_set_weight"].round(1)
    sessions["top_set_reps"] = sessions["top_set_reps"].astype(int)
    sessions["volume"] = sessions["volume"].round(0).astype(int)
    sessions["running_best_1rm"] = running_1rm
    sessions["running_best_top_set"] = running_top
    sessions["pr_kinds"] = pd.Series(kinds_col, index=sessions.index, dtype=object)
    sessions["is_pr"] = sessions["pr_kinds"].apply(bool)
    return sessions[[
        "date", "one_rm", "one_rm_raw", "top_set_weight", "top_set_reps",
        "top_set_volume", "volume", "n_sets", "running_best_1rm",
        "running_best_top_set", "pr_kinds", "is_pr",
    ]]


def strength_summary(progression: pd.DataFrame) -> dict:
    if progression.empty:
        return {
            "sessions": 0, "pr_count": 0, "first_1rm": 0.0,
            "latest_1rm": 0.0, "best_1rm": 0.0, "progress_pct": 0.0,
        }
    first = float(progression["one_rm"].iloc[0])
    latest = float(progression["one_rm"].iloc[-1])
    return {
        "sessions": len(progression),
        "pr_count": int(progression["is_pr"].sum()),
        "first_1rm": first,
        "latest_1rm": latest,
        "best_1rm": float(progression["one_rm"].max()),
        "progress_pct": round((latest - first) / first * 100, 1) if first > 0 else 0.0,
    }


# ═══════════════════════════════════════════════════════════════════════
# 2. CARDIO
# ═══════════════════════════════════════════════════════════════════════

def cardio_progression(df: pd.DataFrame) -> pd.DataFrame:
    """
    One row per cardio effort, oldest first, with the PR kinds it set.

    Pace is seconds per km: the stored pace when present, otherwise
    duration / distance. Efforts shorter than a mile (1.6 km) or 5 km
    don't compete for those pace records.
    """
    if df.empty or not {"date", "distance_m", "duration_sec"}.issubset(df.columns):
        return pd.DataFrame()
    efforts = df.copy()
    efforts["distance_m"] = pd.to_numeric(efforts["distance_m"], errors="coerce")
    efforts["duration_sec"] = pd.to_numeric(efforts["duration_sec"], errors="coerce")
    efforts = drop_missing_dates(efforts[(efforts["distance_m"] > 0) & (efforts["duration_sec"] > 0)])
    if efforts.empty:
        return pd.DataFrame()

    efforts = efforts.copy()
    efforts["date"] = normalize_dates(efforts["date"])
    efforts = efforts.sort_values("date", kind="mergesort").reset_index(drop=True)
    distance_km = efforts["distance_m"] / 1000
    derived_pace = efforts["duration_sec"] / distance_km
    if "pace_sec_per_km" in efforts.columns:
        stored = pd.to_numeric(efforts["pace_sec_per_km"], errors="coerce")
        pace = pd.Series(np.where(stored > 0, stored, derived_pace), index=efforts.index)
    else:
        pace = derived_pace

    best_mile = None
    best_5k = None
    longest = None
    kinds_col = []
    for km, p in zip(distance_km, pace):
        kinds = []
        if km >= MILE_KM and (best_mile is None or p < best_mile):
            kinds.append(PR_FASTEST_MILE)
            best_mile = p
        if km >= FIVE_K_KM and (best_5k is None or p < best_5k):
            kinds.append(PR_FASTEST_5K)
            best_5k = p
        if longest is None or km > longest:
            kinds.append(PR_LONGEST_DISTANCE)
            longest = km
        kinds_col.append(tuple(kinds))

    if "exercise_id" in efforts.columns:
        exercise_ids = efforts["exercise_id"].astype(object)
    else:
        exercise_ids = pd.Series([None] * len(efforts), index=efforts.index, dtype=object)
    result = pd.DataFrame({
        "date": efforts["date"],
        "exercise_id": exercise_ids,
        "distance_km": distance_km.round(2),
        "duration_min": (efforts["duration_sec"] / 60).round(1),
        "pace": pace.round(0).astype(int),
        "pr_kinds": pd.Series(kinds_col, index=efforts.index, dtype=object),
    })
    result["is_pr"] = result["pr_kinds"].apply(bool)
    # Display label: first satisfied kind in mile → 5K → longest order.
    # Kept as object so non-PR rows stay None rather than NaN.
    result["pr_type"] = pd.Series(
        [get_pr_label(kinds[0]) if kinds else None for kinds in kinds_col],
        index=result.index,
        dtype=object,
    )
    return result


def cardio_records(progression: pd.DataFrame) -> dict:
    """Current holder (as a dict) of each cardio record, or None."""
    records = {kind: None for kind in CARDIO_PR_ORDER}
    if progression.empty:
        return records
    for kind in CARDIO_PR_ORDER:
        hits = progression[progression["pr_kinds"].apply(lambda kinds: kind in kinds)]
        if not hits.empty:
            records[kind] = hits.iloc[-1].to_dict()
    return records


def cardio_summary(progression: pd.DataFrame) -> dict:
    if progression.empty:
        return {"total_sessions": 0, "total_distance_km": 0.0, "avg_pace": 0}
    return {
        "total_sessions": len(progression),
        "total_distance_km": round(float(progression["distance_km"].sum()), 2),
        "avg_pace": int(round(progression["pace"].mean())),
    }


# ═══════════════════════════════════════════════════════════════════════
# 3. PR RECORDS & FORMATTING
# ═══════════════════════════════════════════════════════════════════════

_PR_VALUE_COLUMN = {
    PR_ONE_RM: "one_rm",
    PR_TOP_SET: "top_set_volume",
    PR_FASTEST_MILE: "pace",
    PR_FASTEST_5K: "pace",
    PR_LONGEST_DISTANCE: "distance_km",
}


def pr_records(progression: pd.DataFrame, exercise_id: str = None) -> list[dict]:
    """
    Flatten a strength or cardio progression into PRRecord dicts.

    A per-row exercise_id (cardio) takes precedence over the argument.
    """
    if progression.empty or "pr_kinds" not in progression.columns:
        return []
    records = []
    for _, row in progression[progression["is_pr"]].iterrows():
        row_exercise = row.get("exercise_id")
        for kind in row["pr_kinds"]:
            records.append({
                "exercise_id": row_exercise if pd.notna(row_exercise) else exercise_id,
                "achieved_at": day_key(row["date"]),
                "kind": kind,
                "value": float(row[_PR_VALUE_COLUMN[kind]]),
            })
    return records


def format_pace(sec_per_km: float) -> str:
    total = int(round(sec_per_km))
    return f"{total // 60}:{total % 60:02d}/km"


def format_duration(minutes: float) -> str:
    hours = int(minutes // 60)
    mins = int(minutes % 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"
