"""
FitLog Analytics — Data store client

Read-only PostgREST queries against the hosted database. Every query is
filtered by an explicit user id; row-level security on the server enforces
the same thing for the access token in use.

Nested rows from embedded selects are flattened into the DataFrames the
aggregators consume. Weights logged in lb are converted to kg here so
nothing downstream has to care about units.
"""
import requests
import pandas as pd

from fitlog.config import (
    SUPABASE_URL,
    SUPABASE_ANON_KEY,
    SUPABASE_ACCESS_TOKEN,
    REQUEST_TIMEOUT,
    LB_TO_KG,
)
from fitlog.dates import day_key

PAGE_SIZE = 1000

# Embedded selects (PostgREST resource embedding)
_SESSION_OF_SET = "workout_sessions!inner(date,user_id)"
_BODY_PART = "body_parts!exercises_primary_body_part_id_fkey(name)"


class StoreConfigError(RuntimeError):
    """Data store URL or key missing from the environment."""


def _headers() -> dict:
    token = SUPABASE_ACCESS_TOKEN or SUPABASE_ANON_KEY
    return {
        "apikey": SUPABASE_ANON_KEY,
        "Authorization": f"Bearer {token}",
        "Accept": "application/json",
    }


def _get(table: str, params: list[tuple]) -> list[dict]:
    if not SUPABASE_URL or not SUPABASE_ANON_KEY:
        raise StoreConfigError("SUPABASE_URL and SUPABASE_ANON_KEY must be set")
    r = requests.get(
        f"{SUPABASE_URL}/rest/v1/{table}",
        headers=_headers(),
        params=params,
        timeout=REQUEST_TIMEOUT,
    )
    r.raise_for_status()
    return r.json()


def _get_all(table: str, params: list[tuple], order: str = "id.asc") -> list[dict]:
    """
    Page through a query with limit/offset until a short page comes back.

    `order` must end on a unique column so pages neither overlap nor skip rows.
    """
    rows = []
    offset = 0
    while True:
        page = _get(table, params + [("order", order), ("limit", PAGE_SIZE), ("offset", offset)])
        rows.extend(page)
        if len(page) < PAGE_SIZE:
            break
        offset += PAGE_SIZE
    return rows


# ═══════════════════════════════════════════════════════════════════════
# 1. FETCHERS
# ═══════════════════════════════════════════════════════════════════════

def fetch_session_dates(user_id: str) -> list[str]:
    rows = _get_all("workout_sessions", [
        ("select", "date"),
        ("user_id", f"eq.{user_id}"),
    ], order="date.desc,id.desc")
    return [r["date"] for r in rows if r.get("date")]


def fetch_user_exercises(user_id: str) -> list[dict]:
    """Exercises the user has logged at least once."""
    return _get_all("workout_exercises", [
        ("select", "exercise_id,exercises!inner(id,name,category),workout_sessions!inner(user_id)"),
        ("workout_sessions.user_id", f"eq.{user_id}"),
    ])


def fetch_strength_sets(user_id: str, exercise_id: str) -> list[dict]:
    return _get_all("workout_sets", [
        ("select", f"weight,reps,unit,estimated_1rm,workout_exercises!inner(exercise_id,{_SESSION_OF_SET})"),
        ("workout_exercises.exercise_id", f"eq.{exercise_id}"),
        ("workout_exercises.workout_sessions.user_id", f"eq.{user_id}"),
        ("weight", "not.is.null"),
        ("reps", "not.is.null"),
    ])


def fetch_cardio_sets(user_id: str) -> list[dict]:
    return _get_all("workout_sets", [
        ("select", f"distance_m,duration_sec,pace_sec_per_km,workout_exercises!inner(exercise_id,{_SESSION_OF_SET})"),
        ("workout_exercises.workout_sessions.user_id", f"eq.{user_id}"),
        ("distance_m", "not.is.null"),
        ("duration_sec", "not.is.null"),
    ])


def fetch_body_part_sets(user_id: str, since) -> list[dict]:
    return _get_all("workout_sets", [
        ("select", (
            "weight,reps,unit,workout_exercises!inner("
            f"exercise_id,exercises!inner(name,{_BODY_PART}),{_SESSION_OF_SET})"
        )),
        ("workout_exercises.workout_sessions.user_id", f"eq.{user_id}"),
        ("workout_exercises.workout_sessions.date", f"gte.{day_key(since)}"),
        ("weight", "not.is.null"),
        ("reps", "not.is.null"),
    ])


def fetch_lift_sets(user_id: str, name_pattern: str) -> list[dict]:
    """Sets of every exercise whose name matches `name_pattern` (e.g. squat)."""
    return _get_all("workout_sets", [
        ("select", (
            "weight,reps,unit,estimated_1rm,workout_exercises!inner("
            f"exercise_id,exercises!inner(name),{_SESSION_OF_SET})"
        )),
        ("workout_exercises.workout_sessions.user_id", f"eq.{user_id}"),
        ("workout_exercises.exercises.name", f"ilike.*{name_pattern}*"),
    ])


def fetch_calendar_sessions(user_id: str, start, end) -> list[dict]:
    return _get_all("workout_sessions", [
        ("select", (
            "id,date,duration_min,workout_exercises!inner("
            f"id,exercise_id,exercises!inner(name,{_BODY_PART}),"
            "workout_sets(id,weight,reps,unit))"
        )),
        ("user_id", f"eq.{user_id}"),
        ("date", f"gte.{day_key(start)}"),
        ("date", f"lte.{day_key(end)}"),
    ])


def fetch_weight_logs(user_id: str) -> list[dict]:
    return _get_all("body_weight_logs", [
        ("select", "id,date,body_weight,unit,notes,created_at"),
        ("user_id", f"eq.{user_id}"),
    ], order="date.asc,id.asc")


# ═══════════════════════════════════════════════════════════════════════
# 2. FLATTENERS
# ═══════════════════════════════════════════════════════════════════════

def _one(embedded) -> dict:
    """Embedded to-one relations may come back as an object or a 1-item list."""
    if isinstance(embedded, list):
        return embedded[0] if embedded else {}
    return embedded or {}


def _to_kg(value, unit):
    if value is None:
        return None
    return value * LB_TO_KG if unit == "lb" else value


def sets_to_dataframe(rows: list[dict]) -> pd.DataFrame:
    """
    Flatten workout_sets rows (with their exercise and session) to one row
    per set. Sets whose session has no date are dropped.
    """
    out = []
    for row in rows:
        we = _one(row.get("workout_exercises"))
        session = _one(we.get("workout_sessions"))
        exercise = _one(we.get("exercises"))
        body_part = _one(exercise.get("body_parts"))
        if not session.get("date"):
            continue
        unit = row.get("unit") or "kg"
        out.append({
            "date": session["date"],
            "exercise_id": we.get("exercise_id"),
            "exercise": exercise.get("name"),
            "body_part": body_part.get("name"),
            "weight": _to_kg(row.get("weight"), unit),
            "reps": row.get("reps"),
            "estimated_1rm": _to_kg(row.get("estimated_1rm"), unit),
            "distance_m": row.get("distance_m"),
            "duration_sec": row.get("duration_sec"),
            "pace_sec_per_km": row.get("pace_sec_per_km"),
        })
    return pd.DataFrame(out)


def calendar_to_dataframe(sessions: list[dict]) -> pd.DataFrame:
    """
    Flatten sessions → exercises → sets. An exercise logged without sets
    still yields one row (set_id None) so it counts toward exercise_count.
    """
    out = []
    for s in sessions:
        if not s.get("date"):
            continue
        for we in s.get("workout_exercises") or []:
            exercise = _one(we.get("exercises"))
            body_part = _one(exercise.get("body_parts"))
            base = {
                "session_id": s.get("id"),
                "workout_exercise_id": we.get("id"),
                "date": s["date"],
                "duration_min": s.get("duration_min"),
                "exercise_id": we.get("exercise_id"),
                "exercise": exercise.get("name"),
                "body_part": body_part.get("name"),
            }
            sets = we.get("workout_sets") or []
            if not sets:
                out.append({**base, "set_id": None, "weight": None, "reps": None})
            for st in sets:
                unit = st.get("unit") or "kg"
                out.append({
                    **base,
                    "set_id": st.get("id"),
                    "weight": _to_kg(st.get("weight"), unit),
                    "reps": st.get("reps"),
                })
    return pd.DataFrame(out)


def exercises_to_dataframe(rows: list[dict]) -> pd.DataFrame:
    """Unique exercises (id, name, category) in first-seen order."""
    seen = {}
    for row in rows:
        ex = _one(row.get("exercises"))
        if ex.get("id") and ex["id"] not in seen:
            seen[ex["id"]] = {"id": ex["id"], "name": ex.get("name"), "category": ex.get("category")}
    return pd.DataFrame(list(seen.values()))


def weight_logs_to_dataframe(rows: list[dict]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame()
    return pd.DataFrame(rows).rename(columns={"body_weight": "weight"})
