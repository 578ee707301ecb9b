"""
FitLog Analytics — Configuration

Connection settings for the hosted data store plus the fixed tables the
aggregators depend on (body-part vocabulary, thresholds, windows).
Everything here is read-only at runtime.
"""
import os

# ── Data store (PostgREST over the hosted database) ─────────────────
SUPABASE_URL = os.environ.get("SUPABASE_URL", "").rstrip("/")
SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")
# User JWT; row-level security filters every query to this user
SUPABASE_ACCESS_TOKEN = os.environ.get("SUPABASE_ACCESS_TOKEN", "")
REQUEST_TIMEOUT = float(os.environ.get("FITLOG_REQUEST_TIMEOUT", "15"))

# ── Units ────────────────────────────────────────────────────────────
LB_TO_KG = 0.453592
KG_TO_LB = 2.20462

# ═════════════════════════════════════════════════════════════════════
# BODY PARTS
#
# The store keeps free-text body-part names ("Lats", "Quadriceps", ...).
# Aggregation works on a fixed six-bucket vocabulary; names are mapped by
# ordered substring rules, first match wins.
# ═════════════════════════════════════════════════════════════════════

BODY_PART_BUCKETS = ["chest", "back", "legs", "arms", "shoulders", "core"]

BODY_PART_RULES = [
    ("chest", ("chest", "pec")),
    ("back", ("back", "lat")),
    ("legs", ("leg", "quad", "hamstring", "glute")),
    ("arms", ("arm", "bicep", "tricep")),
    ("shoulders", ("shoulder", "delt")),
    ("core", ("core", "ab")),
]

# Unmatched names land here instead of being silently counted as arms
UNCLASSIFIED_BUCKET = "other"
# What the mobile app historically did with unmatched names
LEGACY_FALLBACK_BUCKET = "arms"

VOLUME_COLUMNS = BODY_PART_BUCKETS + [UNCLASSIFIED_BUCKET]

BODY_PART_COLORS = {
    "chest": "#FF6B6B",
    "back": "#4ECDC4",
    "legs": "#45B7D1",
    "arms": "#FFA07A",
    "shoulders": "#98D8C8",
    "core": "#F7DC6F",
    "other": "#8884D8",
}

# ── Analysis windows ─────────────────────────────────────────────────
VOLUME_WINDOW_WEEKS = 8
DISTRIBUTION_WINDOW_WEEKS = 4
CALENDAR_SUMMARY_WEEKS = 4
WEIGHT_ROLLING_DAYS = 7
RECENT_ENTRIES = 5

# ── Body-part insights ───────────────────────────────────────────────
INSIGHT_CHANGE_PCT = 20
DOMINANT_SHARE_PCT = 35
BALANCED_SHARE_PCT = 15
BALANCED_MIN_BUCKETS = 4
DEFAULT_INSIGHT = "Keep up the consistent training!"

# ── Calendar heat map ────────────────────────────────────────────────
# (min ratio to the busiest day, level), checked top-down
INTENSITY_THRESHOLDS = [(0.8, 4), (0.6, 3), (0.4, 2), (0.2, 1)]

# ── Personal records ─────────────────────────────────────────────────
MILE_KM = 1.6
FIVE_K_KM = 5.0

PR_ONE_RM = "one_rm_estimate"
PR_TOP_SET = "best_top_set"
PR_FASTEST_MILE = "fastest_mile"
PR_FASTEST_5K = "fastest_5k"
PR_LONGEST_DISTANCE = "longest_distance"

PR_LABELS = {
    PR_ONE_RM: "Est. 1RM",
    PR_TOP_SET: "Top Set",
    PR_FASTEST_MILE: "Fastest Mile",
    PR_FASTEST_5K: "Fastest 5K",
    PR_LONGEST_DISTANCE: "Longest Distance",
}

# Evaluation order for cardio sessions; also decides the display label
CARDIO_PR_ORDER = [PR_FASTEST_MILE, PR_FASTEST_5K, PR_LONGEST_DISTANCE]


def get_bucket_color(bucket: str) -> str:
    return BODY_PART_COLORS.get(bucket, BODY_PART_COLORS[UNCLASSIFIED_BUCKET])


def get_pr_label(kind: str) -> str:
    return PR_LABELS.get(kind, kind)
