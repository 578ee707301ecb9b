"""
FitLog Analytics — Progress report
Run manually: python -m fitlog.report <user_id> [--exercise ID] [--month YYYY-MM] [--unit kg|lb]
"""
import sys
from datetime import datetime

from fitlog.config import get_pr_label
from fitlog.records import format_pace, format_duration
from fitlog.weight import UNIT_FACTORS
from fitlog.views import (
    streak_view,
    strength_view,
    cardio_view,
    body_part_view,
    calendar_view,
    weight_view,
)

USAGE = "Usage: python -m fitlog.report <user_id> [--exercise ID] [--month YYYY-MM] [--unit kg|lb]"


def _arg(argv: list[str], flag: str, default=None):
    if flag in argv:
        i = argv.index(flag)
        if i + 1 < len(argv):
            return argv[i + 1]
    return default


def _parse_month(value: str) -> tuple[int, int]:
    """Parse YYYY-MM into (year, month); ValueError when malformed."""
    parts = value.split("-")
    if len(parts) != 2:
        raise ValueError(f"Invalid month: {value!r}")
    year, month = int(parts[0]), int(parts[1])
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {value!r}")
    return year, month


def print_streaks(view: dict):
    print("\n🔥 Streaks")
    print(f"   Current: {view['current_daily']} day(s), {view['current_weekly']} week(s)")
    print(f"   Best:    {view['best_daily']} day(s), {view['best_weekly']} week(s)")


def print_strength(view: dict):
    print("\n🏋️ Strength")
    summary = view["summary"]
    if not summary["sessions"]:
        print("   No strength data yet.")
        return
    name = next((e["name"] for e in view["exercises"] if e["id"] == view["exercise_id"]), view["exercise_id"])
    print(f"   {name}: {summary['sessions']} sessions, {summary['pr_count']} PRs")
    print(f"   e1RM {summary['first_1rm']} → {summary['latest_1rm']} kg ({summary['progress_pct']:+.1f}%)")
    prs = view["progression"][view["progression"]["is_pr"]].tail(5)
    for _, row in prs.iterrows():
        print(f"   🏆 {row['date'].date()} | e1RM {row['one_rm']:.1f} | top set {row['top_set_weight']:.1f}×{row['top_set_reps']}")


def print_cardio(view: dict):
    print("\n🏃 Cardio")
    summary = view["summary"]
    if not summary["total_sessions"]:
        print("   No cardio data yet.")
        return
    print(f"   {summary['total_sessions']} sessions, {summary['total_distance_km']} km, avg {format_pace(summary['avg_pace'])}")
    for kind, holder in view["records"].items():
        if holder is None:
            continue
        print(f"   🏆 {get_pr_label(kind)}: {holder['date'].date()} | {holder['distance_km']:.1f} km"
              f" in {format_duration(holder['duration_min'])} ({format_pace(holder['pace'])})")


def print_body_parts(view: dict):
    print("\n💪 Body parts (last 4 weeks)")
    for d in view["distribution"]:
        print(f"   {d['name']:<10} {d['share']:>3}%")
    for insight in view["insights"]:
        print(f"   💡 {insight}")


def print_calendar(view: dict):
    cal = view["calendar"]
    summary = view["summary"]
    print(f"\n📅 {cal['year']}-{cal['month']:02d}")
    print(f"   Training days: {summary['total_sessions']} | Volume: {summary['total_volume']:,} kg"
          f" | Avg duration: {summary['avg_duration']} min")
    shades = " ░▒▓█"
    cells = [" "] * cal["leading_blanks"] + [shades[c["level"]] if c["has_session"] else "·" for c in cal["days"]]
    for i in range(0, len(cells), 7):
        print("   " + " ".join(cells[i:i + 7]))
    for _, row in view["weekly"].iterrows():
        print(f"   Week of {row['week_start'].date()}: {row['sessions']} sessions,"
              f" {row['total_sets']} sets, {row['total_volume']:,} kg")


def print_weight(view: dict):
    print("\n⚖️ Body weight")
    summary = view["summary"]
    if not summary["entries"]:
        print("   No weigh-ins yet.")
        return
    unit = view["unit"]
    print(f"   Current {summary['current']} {unit} ({summary['change']:+.1f} {unit} since first entry)")
    for entry in view["recent"]:
        print(f"   {entry['date'].date()}: {entry['weight']} {unit} (7-day avg {entry['rolling_avg']})")


def run_report(user_id: str, exercise_id: str = None, year: int = None, month: int = None, unit: str = "kg") -> dict:
    """Run every view for one user and print it. Returns the views by name."""
    print(f"📊 FitLog report — {user_id}")
    print(f"   {datetime.now().isoformat()}")

    views = {
        "streaks": streak_view(user_id),
        "strength": strength_view(user_id, exercise_id),
        "cardio": cardio_view(user_id),
        "body_parts": body_part_view(user_id),
        "calendar": calendar_view(user_id, year, month),
        "weight": weight_view(user_id, unit=unit),
    }
    print_streaks(views["streaks"])
    print_strength(views["strength"])
    print_cardio(views["cardio"])
    print_body_parts(views["body_parts"])
    print_calendar(views["calendar"])
    print_weight(views["weight"])
    return views


def main(args: list[str]) -> int:
    """CLI entry point; returns the process exit code."""
    if not args or args[0].startswith("--"):
        print(USAGE)
        return 2

    month_arg = _arg(args, "--month")
    year = month = None
    if month_arg:
        try:
            year, month = _parse_month(month_arg)
        except ValueError as e:
            print(f"❌ {e}")
            print(USAGE)
            return 2

    unit = _arg(args, "--unit", "kg")
    if unit not in UNIT_FACTORS:
        print(f"❌ Unknown unit: {unit}")
        print(USAGE)
        return 2

    results = run_report(
        args[0],
        exercise_id=_arg(args, "--exercise"),
        year=year,
        month=month,
        unit=unit,
    )

    errors = {name: v["error"] for name, v in results.items() if v.get("error")}
    if errors:
        print("\n⚠️  Errors occurred:")
        for name, err in errors.items():
            print(f"  {name}: {err}")
        return 1
    print("\nDone.")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
