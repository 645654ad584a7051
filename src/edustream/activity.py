"""Study activity log, consistency streaks and time-based rank."""
from datetime import date, timedelta
from typing import Iterable

from loguru import logger

from edustream.db import get_connection
from edustream.models import StudyLog

# (upper bound in hours, rank name), checked in order.
RANK_TIERS = [
    (5, "Novice"),
    (20, "Apprentice"),
    (50, "Scholar"),
    (100, "Master"),
]
TOP_RANK = "Grand Master"


def log_activity(db_path: str, day: date | None = None) -> None:
    """Count one study event on the given day (today by default)."""
    day = (day or date.today()).isoformat()
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO study_logs (date, count) VALUES (?, 1) ON CONFLICT(date) DO UPDATE SET count = count + 1",
        (day,),
    )
    conn.commit()
    conn.close()
    logger.debug(f"Logged study activity for {day}")


def get_logs(db_path: str, limit: int = 100) -> list[StudyLog]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT date, count FROM study_logs ORDER BY date DESC LIMIT ?", (limit,)
    ).fetchall()
    conn.close()
    return [StudyLog(date=r["date"], count=r["count"]) for r in rows]


def calc_streak(days: Iterable[date], today: date | None = None) -> int:
    """Count consecutive study days ending today.

    A streak that ended yesterday is still alive (today may just not have
    started yet). With no activity on either day the streak is 0.
    """
    today = today or date.today()
    studied = set(days)
    if today in studied:
        current = today
    elif today - timedelta(days=1) in studied:
        current = today - timedelta(days=1)
    else:
        return 0
    streak = 0
    while current in studied:
        streak += 1
        current -= timedelta(days=1)
    return streak


def get_streak(db_path: str, today: date | None = None) -> int:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT date FROM study_logs WHERE count > 0").fetchall()
    conn.close()
    return calc_streak((date.fromisoformat(r["date"]) for r in rows), today)


def get_rank(total_seconds: int) -> str:
    hours = total_seconds / 3600
    for limit, name in RANK_TIERS:
        if hours < limit:
            return name
    return TOP_RANK


def heatmap(db_path: str, days: int = 84, today: date | None = None) -> list[StudyLog]:
    """Daily activity counts for the last `days` days, oldest first, zero-filled."""
    today = today or date.today()
    start = today - timedelta(days=days - 1)
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT date, count FROM study_logs WHERE date BETWEEN ? AND ?",
        (start.isoformat(), today.isoformat()),
    ).fetchall()
    conn.close()
    counts = {r["date"]: r["count"] for r in rows}
    result = []
    for offset in range(days):
        day = (start + timedelta(days=offset)).isoformat()
        result.append(StudyLog(date=day, count=counts.get(day, 0)))
    return result
