"""Dashboard progress and statistics."""
from datetime import datetime

from edustream.activity import get_rank, get_streak
from edustream.models import StudyStatus
from edustream.retention import average_review_level
from edustream.review import find_due_topics
from edustream.store import list_areas


def format_duration(seconds: int) -> str:
    hours, remainder = divmod(int(seconds), 3600)
    return f"{hours}h {remainder // 60}m"


def _progress(completed: int, total: int) -> int:
    if total == 0:
        return 0
    return round(completed / total * 100)


def get_area_progress(db_path: str) -> list[dict]:
    results = []
    for area in list_areas(db_path):
        total = len(area.topics)
        completed = sum(1 for t in area.topics if t.status == StudyStatus.COMPLETED)
        results.append({
            "area_id": area.id,
            "name": area.name,
            "icon": area.icon,
            "total": total,
            "completed": completed,
            "progress": _progress(completed, total),
        })
    return results


def get_dashboard_stats(db_path: str, now: datetime | None = None) -> dict:
    now = now or datetime.now()
    topics = [t for area in list_areas(db_path) for t in area.topics]
    completed = sum(1 for t in topics if t.status == StudyStatus.COMPLETED)
    time_spent = sum(t.time_spent for t in topics)
    return {
        "total_topics": len(topics),
        "completed_topics": completed,
        "overall_progress": _progress(completed, len(topics)),
        "time_spent": time_spent,
        "average_review_level": round(average_review_level(topics), 1),
        "due_reviews": len(find_due_topics(topics, now)),
        "streak": get_streak(db_path, now.date()),
        "rank": get_rank(time_spent),
    }
