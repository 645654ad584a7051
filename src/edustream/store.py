"""Persistence for study areas, topics and their resources."""
import random
import sqlite3
import uuid
from datetime import datetime

from loguru import logger

from edustream.db import get_connection
from edustream.models import RESOURCE_TYPES, Resource, StudyArea, StudyStatus, Topic

AREA_ICONS = ["🧠", "💻", "🌍", "📊", "🔬", "🎨", "📜", "⚖️", "🏔️", "🧬", "🎼", "🚀"]
DEFAULT_AREA_DESCRIPTION = "Master knowledge management."

# Columns a caller may replace through update_topic.
UPDATABLE_TOPIC_FIELDS = (
    "title", "description", "notes", "status", "time_spent",
    "last_studied", "review_level", "next_review_at",
)


class AreaNotFoundError(LookupError):
    pass


class TopicNotFoundError(LookupError):
    pass


class ResourceNotFoundError(LookupError):
    pass


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def _to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _from_iso(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _row_to_resource(row: sqlite3.Row) -> Resource:
    return Resource(
        id=row["id"],
        topic_id=row["topic_id"],
        type=row["type"],
        title=row["title"],
        url=row["url"],
        description=row["description"] or "",
        watched=bool(row["watched"]),
        video_notes=row["video_notes"] or "",
    )


def _row_to_topic(row: sqlite3.Row, resources: list[Resource] | None = None) -> Topic:
    return Topic(
        id=row["id"],
        area_id=row["area_id"],
        title=row["title"],
        description=row["description"] or "",
        status=StudyStatus(row["status"]),
        notes=row["notes"] or "",
        resources=resources or [],
        time_spent=row["time_spent"] or 0,
        last_studied=_from_iso(row["last_studied"]),
        review_level=row["review_level"] or 0,
        next_review_at=_from_iso(row["next_review_at"]),
        order_index=row["order_index"] or 0,
    )


def _load_topics(conn: sqlite3.Connection, rows: list) -> list[Topic]:
    topics = []
    for row in rows:
        resources = conn.execute(
            "SELECT * FROM resources WHERE topic_id = ? ORDER BY rowid", (row["id"],)
        ).fetchall()
        topics.append(_row_to_topic(row, [_row_to_resource(r) for r in resources]))
    return topics


def _row_to_area(conn: sqlite3.Connection, row: sqlite3.Row) -> StudyArea:
    topic_rows = conn.execute(
        "SELECT * FROM topics WHERE area_id = ? ORDER BY order_index ASC", (row["id"],)
    ).fetchall()
    return StudyArea(
        id=row["id"],
        name=row["name"],
        description=row["description"] or "",
        icon=row["icon"] or "",
        topics=_load_topics(conn, topic_rows),
        created_at=_from_iso(row["created_at"]),
        order_index=row["order_index"] or 0,
    )


# --- Areas ---


def create_area(
    db_path: str,
    name: str,
    description: str = DEFAULT_AREA_DESCRIPTION,
    icon: str | None = None,
) -> StudyArea:
    conn = get_connection(db_path)
    next_index = conn.execute(
        "SELECT COALESCE(MAX(order_index) + 1, 0) FROM study_areas"
    ).fetchone()[0]
    area = StudyArea(
        id=_new_id(),
        name=name,
        description=description,
        icon=icon or random.choice(AREA_ICONS),
        created_at=datetime.now(),
        order_index=next_index,
    )
    conn.execute(
        "INSERT INTO study_areas (id, name, description, icon, created_at, order_index) VALUES (?, ?, ?, ?, ?, ?)",
        (area.id, area.name, area.description, area.icon, _to_iso(area.created_at), area.order_index),
    )
    conn.commit()
    conn.close()
    logger.info(f"Created area {area.name!r} ({area.id})")
    return area


def list_areas(db_path: str) -> list[StudyArea]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM study_areas ORDER BY order_index ASC, created_at DESC"
    ).fetchall()
    areas = [_row_to_area(conn, row) for row in rows]
    conn.close()
    return areas


def get_area(db_path: str, area_id: str) -> StudyArea | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM study_areas WHERE id = ?", (area_id,)).fetchone()
    area = _row_to_area(conn, row) if row else None
    conn.close()
    return area


def _reorder(ids: list[str], item_id: str, new_index: int) -> list[tuple[int, str]]:
    ids.remove(item_id)
    new_index = max(0, min(new_index, len(ids)))
    ids.insert(new_index, item_id)
    return [(index, i) for index, i in enumerate(ids)]


def move_area(db_path: str, area_id: str, new_index: int) -> None:
    """Move an area to a new position in the area list."""
    conn = get_connection(db_path)
    ids = [
        r["id"] for r in conn.execute(
            "SELECT id FROM study_areas ORDER BY order_index ASC, created_at DESC"
        ).fetchall()
    ]
    if area_id not in ids:
        conn.close()
        raise AreaNotFoundError(area_id)
    conn.executemany(
        "UPDATE study_areas SET order_index = ? WHERE id = ?", _reorder(ids, area_id, new_index)
    )
    conn.commit()
    conn.close()


def delete_area(db_path: str, area_id: str) -> None:
    """Delete an area; its topics and their resources go with it."""
    conn = get_connection(db_path)
    conn.execute("DELETE FROM study_areas WHERE id = ?", (area_id,))
    conn.commit()
    conn.close()
    logger.info(f"Deleted area {area_id}")


# --- Topics ---


def create_topic(db_path: str, area_id: str, title: str, description: str = "") -> Topic:
    """Append a new, never-reviewed topic to an area."""
    return create_topics(db_path, area_id, [(title, description)])[0]


def create_topics(db_path: str, area_id: str, items: list[tuple[str, str]]) -> list[Topic]:
    """Bulk-create topics from (title, description) pairs, e.g. from a study plan."""
    conn = get_connection(db_path)
    if not conn.execute("SELECT 1 FROM study_areas WHERE id = ?", (area_id,)).fetchone():
        conn.close()
        raise AreaNotFoundError(area_id)
    next_index = conn.execute(
        "SELECT COALESCE(MAX(order_index) + 1, 0) FROM topics WHERE area_id = ?", (area_id,)
    ).fetchone()[0]
    created = []
    for offset, (title, description) in enumerate(items):
        topic = Topic(
            id=_new_id(),
            area_id=area_id,
            title=title,
            description=description,
            order_index=next_index + offset,
        )
        conn.execute(
            """INSERT INTO topics (id, area_id, title, description, status, review_level, order_index)
            VALUES (?, ?, ?, ?, ?, 0, ?)""",
            (topic.id, area_id, topic.title, topic.description, topic.status.value, topic.order_index),
        )
        created.append(topic)
    conn.commit()
    conn.close()
    logger.info(f"Created {len(created)} topic(s) in area {area_id}")
    return created


def get_topic(db_path: str, topic_id: str) -> Topic | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM topics WHERE id = ?", (topic_id,)).fetchone()
    topic = _load_topics(conn, [row])[0] if row else None
    conn.close()
    return topic


def list_topics(db_path: str, area_id: str | None = None) -> list[Topic]:
    conn = get_connection(db_path)
    if area_id is None:
        rows = conn.execute("SELECT * FROM topics ORDER BY area_id, order_index").fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM topics WHERE area_id = ? ORDER BY order_index", (area_id,)
        ).fetchall()
    topics = _load_topics(conn, rows)
    conn.close()
    return topics


def update_topic(db_path: str, topic_id: str, **fields) -> None:
    """Replace the supplied topic fields, leaving every other column untouched."""
    unknown = set(fields) - set(UPDATABLE_TOPIC_FIELDS)
    if unknown:
        raise ValueError(f"Cannot update topic field(s): {', '.join(sorted(unknown))}")
    if not fields:
        return
    values = []
    for name, value in fields.items():
        if isinstance(value, datetime):
            value = _to_iso(value)
        elif isinstance(value, StudyStatus):
            value = value.value
        values.append(value)
    assignments = ", ".join(f"{name} = ?" for name in fields)
    conn = get_connection(db_path)
    try:
        cursor = conn.execute(
            f"UPDATE topics SET {assignments} WHERE id = ?", (*values, topic_id)
        )
        if cursor.rowcount == 0:
            raise TopicNotFoundError(topic_id)
        conn.commit()
    finally:
        conn.close()


def save_review(db_path: str, topic: Topic) -> None:
    """Persist the scheduling fields of a reviewed topic."""
    update_topic(
        db_path,
        topic.id,
        review_level=topic.review_level,
        next_review_at=topic.next_review_at,
        last_studied=topic.last_studied,
    )
    logger.debug(f"Saved review state for topic {topic.id}: level {topic.review_level}")


def set_status(db_path: str, topic_id: str, status: StudyStatus) -> None:
    update_topic(db_path, topic_id, status=StudyStatus(status))


def update_notes(db_path: str, topic_id: str, notes: str) -> None:
    update_topic(db_path, topic_id, notes=notes)


def add_time_spent(db_path: str, topic_id: str, seconds: int) -> int:
    """Add tracked study seconds to a topic and return the new total."""
    if seconds < 0:
        raise ValueError("seconds must not be negative")
    conn = get_connection(db_path)
    cursor = conn.execute(
        "UPDATE topics SET time_spent = time_spent + ? WHERE id = ?", (seconds, topic_id)
    )
    if cursor.rowcount == 0:
        conn.close()
        raise TopicNotFoundError(topic_id)
    conn.commit()
    total = conn.execute("SELECT time_spent FROM topics WHERE id = ?", (topic_id,)).fetchone()[0]
    conn.close()
    return total


def move_topic(db_path: str, topic_id: str, new_index: int) -> None:
    """Move a topic to a new position within its area."""
    conn = get_connection(db_path)
    row = conn.execute("SELECT area_id FROM topics WHERE id = ?", (topic_id,)).fetchone()
    if not row:
        conn.close()
        raise TopicNotFoundError(topic_id)
    ids = [
        r["id"] for r in conn.execute(
            "SELECT id FROM topics WHERE area_id = ? ORDER BY order_index", (row["area_id"],)
        ).fetchall()
    ]
    conn.executemany(
        "UPDATE topics SET order_index = ? WHERE id = ?", _reorder(ids, topic_id, new_index)
    )
    conn.commit()
    conn.close()


def delete_topic(db_path: str, topic_id: str) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM topics WHERE id = ?", (topic_id,))
    conn.commit()
    conn.close()


# --- Resources ---


def add_resource(
    db_path: str,
    topic_id: str,
    type: str,
    title: str,
    url: str,
    description: str = "",
) -> Resource:
    if type not in RESOURCE_TYPES:
        raise ValueError(f"Unknown resource type: {type}")
    resource = Resource(
        id=_new_id(), topic_id=topic_id, type=type, title=title, url=url, description=description,
    )
    conn = get_connection(db_path)
    try:
        conn.execute(
            """INSERT INTO resources (id, topic_id, type, title, url, description, watched, video_notes)
            VALUES (?, ?, ?, ?, ?, ?, 0, '')""",
            (resource.id, topic_id, type, title, url, description),
        )
    except sqlite3.IntegrityError as e:
        conn.close()
        raise TopicNotFoundError(topic_id) from e
    conn.commit()
    conn.close()
    return resource


def set_resource_watched(db_path: str, resource_id: str, watched: bool = True) -> None:
    conn = get_connection(db_path)
    conn.execute("UPDATE resources SET watched = ? WHERE id = ?", (int(watched), resource_id))
    conn.commit()
    conn.close()


def update_video_notes(db_path: str, resource_id: str, notes: str) -> None:
    conn = get_connection(db_path)
    cursor = conn.execute("UPDATE resources SET video_notes = ? WHERE id = ?", (notes, resource_id))
    if cursor.rowcount == 0:
        conn.close()
        raise ResourceNotFoundError(resource_id)
    conn.commit()
    conn.close()


def delete_resource(db_path: str, resource_id: str) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM resources WHERE id = ?", (resource_id,))
    conn.commit()
    conn.close()
