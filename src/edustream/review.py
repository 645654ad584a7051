"""Due-review lookup and the review completion workflow."""
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from loguru import logger

from edustream.activity import log_activity
from edustream.models import Topic
from edustream.retention import complete_review, is_review_due, quiz_outcome
from edustream.store import TopicNotFoundError, get_topic, list_topics, save_review


@dataclass
class ReviewCommand:
    topic_id: str
    success: bool


@dataclass
class ReviewResult:
    topic: Topic
    persisted: bool = True
    error: Optional[str] = None


def find_due_topics(topics: Iterable[Topic], now: Optional[datetime] = None) -> list[Topic]:
    """Topics whose review is due, most overdue first."""
    now = now or datetime.now()
    due = [t for t in topics if is_review_due(t, now)]
    return sorted(due, key=lambda t: t.next_review_at)


def get_due_topics(db_path: str, now: Optional[datetime] = None) -> list[Topic]:
    return find_due_topics(list_topics(db_path), now)


def get_upcoming_reviews(db_path: str, days: int = 7, now: Optional[datetime] = None) -> list[Topic]:
    """Scheduled topics that are not due yet but will be within `days` days."""
    now = now or datetime.now()
    horizon = now + timedelta(days=days)
    upcoming = [
        t for t in list_topics(db_path)
        if t.next_review_at is not None and now < t.next_review_at <= horizon
    ]
    return sorted(upcoming, key=lambda t: t.next_review_at)


def complete_topic_review(
    db_path: str,
    command: ReviewCommand,
    now: Optional[datetime] = None,
    notify: Optional[Callable[[str], None]] = None,
) -> ReviewResult:
    """Apply a review outcome to a stored topic and try to persist it.

    The rescheduled topic is returned even if saving fails; the failure is
    logged, handed to `notify` and reported on the result. Nothing is rolled
    back or retried.
    """
    topic = get_topic(db_path, command.topic_id)
    if topic is None:
        raise TopicNotFoundError(command.topic_id)
    updated = complete_review(topic, command.success, now)
    logger.info(
        f"Review of {topic.title!r}: {'success' if command.success else 'failure'}, "
        f"level {topic.review_level} -> {updated.review_level}, next {updated.next_review_at:%Y-%m-%d}"
    )
    try:
        save_review(db_path, updated)
    except (sqlite3.Error, TopicNotFoundError) as e:
        message = f"Could not save review for {topic.title!r}: {e}"
        logger.warning(message)
        if notify is not None:
            notify(message)
        return ReviewResult(topic=updated, persisted=False, error=str(e))
    # The schedule is already stored; a missing log entry only affects streaks.
    try:
        log_activity(db_path, updated.last_studied.date())
    except sqlite3.Error as e:
        logger.warning(f"Could not log study activity for {topic.title!r}: {e}")
    return ReviewResult(topic=updated)


def complete_quiz_review(
    db_path: str,
    topic_id: str,
    correct: int,
    total: int,
    now: Optional[datetime] = None,
    notify: Optional[Callable[[str], None]] = None,
) -> ReviewResult:
    """Grade a quiz score and record it as a review of the topic."""
    success = quiz_outcome(correct, total)
    logger.debug(f"Quiz {correct}/{total} on topic {topic_id} graded as {'pass' if success else 'fail'}")
    return complete_topic_review(db_path, ReviewCommand(topic_id, success), now, notify)
