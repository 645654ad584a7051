"""Leveled spaced-repetition scheduling for study topics.

A topic's review level is a saturating counter from 0 to 6. Every completed
review moves it one step (up on success, down on failure) and re-arms the
next review date with the interval of the level it lands on.
"""
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable, Optional

from edustream.models import Topic

# Days until the next review, indexed by review level.
REVIEW_INTERVALS = (1, 3, 7, 14, 30, 60, 120)
MIN_LEVEL = 0
MAX_LEVEL = 6

# Quiz scores at or above this share of the questions count as a successful review.
QUIZ_PASS_RATIO = 0.7

if len(REVIEW_INTERVALS) != MAX_LEVEL - MIN_LEVEL + 1:
    raise RuntimeError("REVIEW_INTERVALS must have one entry per review level")


def next_level(level: int, success: bool) -> int:
    if success:
        return min(level + 1, MAX_LEVEL)
    return max(level - 1, MIN_LEVEL)


def interval_days(level: int) -> int:
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValueError(f"review level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {level}")
    return REVIEW_INTERVALS[level]


def complete_review(topic: Topic, success: bool, now: Optional[datetime] = None) -> Topic:
    """Apply one review outcome to a topic.

    Args:
        topic: Topic being reviewed. It is not modified.
        success: Whether the topic was recalled successfully.
        now: Review time; defaults to the local wall clock.

    Returns:
        A copy of the topic with review_level, next_review_at and
        last_studied updated. Every other field is carried over as is.
    """
    if now is None:
        now = datetime.now()
    level = next_level(topic.review_level, success)
    return replace(
        topic,
        review_level=level,
        next_review_at=now + timedelta(days=interval_days(level)),
        last_studied=now,
    )


def is_review_due(topic: Topic, now: Optional[datetime] = None) -> bool:
    """A topic is due once its scheduled review time has been reached.

    Topics that have never completed a review have no schedule and are never due.
    """
    if topic.next_review_at is None:
        return False
    if now is None:
        now = datetime.now()
    return topic.next_review_at <= now


def quiz_outcome(correct: int, total: int) -> bool:
    """Map a quiz score onto a review outcome."""
    if total <= 0:
        return False
    if not 0 <= correct <= total:
        raise ValueError(f"correct answers must be between 0 and {total}, got {correct}")
    return correct / total >= QUIZ_PASS_RATIO


def average_review_level(topics: Iterable[Topic]) -> float:
    levels = [t.review_level for t in topics]
    if not levels:
        return 0.0
    return sum(levels) / len(levels)
