"""Data classes for the study tracker domain model."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class StudyStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEWING = "REVIEWING"
    COMPLETED = "COMPLETED"


RESOURCE_TYPES = ("link", "video", "book", "pdf", "other")


@dataclass
class Resource:
    id: str
    topic_id: str
    type: str
    title: str
    url: str
    description: str = ""
    watched: bool = False
    video_notes: str = ""


@dataclass
class Topic:
    id: str
    area_id: str
    title: str
    description: str = ""
    status: StudyStatus = StudyStatus.PENDING
    notes: str = ""
    resources: list[Resource] = field(default_factory=list)
    time_spent: int = 0  # seconds
    last_studied: Optional[datetime] = None
    review_level: int = 0
    next_review_at: Optional[datetime] = None
    order_index: int = 0


@dataclass
class StudyArea:
    id: str
    name: str
    description: str = ""
    icon: str = ""
    topics: list[Topic] = field(default_factory=list)
    created_at: Optional[datetime] = None
    order_index: int = 0


@dataclass
class StudyLog:
    date: str  # YYYY-MM-DD
    count: int = 0
