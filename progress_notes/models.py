from __future__ import annotations
from datetime import datetime, UTC
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Category(str, Enum):
    BUG = "bug"
    TASK = "task"
    LEARNING = "learning"
    MEETING = "meeting"
    FEEDBACK = "feedback"


class SortOption(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    TITLE = "title"
    PRIORITY = "priority"


PRIORITY_RANK: dict[Priority, int] = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}

PRIORITY_LABELS: dict[Priority, str] = {
    Priority.HIGH: "High Priority",
    Priority.MEDIUM: "Medium Priority",
    Priority.LOW: "Low Priority",
}

CATEGORY_LABELS: dict[Category, str] = {
    Category.BUG: "Bug",
    Category.TASK: "Task",
    Category.LEARNING: "Learning",
    Category.MEETING: "Meeting",
    Category.FEEDBACK: "Feedback",
}

DEFAULT_CATEGORIES: list[Category] = list(Category)


def utcnow() -> datetime:
    return datetime.now(UTC)


class Note(BaseModel):
    """A single tracked item.

    Attributes are snake_case; the stored and exported JSON uses the
    camelCase aliases (``isFavorite``, ``createdAt``, ``updatedAt``).
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    content: str = ""
    tags: list[str] = Field(default_factory=list)
    priority: Priority = Priority.MEDIUM
    category: Category = Category.TASK
    is_favorite: bool = Field(default=False, alias="isFavorite")
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # stored data written without an offset is taken as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class SearchFilters(BaseModel):
    """Independently optional constraints; ``None`` means unconstrained."""

    model_config = ConfigDict(populate_by_name=True)

    query: Optional[str] = None
    priority: Optional[Priority] = None
    category: Optional[Category] = None
    is_favorite: Optional[bool] = Field(default=None, alias="isFavorite")
    tags: Optional[list[str]] = None


class NoteStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    favorites: int
    priorities: dict[Priority, int]
    categories: dict[Category, int]
    recent_notes: int = Field(alias="recentNotes")
    tags: int
