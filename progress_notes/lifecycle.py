from __future__ import annotations
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional
import re
import secrets
import string
import time

from .models import Category, Note, Priority, utcnow

_TAG_SPLIT_RE = re.compile(r"[,\s]+")
_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_id() -> str:
    """``note_<epoch millis>_<9 random base-36 chars>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"note_{int(time.time() * 1000)}_{suffix}"


def parse_tags(raw: Optional[str]) -> list[str]:
    """Split on commas and/or whitespace, lower-case, drop empties. Keeps duplicates."""
    if not raw or not raw.strip():
        return []
    pieces = (p.strip() for p in _TAG_SPLIT_RE.split(raw))
    return [p.lower() for p in pieces if p]


def normal_tags(tags: Optional[Iterable[str]]) -> list[str]:
    if not tags:
        return []
    return [t.strip().lower() for t in tags if t and t.strip()]


def _is_member(enum_cls, value: Any) -> bool:
    if value is None:
        return False
    try:
        enum_cls(value)
    except ValueError:
        return False
    return True


def validate_note(candidate: Mapping[str, Any] | Note) -> list[str]:
    """Return one message per violated rule; empty when the candidate is valid."""
    if isinstance(candidate, Note):
        candidate = candidate.model_dump()
    errors: list[str] = []

    if not str(candidate.get("title") or "").strip():
        errors.append("Title is required")
    if not str(candidate.get("content") or "").strip():
        errors.append("Content is required")
    if not _is_member(Priority, candidate.get("priority")):
        errors.append("Priority is required")
    if not _is_member(Category, candidate.get("category")):
        errors.append("Category is required")

    return errors


def new_note(**overrides: Any) -> Note:
    """Build a note with defaults (medium, task, not favorite, no tags), both timestamps now."""
    now = utcnow()
    data: dict[str, Any] = {
        "id": generate_id(),
        "title": "",
        "content": "",
        "tags": [],
        "priority": Priority.MEDIUM,
        "category": Category.TASK,
        "is_favorite": False,
        "created_at": now,
        "updated_at": now,
    }
    data.update(overrides)
    return Note(**data)


def apply_edit(
    note: Note,
    *,
    title: Optional[str] = None,
    content: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
    priority: Optional[Priority | str] = None,
    category: Optional[Category | str] = None,
    is_favorite: Optional[bool] = None,
) -> Note:
    """Copy of *note* with the given fields replaced and ``updated_at`` bumped.

    ``id`` and ``created_at`` are never touched.
    """
    update: dict[str, Any] = {"updated_at": max(utcnow(), note.created_at)}
    if title is not None:
        update["title"] = title
    if content is not None:
        update["content"] = content
    if tags is not None:
        update["tags"] = normal_tags(tags)
    if priority is not None:
        update["priority"] = Priority(priority)
    if category is not None:
        update["category"] = Category(category)
    if is_favorite is not None:
        update["is_favorite"] = is_favorite
    return note.model_copy(update=update)


def toggle_favorite(note: Note) -> Note:
    return note.model_copy(
        update={"is_favorite": not note.is_favorite, "updated_at": max(utcnow(), note.created_at)}
    )


def format_tags_for_display(tags: Iterable[str]) -> list[str]:
    return [t[:1].upper() + t[1:].lower() for t in tags]


def truncate_text(text: str, max_length: int = 150) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."


def format_date(value: datetime, now: Optional[datetime] = None) -> str:
    now = now or utcnow()
    days = (now - value).days
    if days == 0:
        return value.astimezone().strftime("%H:%M")
    if days == 1:
        return "Yesterday"
    if 1 < days < 7:
        return f"{days} days ago"
    return value.astimezone().date().isoformat()
