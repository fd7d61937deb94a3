"""Record store: the whole note collection kept as one JSON blob.

Every write replaces the blob under a fixed key; there is no partial update.
The store talks to a small key-value backend (``get_item``/``set_item``/
``remove_item``), SQLite by default, so a different medium can be plugged in
without changing anything that consumes the notes.
"""
from __future__ import annotations
from typing import Iterable, Optional, Protocol
import logging

from pydantic import BaseModel, TypeAdapter, ValidationError

from . import db
from .errors import DeleteFailed, SaveFailed, StorageCorrupt, StorageUnavailable
from .models import Category, DEFAULT_CATEGORIES, Note

logger = logging.getLogger(__name__)

NOTES_STORAGE_KEY = "notes-app-data"
CATEGORIES_STORAGE_KEY = "notes-app-categories"
_PROBE_KEY = "storage-test"

_notes_adapter = TypeAdapter(list[Note])
_categories_adapter = TypeAdapter(list[Category])


class Backend(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


class SqliteBackend:
    """Key-value items in the local SQLite file (see ``db.db_path``)."""

    def __init__(self):
        self._ready = False

    def _ensure(self) -> None:
        if not self._ready:
            db.init_db()
            self._ready = True

    def get_item(self, key: str) -> Optional[str]:
        self._ensure()
        return db.get_item(key)

    def set_item(self, key: str, value: str) -> None:
        self._ensure()
        db.set_item(key, value)

    def remove_item(self, key: str) -> None:
        self._ensure()
        db.remove_item(key)


class MemoryBackend:
    """Process-local dict; nothing survives the session."""

    def __init__(self, items: Optional[dict[str, str]] = None):
        self.items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


def dump_notes(notes: Iterable[Note], indent: Optional[int] = None) -> str:
    return _notes_adapter.dump_json(list(notes), by_alias=True, indent=indent).decode("utf-8")


def parse_notes(raw: str | bytes, source: str = "stored notes") -> list[Note]:
    """Parse a serialized collection, reconstructing the timestamps.

    *source* names where *raw* came from in the error message.
    """
    try:
        return _notes_adapter.validate_json(raw)
    except ValidationError as exc:
        raise StorageCorrupt(f"Cannot read {source}: {exc.error_count()} error(s)") from exc


class StorageStats(BaseModel):
    total_notes: int
    storage_size: str
    favorite_notes: int
    notes_by_category: dict[Category, int]


class RecordStore:
    def __init__(self, backend: Optional[Backend] = None, key: str = NOTES_STORAGE_KEY):
        self.backend = backend if backend is not None else SqliteBackend()
        self.key = key

    def load(self) -> list[Note]:
        """Return the stored collection, or ``[]`` when nothing was ever saved.

        Raises ``StorageCorrupt`` when a blob exists but cannot be parsed and
        ``StorageUnavailable`` when the medium cannot be read at all.
        """
        try:
            raw = self.backend.get_item(self.key)
        except Exception as exc:
            logger.error("Failed to read notes from storage", exc_info=True)
            raise StorageUnavailable("Failed to read notes from storage") from exc
        if raw is None:
            return []
        try:
            return parse_notes(raw)
        except StorageCorrupt:
            logger.warning("Stored notes under %r are corrupt", self.key)
            raise

    def load_or_empty(self) -> list[Note]:
        try:
            return self.load()
        except StorageCorrupt:
            return []

    def save(self, notes: Iterable[Note]) -> None:
        payload = dump_notes(notes)
        try:
            self.backend.set_item(self.key, payload)
        except Exception as exc:
            logger.error("Failed to save notes", exc_info=True)
            raise SaveFailed("Failed to save notes") from exc

    def is_available(self) -> bool:
        try:
            self.backend.set_item(_PROBE_KEY, _PROBE_KEY)
            self.backend.remove_item(_PROBE_KEY)
            return True
        except Exception:
            logger.debug("Storage probe failed", exc_info=True)
            return False

    def get_note(self, note_id: str) -> Optional[Note]:
        return next((n for n in self.load_or_empty() if n.id == note_id), None)

    def save_note(self, note: Note) -> None:
        """Insert or replace one note, rewriting the whole collection."""
        try:
            notes = self.load_or_empty()
        except StorageUnavailable as exc:
            raise SaveFailed("Failed to save note") from exc
        for i, existing in enumerate(notes):
            if existing.id == note.id:
                notes[i] = note
                break
        else:
            notes.append(note)
        self.save(notes)

    def delete_note(self, note_id: str) -> None:
        try:
            notes = self.load_or_empty()
            self.save([n for n in notes if n.id != note_id])
        except (StorageUnavailable, SaveFailed) as exc:
            raise DeleteFailed("Failed to delete note") from exc

    def import_notes(self, notes: Iterable[Note]) -> None:
        self.save(notes)

    def clear(self) -> None:
        try:
            self.backend.remove_item(self.key)
        except Exception as exc:
            logger.error("Failed to clear notes", exc_info=True)
            raise DeleteFailed("Failed to clear notes") from exc

    def stats(self) -> StorageStats:
        notes = self.load_or_empty()
        by_category: dict[Category, int] = {}
        for n in notes:
            by_category[n.category] = by_category.get(n.category, 0) + 1
        size = len(dump_notes(notes))
        return StorageStats(
            total_notes=len(notes),
            storage_size=f"{size / 1024:.2f} KB",
            favorite_notes=sum(1 for n in notes if n.is_favorite),
            notes_by_category=by_category,
        )


class CategoryStore:
    """Recognized categories; the built-in five unless something else was stored."""

    def __init__(self, backend: Optional[Backend] = None, key: str = CATEGORIES_STORAGE_KEY):
        self.backend = backend if backend is not None else SqliteBackend()
        self.key = key

    def all(self) -> list[Category]:
        try:
            raw = self.backend.get_item(self.key)
            if raw is None:
                return list(DEFAULT_CATEGORIES)
            return _categories_adapter.validate_json(raw)
        except Exception:
            logger.warning("Failed to load categories, using defaults", exc_info=True)
            return list(DEFAULT_CATEGORIES)

    def add(self, category: Category) -> None:
        categories = self.all()
        if category in categories:
            return
        categories.append(category)
        try:
            self.backend.set_item(self.key, _categories_adapter.dump_json(categories).decode("utf-8"))
        except Exception:
            logger.error("Failed to add category %s", category.value, exc_info=True)
