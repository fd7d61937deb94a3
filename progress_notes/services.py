from __future__ import annotations
from datetime import date
from pathlib import Path
from typing import Iterable, Optional
import logging

from .errors import NoteNotFound, StorageCorrupt, StorageUnavailable, ValidationFailed
from .lifecycle import apply_edit, new_note, normal_tags, toggle_favorite, validate_note
from .models import Category, Note, NoteStats, Priority, SearchFilters, SortOption
from .query import filter_notes, note_stats, sort_notes, unique_tags
from .store import CategoryStore, MemoryBackend, RecordStore, StorageStats, dump_notes, parse_notes

logger = logging.getLogger(__name__)


def sample_notes() -> list[Note]:
    return [
        new_note(
            title="Welcome to Progress Notes!",
            content=(
                "This is your personal notes app to track your internship journey. "
                "You can create, edit, and organize notes with priorities, categories, and tags.\n\n"
                "Try editing this note or creating a new one!"
            ),
            priority=Priority.HIGH,
            category=Category.LEARNING,
            tags=["welcome", "getting-started"],
            is_favorite=True,
        ),
        new_note(
            title="Bug: Login form validation",
            content=(
                "Found an issue with the login form where empty passwords are accepted. "
                "Need to add client-side validation before submitting.\n\n"
                "Steps to reproduce:\n1. Go to login page\n2. Enter email only\n"
                "3. Click submit\n4. Form submits without password"
            ),
            priority=Priority.HIGH,
            category=Category.BUG,
            tags=["frontend", "validation", "urgent"],
        ),
        new_note(
            title="Learning: React Hooks Best Practices",
            content=(
                "Key takeaways from today's code review:\n\n"
                "- Use useCallback for functions passed to child components\n"
                "- useMemo for expensive calculations only\n"
                "- Custom hooks for reusable stateful logic\n"
                "- Keep effects focused and use cleanup functions"
            ),
            priority=Priority.MEDIUM,
            category=Category.LEARNING,
            tags=["react", "hooks", "best-practices"],
            is_favorite=True,
        ),
    ]


def export_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"notes-backup-{day.isoformat()}.json"


class NotesController:
    """Owns the in-memory collection plus the active filters and sort.

    Every mutation writes the full collection to the store first and only
    then replaces the in-memory list, so a failed write leaves both as they were.
    """

    def __init__(self, store: Optional[RecordStore] = None):
        self.store = store if store is not None else RecordStore()
        self.notes: list[Note] = []
        self.filters = SearchFilters()
        self.sort = SortOption.NEWEST

    # ---------- loading ----------
    def load(self, seed: bool = True) -> list[str]:
        """Load the collection; returns user-facing warnings (possibly empty)."""
        warnings: list[str] = []
        if not self.store.is_available():
            logger.warning("Storage unavailable, notes will not be saved this session")
            warnings.append("Local storage is not available. Notes will not be saved.")
            self.store = RecordStore(MemoryBackend())

        try:
            self.notes = self.store.load()
        except StorageCorrupt:
            warnings.append("Stored notes could not be read and were ignored.")
            self.notes = []
        except StorageUnavailable:
            warnings.append("Failed to load your notes.")
            self.notes = []

        if seed and not self.notes and not warnings:
            seeded = sample_notes()
            self.store.save(seeded)
            self.notes = seeded
            logger.info("Seeded %d sample notes", len(seeded))
        return warnings

    # ---------- mutation ----------
    def _commit(self, notes: list[Note]) -> None:
        self.store.save(notes)
        self.notes = notes

    def find(self, note_id: str) -> Note:
        for n in self.notes:
            if n.id == note_id:
                return n
        raise NoteNotFound(note_id)

    def create(
        self,
        title: str,
        content: str,
        tags: Optional[Iterable[str]] = None,
        priority: Priority | str = Priority.MEDIUM,
        category: Category | str = Category.TASK,
        is_favorite: bool = False,
    ) -> Note:
        errors = validate_note(
            {"title": title, "content": content, "priority": priority, "category": category}
        )
        if errors:
            raise ValidationFailed(errors)
        note = new_note(
            title=title.strip(),
            content=content,
            tags=normal_tags(tags),
            priority=Priority(priority),
            category=Category(category),
            is_favorite=is_favorite,
        )
        self._commit([*self.notes, note])
        logger.debug("Created note %s", note.id)
        return note

    def edit(
        self,
        note_id: str,
        *,
        title: Optional[str] = None,
        content: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        priority: Optional[Priority | str] = None,
        category: Optional[Category | str] = None,
        is_favorite: Optional[bool] = None,
    ) -> Note:
        current = self.find(note_id)
        candidate = current.model_dump()
        for key, value in (
            ("title", title),
            ("content", content),
            ("priority", priority),
            ("category", category),
        ):
            if value is not None:
                candidate[key] = value
        errors = validate_note(candidate)
        if errors:
            raise ValidationFailed(errors)

        updated = apply_edit(
            current,
            title=None if title is None else title.strip(),
            content=content,
            tags=tags,
            priority=priority,
            category=category,
            is_favorite=is_favorite,
        )
        self._commit([updated if n.id == note_id else n for n in self.notes])
        logger.debug("Updated note %s", note_id)
        return updated

    def delete(self, note_id: str) -> Note:
        note = self.find(note_id)
        remaining = [n for n in self.notes if n.id != note_id]
        self.store.delete_note(note_id)
        self.notes = remaining
        logger.debug("Deleted note %s", note_id)
        return note

    def toggle_favorite(self, note_id: str) -> Note:
        updated = toggle_favorite(self.find(note_id))
        self._commit([updated if n.id == note_id else n for n in self.notes])
        return updated

    # ---------- query state ----------
    def set_filters(self, filters: SearchFilters) -> list[Note]:
        self.filters = filters
        return self.visible()

    def clear_filters(self) -> list[Note]:
        return self.set_filters(SearchFilters())

    def set_sort(self, option: SortOption | str) -> list[Note]:
        self.sort = SortOption(option)
        return self.visible()

    def visible(self) -> list[Note]:
        return sort_notes(filter_notes(self.notes, self.filters), self.sort)

    def stats(self) -> NoteStats:
        return note_stats(self.notes)

    def tags(self) -> list[str]:
        return unique_tags(self.notes)

    def categories(self) -> list[Category]:
        return CategoryStore(self.store.backend).all()

    def storage_stats(self) -> StorageStats:
        return self.store.stats()

    def clear(self) -> None:
        """Remove every stored note; the in-memory list follows only on success."""
        self.store.clear()
        self.notes = []
        logger.info("Cleared all notes")

    # ---------- export / import ----------
    def export(self, directory: Path, day: Optional[date] = None) -> Path:
        path = Path(directory) / export_filename(day)
        path.write_text(dump_notes(self.notes, indent=2), encoding="utf-8")
        logger.info("Exported %d notes to %s", len(self.notes), path)
        return path

    def import_file(self, path: Path) -> list[Note]:
        notes = parse_notes(Path(path).read_bytes(), source=f"notes from {path}")
        self.store.import_notes(notes)
        self.notes = notes
        logger.info("Imported %d notes from %s", len(notes), path)
        return notes
