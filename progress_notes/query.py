"""Filtering, sorting and statistics over an in-memory note collection.

Every function here is pure: inputs are never mutated and the same inputs
always give the same output.
"""
from __future__ import annotations
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence
import locale

from .models import (
    Category,
    Note,
    NoteStats,
    Priority,
    PRIORITY_RANK,
    SearchFilters,
    SortOption,
    utcnow,
)

RECENT_WINDOW = timedelta(days=7)


def searchable_text(note: Note) -> str:
    return " ".join(
        [note.title, note.content, *note.tags, note.category.value, note.priority.value]
    ).lower()


def matches(note: Note, filters: SearchFilters) -> bool:
    """True when *note* satisfies every constraint set in *filters*."""
    query = (filters.query or "").strip().lower()
    if query and query not in searchable_text(note):
        return False

    if filters.priority is not None and note.priority != filters.priority:
        return False

    if filters.category is not None and note.category != filters.category:
        return False

    if filters.is_favorite is not None and note.is_favorite != filters.is_favorite:
        return False

    if filters.tags:
        wanted = [t.lower() for t in filters.tags]
        note_tags = [t.lower() for t in note.tags]
        if not any(w in t for w in wanted for t in note_tags):
            return False

    return True


def filter_notes(notes: Iterable[Note], filters: Optional[SearchFilters] = None) -> list[Note]:
    if filters is None:
        return list(notes)
    return [n for n in notes if matches(n, filters)]


def _title_key(note: Note) -> tuple[str, str]:
    return locale.strxfrm(note.title.casefold()), locale.strxfrm(note.title)


def sort_notes(notes: Iterable[Note], option: SortOption | str = SortOption.NEWEST) -> list[Note]:
    """Return a new, stably sorted list; *notes* is left untouched."""
    option = SortOption(option)
    match option:
        case SortOption.NEWEST:
            return sorted(notes, key=lambda n: n.created_at, reverse=True)
        case SortOption.OLDEST:
            return sorted(notes, key=lambda n: n.created_at)
        case SortOption.TITLE:
            return sorted(notes, key=_title_key)
        case SortOption.PRIORITY:
            # negated rank instead of reverse=True keeps equal ranks in input order
            return sorted(notes, key=lambda n: -PRIORITY_RANK[n.priority])


def unique_tags(notes: Iterable[Note]) -> list[str]:
    return sorted({t for n in notes for t in n.tags})


def note_stats(notes: Sequence[Note], now: Optional[datetime] = None) -> NoteStats:
    """Counts over *notes*.

    ``recent_notes`` counts notes created strictly after ``now - 7 days``.
    Priorities always carry all three levels; categories only those present.
    """
    now = now or utcnow()
    week_ago = now - RECENT_WINDOW

    priorities = {p: 0 for p in Priority}
    categories: dict[Category, int] = {}
    for n in notes:
        priorities[n.priority] += 1
        categories[n.category] = categories.get(n.category, 0) + 1

    return NoteStats(
        total=len(notes),
        favorites=sum(1 for n in notes if n.is_favorite),
        priorities=priorities,
        categories=categories,
        recent_notes=sum(1 for n in notes if n.created_at > week_ago),
        tags=len(unique_tags(notes)),
    )
