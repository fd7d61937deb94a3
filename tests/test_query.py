from datetime import timedelta
import locale

import pytest

from progress_notes.lifecycle import new_note
from progress_notes.models import Category, Priority, SearchFilters, SortOption
from progress_notes.query import filter_notes, note_stats, sort_notes, unique_tags


def _titles(notes):
    return [n.title for n in notes]


def test_empty_filters_return_collection_unchanged(collection):
    assert filter_notes(collection, SearchFilters()) == collection
    assert filter_notes(collection, None) == collection
    assert filter_notes(collection, SearchFilters(query="   ", tags=[])) == collection


def test_query_searches_title_content_tags_category_and_priority(collection):
    assert _titles(filter_notes(collection, SearchFilters(query="LOGIN"))) == ["Fix login bug"]
    assert _titles(filter_notes(collection, SearchFilters(query="backoff"))) == ["api retries"]
    assert _titles(filter_notes(collection, SearchFilters(query="react"))) == ["Hooks review"]
    assert _titles(filter_notes(collection, SearchFilters(query="meeting"))) == ["Standup notes"]
    assert _titles(filter_notes(collection, SearchFilters(query="high"))) == [
        "Fix login bug",
        "Hooks review",
    ]


def test_structured_filters_are_anded(collection):
    high = filter_notes(collection, SearchFilters(priority=Priority.HIGH))
    assert _titles(high) == ["Fix login bug", "Hooks review"]

    high_bugs = filter_notes(collection, SearchFilters(priority="high", category=Category.BUG))
    assert _titles(high_bugs) == ["Fix login bug"]

    assert filter_notes(collection, SearchFilters(priority="low", category="bug")) == []


def test_favorite_filter_distinguishes_false_from_absent(collection):
    favs = filter_notes(collection, SearchFilters(is_favorite=True))
    assert len(favs) == 1
    assert favs[0] is collection[2]

    not_favs = filter_notes(collection, SearchFilters(is_favorite=False))
    assert len(not_favs) == 3
    assert len(filter_notes(collection, SearchFilters(is_favorite=None))) == 4


def test_tag_filter_is_substring_and_any_of(collection):
    front = filter_notes(collection, SearchFilters(tags=["front"]))
    # "frontend" and "Frontend-Guild" contain it, "backend" does not
    assert _titles(front) == ["Fix login bug", "Standup notes"]

    either = filter_notes(collection, SearchFilters(tags=["REACT", "back"]))
    assert _titles(either) == ["api retries", "Hooks review"]


def test_filter_preserves_order_and_only_keeps_matches(collection):
    reordered = list(reversed(collection))
    result = filter_notes(reordered, SearchFilters(priority="high"))
    assert _titles(result) == ["Hooks review", "Fix login bug"]
    assert all(n.priority is Priority.HIGH for n in result)


def test_sort_newest_oldest_are_reverses(collection):
    newest = sort_notes(collection, SortOption.NEWEST)
    assert _titles(newest) == ["Standup notes", "Fix login bug", "api retries", "Hooks review"]
    oldest = sort_notes(newest, "oldest")
    assert oldest == list(reversed(newest))


def test_sort_title_ignores_case(collection):
    assert _titles(sort_notes(collection, "title")) == [
        "api retries",
        "Fix login bug",
        "Hooks review",
        "Standup notes",
    ]


@pytest.fixture()
def utf8_collation():
    previous = locale.setlocale(locale.LC_COLLATE)
    for name in ("en_US.UTF-8", "en_US.utf8", "en_GB.UTF-8", "de_DE.UTF-8", "fr_FR.UTF-8"):
        try:
            locale.setlocale(locale.LC_COLLATE, name)
            break
        except locale.Error:
            continue
    else:
        pytest.skip("no UTF-8 locale with language collation installed")
    yield
    locale.setlocale(locale.LC_COLLATE, previous)


def test_sort_title_follows_locale_collation(utf8_collation):
    notes = [new_note(title=t, content="x") for t in ("Zebra", "Éclair", "eagle")]
    assert _titles(sort_notes(notes, "title")) == ["eagle", "Éclair", "Zebra"]


def test_sort_priority_is_stable_for_equal_ranks(collection):
    assert _titles(sort_notes(collection, SortOption.PRIORITY)) == [
        "Fix login bug",
        "Hooks review",
        "Standup notes",
        "api retries",
    ]
    swapped = [collection[3], collection[0]]
    assert _titles(sort_notes(swapped, "priority")) == ["Hooks review", "Fix login bug"]


def test_sort_does_not_mutate_input(collection):
    before = list(collection)
    sort_notes(collection, "title")
    sort_notes(collection, "priority")
    assert collection == before
    assert sort_notes(collection, "newest") == sort_notes(before, "newest")


def test_unique_tags_sorted_and_case_preserved(collection):
    extra = new_note(title="x", content="y", tags=["urgent", "team"])
    assert unique_tags([*collection, extra]) == [
        "Frontend-Guild",
        "backend",
        "frontend",
        "react",
        "team",
        "urgent",
    ]
    assert unique_tags([]) == []


def test_stats_counts(collection, now):
    stats = note_stats(collection, now=now)
    assert stats.total == 4
    assert stats.favorites == 1
    assert stats.priorities == {Priority.HIGH: 2, Priority.MEDIUM: 1, Priority.LOW: 1}
    assert stats.categories == {
        Category.BUG: 1,
        Category.TASK: 1,
        Category.MEETING: 1,
        Category.LEARNING: 1,
    }
    assert stats.recent_notes == 2
    assert stats.tags == 6


def test_stats_recent_window(now):
    notes = [
        new_note(title="today", content="a", created_at=now),
        new_note(title="yesterday", content="b", created_at=now - timedelta(days=1)),
        new_note(title="old", content="c", created_at=now - timedelta(days=10)),
    ]
    assert note_stats(notes, now=now).recent_notes == 2


def test_stats_empty_collection_keeps_all_priorities():
    stats = note_stats([])
    assert stats.total == 0
    assert stats.priorities == {Priority.HIGH: 0, Priority.MEDIUM: 0, Priority.LOW: 0}
    assert stats.categories == {}
