from datetime import datetime, timedelta, UTC

import pytest

from progress_notes.db import init_db, reset_engine
from progress_notes.lifecycle import new_note
from progress_notes.models import Category, Priority


@pytest.fixture()
def notes_db(tmp_path, monkeypatch):
    monkeypatch.setenv("PROGRESS_NOTES_DB_PATH", str(tmp_path / "notes.sqlite"))
    reset_engine()
    init_db()
    yield tmp_path / "notes.sqlite"
    reset_engine()


@pytest.fixture()
def now():
    return datetime(2024, 5, 20, 12, 0, tzinfo=UTC)


@pytest.fixture()
def collection(now):
    return [
        new_note(
            title="Fix login bug",
            content="Empty passwords are accepted",
            tags=["frontend", "urgent"],
            priority=Priority.HIGH,
            category=Category.BUG,
            created_at=now - timedelta(days=2),
            updated_at=now - timedelta(days=2),
        ),
        new_note(
            title="api retries",
            content="Add backoff to the sync client",
            tags=["backend"],
            priority=Priority.LOW,
            category=Category.TASK,
            created_at=now - timedelta(days=10),
            updated_at=now - timedelta(days=1),
        ),
        new_note(
            title="Standup notes",
            content="Discussed the release checklist",
            tags=["team", "Frontend-Guild"],
            priority=Priority.MEDIUM,
            category=Category.MEETING,
            is_favorite=True,
            created_at=now - timedelta(hours=3),
            updated_at=now - timedelta(hours=3),
        ),
        new_note(
            title="Hooks review",
            content="useMemo only for expensive work",
            tags=["react"],
            priority=Priority.HIGH,
            category=Category.LEARNING,
            created_at=now - timedelta(days=30),
            updated_at=now - timedelta(days=30),
        ),
    ]
