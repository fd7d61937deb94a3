from __future__ import annotations
from contextlib import contextmanager
from pathlib import Path
from typing import Optional
import os

from sqlmodel import Field, Session, SQLModel, create_engine

_ENGINE = None
_ENGINE_URL = None  # current engine's URL, so a changed env var swaps it

DB_PATH_ENV = "PROGRESS_NOTES_DB_PATH"


class KeyValueItem(SQLModel, table=True):
    __tablename__ = "kv_item"

    key: str = Field(primary_key=True)
    value: str


def db_path() -> Path:
    env_path = os.getenv(DB_PATH_ENV)
    if env_path:
        return Path(env_path)
    return Path.home() / ".progress_notes" / "notes.db"


def _compute_url() -> str:
    path = db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{path}"


def get_engine():
    global _ENGINE, _ENGINE_URL
    url = _compute_url()
    if _ENGINE is None or _ENGINE_URL != url:
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = create_engine(url, echo=False)
        _ENGINE_URL = url
    return _ENGINE


def reset_engine():
    """For tests: drop the cached engine so a new PROGRESS_NOTES_DB_PATH is picked up."""
    global _ENGINE, _ENGINE_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _ENGINE_URL = None


def init_db():
    SQLModel.metadata.create_all(get_engine())


def get_session():
    return Session(get_engine(), expire_on_commit=False)


@contextmanager
def session_scope():
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_item(key: str) -> Optional[str]:
    with session_scope() as s:
        item = s.get(KeyValueItem, key)
        return item.value if item else None


def set_item(key: str, value: str) -> None:
    with session_scope() as s:
        item = s.get(KeyValueItem, key)
        if item is None:
            item = KeyValueItem(key=key, value=value)
        else:
            item.value = value
        s.add(item)


def remove_item(key: str) -> None:
    with session_scope() as s:
        item = s.get(KeyValueItem, key)
        if item is not None:
            s.delete(item)
