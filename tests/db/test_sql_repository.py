"""Unit tests for src/db/sql_repository.py"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from src.core.exceptions import RepositoryError
from src.db.schema import DBSessionEntry
from src.db.sql_repository import SQLSessionStore

KEY = "chess-app-game-state"


def test_load_unknown_key(db_session_repo: Session) -> None:
    """Should return None if nothing was stored under the key. With an empty database, any key will do."""
    store = SQLSessionStore(db_session_repo)
    assert store.load(KEY) is None


def test_save_then_load(db_session_repo: Session) -> None:
    store = SQLSessionStore(db_session_repo)
    store.save(KEY, '{"moveHistory": []}')
    assert store.load(KEY) == '{"moveHistory": []}'
    assert store.load("some-other-key") is None


def test_save_overwrites(db_session_repo: Session) -> None:
    store = SQLSessionStore(db_session_repo)
    store.save(KEY, "first")
    store.save(KEY, "second")
    assert store.load(KEY) == "second"
    assert db_session_repo.query(DBSessionEntry).count() == 1


def test_updated_at_changes(db_session_repo: Session) -> None:
    store = SQLSessionStore(db_session_repo)
    store.save(KEY, "first")
    entry = db_session_repo.get(DBSessionEntry, KEY)
    created = entry.created_at
    store.save(KEY, "second")
    db_session_repo.refresh(entry)
    assert entry.created_at == created
    assert entry.updated_at >= created


def test_clear(db_session_repo: Session) -> None:
    store = SQLSessionStore(db_session_repo)
    store.save(KEY, "value")
    store.clear(KEY)
    assert store.load(KEY) is None
    # clearing twice is fine
    store.clear(KEY)


def test_sessions_share_the_database(db_session_repo: Session, db_session_shared: Session) -> None:
    """Mock real setup: two sessions connected to the same engine see each other's writes."""
    SQLSessionStore(db_session_repo).save(KEY, "value")
    assert SQLSessionStore(db_session_shared).load(KEY) == "value"


@pytest.mark.parametrize("method, args", [("load", (KEY,)), ("save", (KEY, "value")), ("clear", (KEY,))])
def test_database_errors_are_wrapped(db_session_repo: Session, method: str, args: tuple) -> None:
    store = SQLSessionStore(db_session_repo)
    error = OperationalError("SELECT", {}, Exception("database is locked"))
    with patch.object(store, "_fetch_entry", side_effect=error):
        with pytest.raises(RepositoryError) as exc_info:
            getattr(store, method)(*args)
    assert exc_info.value.__cause__ is error


def test_failed_commit_rolls_back(db_session_repo: Session) -> None:
    store = SQLSessionStore(db_session_repo)
    error = OperationalError("COMMIT", {}, Exception("disk full"))
    with (
        patch.object(db_session_repo, "commit", side_effect=error),
        patch.object(db_session_repo, "rollback") as rollback,
    ):
        with pytest.raises(RepositoryError):
            store.save(KEY, "value")
    rollback.assert_called_once()
