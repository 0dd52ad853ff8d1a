"""Implementation of SessionStore using SQLAlchemy"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import RepositoryError
from src.db.schema import DBSessionEntry

logger = logging.getLogger(__name__)


class SQLSessionStore:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def load(self, key: str) -> str | None:
        try:
            entry = self._fetch_entry(key)
        except SQLAlchemyError as exc:
            raise RepositoryError(f"Could not load session entry {key!r}") from exc
        return entry.value if entry else None

    def save(self, key: str, value: str) -> None:
        try:
            entry = self._fetch_entry(key)
            if entry is None:
                self.db.add(DBSessionEntry(key=key, value=value))
            else:
                entry.value = value
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RepositoryError(f"Could not save session entry {key!r}") from exc

    def clear(self, key: str) -> None:
        try:
            entry = self._fetch_entry(key)
            if entry is None:
                return
            self.db.delete(entry)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RepositoryError(f"Could not clear session entry {key!r}") from exc
        logger.debug("Cleared session entry %r", key)

    def _fetch_entry(self, key: str) -> DBSessionEntry | None:
        query = select(DBSessionEntry).where(DBSessionEntry.key == key)
        return self.db.scalar(query)
