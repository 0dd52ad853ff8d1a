"""Generate database session"""

from typing import Generator

from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import SETTINGS
from src.db.schema import Base


def build_engine(url: str = SETTINGS.database_url) -> Engine:
    """
    Engine with all tables created.
    An in-memory SQLite database only lives as long as its connection, so all sessions share a single one.
    """
    if url.startswith("sqlite") and ":memory:" in url:
        engine = create_engine(
            url, connect_args={"check_same_thread": False}, poolclass=StaticPool
        )
    else:
        engine = create_engine(url)

    # Ensure all tables are created
    Base.metadata.create_all(bind=engine)
    return engine


engine = build_engine()
SessionLocal = sessionmaker(bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
