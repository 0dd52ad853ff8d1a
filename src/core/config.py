"""
Configuration loaded from environment variables.

- Every setting has a default, so nothing needs to be set to run the engine or the tests.
- `SETTINGS` is read once at import. Call `load_settings()` again when the environment changed (e.g. in tests).
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Callable

ENV_PREFIX = "CHESS_PRACTICE_"


def _get(name: str, default: Any, cast: Callable[[str], Any] | None = None) -> Any:
    value = os.environ.get(f"{ENV_PREFIX}{name}")
    if value is None:
        return default
    return cast(value) if cast else value


@dataclass(frozen=True)
class Settings:
    # persistence
    database_url: str
    session_key: str

    # logging
    log_level: str

    # defaults for the PGN header lines
    pgn_event: str
    pgn_site: str
    pgn_white: str
    pgn_black: str


def load_settings() -> Settings:
    return Settings(
        database_url=_get("DATABASE_URL", "sqlite:///:memory:"),
        session_key=_get("SESSION_KEY", "chess-app-game-state"),
        log_level=_get("LOG_LEVEL", "WARNING", cast=str.upper),
        pgn_event=_get("PGN_EVENT", "Chess Practice Game"),
        pgn_site=_get("PGN_SITE", "Local"),
        pgn_white=_get("PGN_WHITE", "Player 1"),
        pgn_black=_get("PGN_BLACK", "Player 2"),
    )


SETTINGS = load_settings()


def configure_logging(level: str | None = None) -> None:
    """For applications embedding the engine. The library itself never configures logging."""
    level_name = level or SETTINGS.log_level
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
