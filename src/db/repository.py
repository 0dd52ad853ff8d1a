"""Protocol repository: where the serialized game state is kept between sessions (SQL table, browser storage, ...)"""

from typing import Protocol


class SessionStore(Protocol):
    """Persistence layer orchestration. Values are the serialized game history (JSON text)."""

    def load(self, key: str) -> str | None:
        """Stored value, if a record exists for the key."""
        ...

    def save(self, key: str, value: str) -> None:
        """Create or overwrite the record for the key."""
        ...

    def clear(self, key: str) -> None:
        """Remove the record for the key (no error if there is none)."""
        ...
