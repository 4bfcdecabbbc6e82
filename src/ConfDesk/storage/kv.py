"""String key/value substrates backing the preference store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from ConfDesk.utils.log import log

if TYPE_CHECKING:
    from ConfDesk.storage.db import DatabaseManager


class KeyValueStore(Protocol):
    """Minimal persistence contract: string key to string value."""

    def get(self, key: str) -> str | None:
        """Return the stored value or None."""
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        """Persist ``value`` under ``key``, replacing any previous value."""
        raise NotImplementedError


class MemoryKeyValueStore:
    """Process-local substrate, used by tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class SqliteKeyValueStore:
    """Substrate stored in the ``preferences`` table of the local database."""

    def __init__(self, db_manager: DatabaseManager) -> None:
        log.debug("Initializing SqliteKeyValueStore")
        self.conn = db_manager.get_connection()

    def get(self, key: str) -> str | None:
        row = self.conn.execute("SELECT value FROM preferences WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        self.conn.execute(
            """
            INSERT INTO preferences (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET
              value = excluded.value,
              updated_at = CAST(strftime('%s','now') AS INTEGER)
            """,
            (key, value),
        )
