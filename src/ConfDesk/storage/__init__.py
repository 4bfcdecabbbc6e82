"""Local storage layer: SQLite connection, migrations, preference and cache tables."""

from __future__ import annotations

from ConfDesk.storage.db import DatabaseManager
from ConfDesk.storage.kv import KeyValueStore, MemoryKeyValueStore, SqliteKeyValueStore
from ConfDesk.storage.migration import run_migrations
from ConfDesk.storage.participations import SqliteParticipationStore

__all__ = [
    "DatabaseManager",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SqliteKeyValueStore",
    "SqliteParticipationStore",
    "run_migrations",
]
