"""SQLite database utilities for the local preference and cache tables."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from ConfDesk.storage.migration import run_migrations


class DatabaseManager:
    """Owner of the local SQLite connection.

    One manager is created at application start and handed to the stores
    that need it. Supports the context manager protocol for cleanup.
    """

    def __init__(self, db_path: Path) -> None:
        """Open (creating if needed) the database and bring its schema up to date.

        Args:
            db_path: Absolute path or project-relative path to database file.
        """
        self.db_path = db_path
        self.conn: sqlite3.Connection | None = ensure_db(db_path)
        run_migrations(self.conn)

    def get_connection(self) -> sqlite3.Connection:
        """Get the shared database connection.

        Raises:
            RuntimeError: If the manager was already closed.
        """
        if self.conn is None:
            raise RuntimeError(f"Database already closed: {self.db_path}")
        return self.conn

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def __enter__(self) -> DatabaseManager:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def ensure_db(db_path: Path) -> sqlite3.Connection:
    """Ensure database file exists and return an autocommit connection.

    Every statement outside an explicit ``BEGIN`` commits on its own, so a
    preference write is durable as soon as ``execute`` returns.

    Raises:
        OSError: If directory creation fails.
        sqlite3.Error: If database connection fails.
    """
    if str(db_path) != ":memory:":
        db_path.parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(str(db_path), isolation_level=None)
