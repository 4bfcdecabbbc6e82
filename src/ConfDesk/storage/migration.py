"""Versioned schema of the local database.

The applied version lives in SQLite's ``PRAGMA user_version`` header field.
``run_migrations`` brings a database up to ``MIGRATIONS[-1].version``; each
step runs in its own transaction together with the version bump, so a
failing step leaves both schema and version as they were.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Sequence

from ConfDesk.utils.log import log


@dataclass(frozen=True, slots=True)
class Migration:
    """One schema step.

    Attributes:
        version: Position in the chain; the first migration is 1.
        description: Shown in debug logs when the step is applied.
        statements: SQL statements executed in order.
    """

    version: int
    description: str
    statements: tuple[str, ...]


# Append-only.
MIGRATIONS: list[Migration] = [
    Migration(
        version=1,
        description="preferences key/value table",
        statements=(
            """
            CREATE TABLE IF NOT EXISTS preferences (
              key TEXT PRIMARY KEY,
              value TEXT NOT NULL,
              updated_at INTEGER NOT NULL DEFAULT (CAST(strftime('%s','now') AS INTEGER))
            )
            """,
        ),
    ),
    Migration(
        version=2,
        description="participation cache table",
        statements=(
            """
            CREATE TABLE IF NOT EXISTS participation_cache (
              user_id TEXT PRIMARY KEY,
              payload TEXT NOT NULL,
              fetched_at REAL NOT NULL
            )
            """,
        ),
    ),
]


def schema_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def check_chain(migrations: Sequence[Migration]) -> None:
    """Require versions 1, 2, 3, ... without gaps or repeats.

    Raises:
        ValueError: Naming the first out-of-place migration.
    """
    for expected, migration in enumerate(migrations, start=1):
        if migration.version != expected:
            raise ValueError(
                f"Migration {migration.description!r} has version {migration.version}, expected {expected}"
            )


def run_migrations(conn: sqlite3.Connection, migrations: Sequence[Migration] | None = None) -> int:
    """Apply pending migrations and return the resulting schema version.

    Args:
        conn: Connection opened with ``isolation_level=None``.
        migrations: Chain to apply; defaults to ``MIGRATIONS``.

    Raises:
        ValueError: If the chain has a gap.
        sqlite3.Error: If a statement fails; that step is rolled back.
    """
    chain = MIGRATIONS if migrations is None else migrations
    check_chain(chain)
    current = schema_version(conn)
    for migration in chain:
        if migration.version <= current:
            continue
        _apply(conn, migration)
        current = migration.version
        log.debug("Local schema upgraded to v%d (%s)", current, migration.description)
    return current


def _apply(conn: sqlite3.Connection, migration: Migration) -> None:
    conn.execute("BEGIN")
    try:
        for statement in migration.statements:
            conn.execute(statement)
        # PRAGMA does not accept bound parameters; version is an int from code.
        conn.execute(f"PRAGMA user_version = {int(migration.version)}")
    except sqlite3.Error:
        conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")
