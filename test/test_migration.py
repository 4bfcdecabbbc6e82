"""Tests for the local preference database schema and key/value substrate.

Covers:
  1. fresh database      - preferences table created, user_version set
  2. already up to date  - second run changes nothing
  3. new migration       - next version applied to an existing DB, stored values intact
  4. broken migration    - transaction rolled back, version unchanged
Plus: chain validation and the SQLite-backed substrate.
"""

import sqlite3
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

import ConfDesk.storage.migration as migration_module
from ConfDesk.storage.db import DatabaseManager
from ConfDesk.storage.kv import SqliteKeyValueStore
from ConfDesk.storage.migration import MIGRATIONS, Migration, run_migrations, schema_version

LATEST = MIGRATIONS[-1].version


def _table_names(conn: sqlite3.Connection) -> set[str]:
    return {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}


class _DatabaseCase(unittest.TestCase):
    migrate_on_setup = False

    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.conn = sqlite3.connect(str(Path(self._tmpdir.name) / "preferences.db"), isolation_level=None)
        if self.migrate_on_setup:
            run_migrations(self.conn)

    def tearDown(self) -> None:
        self.conn.close()
        self._tmpdir.cleanup()


class TestFreshDatabase(_DatabaseCase):
    def test_version_and_tables(self) -> None:
        self.assertEqual(schema_version(self.conn), 0)
        self.assertEqual(run_migrations(self.conn), LATEST)
        self.assertEqual(schema_version(self.conn), LATEST)
        self.assertIn("preferences", _table_names(self.conn))
        self.assertIn("participation_cache", _table_names(self.conn))


class TestAlreadyUpToDate(_DatabaseCase):
    migrate_on_setup = True

    def test_second_run_is_noop(self) -> None:
        tables = _table_names(self.conn)
        self.assertEqual(run_migrations(self.conn), LATEST)
        self.assertEqual(_table_names(self.conn), tables)


class TestNewMigration(_DatabaseCase):
    migrate_on_setup = True
    _NEXT = Migration(
        version=LATEST + 1,
        description="scope column",
        statements=("ALTER TABLE preferences ADD COLUMN scope TEXT",),
    )

    def test_next_version_applied_and_old_rows_kept(self) -> None:
        self.conn.execute("INSERT INTO preferences (key, value) VALUES (?, ?)", ("app.theme", "dark"))
        with patch.object(migration_module, "MIGRATIONS", list(MIGRATIONS) + [self._NEXT]):
            self.assertEqual(run_migrations(self.conn), LATEST + 1)
        row = self.conn.execute("SELECT value, scope FROM preferences WHERE key = 'app.theme'").fetchone()
        self.assertEqual(row, ("dark", None))


class TestUpgradeFromFirstVersion(_DatabaseCase):
    def test_cache_table_added_next_to_existing_preferences(self) -> None:
        self.assertEqual(run_migrations(self.conn, MIGRATIONS[:1]), 1)
        self.conn.execute("INSERT INTO preferences (key, value) VALUES (?, ?)", ("app.language", "uk"))
        self.assertNotIn("participation_cache", _table_names(self.conn))
        self.assertEqual(run_migrations(self.conn), LATEST)
        self.assertIn("participation_cache", _table_names(self.conn))
        row = self.conn.execute("SELECT value FROM preferences WHERE key = 'app.language'").fetchone()
        self.assertEqual(row, ("uk",))


class TestRollbackOnError(_DatabaseCase):
    migrate_on_setup = True

    def test_failed_step_leaves_schema_and_version(self) -> None:
        broken = Migration(
            version=LATEST + 1,
            description="half applied",
            statements=("CREATE TABLE extra (id INTEGER)", "THIS IS NOT VALID SQL"),
        )
        with self.assertRaises(sqlite3.Error):
            run_migrations(self.conn, list(MIGRATIONS) + [broken])
        self.assertEqual(schema_version(self.conn), LATEST)
        self.assertNotIn("extra", _table_names(self.conn))


class TestChainValidation(_DatabaseCase):
    def test_gap_raises_before_touching_db(self) -> None:
        gap = list(MIGRATIONS) + [Migration(version=LATEST + 2, description="gap", statements=("SELECT 1",))]
        with self.assertRaises(ValueError):
            run_migrations(self.conn, gap)
        self.assertEqual(schema_version(self.conn), 0)


class TestSqliteKeyValueStore(unittest.TestCase):
    def test_values_survive_reopen(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "nested" / "preferences.db"
            with DatabaseManager(db_path) as db_manager:
                store = SqliteKeyValueStore(db_manager)
                store.set("app.theme", "dark")
                store.set("app.theme", "light")
            with DatabaseManager(db_path) as db_manager:
                store = SqliteKeyValueStore(db_manager)
                self.assertEqual(store.get("app.theme"), "light")
                self.assertIsNone(store.get("app.language"))

    def test_closed_manager_raises(self) -> None:
        manager = DatabaseManager(Path(":memory:"))
        manager.close()
        with self.assertRaises(RuntimeError):
            manager.get_connection()


if __name__ == "__main__":
    unittest.main()
