"""Participation cache entries persisted in the local database."""

from __future__ import annotations

import json
import sqlite3
from dataclasses import asdict
from datetime import date
from typing import TYPE_CHECKING, Any

from ConfDesk.cache.participation import CacheEntry, ParticipationSnapshot
from ConfDesk.core.models import AuthorCertificate, AuthorParticipation
from ConfDesk.utils.log import log

if TYPE_CHECKING:
    from ConfDesk.storage.db import DatabaseManager


def _iso(value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def encode_snapshot(snapshot: ParticipationSnapshot) -> str:
    """Serialize a snapshot to JSON; dates become ISO strings."""
    payload = {
        "participations": [asdict(p) for p in snapshot.participations],
        "certificates": {key: asdict(c) for key, c in snapshot.certificates.items()},
    }
    return json.dumps(payload, ensure_ascii=False, default=_iso)


def decode_snapshot(text: str) -> ParticipationSnapshot:
    """Inverse of ``encode_snapshot``.

    Raises:
        ValueError: If the text is not JSON or lacks the expected keys.
    """
    try:
        payload = json.loads(text)
        participations = tuple(AuthorParticipation.from_row(row) for row in payload["participations"])
        certificates = {
            key: AuthorCertificate.from_row(row) for key, row in payload["certificates"].items()
        }
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed participation snapshot: {e}") from e
    return ParticipationSnapshot(participations=participations, certificates=certificates)


class SqliteParticipationStore:
    """Mirror of the participation cache in the ``participation_cache`` table.

    A row that cannot be decoded is treated as missing. Write failures are
    logged; the in-memory cache stays authoritative for the running process.
    """

    def __init__(self, db_manager: DatabaseManager) -> None:
        log.debug("Initializing SqliteParticipationStore")
        self.conn = db_manager.get_connection()

    def load(self, user_id: str) -> CacheEntry | None:
        row = self.conn.execute(
            "SELECT payload, fetched_at FROM participation_cache WHERE user_id = ?",
            (user_id,),
        ).fetchone()
        if row is None:
            return None
        try:
            snapshot = decode_snapshot(row[0])
        except ValueError as e:
            log.warning("Ignoring cached participations of %s: %s", user_id, e)
            return None
        return CacheEntry(user_id=user_id, snapshot=snapshot, fetched_at=float(row[1]))

    def save(self, entry: CacheEntry) -> None:
        try:
            self.conn.execute(
                """
                INSERT INTO participation_cache (user_id, payload, fetched_at) VALUES (?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                  payload = excluded.payload,
                  fetched_at = excluded.fetched_at
                """,
                (entry.user_id, encode_snapshot(entry.snapshot), entry.fetched_at),
            )
        except sqlite3.Error as e:
            log.warning("Failed to persist participations of %s: %s", entry.user_id, e)

    def delete(self, user_id: str) -> None:
        self.conn.execute("DELETE FROM participation_cache WHERE user_id = ?", (user_id,))
