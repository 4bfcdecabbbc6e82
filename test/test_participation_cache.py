"""Tests for the stale-while-revalidate participation cache."""

import asyncio
import sys
import unittest
from datetime import date
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ConfDesk.cache import ParticipationCache, ParticipationSnapshot
from ConfDesk.core.errors import BackendError
from ConfDesk.core.models import AuthorCertificate, AuthorParticipation


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _participation(conference_id: str) -> AuthorParticipation:
    return AuthorParticipation(
        conference_id=conference_id,
        conference_title=f"Conference {conference_id}",
        conference_start_date=date(2024, 5, 1),
        conference_end_date=date(2024, 5, 3),
        article_id=f"article-{conference_id}",
        article_title="Accepted work",
        article_status="accepted",
    )


def _certificate(conference_id: str, number: str) -> AuthorCertificate:
    return AuthorCertificate(
        id=f"cert-{number}",
        author_id="author-1",
        conference_id=conference_id,
        article_id=f"article-{conference_id}",
        certificate_number=number,
        snapshot_author_name="Ada Author",
        snapshot_conference_title=f"Conference {conference_id}",
        snapshot_conference_start_date=date(2024, 5, 1),
        snapshot_conference_end_date=date(2024, 5, 3),
        snapshot_article_title="Accepted work",
        snapshot_article_status="accepted",
        issued_at=None,
    )


class _FakeSource:
    def __init__(self) -> None:
        self.loads = 0
        self.issues = 0
        self.fail_next = False
        self.conferences = ["c1"]

    async def load(self, user_id: str) -> ParticipationSnapshot:
        self.loads += 1
        await asyncio.sleep(0)
        if self.fail_next:
            self.fail_next = False
            raise BackendError("articles.select", "connection reset")
        return ParticipationSnapshot(
            participations=tuple(_participation(c) for c in self.conferences),
        )

    async def issue(self, conference_id: str) -> AuthorCertificate:
        self.issues += 1
        return _certificate(conference_id, f"CERT-{self.issues:04d}")


class TestParticipationCache(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.clock = _Clock()
        self.source = _FakeSource()
        self.cache = ParticipationCache(self.source, ttl=300, clock=self.clock)

    async def asyncTearDown(self) -> None:
        await self.cache.close()

    async def test_fresh_entry_served_without_fetch(self) -> None:
        first = await self.cache.get("author-1")
        self.clock.advance(4 * 60)
        second = await self.cache.get("author-1")
        self.assertIs(first, second)
        self.assertEqual(self.cache.refreshing, 0)
        self.assertEqual(self.source.loads, 1)

    async def test_stale_entry_served_then_refreshed_once(self) -> None:
        first = await self.cache.get("author-1")
        self.clock.advance(6 * 60)
        self.source.conferences = ["c1", "c2"]

        stale = await self.cache.get("author-1")
        again = await self.cache.get("author-1")
        self.assertIs(stale, first)
        self.assertIs(again, first)
        self.assertEqual(self.cache.refreshing, 1)

        await self.cache.drain()
        self.assertEqual(self.source.loads, 2)
        refreshed = self.cache.peek("author-1")
        self.assertEqual(len(refreshed.participations), 2)
        self.assertEqual(refreshed.fetched_at, self.clock.now)

    async def test_failed_refresh_keeps_stale_entry(self) -> None:
        first = await self.cache.get("author-1")
        self.clock.advance(600)
        self.source.fail_next = True
        await self.cache.get("author-1")
        await self.cache.drain()
        self.assertIs(self.cache.peek("author-1"), first)

    async def test_first_load_error_propagates(self) -> None:
        self.source.fail_next = True
        with self.assertRaises(BackendError):
            await self.cache.get("author-1")
        self.assertIsNone(self.cache.peek("author-1"))
        entry = await self.cache.get("author-1")
        self.assertEqual(len(entry.participations), 1)

    async def test_concurrent_first_loads_share_one_fetch(self) -> None:
        first, second = await asyncio.gather(self.cache.get("author-1"), self.cache.get("author-1"))
        self.assertEqual(self.source.loads, 1)
        self.assertIs(first.snapshot, second.snapshot)

    async def test_issue_certificate_updates_entry_once(self) -> None:
        seen = []
        self.cache.subscribe(seen.append)
        await self.cache.get("author-1")

        certificate = await self.cache.issue_certificate("author-1", "c1")
        self.assertEqual(certificate.certificate_number, "CERT-0001")
        self.assertIn("c1", self.cache.peek("author-1").certificates)

        again = await self.cache.issue_certificate("author-1", "c1")
        self.assertIs(again, certificate)
        self.assertEqual(self.source.issues, 1)
        self.assertEqual(len(seen), 2)

    async def test_invalidate_forces_reload(self) -> None:
        await self.cache.get("author-1")
        self.cache.invalidate("author-1")
        await self.cache.get("author-1")
        self.assertEqual(self.source.loads, 2)

    async def test_certificate_issued_during_refresh_is_kept(self) -> None:
        await self.cache.get("author-1")
        self.clock.advance(600)
        await self.cache.get("author-1")
        self.assertEqual(self.cache.refreshing, 1)

        certificate = await self.cache.issue_certificate("author-1", "c1")
        await self.cache.drain()

        self.assertEqual(self.source.loads, 2)
        entry = self.cache.peek("author-1")
        self.assertIs(entry.certificates["c1"], certificate)
        again = await self.cache.issue_certificate("author-1", "c1")
        self.assertIs(again, certificate)
        self.assertEqual(self.source.issues, 1)

    async def test_invalidate_during_refresh_drops_its_result(self) -> None:
        await self.cache.get("author-1")
        self.clock.advance(600)
        await self.cache.get("author-1")
        self.cache.invalidate("author-1")
        await self.cache.drain()

        self.assertEqual(self.source.loads, 2)
        self.assertIsNone(self.cache.peek("author-1"))
        await self.cache.get("author-1")
        self.assertEqual(self.source.loads, 3)


if __name__ == "__main__":
    unittest.main()
