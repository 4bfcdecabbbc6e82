"""Tests for participation derivation and the certificate source."""

import sys
import unittest
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ConfDesk.core.errors import BackendError
from ConfDesk.core.models import Article, AuthorCertificate
from ConfDesk.services import CertificateSource, derive_participations

UTC = timezone.utc


def _article(
    article_id: str,
    conference_id: str | None,
    end: date | None,
    *,
    status: str = "accepted",
    submitted_day: int = 1,
) -> Article:
    return Article(
        id=article_id,
        title=f"Title {article_id}",
        abstract="",
        author_id="author-1",
        status=status,
        submitted_at=datetime(2025, 1, submitted_day, tzinfo=UTC),
        conference_id=conference_id,
        conference_title=f"Conference {conference_id}",
        conference_start_date=end - timedelta(days=2) if end else None,
        conference_end_date=end,
    )


class TestDeriveParticipations(unittest.TestCase):
    def test_conference_counts_after_last_second_of_end_date(self) -> None:
        articles = [_article("a1", "c1", date(2025, 5, 10))]
        before = datetime(2025, 5, 10, 23, 59, 58, tzinfo=UTC)
        after = datetime(2025, 5, 11, 0, 0, 0, tzinfo=UTC)
        self.assertEqual(derive_participations(articles, before, UTC), [])
        self.assertEqual(len(derive_participations(articles, after, UTC)), 1)

    def test_one_participation_per_conference_with_latest_article(self) -> None:
        articles = [
            _article("old", "c1", date(2025, 1, 20), submitted_day=2),
            _article("new", "c1", date(2025, 1, 20), submitted_day=9, status="accepted_with_comments"),
            _article("other", "c2", date(2025, 1, 25)),
        ]
        result = derive_participations(articles, datetime(2025, 6, 1, tzinfo=UTC), UTC)
        by_conference = {p.conference_id: p for p in result}
        self.assertEqual(set(by_conference), {"c1", "c2"})
        self.assertEqual(by_conference["c1"].article_id, "new")
        self.assertEqual(by_conference["c1"].article_status, "accepted_with_comments")

    def test_non_accepted_and_incomplete_rows_skipped(self) -> None:
        articles = [
            _article("rej", "c1", date(2025, 1, 20), status="rejected"),
            _article("noconf", None, date(2025, 1, 20)),
            _article("noend", "c3", None),
        ]
        self.assertEqual(derive_participations(articles, datetime(2025, 6, 1, tzinfo=UTC), UTC), [])


class _Gateway:
    def __init__(self, articles, certificates=None, certificate_error=None) -> None:
        self.articles = articles
        self.certificates = certificates or []
        self.certificate_error = certificate_error
        self.certificate_calls = 0

    async def list_articles(self, **filters):
        return list(self.articles)

    async def list_certificates(self, author_id):
        self.certificate_calls += 1
        if self.certificate_error is not None:
            raise self.certificate_error
        return list(self.certificates)


def _certificate(conference_id: str) -> AuthorCertificate:
    return AuthorCertificate(
        id="cert-1",
        author_id="author-1",
        conference_id=conference_id,
        article_id="a1",
        certificate_number="CERT-1",
        snapshot_author_name="Ada",
        snapshot_conference_title="Conference",
        snapshot_conference_start_date=None,
        snapshot_conference_end_date=None,
        snapshot_article_title="Title",
        snapshot_article_status="accepted",
        issued_at=None,
    )


def _clock() -> datetime:
    return datetime(2025, 6, 1, tzinfo=UTC)


class TestCertificateSource(unittest.IsolatedAsyncioTestCase):
    async def test_certificates_keyed_by_conference(self) -> None:
        gateway = _Gateway([_article("a1", "c1", date(2025, 1, 20))], [_certificate("c1")])
        snapshot = await CertificateSource(gateway, clock=_clock, zone=UTC).load("author-1")
        self.assertEqual(len(snapshot.participations), 1)
        self.assertEqual(snapshot.certificates["c1"].certificate_number, "CERT-1")

    async def test_no_participations_skips_certificate_query(self) -> None:
        gateway = _Gateway([_article("a1", "c1", date(2025, 12, 20))])
        snapshot = await CertificateSource(gateway, clock=_clock, zone=UTC).load("author-1")
        self.assertEqual(snapshot.participations, ())
        self.assertEqual(gateway.certificate_calls, 0)

    async def test_missing_certificate_table_yields_empty_map(self) -> None:
        gateway = _Gateway(
            [_article("a1", "c1", date(2025, 1, 20))],
            certificate_error=BackendError("author_certificates.select", "relation does not exist", "42P01"),
        )
        snapshot = await CertificateSource(gateway, clock=_clock, zone=UTC).load("author-1")
        self.assertEqual(len(snapshot.participations), 1)
        self.assertEqual(snapshot.certificates, {})

    async def test_other_certificate_errors_propagate(self) -> None:
        gateway = _Gateway(
            [_article("a1", "c1", date(2025, 1, 20))],
            certificate_error=BackendError("author_certificates.select", "permission denied", "42501"),
        )
        with self.assertRaises(BackendError):
            await CertificateSource(gateway, clock=_clock, zone=UTC).load("author-1")


if __name__ == "__main__":
    unittest.main()
