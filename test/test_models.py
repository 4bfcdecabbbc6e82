"""Tests for building domain records from backend rows."""

import sys
import unittest
from datetime import date, datetime, timezone
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ConfDesk.core.models import Article, AuthorCertificate, Conference, Notification, Profile, Review
from ConfDesk.core.timeutil import parse_date, parse_timestamp


class TestTimestamps(unittest.TestCase):
    def test_naive_values_taken_as_utc(self) -> None:
        self.assertEqual(
            parse_timestamp("2025-03-01T10:00:00"),
            datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc),
        )

    def test_offsets_kept(self) -> None:
        parsed = parse_timestamp("2025-03-01T10:00:00+02:00")
        self.assertEqual(parsed.utcoffset().total_seconds(), 7200)

    def test_bad_values(self) -> None:
        self.assertIsNone(parse_timestamp(""))
        self.assertIsNone(parse_timestamp("yesterday"))
        self.assertIsNone(parse_date(None))
        self.assertEqual(parse_date("2025-05-14"), date(2025, 5, 14))


class TestFromRow(unittest.TestCase):
    def test_article_with_embedded_relations(self) -> None:
        article = Article.from_row(
            {
                "id": "a1",
                "title": "Streaming joins",
                "abstract": "We join.",
                "author_id": "u1",
                "status": "accepted",
                "submitted_at": "2025-01-05T12:00:00Z",
                "keywords": ["streams", "joins"],
                "conference_id": "c1",
                "profiles": {"full_name": "Ada Author", "institution": "KPI"},
                "conferences": [{"title": "Data Forum", "start_date": "2025-05-12", "end_date": "2025-05-14"}],
            }
        )
        self.assertEqual(article.author_name, "Ada Author")
        self.assertEqual(article.author_institution, "KPI")
        self.assertEqual(article.conference_title, "Data Forum")
        self.assertEqual(article.conference_end_date, date(2025, 5, 14))
        self.assertEqual(article.keywords, ("streams", "joins"))
        self.assertTrue(article.is_accepted)

    def test_article_missing_optionals(self) -> None:
        article = Article.from_row({"id": "a2", "title": "T", "author_id": "u1", "file_url": ""})
        self.assertEqual(article.status, "submitted")
        self.assertEqual(article.abstract, "")
        self.assertIsNone(article.submitted_at)
        self.assertIsNone(article.file_url)
        self.assertIsNone(article.author_name)
        self.assertEqual(article.keywords, ())

    def test_review_nested_article_author(self) -> None:
        review = Review.from_row(
            {
                "id": "r1",
                "article_id": "a1",
                "reviewer_id": "rev",
                "content": "Fine",
                "rating": 4,
                "recommendation": "accept",
                "status": "submitted",
                "created_at": "2025-01-06T08:00:00Z",
                "articles": {
                    "title": "Streaming joins",
                    "conference_id": "c1",
                    "profiles": {"full_name": "Ada Author"},
                },
                "profiles": [{"full_name": "Rita Reviewer"}],
            }
        )
        self.assertEqual(review.article_title, "Streaming joins")
        self.assertEqual(review.article_conference_id, "c1")
        self.assertEqual(review.article_author_name, "Ada Author")
        self.assertEqual(review.reviewer_name, "Rita Reviewer")
        self.assertIsNone(review.submitted_at)

    def test_unknown_enum_values_fall_back(self) -> None:
        profile = Profile.from_row({"id": "u1", "email": "a@example.org", "role": "admin"})
        self.assertEqual(profile.role, "author")
        review = Review.from_row({"id": "r1", "article_id": "a1", "reviewer_id": "rev", "status": "archived"})
        self.assertEqual(review.status, "draft")

    def test_conference_defaults(self) -> None:
        conference = Conference.from_row({"id": "c1", "title": "Forum", "start_date": "2025-05-12"})
        self.assertEqual(conference.start_date, date(2025, 5, 12))
        self.assertIsNone(conference.end_date)
        self.assertEqual(conference.status, "draft")
        self.assertTrue(conference.is_public)

    def test_notification_and_certificate(self) -> None:
        notification = Notification.from_row(
            {"id": "n1", "user_id": "u1", "title": "T", "message": "M", "type": "status", "read": None}
        )
        self.assertFalse(notification.read)
        certificate = AuthorCertificate.from_row(
            {
                "id": "cert",
                "author_id": "u1",
                "conference_id": "c1",
                "article_id": "a1",
                "certificate_number": "CERT-7",
                "snapshot_author_name": "Ada",
                "snapshot_conference_title": "Forum",
                "snapshot_conference_end_date": "2025-05-14",
                "snapshot_article_title": "T",
                "snapshot_article_status": "accepted",
                "issued_at": "2025-06-01T00:00:00Z",
            }
        )
        self.assertEqual(certificate.snapshot_conference_end_date, date(2025, 5, 14))
        self.assertIsNone(certificate.snapshot_conference_start_date)
        self.assertIsNone(certificate.snapshot_institution)


if __name__ == "__main__":
    unittest.main()
