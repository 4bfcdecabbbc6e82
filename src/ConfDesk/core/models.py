"""Domain records fetched from the conference backend.

Every record is an immutable snapshot of one backend row. The client never
owns their lifecycle beyond a render cycle or a short cache window, so all
models are frozen and built through ``from_row``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Sequence

from ConfDesk.core.timeutil import parse_date, parse_timestamp

USER_ROLES = ("author", "reviewer", "organizer")
ARTICLE_STATUSES = ("submitted", "under_review", "accepted", "accepted_with_comments", "rejected")
ACCEPTED_STATUSES = ("accepted", "accepted_with_comments")
REVIEW_STATUSES = ("draft", "submitted")
RECOMMENDATIONS = ("accept", "accept_with_comments", "reject")
CONFERENCE_STATUSES = ("draft", "announced", "submission_open", "reviewing", "closed", "archived")


def _embedded(row: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """Return an embedded relation, which the backend may send as object or list."""
    value = row.get(key)
    if isinstance(value, list):
        value = value[0] if value else None
    return value if isinstance(value, Mapping) else {}


def _str(row: Mapping[str, Any], key: str, default: str = "") -> str:
    value = row.get(key)
    return default if value is None else str(value)


def _opt_str(row: Mapping[str, Any], key: str) -> str | None:
    value = row.get(key)
    return None if value is None or value == "" else str(value)


def _choice(row: Mapping[str, Any], key: str, choices: Sequence[str], default: str) -> str:
    value = row.get(key)
    return value if value in choices else default


@dataclass(frozen=True, slots=True)
class Profile:
    """User profile row (``profiles``)."""

    id: str
    email: str
    full_name: str
    role: str
    institution: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Profile:
        return cls(
            id=_str(row, "id"),
            email=_str(row, "email"),
            full_name=_str(row, "full_name"),
            role=_choice(row, "role", USER_ROLES, "author"),
            institution=_opt_str(row, "institution"),
            created_at=parse_timestamp(row.get("created_at")),
        )


@dataclass(frozen=True, slots=True)
class Conference:
    """Conference row (``conferences``).

    Attributes:
        start_date: First day of the conference.
        end_date: Last day of the conference.
        is_public: Whether authors may submit to it.
    """

    id: str
    title: str
    start_date: date | None
    end_date: date | None
    status: str = "draft"
    is_public: bool = True
    location: str | None = None
    timezone: str | None = None
    description: str | None = None
    thesis_requirements: str | None = None
    submission_start_at: datetime | None = None
    submission_end_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Conference:
        return cls(
            id=_str(row, "id"),
            title=_str(row, "title"),
            start_date=parse_date(row.get("start_date")),
            end_date=parse_date(row.get("end_date")),
            status=_str(row, "status", "draft"),
            is_public=bool(row.get("is_public", True)),
            location=_opt_str(row, "location"),
            timezone=_opt_str(row, "timezone"),
            description=_opt_str(row, "description"),
            thesis_requirements=_opt_str(row, "thesis_requirements"),
            submission_start_at=parse_timestamp(row.get("submission_start_at")),
            submission_end_at=parse_timestamp(row.get("submission_end_at")),
        )


@dataclass(frozen=True, slots=True)
class ConferenceSection:
    id: str
    conference_id: str
    title: str
    sort_order: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ConferenceSection:
        return cls(
            id=_str(row, "id"),
            conference_id=_str(row, "conference_id"),
            title=_str(row, "title"),
            sort_order=int(row.get("sort_order") or 0),
        )


@dataclass(frozen=True, slots=True)
class Article:
    """Submitted article row (``articles``) with embedded author and conference."""

    id: str
    title: str
    abstract: str
    author_id: str
    status: str
    submitted_at: datetime | None
    created_at: datetime | None = None
    keywords: Sequence[str] = ()
    file_url: str | None = None
    file_name: str | None = None
    conference_id: str | None = None
    section_id: str | None = None
    language: str | None = None
    review_due_at: datetime | None = None
    presentation_starts_at: datetime | None = None
    presentation_location: str | None = None
    author_name: str | None = None
    author_institution: str | None = None
    conference_title: str | None = None
    conference_start_date: date | None = None
    conference_end_date: date | None = None

    @property
    def is_accepted(self) -> bool:
        return self.status in ACCEPTED_STATUSES

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Article:
        author = _embedded(row, "profiles")
        conference = _embedded(row, "conferences")
        keywords = row.get("keywords") or ()
        return cls(
            id=_str(row, "id"),
            title=_str(row, "title"),
            abstract=_str(row, "abstract"),
            author_id=_str(row, "author_id"),
            status=_str(row, "status", "submitted"),
            submitted_at=parse_timestamp(row.get("submitted_at")),
            created_at=parse_timestamp(row.get("created_at")),
            keywords=tuple(str(k) for k in keywords),
            file_url=_opt_str(row, "file_url"),
            file_name=_opt_str(row, "file_name"),
            conference_id=_opt_str(row, "conference_id"),
            section_id=_opt_str(row, "section_id"),
            language=_opt_str(row, "language"),
            review_due_at=parse_timestamp(row.get("review_due_at")),
            presentation_starts_at=parse_timestamp(row.get("presentation_starts_at")),
            presentation_location=_opt_str(row, "presentation_location"),
            author_name=_opt_str(author, "full_name"),
            author_institution=_opt_str(author, "institution"),
            conference_title=_opt_str(conference, "title"),
            conference_start_date=parse_date(conference.get("start_date")),
            conference_end_date=parse_date(conference.get("end_date")),
        )


@dataclass(frozen=True, slots=True)
class Review:
    """Review row (``reviews``) with the reviewed article and reviewer name embedded."""

    id: str
    article_id: str
    reviewer_id: str
    content: str
    rating: int
    recommendation: str
    status: str
    submitted_at: datetime | None
    created_at: datetime | None
    article_title: str | None = None
    article_conference_id: str | None = None
    article_author_name: str | None = None
    reviewer_name: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Review:
        article = _embedded(row, "articles")
        return cls(
            id=_str(row, "id"),
            article_id=_str(row, "article_id"),
            reviewer_id=_str(row, "reviewer_id"),
            content=_str(row, "content"),
            rating=int(row.get("rating") or 0),
            recommendation=_str(row, "recommendation"),
            status=_choice(row, "status", REVIEW_STATUSES, "draft"),
            submitted_at=parse_timestamp(row.get("submitted_at")),
            created_at=parse_timestamp(row.get("created_at")),
            article_title=_opt_str(article, "title"),
            article_conference_id=_opt_str(article, "conference_id"),
            article_author_name=_opt_str(_embedded(article, "profiles"), "full_name"),
            reviewer_name=_opt_str(_embedded(row, "profiles"), "full_name"),
        )


@dataclass(frozen=True, slots=True)
class ArticleStatusHistory:
    id: str
    article_id: str
    new_status: str
    changed_by: str
    created_at: datetime | None
    old_status: str | None = None
    comments: str | None = None
    changed_by_name: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ArticleStatusHistory:
        return cls(
            id=_str(row, "id"),
            article_id=_str(row, "article_id"),
            new_status=_str(row, "new_status"),
            changed_by=_str(row, "changed_by"),
            created_at=parse_timestamp(row.get("created_at")),
            old_status=_opt_str(row, "old_status"),
            comments=_opt_str(row, "comments"),
            changed_by_name=_opt_str(_embedded(row, "profiles"), "full_name"),
        )


@dataclass(frozen=True, slots=True)
class ReviewAssignment:
    """Reviewer assignment row (``article_review_assignments``)."""

    id: str
    article_id: str
    reviewer_id: str
    assigned_by: str | None = None
    due_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None
    reviewer_name: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ReviewAssignment:
        return cls(
            id=_str(row, "id"),
            article_id=_str(row, "article_id"),
            reviewer_id=_str(row, "reviewer_id"),
            assigned_by=_opt_str(row, "assigned_by"),
            due_at=parse_timestamp(row.get("due_at")),
            completed_at=parse_timestamp(row.get("completed_at")),
            created_at=parse_timestamp(row.get("created_at")),
            reviewer_name=_opt_str(_embedded(row, "profiles"), "full_name"),
        )


@dataclass(frozen=True, slots=True)
class Notification:
    id: str
    user_id: str
    title: str
    message: str
    type: str
    read: bool
    created_at: datetime | None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Notification:
        return cls(
            id=_str(row, "id"),
            user_id=_str(row, "user_id"),
            title=_str(row, "title"),
            message=_str(row, "message"),
            type=_str(row, "type"),
            read=bool(row.get("read")),
            created_at=parse_timestamp(row.get("created_at")),
        )


@dataclass(frozen=True, slots=True)
class AuthorParticipation:
    """One finished conference in which an author had an accepted article."""

    conference_id: str
    conference_title: str
    conference_start_date: date | None
    conference_end_date: date | None
    article_id: str
    article_title: str
    article_status: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> AuthorParticipation:
        return cls(
            conference_id=_str(row, "conference_id"),
            conference_title=_str(row, "conference_title"),
            conference_start_date=parse_date(row.get("conference_start_date")),
            conference_end_date=parse_date(row.get("conference_end_date")),
            article_id=_str(row, "article_id"),
            article_title=_str(row, "article_title"),
            article_status=_str(row, "article_status"),
        )


@dataclass(frozen=True, slots=True)
class AuthorCertificate:
    """Issued participation certificate with the snapshot taken at issue time."""

    id: str
    author_id: str
    conference_id: str
    article_id: str
    certificate_number: str
    snapshot_author_name: str
    snapshot_conference_title: str
    snapshot_conference_start_date: date | None
    snapshot_conference_end_date: date | None
    snapshot_article_title: str
    snapshot_article_status: str
    issued_at: datetime | None
    snapshot_institution: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> AuthorCertificate:
        return cls(
            id=_str(row, "id"),
            author_id=_str(row, "author_id"),
            conference_id=_str(row, "conference_id"),
            article_id=_str(row, "article_id"),
            certificate_number=_str(row, "certificate_number"),
            snapshot_author_name=_str(row, "snapshot_author_name"),
            snapshot_conference_title=_str(row, "snapshot_conference_title"),
            snapshot_conference_start_date=parse_date(row.get("snapshot_conference_start_date")),
            snapshot_conference_end_date=parse_date(row.get("snapshot_conference_end_date")),
            snapshot_article_title=_str(row, "snapshot_article_title"),
            snapshot_article_status=_str(row, "snapshot_article_status"),
            issued_at=parse_timestamp(row.get("issued_at")),
            snapshot_institution=_opt_str(row, "snapshot_institution"),
        )
