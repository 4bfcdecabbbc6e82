"""Contract of the hosted backend as seen by services.

The backend owns persistence, authentication, object storage and row-level
authorization. Every call is a suspension point; implementations raise
``BackendError`` for any rejected operation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Protocol, Sequence

from ConfDesk.core.models import (
    Article,
    ArticleStatusHistory,
    AuthorCertificate,
    Conference,
    ConferenceSection,
    Notification,
    Profile,
    Review,
    ReviewAssignment,
)


class Gateway(Protocol):
    """Async query, mutation, RPC and storage operations used by services."""

    async def sign_in(self, email: str, password: str) -> str:
        """Authenticate and return the signed-in user id."""
        raise NotImplementedError

    async def fetch_profile(self, user_id: str) -> Profile:
        raise NotImplementedError

    async def list_profiles(self) -> list[Profile]:
        """Return all profiles, newest first."""
        raise NotImplementedError

    async def update_profile(self, user_id: str, changes: Mapping[str, Any]) -> Profile:
        raise NotImplementedError

    async def list_articles(
        self,
        *,
        author_id: str | None = None,
        conference_id: str | None = None,
        statuses: Sequence[str] | None = None,
        ids: Sequence[str] | None = None,
        submitted_from: datetime | None = None,
        submitted_to: datetime | None = None,
    ) -> list[Article]:
        """Return articles matching every given constraint, newest submission first."""
        raise NotImplementedError

    async def insert_article(self, row: Mapping[str, Any]) -> Article:
        raise NotImplementedError

    async def update_article(self, article_id: str, changes: Mapping[str, Any]) -> None:
        raise NotImplementedError

    async def insert_status_history(self, row: Mapping[str, Any]) -> None:
        raise NotImplementedError

    async def list_status_history(self, article_id: str) -> list[ArticleStatusHistory]:
        raise NotImplementedError

    async def list_reviews(
        self,
        *,
        reviewer_id: str | None = None,
        article_id: str | None = None,
        submitted_only: bool = False,
    ) -> list[Review]:
        raise NotImplementedError

    async def insert_review(self, row: Mapping[str, Any]) -> None:
        raise NotImplementedError

    async def list_assignments(
        self,
        *,
        reviewer_id: str | None = None,
        article_id: str | None = None,
        open_only: bool = False,
    ) -> list[ReviewAssignment]:
        raise NotImplementedError

    async def upsert_assignment(self, row: Mapping[str, Any]) -> None:
        """Insert or update the assignment identified by (article_id, reviewer_id)."""
        raise NotImplementedError

    async def delete_assignment(self, assignment_id: str) -> None:
        raise NotImplementedError

    async def list_conferences(self, *, public_only: bool = False) -> list[Conference]:
        """Return conferences, latest start date first."""
        raise NotImplementedError

    async def insert_conference(self, row: Mapping[str, Any]) -> Conference:
        raise NotImplementedError

    async def list_sections(self, conference_id: str) -> list[ConferenceSection]:
        raise NotImplementedError

    async def list_notifications(self, user_id: str) -> list[Notification]:
        """Return notifications for ``user_id``, newest first."""
        raise NotImplementedError

    async def mark_notification_read(self, notification_id: str) -> None:
        raise NotImplementedError

    async def mark_all_notifications_read(self, user_id: str) -> None:
        raise NotImplementedError

    async def list_certificates(self, author_id: str) -> list[AuthorCertificate]:
        raise NotImplementedError

    async def issue_certificate(self, conference_id: str) -> AuthorCertificate:
        """Ask the backend to issue (or return) the caller's certificate."""
        raise NotImplementedError

    async def set_user_role(self, user_id: str, role: str) -> None:
        raise NotImplementedError

    async def upload_file(self, path: str, content: bytes, content_type: str | None) -> None:
        raise NotImplementedError

    async def create_signed_url(self, path: str, expires_in: int) -> str:
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError
