"""Gateway implementation on top of the hosted Supabase project."""

from __future__ import annotations

import os
from datetime import datetime
from typing import Any, Mapping, Sequence

from supabase import AsyncClient, acreate_client

from ConfDesk.config import BackendConfig
from ConfDesk.core.errors import BackendError, ConfDeskError
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
from ConfDesk.core.timeutil import to_iso
from ConfDesk.utils.log import log

ARTICLE_SELECT = """
    *,
    profiles!articles_author_id_fkey(full_name, institution),
    conferences:conference_id(id, title, start_date, end_date)
"""

REVIEW_SELECT = """
    *,
    articles!inner(
        title,
        conference_id,
        conferences:conference_id(id, title),
        profiles:author_id(full_name)
    ),
    profiles!reviews_reviewer_id_fkey(full_name)
"""

ASSIGNMENT_SELECT = "*, profiles:reviewer_id(full_name, email, institution)"
HISTORY_SELECT = "*, profiles!article_status_history_changed_by_fkey(full_name)"
PROFILE_SELECT = "id, full_name, email, institution, role, created_at"


def _error_code(error: Exception) -> str | None:
    code = getattr(error, "code", None)
    return None if code is None else str(code)


def _error_message(error: Exception) -> str:
    message = getattr(error, "message", None)
    return str(message) if message else str(error)


def _single(data: Any, operation: str) -> Mapping[str, Any]:
    """Return the one row an insert/RPC produced, whether sent as object or list."""
    if isinstance(data, list):
        data = data[0] if data else None
    if not isinstance(data, Mapping):
        raise BackendError(operation, "backend returned no row")
    return data


class SupabaseGateway:
    """Backend gateway over a supabase-py ``AsyncClient``.

    Query shapes and embedded relations follow the database schema; any
    client or PostgREST failure is re-raised as ``BackendError`` with the
    backend error code when present.
    """

    def __init__(self, client: AsyncClient, *, storage_bucket: str) -> None:
        self.client = client
        self.storage_bucket = storage_bucket

    async def _execute(self, operation: str, query: Any) -> Any:
        try:
            response = await query.execute()
        except Exception as error:  # noqa: BLE001 - normalized into BackendError
            raise BackendError(operation, _error_message(error), _error_code(error)) from error
        return response.data

    async def sign_in(self, email: str, password: str) -> str:
        try:
            response = await self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as error:  # noqa: BLE001 - normalized into BackendError
            raise BackendError("auth.sign_in", _error_message(error), _error_code(error)) from error
        if response.user is None:
            raise BackendError("auth.sign_in", "no user in response")
        log.debug("Signed in as %s", response.user.id)
        return response.user.id

    async def fetch_profile(self, user_id: str) -> Profile:
        data = await self._execute(
            "profiles.select",
            self.client.table("profiles").select("*").eq("id", user_id).limit(1),
        )
        return Profile.from_row(_single(data, "profiles.select"))

    async def list_profiles(self) -> list[Profile]:
        data = await self._execute(
            "profiles.select",
            self.client.table("profiles").select(PROFILE_SELECT).order("created_at", desc=True),
        )
        return [Profile.from_row(row) for row in data or []]

    async def update_profile(self, user_id: str, changes: Mapping[str, Any]) -> Profile:
        data = await self._execute(
            "profiles.update",
            self.client.table("profiles").update(dict(changes)).eq("id", user_id),
        )
        return Profile.from_row(_single(data, "profiles.update"))

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
        if ids is not None and not ids:
            return []
        query = self.client.table("articles").select(ARTICLE_SELECT)
        if author_id is not None:
            query = query.eq("author_id", author_id)
        if conference_id is not None:
            query = query.eq("conference_id", conference_id)
        if statuses:
            query = query.in_("status", list(statuses))
        if ids:
            query = query.in_("id", list(ids))
        if submitted_from is not None:
            query = query.gte("submitted_at", to_iso(submitted_from))
        if submitted_to is not None:
            query = query.lte("submitted_at", to_iso(submitted_to))
        data = await self._execute("articles.select", query.order("submitted_at", desc=True))
        return [Article.from_row(row) for row in data or []]

    async def insert_article(self, row: Mapping[str, Any]) -> Article:
        data = await self._execute("articles.insert", self.client.table("articles").insert(dict(row)))
        return Article.from_row(_single(data, "articles.insert"))

    async def update_article(self, article_id: str, changes: Mapping[str, Any]) -> None:
        await self._execute(
            "articles.update",
            self.client.table("articles").update(dict(changes)).eq("id", article_id),
        )

    async def insert_status_history(self, row: Mapping[str, Any]) -> None:
        await self._execute(
            "article_status_history.insert",
            self.client.table("article_status_history").insert(dict(row)),
        )

    async def list_status_history(self, article_id: str) -> list[ArticleStatusHistory]:
        data = await self._execute(
            "article_status_history.select",
            self.client.table("article_status_history")
            .select(HISTORY_SELECT)
            .eq("article_id", article_id)
            .order("created_at", desc=True),
        )
        return [ArticleStatusHistory.from_row(row) for row in data or []]

    async def list_reviews(
        self,
        *,
        reviewer_id: str | None = None,
        article_id: str | None = None,
        submitted_only: bool = False,
    ) -> list[Review]:
        query = self.client.table("reviews").select(REVIEW_SELECT)
        if reviewer_id is not None:
            query = query.eq("reviewer_id", reviewer_id)
        if article_id is not None:
            query = query.eq("article_id", article_id)
        if submitted_only:
            query = query.eq("status", "submitted")
        data = await self._execute("reviews.select", query.order("created_at", desc=True))
        return [Review.from_row(row) for row in data or []]

    async def insert_review(self, row: Mapping[str, Any]) -> None:
        await self._execute("reviews.insert", self.client.table("reviews").insert(dict(row)))

    async def list_assignments(
        self,
        *,
        reviewer_id: str | None = None,
        article_id: str | None = None,
        open_only: bool = False,
    ) -> list[ReviewAssignment]:
        query = self.client.table("article_review_assignments").select(ASSIGNMENT_SELECT)
        if reviewer_id is not None:
            query = query.eq("reviewer_id", reviewer_id)
        if article_id is not None:
            query = query.eq("article_id", article_id)
        if open_only:
            query = query.is_("completed_at", "null")
        data = await self._execute("article_review_assignments.select", query.order("created_at", desc=True))
        return [ReviewAssignment.from_row(row) for row in data or []]

    async def upsert_assignment(self, row: Mapping[str, Any]) -> None:
        await self._execute(
            "article_review_assignments.upsert",
            self.client.table("article_review_assignments").upsert(
                dict(row), on_conflict="article_id,reviewer_id"
            ),
        )

    async def delete_assignment(self, assignment_id: str) -> None:
        await self._execute(
            "article_review_assignments.delete",
            self.client.table("article_review_assignments").delete().eq("id", assignment_id),
        )

    async def list_conferences(self, *, public_only: bool = False) -> list[Conference]:
        query = self.client.table("conferences").select("*")
        if public_only:
            query = query.eq("is_public", True)
        data = await self._execute("conferences.select", query.order("start_date", desc=True))
        return [Conference.from_row(row) for row in data or []]

    async def insert_conference(self, row: Mapping[str, Any]) -> Conference:
        data = await self._execute("conferences.insert", self.client.table("conferences").insert(dict(row)))
        return Conference.from_row(_single(data, "conferences.insert"))

    async def list_sections(self, conference_id: str) -> list[ConferenceSection]:
        data = await self._execute(
            "conference_sections.select",
            self.client.table("conference_sections")
            .select("*")
            .eq("conference_id", conference_id)
            .order("sort_order"),
        )
        return [ConferenceSection.from_row(row) for row in data or []]

    async def list_notifications(self, user_id: str) -> list[Notification]:
        data = await self._execute(
            "notifications.select",
            self.client.table("notifications")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True),
        )
        return [Notification.from_row(row) for row in data or []]

    async def mark_notification_read(self, notification_id: str) -> None:
        await self._execute(
            "notifications.update",
            self.client.table("notifications").update({"read": True}).eq("id", notification_id),
        )

    async def mark_all_notifications_read(self, user_id: str) -> None:
        await self._execute(
            "notifications.update",
            self.client.table("notifications")
            .update({"read": True})
            .eq("user_id", user_id)
            .eq("read", False),
        )

    async def list_certificates(self, author_id: str) -> list[AuthorCertificate]:
        data = await self._execute(
            "author_conference_certificates.select",
            self.client.table("author_conference_certificates").select("*").eq("author_id", author_id),
        )
        return [AuthorCertificate.from_row(row) for row in data or []]

    async def issue_certificate(self, conference_id: str) -> AuthorCertificate:
        data = await self._execute(
            "rpc.issue_own_conference_certificate",
            self.client.rpc("issue_own_conference_certificate", {"p_conference_id": conference_id}),
        )
        return AuthorCertificate.from_row(_single(data, "rpc.issue_own_conference_certificate"))

    async def set_user_role(self, user_id: str, role: str) -> None:
        await self._execute(
            "rpc.organizer_set_user_role",
            self.client.rpc("organizer_set_user_role", {"p_user_id": user_id, "p_role": role}),
        )

    async def upload_file(self, path: str, content: bytes, content_type: str | None) -> None:
        options = {"content-type": content_type} if content_type else None
        try:
            await self.client.storage.from_(self.storage_bucket).upload(path, content, options)
        except Exception as error:  # noqa: BLE001 - normalized into BackendError
            raise BackendError("storage.upload", _error_message(error), _error_code(error)) from error

    async def create_signed_url(self, path: str, expires_in: int) -> str:
        try:
            result = await self.client.storage.from_(self.storage_bucket).create_signed_url(path, expires_in)
        except Exception as error:  # noqa: BLE001 - normalized into BackendError
            raise BackendError("storage.sign", _error_message(error), _error_code(error)) from error
        url = result.get("signedURL") or result.get("signedUrl")
        if not url:
            raise BackendError("storage.sign", "no signed URL in response")
        return url

    async def close(self) -> None:
        try:
            await self.client.auth.sign_out()
        except Exception as error:  # noqa: BLE001 - best-effort cleanup
            log.warning("Sign-out failed: %s", error)


async def create_gateway(config: BackendConfig) -> SupabaseGateway:
    """Connect to the backend named by the environment variables in ``config``.

    Raises:
        ConfDeskError: If the URL or key environment variable is unset.
    """
    url = os.getenv(config.url_env, "").strip()
    key = os.getenv(config.key_env, "").strip()
    if not url or not key:
        raise ConfDeskError(
            f"Backend credentials missing: set {config.url_env} and {config.key_env}"
        )
    client = await acreate_client(url, key)
    log.debug("Backend client created for %s", url)
    return SupabaseGateway(client, storage_bucket=config.storage_bucket)
