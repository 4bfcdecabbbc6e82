"""Article submission, review workflow mutations and file access."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Sequence

from ConfDesk.backend.files import (
    build_upload_path,
    get_storage_path_from_file_url,
    validate_article_file,
)
from ConfDesk.backend.gateway import Gateway
from ConfDesk.core.errors import ValidationError
from ConfDesk.core.models import (
    ARTICLE_STATUSES,
    Article,
    ArticleStatusHistory,
    Conference,
    ReviewAssignment,
)
from ConfDesk.core.timeutil import to_iso, utc_now
from ConfDesk.utils.log import log

REVIEWABLE_STATUSES = ("submitted", "under_review")


@dataclass(frozen=True, slots=True)
class ArticleUpload:
    """File chosen for a new submission."""

    filename: str
    content: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True, slots=True)
class ArticleDraft:
    """Form values of a new submission before validation."""

    title: str
    abstract: str
    keywords: str
    conference_id: str | None = None


@dataclass(frozen=True, slots=True)
class ReviewerQueue:
    """Articles waiting for one reviewer, with their assignment due dates."""

    articles: list[Article]
    due_dates: dict[str, datetime | None]


def parse_keywords(text: str) -> list[str]:
    """Split a comma separated keyword field, dropping blanks."""
    return [keyword.strip() for keyword in text.split(",") if keyword.strip()]


def validate_submission(draft: ArticleDraft, upload: ArticleUpload | None) -> list[str]:
    """Check the form fields that need no backend data.

    Args:
        draft: Title, abstract, keywords and chosen conference.
        upload: Selected file, or None when nothing was chosen.

    Returns:
        The parsed keywords.

    Raises:
        ValidationError: On the first rule the form breaks.
    """
    if not draft.title.strip():
        raise ValidationError("title", "title is required")
    if not draft.abstract.strip():
        raise ValidationError("abstract", "abstract is required")
    keywords = parse_keywords(draft.keywords)
    if not keywords:
        raise ValidationError("keywords", "at least one keyword is required")
    if upload is None:
        raise ValidationError("file", "an article file is required")
    validate_article_file(upload.filename, upload.size, upload.content_type)
    return keywords


def validate_conference_choice(draft: ArticleDraft, open_conferences: Sequence[Conference]) -> None:
    """Require a known conference whenever any public conference exists.

    Raises:
        ValidationError: If the choice is missing or not among ``open_conferences``.
    """
    if not open_conferences:
        return
    if not draft.conference_id:
        raise ValidationError("conference", "choose a conference")
    if draft.conference_id not in {c.id for c in open_conferences}:
        raise ValidationError("conference", "unknown conference")


class ArticleService:
    """Article operations for authors, reviewers and organizers.

    Dependent writes are issued one after the other; a failure stops the
    sequence and propagates as ``BackendError``.
    """

    def __init__(
        self,
        gateway: Gateway,
        *,
        signed_url_ttl: int = 3600,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.gateway = gateway
        self.signed_url_ttl = signed_url_ttl
        self.clock = clock

    async def submit(
        self,
        author_id: str,
        draft: ArticleDraft,
        upload: ArticleUpload | None,
    ) -> Article:
        """Validate, upload the file and insert the article row.

        Form fields are checked before any backend call; conferences are only
        fetched for the conference rule. The row stores the storage path;
        signed URLs are created on demand.
        """
        keywords = validate_submission(draft, upload)
        open_conferences = await self.gateway.list_conferences(public_only=True)
        validate_conference_choice(draft, open_conferences)
        epoch_ms = int(self.clock().timestamp() * 1000)
        path = build_upload_path(author_id, upload.filename, epoch_ms)
        await self.gateway.upload_file(path, upload.content, upload.content_type)
        article = await self.gateway.insert_article(
            {
                "title": draft.title.strip(),
                "abstract": draft.abstract.strip(),
                "keywords": keywords,
                "file_url": path,
                "file_name": upload.filename,
                "conference_id": draft.conference_id or None,
                "author_id": author_id,
            }
        )
        log.info("Submitted article %s (%s)", article.id, article.title)
        return article

    async def list_for_author(self, author_id: str) -> list[Article]:
        return await self.gateway.list_articles(author_id=author_id)

    async def list_all(self) -> list[Article]:
        return await self.gateway.list_articles()

    async def get(self, article_id: str) -> Article:
        articles = await self.gateway.list_articles(ids=[article_id])
        if not articles:
            raise ValidationError("article", f"article {article_id} not found")
        return articles[0]

    async def reviewer_queue(self, reviewer_id: str) -> ReviewerQueue:
        """Open assignments of a reviewer, minus own and already reviewed articles."""
        assignments = await self.gateway.list_assignments(reviewer_id=reviewer_id, open_only=True)
        due_dates = {a.article_id: a.due_at for a in assignments}
        if not due_dates:
            return ReviewerQueue(articles=[], due_dates={})
        articles = await self.gateway.list_articles(
            ids=list(due_dates),
            statuses=REVIEWABLE_STATUSES,
        )
        reviews = await self.gateway.list_reviews(reviewer_id=reviewer_id)
        reviewed = {review.article_id for review in reviews}
        queue = [
            article
            for article in articles
            if article.author_id != reviewer_id and article.id not in reviewed
        ]
        return ReviewerQueue(articles=queue, due_dates=due_dates)

    async def change_status(
        self,
        article: Article,
        new_status: str,
        *,
        changed_by: str,
        comments: str = "",
    ) -> None:
        """Record the transition in the history, then update the article."""
        if new_status not in ARTICLE_STATUSES:
            raise ValidationError("status", f"unknown status {new_status!r}")
        await self.gateway.insert_status_history(
            {
                "article_id": article.id,
                "old_status": article.status,
                "new_status": new_status,
                "changed_by": changed_by,
                "comments": comments,
            }
        )
        await self.gateway.update_article(
            article.id,
            {"status": new_status, "updated_at": to_iso(self.clock())},
        )
        log.info("Article %s: %s -> %s", article.id, article.status, new_status)

    async def status_history(self, article_id: str) -> list[ArticleStatusHistory]:
        return await self.gateway.list_status_history(article_id)

    async def assignments(self, article_id: str) -> list[ReviewAssignment]:
        return await self.gateway.list_assignments(article_id=article_id)

    async def assign_reviewer(
        self,
        article_id: str,
        reviewer_id: str,
        *,
        assigned_by: str,
        due_at: datetime | None = None,
    ) -> None:
        if not reviewer_id:
            raise ValidationError("reviewer", "choose a reviewer")
        await self.gateway.upsert_assignment(
            {
                "article_id": article_id,
                "reviewer_id": reviewer_id,
                "assigned_by": assigned_by,
                "due_at": to_iso(due_at),
                "updated_at": to_iso(self.clock()),
            }
        )
        log.info("Assigned reviewer %s to article %s", reviewer_id, article_id)

    async def delete_assignment(self, assignment_id: str) -> None:
        await self.gateway.delete_assignment(assignment_id)

    async def save_schedule(
        self,
        article_id: str,
        *,
        review_due_at: datetime | None,
        presentation_starts_at: datetime | None,
        presentation_location: str | None,
    ) -> None:
        location = (presentation_location or "").strip() or None
        await self.gateway.update_article(
            article_id,
            {
                "review_due_at": to_iso(review_due_at),
                "presentation_starts_at": to_iso(presentation_starts_at),
                "presentation_location": location,
                "updated_at": to_iso(self.clock()),
            },
        )

    async def signed_file_url(self, article: Article) -> str:
        """Exchange the article's stored file reference for a fresh signed URL."""
        path = get_storage_path_from_file_url(article.file_url)
        if path is None:
            raise ValidationError("file", "article has no downloadable file")
        return await self.gateway.create_signed_url(path, self.signed_url_ttl)
