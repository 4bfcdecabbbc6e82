"""Review submission and listing."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from ConfDesk.backend.gateway import Gateway
from ConfDesk.core.errors import ValidationError
from ConfDesk.core.models import RECOMMENDATIONS, Article, Review
from ConfDesk.core.timeutil import to_iso, utc_now
from ConfDesk.utils.log import log


class ReviewService:
    def __init__(self, gateway: Gateway, *, clock: Callable[[], datetime] = utc_now) -> None:
        self.gateway = gateway
        self.clock = clock

    async def submit(
        self,
        article: Article,
        *,
        reviewer_id: str,
        content: str,
        rating: int,
        recommendation: str,
    ) -> None:
        """Insert a submitted review, then move the article to ``under_review``.

        Raises:
            ValidationError: If the form values are out of range.
            BackendError: If either write fails; the second is not attempted
                after a failed first.
        """
        if not content.strip():
            raise ValidationError("content", "review text is required")
        if isinstance(rating, bool) or not 1 <= rating <= 5:
            raise ValidationError("rating", "rating must be between 1 and 5")
        if recommendation not in RECOMMENDATIONS:
            raise ValidationError("recommendation", f"unknown recommendation {recommendation!r}")
        if article.author_id == reviewer_id:
            raise ValidationError("article", "authors cannot review their own article")

        await self.gateway.insert_review(
            {
                "article_id": article.id,
                "reviewer_id": reviewer_id,
                "content": content,
                "rating": rating,
                "recommendation": recommendation,
                "status": "submitted",
                "submitted_at": to_iso(self.clock()),
            }
        )
        await self.gateway.update_article(article.id, {"status": "under_review"})
        log.info("Review submitted for article %s", article.id)

    async def list_for_reviewer(self, reviewer_id: str) -> list[Review]:
        return await self.gateway.list_reviews(reviewer_id=reviewer_id)

    async def list_submitted(self) -> list[Review]:
        return await self.gateway.list_reviews(submitted_only=True)

    async def list_for_article(self, article_id: str) -> list[Review]:
        return await self.gateway.list_reviews(article_id=article_id, submitted_only=True)
