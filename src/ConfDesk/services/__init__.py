"""Application services: validated operations over the backend gateway."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ConfDesk.services.articles import ArticleDraft, ArticleService, ArticleUpload, ReviewerQueue
from ConfDesk.services.certificates import CertificateSource, derive_participations
from ConfDesk.services.conferences import ConferenceDraft, ConferenceService
from ConfDesk.services.notifications import NotificationService, unread_count
from ConfDesk.services.reviews import ReviewService
from ConfDesk.services.users import UserService, can_change_role

if TYPE_CHECKING:
    from ConfDesk.backend.gateway import Gateway
    from ConfDesk.config import AppConfig


@dataclass(frozen=True, slots=True)
class Services:
    """All services bound to one gateway."""

    articles: ArticleService
    reviews: ReviewService
    conferences: ConferenceService
    notifications: NotificationService
    users: UserService


def create_services(config: AppConfig, gateway: Gateway) -> Services:
    return Services(
        articles=ArticleService(gateway, signed_url_ttl=config.backend.signed_url_ttl),
        reviews=ReviewService(gateway),
        conferences=ConferenceService(gateway),
        notifications=NotificationService(gateway),
        users=UserService(gateway),
    )


__all__ = [
    "ArticleDraft",
    "ArticleService",
    "ArticleUpload",
    "CertificateSource",
    "ConferenceDraft",
    "ConferenceService",
    "NotificationService",
    "ReviewService",
    "ReviewerQueue",
    "Services",
    "UserService",
    "can_change_role",
    "create_services",
    "derive_participations",
    "unread_count",
]
