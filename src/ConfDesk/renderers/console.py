"""Console text output renderers.

Renders one page of a list into human-friendly text followed by a
pagination footer.
"""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

from ConfDesk.core.models import (
    Article,
    AuthorCertificate,
    AuthorParticipation,
    Conference,
    Notification,
    Profile,
    Review,
)
from ConfDesk.listing.pagination import Page
from ConfDesk.prefs.formatting import format_date, format_datetime
from ConfDesk.prefs.store import Preferences
from ConfDesk.renderers.labels import enum_label, label, status_label
from ConfDesk.utils.log import log

T = TypeVar("T")


def render_page(
    page: Page[T],
    prefs: Preferences,
    render_item: Callable[[T, Preferences], list[str]],
    *,
    offset: int = 0,
) -> str:
    """Render a page of items with a ``Page x of y`` footer.

    Args:
        page: Visible slice produced by the list pipeline.
        prefs: Preference snapshot used for dates and labels.
        render_item: Returns the lines for one item; the first line is numbered.
        offset: Absolute index of the first item on the page.

    Returns:
        A formatted string ready to be printed.
    """
    if not page.page_items:
        return label(prefs.locale, "list.empty") + "\n"
    lines: list[str] = []
    for idx, item in enumerate(page.page_items, start=offset + 1):
        item_lines = render_item(item, prefs)
        lines.append(f"{idx}. {item_lines[0]}")
        lines.extend(f"   {line}" for line in item_lines[1:])
        if not prefs.compact_mode:
            lines.append("")
    lines.append(
        label(
            prefs.locale,
            "pagination.page",
            page=page.safe_page,
            pages=page.total_pages,
            total=page.total_items,
        )
    )
    return "\n".join(lines).rstrip() + "\n"


def article_lines(article: Article, prefs: Preferences) -> list[str]:
    lines = [
        article.title,
        f"[{status_label(prefs.locale, article.status)}] {article.author_name or '-'}",
        f"Submitted: {format_datetime(article.submitted_at, prefs)}",
    ]
    if article.conference_title:
        lines.append(f"Conference: {article.conference_title}")
    if prefs.compact_mode:
        return lines
    if article.keywords:
        lines.append(f"Keywords: {', '.join(article.keywords)}")
    if article.review_due_at:
        lines.append(f"Review due: {format_datetime(article.review_due_at, prefs)}")
    lines.append(f"ID: {article.id}")
    return lines


def review_lines(review: Review, prefs: Preferences) -> list[str]:
    lines = [
        review.article_title or review.article_id,
        f"{review.rating}/5  {enum_label(prefs.locale, 'recommendation', review.recommendation)}",
        f"Reviewer: {review.reviewer_name or '-'}  "
        f"Date: {format_datetime(review.submitted_at or review.created_at, prefs)}",
    ]
    if not prefs.compact_mode and review.content:
        lines.append(review.content.strip())
    return lines


def conference_lines(conference: Conference, prefs: Preferences) -> list[str]:
    visibility = "public" if conference.is_public else "private"
    lines = [
        conference.title,
        f"{format_date(conference.start_date, prefs)} - {format_date(conference.end_date, prefs)}"
        f"  [{enum_label(prefs.locale, 'conference_status', conference.status)}, {visibility}]",
    ]
    if conference.location:
        lines.append(f"Location: {conference.location}")
    if not prefs.compact_mode:
        lines.append(f"ID: {conference.id}")
    return lines


def profile_lines(profile: Profile, prefs: Preferences) -> list[str]:
    lines = [
        profile.full_name or profile.email,
        f"{profile.email}  [{enum_label(prefs.locale, 'role', profile.role)}]",
    ]
    if profile.institution:
        lines.append(profile.institution)
    if not prefs.compact_mode:
        lines.append(f"Registered: {format_date(profile.created_at, prefs)}  ID: {profile.id}")
    return lines


def notification_lines(notification: Notification, prefs: Preferences) -> list[str]:
    marker = " " if notification.read else "*"
    return [
        f"{marker} {notification.title}",
        notification.message,
        f"{format_datetime(notification.created_at, prefs)}  ID: {notification.id}",
    ]


def render_participations(
    participations: Iterable[AuthorParticipation],
    certificates: dict[str, AuthorCertificate],
    prefs: Preferences,
) -> str:
    """Render completed-conference participations with their certificate numbers."""
    lines: list[str] = []
    for idx, item in enumerate(participations, start=1):
        certificate = certificates.get(item.conference_id)
        lines.append(f"{idx}. {item.conference_title}")
        lines.append(
            f"   {format_date(item.conference_start_date, prefs)}"
            f" - {format_date(item.conference_end_date, prefs)}"
        )
        lines.append(f"   {item.article_title} [{status_label(prefs.locale, item.article_status)}]")
        if certificate is not None:
            lines.append(f"   Certificate: {certificate.certificate_number}")
        lines.append(f"   Conference ID: {item.conference_id}")
    if not lines:
        return label(prefs.locale, "list.empty") + "\n"
    return "\n".join(lines) + "\n"


class ConsoleOutputWriter:
    """Write rendered text to the console via logging."""

    def write(self, text: str) -> None:
        for line in text.splitlines():
            log.info(line)
