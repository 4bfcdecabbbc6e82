"""Command implementations for the ConfDesk CLI.

Each command takes an open ``AppSession`` and returns the text to print,
keeping click parameter handling and session setup out of the logic.
"""

from __future__ import annotations

import asyncio
import mimetypes
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Sequence

from ConfDesk.backend.files import FileDownloader, sanitize_filename
from ConfDesk.cli.factories import AppSession
from ConfDesk.core.errors import ValidationError
from ConfDesk.core.models import Article
from ConfDesk.core.scope import run_in_scope
from ConfDesk.core.timeutil import utc_now
from ConfDesk.listing import (
    AUTHOR_ARTICLES,
    LIST_DEFINITIONS,
    ORGANIZER_ARTICLES,
    ORGANIZER_CONFERENCES,
    ORGANIZER_REVIEWS,
    REVIEWER_ARTICLES,
    REVIEWER_REVIEWS,
    ROLE_MANAGEMENT_USERS,
    FilterContext,
    ListDefinition,
    ListState,
    ListView,
    Page,
    paginate,
)
from ConfDesk.prefs import PreferenceStore, format_datetime, resolve_timezone
from ConfDesk.prefs.store import LIST_SORT_PREFIX
from ConfDesk.renderers import (
    CertificateFileWriter,
    CsvFileWriter,
    ProceedingsFileWriter,
    ProceedingsRequest,
    render_page,
    render_participations,
    select_export_articles,
    select_proceedings_articles,
    status_label,
)
from ConfDesk.renderers.console import (
    article_lines,
    conference_lines,
    notification_lines,
    profile_lines,
    review_lines,
)
from ConfDesk.services import ArticleDraft, ArticleUpload, ConferenceDraft, unread_count
from ConfDesk.utils.log import log


@dataclass(frozen=True, slots=True)
class ListOptions:
    """List controls given on the command line.

    Attributes:
        search: Free-text search.
        filters: ``(name, value)`` pairs for the list's filters.
        sort: Sort option; None keeps the stored preference.
        page: Requested 1-based page; clamped by the pipeline.
        page_size: Overrides the page size preference for this call.
    """

    search: str = ""
    filters: tuple[tuple[str, str], ...] = ()
    sort: str | None = None
    page: int = 1
    page_size: int | None = None


def parse_filter_args(values: Sequence[str]) -> tuple[tuple[str, str], ...]:
    """Turn ``name=value`` arguments into filter pairs."""
    pairs: list[tuple[str, str]] = []
    for value in values:
        name, sep, choice = value.partition("=")
        if not sep or not name.strip() or not choice.strip():
            raise ValidationError("filter", f"expected name=value, got {value!r}")
        pairs.append((name.strip(), choice.strip()))
    return tuple(pairs)


def show_page(
    view: ListView,
    items: Sequence[Any],
    options: ListOptions,
    *,
    due_dates: dict[str, datetime | None] | None = None,
) -> Page:
    """Load ``items`` into ``view`` and apply the command-line list controls."""
    try:
        view.load(items, due_dates=due_dates)
        if options.page_size:
            view.set_page_size(options.page_size)
        if options.search:
            view.set_search(options.search)
        for name, value in options.filters:
            view.set_filter(name, value)
        if options.sort:
            view.set_sort(options.sort)
        return view.set_page(options.page)
    except KeyError as error:
        raise ValidationError("filter", error.args[0]) from error
    except ValueError as error:
        raise ValidationError("list", str(error)) from error


def _render(session: AppSession, page: Page, render_item: Callable, page_size: int) -> str:
    offset = (page.safe_page - 1) * page_size
    return render_page(page, session.snapshot(), render_item, offset=offset)


async def _fetch(session: AppSession, coro) -> Any:
    return await run_in_scope(session.scope, coro)


def _list_state(definition: ListDefinition, options: ListOptions, prefs: PreferenceStore) -> ListState:
    if options.sort and options.sort not in definition.sort_names:
        raise ValidationError("sort", f"unknown sort option {options.sort!r} for {definition.key}")
    sort = options.sort or prefs.get_list_sort(definition.key, definition.sort_names, definition.default_sort)
    state = ListState(sort=sort, search=options.search)
    for name, value in options.filters:
        try:
            spec = definition.filter_spec(name)
        except KeyError as error:
            raise ValidationError("filter", f"unknown filter {name!r} for {definition.key}") from error
        if not spec.accepts(value):
            raise ValidationError("filter", f"invalid value {value!r} for filter {name!r}")
        state = state.with_filter(name, value)
    return state


# Articles


async def list_articles(session: AppSession, options: ListOptions, *, mine: bool = False) -> str:
    """List articles for the caller's role.

    Organizers see every article, reviewers their open review queue and
    authors (or anyone passing ``mine``) their own submissions.
    """
    role = session.profile.role
    if role == "organizer" and not mine:
        articles = await _fetch(session, session.services.articles.list_all())
        view = session.list_view(ORGANIZER_ARTICLES, page_size=options.page_size)
        page = show_page(view, articles, options)
        return _render(session, page, article_lines, view.page_size)
    if role == "reviewer" and not mine:
        queue = await _fetch(session, session.services.articles.reviewer_queue(session.profile.id))
        view = session.list_view(REVIEWER_ARTICLES, page_size=options.page_size)
        page = show_page(view, queue.articles, options, due_dates=queue.due_dates)
        return _render(session, page, article_lines, view.page_size)

    articles = await _fetch(session, session.services.articles.list_for_author(session.profile.id))
    view = session.list_view(AUTHOR_ARTICLES, page_size=options.page_size)
    page = show_page(view, articles, options)
    return _render(session, page, article_lines, view.page_size)


async def show_article(session: AppSession, article_id: str) -> str:
    """Article details with status history, plus assignments and reviews for organizers."""
    prefs = session.snapshot()
    article = await session.services.articles.get(article_id)
    lines = article_lines(article, prefs)
    if article.conference_id and article.section_id:
        sections = await session.services.conferences.sections(article.conference_id)
        title = next((s.title for s in sections if s.id == article.section_id), None)
        if title:
            lines.append(f"Section: {title}")
    lines.append(f"Abstract: {article.abstract}")
    if article.presentation_starts_at or article.presentation_location:
        lines.append(
            f"Presentation: {format_datetime(article.presentation_starts_at, prefs)}"
            f" {article.presentation_location or ''}".rstrip()
        )

    history = await session.services.articles.status_history(article_id)
    if history:
        lines.append("History:")
        for entry in history:
            old = status_label(prefs.locale, entry.old_status) if entry.old_status else "-"
            lines.append(
                f"  {format_datetime(entry.created_at, prefs)} {old} -> "
                f"{status_label(prefs.locale, entry.new_status)} ({entry.changed_by_name or entry.changed_by})"
            )
            if entry.comments:
                lines.append(f"    {entry.comments}")

    if session.profile.role == "organizer":
        assignments, reviews = await asyncio.gather(
            session.services.articles.assignments(article_id),
            session.services.reviews.list_for_article(article_id),
        )
        if assignments:
            lines.append("Reviewers:")
            for assignment in assignments:
                state = "done" if assignment.completed_at else f"due {format_datetime(assignment.due_at, prefs)}"
                lines.append(f"  {assignment.reviewer_name or assignment.reviewer_id} [{state}] ID: {assignment.id}")
        if reviews:
            lines.append("Reviews:")
            for review in reviews:
                lines.append(f"  {review.reviewer_name or review.reviewer_id}: {review.rating}/5 {review.recommendation}")
    return "\n".join(lines) + "\n"


async def submit_article(
    session: AppSession,
    *,
    title: str,
    abstract: str,
    keywords: str,
    conference_id: str | None,
    file_path: Path | None,
) -> str:
    upload = None
    if file_path is not None:
        content_type, _ = mimetypes.guess_type(file_path.name)
        upload = ArticleUpload(filename=file_path.name, content=file_path.read_bytes(), content_type=content_type)
    draft = ArticleDraft(title=title, abstract=abstract, keywords=keywords, conference_id=conference_id)
    article = await session.services.articles.submit(session.profile.id, draft, upload)
    return f"Submitted: {article.title} ({article.id})\n"


async def export_articles(session: AppSession, options: ListOptions, mode: str) -> Path:
    """Write the CSV export of the organizer article list."""
    session.require_role("organizer")
    articles = await _fetch(session, session.services.articles.list_all())
    state = _list_state(ORGANIZER_ARTICLES, options, session.prefs)
    selected = select_export_articles(articles, state, mode, FilterContext(now=utc_now()))
    writer = CsvFileWriter(session.config.output.base_dir, encoding=session.config.output.csv_encoding)
    return writer.write(selected, mode, session.snapshot())


async def change_status(session: AppSession, article_id: str, status: str, comments: str) -> str:
    session.require_role("organizer")
    article = await session.services.articles.get(article_id)
    await session.services.articles.change_status(
        article, status, changed_by=session.profile.id, comments=comments
    )
    return f"{article.title}: {status_label(session.snapshot().locale, status)}\n"


async def assign_reviewer(
    session: AppSession, article_id: str, reviewer_id: str, due_at: datetime | None
) -> str:
    session.require_role("organizer")
    await session.services.articles.assign_reviewer(
        article_id, reviewer_id, assigned_by=session.profile.id, due_at=due_at
    )
    return f"Reviewer {reviewer_id} assigned to {article_id}\n"


async def delete_assignment(session: AppSession, assignment_id: str) -> str:
    session.require_role("organizer")
    await session.services.articles.delete_assignment(assignment_id)
    return f"Assignment {assignment_id} removed\n"


async def save_schedule(
    session: AppSession,
    article_id: str,
    *,
    review_due_at: datetime | None,
    presentation_starts_at: datetime | None,
    presentation_location: str | None,
) -> str:
    session.require_role("organizer")
    await session.services.articles.save_schedule(
        article_id,
        review_due_at=review_due_at,
        presentation_starts_at=presentation_starts_at,
        presentation_location=presentation_location,
    )
    return f"Schedule saved for {article_id}\n"


async def download_article_file(session: AppSession, article_id: str, destination: Path | None) -> str:
    """Print a fresh signed URL, or save the file when ``destination`` is given."""
    article = await session.services.articles.get(article_id)
    url = await session.services.articles.signed_file_url(article)
    if destination is None:
        return url + "\n"
    name = sanitize_filename(article.file_name or f"{article.id}.pdf") or article.id
    target = destination / name
    with FileDownloader() as downloader:
        await asyncio.to_thread(downloader.download, url, target)
    return f"Saved {target}\n"


# Reviews


async def list_reviews(session: AppSession, options: ListOptions) -> str:
    session.require_role("organizer", "reviewer")
    if session.profile.role == "organizer":
        reviews = await _fetch(session, session.services.reviews.list_submitted())
        definition = ORGANIZER_REVIEWS
    else:
        reviews = await _fetch(session, session.services.reviews.list_for_reviewer(session.profile.id))
        definition = REVIEWER_REVIEWS
    view = session.list_view(definition, page_size=options.page_size)
    page = show_page(view, reviews, options)
    return _render(session, page, review_lines, view.page_size)


async def submit_review(
    session: AppSession,
    article_id: str,
    *,
    content: str,
    rating: int,
    recommendation: str,
) -> str:
    session.require_role("reviewer")
    article = await session.services.articles.get(article_id)
    await session.services.reviews.submit(
        article,
        reviewer_id=session.profile.id,
        content=content,
        rating=rating,
        recommendation=recommendation,
    )
    return f"Review submitted for {article.title}\n"


# Conferences


async def list_conferences(session: AppSession, options: ListOptions) -> str:
    prefs = session.snapshot()
    if session.profile.role == "organizer":
        conferences = await _fetch(session, session.services.conferences.list_all())
        view = session.list_view(ORGANIZER_CONFERENCES, page_size=options.page_size)
        page = show_page(view, conferences, options)
        return _render(session, page, conference_lines, view.page_size)

    conferences = await _fetch(session, session.services.conferences.list_public())
    page_size = options.page_size or prefs.page_size
    state = _list_state(ORGANIZER_CONFERENCES, options, session.prefs).with_page(options.page)
    page = ORGANIZER_CONFERENCES.apply(conferences, state, page_size)
    return _render(session, page, conference_lines, page_size)


async def create_conference(session: AppSession, draft: ConferenceDraft) -> str:
    session.require_role("organizer")
    conference = await session.services.conferences.create(draft, organizer_id=session.profile.id)
    return f"Created conference {conference.title} ({conference.id})\n"


# Users and profile


async def list_users(session: AppSession, options: ListOptions) -> str:
    session.require_role("organizer")
    profiles = await _fetch(session, session.services.users.list_profiles())
    view = session.list_view(ROLE_MANAGEMENT_USERS, page_size=options.page_size)
    page = show_page(view, profiles, options)
    return _render(session, page, profile_lines, view.page_size)


async def set_user_role(session: AppSession, user_id: str, role: str) -> str:
    session.require_role("organizer")
    profiles = await session.services.users.list_profiles()
    target = next((profile for profile in profiles if profile.id == user_id), None)
    if target is None:
        raise ValidationError("user", f"user {user_id} not found")
    changed = await session.services.users.set_role(session.profile, target, role)
    if not changed:
        return f"Role of {target.full_name or target.email} left unchanged\n"
    return f"Role of {target.full_name or target.email} set to {role}\n"


async def save_profile(session: AppSession, *, full_name: str, institution: str | None) -> str:
    profile = await session.services.users.save_profile(
        session.profile.id, full_name=full_name, institution=institution
    )
    return f"Profile saved: {profile.full_name}\n"


# Notifications


async def list_notifications(session: AppSession, page: int, page_size: int | None) -> str:
    notifications = await _fetch(session, session.services.notifications.list_for_user(session.profile.id))
    prefs = session.snapshot()
    size = page_size or prefs.page_size
    result = paginate(notifications, page, size)
    header = f"Unread: {unread_count(notifications)}\n"
    return header + _render(session, result, notification_lines, size)


async def mark_notification_read(session: AppSession, notification_id: str) -> str:
    await session.services.notifications.mark_read(notification_id)
    return f"Notification {notification_id} marked as read\n"


async def mark_all_notifications_read(session: AppSession) -> str:
    notifications = await session.services.notifications.list_for_user(session.profile.id)
    changed = await session.services.notifications.mark_all_read(session.profile.id, notifications)
    return "All notifications marked as read\n" if changed else "No unread notifications\n"


# Certificates


async def list_participations(session: AppSession) -> str:
    entry = await session.participations.get(session.profile.id)
    return render_participations(entry.participations, entry.certificates, session.snapshot())


async def download_certificate(session: AppSession, conference_id: str) -> Path:
    """Issue (once) and write the certificate for a completed conference."""
    entry = await session.participations.get(session.profile.id)
    if not any(item.conference_id == conference_id for item in entry.participations):
        raise ValidationError("conference", "no completed participation in this conference")
    certificate = await session.participations.issue_certificate(session.profile.id, conference_id)
    writer = CertificateFileWriter(session.config.output.base_dir, session.config.output.certificate_font)
    return writer.write(certificate, session.snapshot())


# Proceedings


async def build_proceedings(session: AppSession, request: ProceedingsRequest) -> Path:
    session.require_role("organizer")
    prefs = session.snapshot()
    articles: list[Article] = await _fetch(session, session.services.articles.list_all())
    selected = select_proceedings_articles(articles, request, resolve_timezone(prefs.timezone))
    conference_title = None
    if request.mode == "conference" and request.conference_id:
        conference_title = (await session.services.conferences.get(request.conference_id)).title
    writer = ProceedingsFileWriter(session.config.output)
    return writer.write(
        selected,
        request,
        prefs,
        generated_at=datetime.now(resolve_timezone(prefs.timezone)),
        conference_title=conference_title,
    )


# Preferences (local only)


def show_preferences(prefs: PreferenceStore) -> str:
    snapshot = prefs.snapshot()
    lines = [
        f"theme: {snapshot.theme}",
        f"language: {snapshot.locale}",
        f"timezone: {snapshot.timezone}",
        f"page_size: {snapshot.page_size}",
        f"email_notifications: {'true' if snapshot.email_notifications else 'false'}",
        f"compact_mode: {'true' if snapshot.compact_mode else 'false'}",
    ]
    for key, definition in LIST_DEFINITIONS.items():
        sort = prefs.get_list_sort(key, definition.sort_names, definition.default_sort)
        lines.append(f"{LIST_SORT_PREFIX}{key}: {sort}")
    return "\n".join(lines) + "\n"


def set_list_sort(prefs: PreferenceStore, list_key: str, sort: str) -> bool:
    definition = LIST_DEFINITIONS.get(list_key)
    if definition is None:
        raise ValidationError("list", f"unknown list {list_key!r}")
    stored = prefs.set_list_sort(list_key, sort, definition.sort_names)
    if stored:
        log.info("Default sort of %s set to %s", list_key, sort)
    return stored
