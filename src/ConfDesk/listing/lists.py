"""Concrete list definitions for every dashboard list."""

from __future__ import annotations

from ConfDesk.core.models import (
    ARTICLE_STATUSES,
    CONFERENCE_STATUSES,
    RECOMMENDATIONS,
    Article,
    Conference,
    Profile,
    Review,
)
from ConfDesk.listing.filters import FilterContext, FilterSpec, field_equals
from ConfDesk.listing.pipeline import ListDefinition
from ConfDesk.listing.sorting import (
    SortOption,
    date_and_title_options,
    number_key,
    timestamp_key,
)

DEADLINE_CHOICES = ("overdue", "upcoming")
VISIBILITY_CHOICES = ("public", "private")


def _deadline_matches(article: Article, value: str, context: FilterContext) -> bool:
    due_at = context.due_dates.get(article.id)
    overdue = due_at is not None and due_at < context.now
    return overdue if value == "overdue" else not overdue


def _visibility_matches(conference: Conference, value: str, _context: FilterContext) -> bool:
    return conference.is_public if value == "public" else not conference.is_public


_article_date = timestamp_key(lambda a: a.submitted_at)
ARTICLE_SORT_OPTIONS = date_and_title_options(_article_date, lambda a: a.title)

# Reviews without a submission timestamp order by creation time.
_review_date = timestamp_key(lambda r: r.submitted_at, lambda r: r.created_at)
_review_rating = number_key(lambda r: r.rating)
REVIEW_SORT_OPTIONS = [
    *date_and_title_options(_review_date, lambda r: r.article_title),
    SortOption("rating_desc", _review_rating, descending=True),
    SortOption("rating_asc", _review_rating),
]

CONFERENCE_SORT_OPTIONS = date_and_title_options(
    timestamp_key(lambda c: c.start_date), lambda c: c.title, date_prefix="start"
)

USER_SORT_OPTIONS = date_and_title_options(
    timestamp_key(lambda p: p.created_at), lambda p: p.full_name, title_prefix="name"
)

_conference_filter = FilterSpec("conference", field_equals(lambda a: a.conference_id))
_review_conference_filter = FilterSpec(
    "conference", field_equals(lambda r: r.article_conference_id)
)
_recommendation_filter = FilterSpec(
    "recommendation", field_equals(lambda r: r.recommendation), RECOMMENDATIONS
)

ORGANIZER_ARTICLES: ListDefinition[Article] = ListDefinition(
    key="organizer.articles",
    search_fields=lambda a: (a.title, a.abstract, a.author_name, a.conference_title),
    sort_options=ARTICLE_SORT_OPTIONS,
    default_sort="date_desc",
    filters=(
        FilterSpec("status", field_equals(lambda a: a.status), ARTICLE_STATUSES),
        _conference_filter,
    ),
)

AUTHOR_ARTICLES: ListDefinition[Article] = ListDefinition(
    key="author.articles",
    search_fields=lambda a: (a.title, a.abstract, a.conference_title),
    sort_options=ARTICLE_SORT_OPTIONS,
    default_sort="date_desc",
    filters=(
        FilterSpec("status", field_equals(lambda a: a.status), ARTICLE_STATUSES),
        _conference_filter,
    ),
)

REVIEWER_ARTICLES: ListDefinition[Article] = ListDefinition(
    key="reviewer.articles",
    search_fields=lambda a: (a.title, a.abstract, a.author_name),
    sort_options=ARTICLE_SORT_OPTIONS,
    default_sort="date_desc",
    filters=(
        FilterSpec("deadline", _deadline_matches, DEADLINE_CHOICES),
        _conference_filter,
    ),
)

ORGANIZER_REVIEWS: ListDefinition[Review] = ListDefinition(
    key="organizer.reviews",
    search_fields=lambda r: (r.article_title, r.reviewer_name, r.content),
    sort_options=REVIEW_SORT_OPTIONS,
    default_sort="date_desc",
    filters=(_recommendation_filter, _review_conference_filter),
)

REVIEWER_REVIEWS: ListDefinition[Review] = ListDefinition(
    key="reviewer.reviews",
    search_fields=lambda r: (r.content, r.article_title, r.article_author_name),
    sort_options=REVIEW_SORT_OPTIONS,
    default_sort="date_desc",
    filters=(_recommendation_filter, _review_conference_filter),
)

ORGANIZER_CONFERENCES: ListDefinition[Conference] = ListDefinition(
    key="organizer.conferences",
    search_fields=lambda c: (c.title, c.location),
    sort_options=CONFERENCE_SORT_OPTIONS,
    default_sort="start_desc",
    filters=(
        FilterSpec("status", field_equals(lambda c: c.status), CONFERENCE_STATUSES),
        FilterSpec("visibility", _visibility_matches, VISIBILITY_CHOICES),
    ),
)

ROLE_MANAGEMENT_USERS: ListDefinition[Profile] = ListDefinition(
    key="role_management.users",
    search_fields=lambda p: (p.full_name, p.email, p.institution),
    sort_options=USER_SORT_OPTIONS,
    default_sort="date_desc",
)

LIST_DEFINITIONS: dict[str, ListDefinition] = {
    definition.key: definition
    for definition in (
        ORGANIZER_ARTICLES,
        AUTHOR_ARTICLES,
        REVIEWER_ARTICLES,
        ORGANIZER_REVIEWS,
        REVIEWER_REVIEWS,
        ORGANIZER_CONFERENCES,
        ROLE_MANAGEMENT_USERS,
    )
}
