"""List presentation: filtering, sorting and pagination of fetched collections."""

from ConfDesk.listing.filters import ALL, FilterContext, FilterSpec
from ConfDesk.listing.lists import (
    AUTHOR_ARTICLES,
    LIST_DEFINITIONS,
    ORGANIZER_ARTICLES,
    ORGANIZER_CONFERENCES,
    ORGANIZER_REVIEWS,
    REVIEWER_ARTICLES,
    REVIEWER_REVIEWS,
    ROLE_MANAGEMENT_USERS,
)
from ConfDesk.listing.pagination import Page, clamp_page, paginate, total_pages
from ConfDesk.listing.pipeline import ListDefinition, ListState, ListView
from ConfDesk.listing.sorting import SortOption, sort_items

__all__ = [
    "ALL",
    "AUTHOR_ARTICLES",
    "LIST_DEFINITIONS",
    "ORGANIZER_ARTICLES",
    "ORGANIZER_CONFERENCES",
    "ORGANIZER_REVIEWS",
    "REVIEWER_ARTICLES",
    "REVIEWER_REVIEWS",
    "ROLE_MANAGEMENT_USERS",
    "FilterContext",
    "FilterSpec",
    "ListDefinition",
    "ListState",
    "ListView",
    "Page",
    "SortOption",
    "clamp_page",
    "paginate",
    "sort_items",
    "total_pages",
]
