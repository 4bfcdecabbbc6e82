"""Page arithmetic shared by every list view."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    """Visible slice of an ordered collection.

    Attributes:
        safe_page: Requested page clamped into ``[1, total_pages]``.
        total_pages: Number of pages, at least 1 even for an empty collection.
        page_items: Items shown on ``safe_page``.
        total_items: Length of the collection that was paginated.
    """

    safe_page: int
    total_pages: int
    page_items: list[T]
    total_items: int = 0


def total_pages(total_items: int, page_size: int) -> int:
    """Count the pages needed for ``total_items``.

    Args:
        total_items: Length of the filtered collection.
        page_size: Items per page; 0 yields a single empty page.

    Returns:
        At least 1, so an empty collection still has a first page.

    Raises:
        ValueError: If ``page_size`` is negative.
    """
    if page_size < 0:
        raise ValueError(f"page_size must not be negative, got {page_size}")
    if page_size == 0:
        return 1
    return max(1, math.ceil(total_items / page_size))


def clamp_page(page: int, total_items: int, page_size: int) -> int:
    """Correct ``page`` into ``[1, total_pages(total_items, page_size)]``."""
    return min(max(1, page), total_pages(total_items, page_size))


def paginate(items: Sequence[T], page: int, page_size: int) -> Page[T]:
    """Return the clamped page of ``items``.

    Out-of-range pages are corrected instead of rejected, so callers never
    render an empty page while items exist. A ``page_size`` of 0 is the one
    exception: a single page with no items.

    Raises:
        ValueError: If ``page_size`` is negative.
    """
    pages = total_pages(len(items), page_size)
    safe_page = min(max(1, page), pages)
    start = (safe_page - 1) * page_size
    return Page(
        safe_page=safe_page,
        total_pages=pages,
        page_items=list(items[start : start + page_size]),
        total_items=len(items),
    )
