"""Sort options and comparators for list views."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Callable, Generic, Iterable, Sequence, TypeVar

from ConfDesk.core.timeutil import EPOCH
from ConfDesk.listing.collation import sort_key

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class SortOption(Generic[T]):
    """One entry of a list's closed sort enumeration.

    Attributes:
        name: Stored identifier, e.g. ``date_desc``.
        key: Extracts the comparable value from an item.
        descending: Whether larger keys come first.
    """

    name: str
    key: Callable[[T], Any]
    descending: bool = False


def sort_items(items: Iterable[T], option: SortOption[T]) -> list[T]:
    """Return a new list ordered by ``option``; ties keep their input order."""
    return sorted(items, key=option.key, reverse=option.descending)


def text_key(getter: Callable[[T], str | None]) -> Callable[[T], tuple[int, ...]]:
    """Build a case-insensitive alphabetical key.

    Args:
        getter: Extracts the text to order by; None sorts first.

    Returns:
        Key function returning the collation key of the extracted text.
    """
    return lambda item: sort_key(getter(item))


def timestamp_key(*getters: Callable[[T], datetime | date | None]) -> Callable[[T], datetime]:
    """Build a chronological key with fallback fields.

    Args:
        getters: Date accessors tried in order, e.g. submitted then created.

    Returns:
        Key function returning the first present value as an aware datetime.
        Items without any date sort as the epoch.
    """

    def key(item: T) -> datetime:
        for getter in getters:
            value = getter(item)
            if value is None:
                continue
            if isinstance(value, datetime):
                return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
            return datetime.combine(value, time.min, tzinfo=timezone.utc)
        return EPOCH

    return key


def number_key(getter: Callable[[T], float | int | None]) -> Callable[[T], float]:
    """Build a numeric key; missing values count as 0.

    Args:
        getter: Extracts the number to order by, e.g. a review rating.

    Returns:
        Key function returning the value as float.
    """

    def key(item: T) -> float:
        value = getter(item)
        return 0.0 if value is None else float(value)

    return key


def date_and_title_options(
    date_key: Callable[[T], datetime],
    title_getter: Callable[[T], str | None],
    *,
    date_prefix: str = "date",
    title_prefix: str = "title",
) -> list[SortOption[T]]:
    """Build the ``<date>_desc, <date>_asc, <title>_asc, <title>_desc`` quartet."""
    title = text_key(title_getter)
    return [
        SortOption(f"{date_prefix}_desc", date_key, descending=True),
        SortOption(f"{date_prefix}_asc", date_key),
        SortOption(f"{title_prefix}_asc", title),
        SortOption(f"{title_prefix}_desc", title, descending=True),
    ]


def option_names(options: Sequence[SortOption[T]]) -> tuple[str, ...]:
    """Return the stored identifiers of ``options`` in declaration order."""
    return tuple(option.name for option in options)
