"""Predicates combined by list views before sorting."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Generic, Mapping, Sequence, TypeVar

from ConfDesk.listing.collation import search_key

T = TypeVar("T")

ALL = "all"


@dataclass(frozen=True, slots=True)
class FilterContext:
    """Values that derived filters compare against at render time.

    Attributes:
        now: Current instant, used by deadline filters.
        due_dates: Assignment due date per article id.
    """

    now: datetime
    due_dates: Mapping[str, datetime | None] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class FilterSpec(Generic[T]):
    """A categorical filter; ``all`` (or empty) disables it.

    Attributes:
        name: Filter identifier used in ``ListState.filters``.
        matches: ``(item, value, context) -> bool``.
        choices: Closed value set, or None when values are open (ids).
    """

    name: str
    matches: Callable[[T, str, FilterContext], bool]
    choices: Sequence[str] | None = None

    def accepts(self, value: str) -> bool:
        return value == ALL or self.choices is None or value in self.choices


def field_equals(getter: Callable[[T], Any]) -> Callable[[T, str, FilterContext], bool]:
    return lambda item, value, _ctx: getter(item) == value


def matches_search(item: T, query: str, fields: Callable[[T], Sequence[str | None]]) -> bool:
    """Case- and accent-insensitive substring match across ``fields``."""
    needle = search_key(query.strip())
    if not needle:
        return True
    return any(needle in search_key(value) for value in fields(item) if value)


def is_inactive(value: str | None) -> bool:
    return value is None or value == "" or value == ALL
