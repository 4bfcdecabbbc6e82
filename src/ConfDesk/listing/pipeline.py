"""Filter, sort and paginate a fetched collection for display."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Generic, Mapping, Sequence, TypeVar

from ConfDesk.core.timeutil import utc_now
from ConfDesk.listing.filters import FilterContext, FilterSpec, is_inactive, matches_search
from ConfDesk.listing.pagination import Page, paginate
from ConfDesk.listing.sorting import SortOption, option_names, sort_items
from ConfDesk.utils.log import log

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ListState:
    """User-controlled inputs of one list view.

    Any change to search, filters or sort returns a state on page 1; a page
    change keeps everything else.
    """

    sort: str
    search: str = ""
    filters: Mapping[str, str] = field(default_factory=dict)
    page: int = 1

    def with_search(self, search: str) -> ListState:
        return replace(self, search=search, page=1)

    def with_filter(self, name: str, value: str) -> ListState:
        return replace(self, filters={**self.filters, name: value}, page=1)

    def with_sort(self, sort: str) -> ListState:
        return replace(self, sort=sort, page=1)

    def with_page(self, page: int) -> ListState:
        return replace(self, page=page)


@dataclass(frozen=True, slots=True)
class ListDefinition(Generic[T]):
    """Search fields, filters and sort options of one named list.

    Attributes:
        key: Preference namespace of the list, e.g. ``organizer.articles``.
        search_fields: Returns the texts free-text search looks at.
        sort_options: Closed sort enumeration; the first matching name wins.
        default_sort: Option used when none or an unknown one is requested.
        filters: Categorical and derived filters, combined with AND.
    """

    key: str
    search_fields: Callable[[T], Sequence[str | None]]
    sort_options: Sequence[SortOption[T]]
    default_sort: str
    filters: Sequence[FilterSpec[T]] = ()

    @property
    def sort_names(self) -> tuple[str, ...]:
        return option_names(self.sort_options)

    def sort_option(self, name: str) -> SortOption[T]:
        for option in self.sort_options:
            if option.name == name:
                return option
        for option in self.sort_options:
            if option.name == self.default_sort:
                return option
        raise KeyError(f"{self.key}: default sort {self.default_sort!r} is not declared")

    def filter_spec(self, name: str) -> FilterSpec[T]:
        for spec in self.filters:
            if spec.name == name:
                return spec
        raise KeyError(f"{self.key}: unknown filter {name!r}")

    def filter_items(self, items: Sequence[T], state: ListState, context: FilterContext) -> list[T]:
        active = [
            (self.filter_spec(name), value)
            for name, value in state.filters.items()
            if not is_inactive(value)
        ]
        result = []
        for item in items:
            if not matches_search(item, state.search, self.search_fields):
                continue
            if all(spec.matches(item, value, context) for spec, value in active):
                result.append(item)
        return result

    def apply(
        self,
        items: Sequence[T],
        state: ListState,
        page_size: int,
        context: FilterContext | None = None,
    ) -> Page[T]:
        """Run the whole filter, sort and paginate composition once."""
        context = context or FilterContext(now=utc_now())
        ordered = sort_items(self.filter_items(items, state, context), self.sort_option(state.sort))
        return paginate(ordered, state.page, page_size)


class ListView(Generic[T]):
    """Stateful list presentation bound to the preference store.

    The sort option is read from preferences when the view opens and written
    back whenever it changes. The filtered and sorted sequence is kept
    between page changes, so paging never re-sorts.
    """

    def __init__(
        self,
        definition: ListDefinition[T],
        prefs,
        *,
        page_size: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.definition = definition
        self.prefs = prefs
        self.clock = clock
        self.page_size = page_size or prefs.snapshot().page_size
        sort = prefs.get_list_sort(definition.key, definition.sort_names, definition.default_sort)
        self.state = ListState(sort=sort)
        self._items: Sequence[T] = ()
        self._due_dates: Mapping[str, datetime | None] = {}
        self._ordered: list[T] | None = None

    def load(self, items: Sequence[T], *, due_dates: Mapping[str, datetime | None] | None = None) -> Page[T]:
        self._items = list(items)
        if due_dates is not None:
            self._due_dates = dict(due_dates)
        self._ordered = None
        return self.page()

    def set_search(self, search: str) -> Page[T]:
        self.state = self.state.with_search(search)
        self._ordered = None
        return self.page()

    def set_filter(self, name: str, value: str) -> Page[T]:
        spec = self.definition.filter_spec(name)
        if not spec.accepts(value):
            raise ValueError(f"{self.definition.key}: invalid value {value!r} for filter {name!r}")
        self.state = self.state.with_filter(name, value)
        self._ordered = None
        return self.page()

    def set_sort(self, sort: str) -> Page[T]:
        if sort not in self.definition.sort_names:
            raise ValueError(f"{self.definition.key}: unknown sort option {sort!r}")
        self.state = self.state.with_sort(sort)
        self.prefs.set_list_sort(self.definition.key, sort, self.definition.sort_names)
        self._ordered = None
        return self.page()

    def set_page(self, page: int) -> Page[T]:
        self.state = self.state.with_page(page)
        return self.page()

    def set_page_size(self, page_size: int) -> Page[T]:
        self.page_size = page_size
        self.state = self.state.with_page(1)
        return self.page()

    def ordered(self) -> list[T]:
        """Return the filtered and sorted sequence, recomputing only after input changes."""
        if self._ordered is None:
            context = FilterContext(now=self.clock(), due_dates=self._due_dates)
            filtered = self.definition.filter_items(self._items, self.state, context)
            self._ordered = sort_items(filtered, self.definition.sort_option(self.state.sort))
            log.debug(
                "%s: %d of %d items after filters, sort=%s",
                self.definition.key,
                len(self._ordered),
                len(self._items),
                self.state.sort,
            )
        return self._ordered

    def page(self) -> Page[T]:
        result = paginate(self.ordered(), self.state.page, self.page_size)
        if result.safe_page != self.state.page:
            self.state = self.state.with_page(result.safe_page)
        return result
