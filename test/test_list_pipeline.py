"""Tests for the filter, sort and paginate pipeline of list views."""

import sys
import unittest
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ConfDesk.core.models import Article, Conference, Profile, Review
from ConfDesk.listing import (
    ORGANIZER_ARTICLES,
    ORGANIZER_CONFERENCES,
    ORGANIZER_REVIEWS,
    REVIEWER_ARTICLES,
    ROLE_MANAGEMENT_USERS,
    FilterContext,
    ListDefinition,
    ListState,
    ListView,
    SortOption,
)
from ConfDesk.prefs.store import PreferenceStore
from ConfDesk.storage.kv import MemoryKeyValueStore

NOW = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)


def _article(idx: int, title: str, **kwargs) -> Article:
    values = {
        "id": f"a{idx}",
        "title": title,
        "abstract": kwargs.pop("abstract", "Plain abstract"),
        "author_id": kwargs.pop("author_id", "author-1"),
        "status": kwargs.pop("status", "submitted"),
        "submitted_at": kwargs.pop("submitted_at", NOW - timedelta(days=idx)),
    }
    values.update(kwargs)
    return Article(**values)


def _review(idx: int, rating: int, **kwargs) -> Review:
    values = {
        "id": f"r{idx}",
        "article_id": f"a{idx}",
        "reviewer_id": "reviewer-1",
        "content": kwargs.pop("content", "Solid work"),
        "rating": rating,
        "recommendation": kwargs.pop("recommendation", "accept"),
        "status": "submitted",
        "submitted_at": kwargs.pop("submitted_at", NOW - timedelta(days=idx)),
        "created_at": kwargs.pop("created_at", NOW - timedelta(days=idx + 1)),
        "article_title": kwargs.pop("article_title", f"Article {idx}"),
    }
    values.update(kwargs)
    return Review(**values)


def _prefs(initial=None) -> PreferenceStore:
    return PreferenceStore(MemoryKeyValueStore(initial))


class TestListDefinitionApply(unittest.TestCase):
    def test_title_asc_is_case_and_accent_insensitive(self) -> None:
        articles = [
            _article(1, "delta"),
            _article(2, "Émile studies"),
            _article(3, "beta"),
            _article(4, "Alpha"),
        ]
        page = ORGANIZER_ARTICLES.apply(articles, ListState(sort="title_asc"), 8)
        self.assertEqual([a.title for a in page.page_items], ["Alpha", "beta", "delta", "Émile studies"])

    def test_desc_is_reverse_of_asc_for_distinct_dates(self) -> None:
        articles = [_article(i, f"T{i}") for i in range(6)]
        asc = ORGANIZER_ARTICLES.apply(articles, ListState(sort="date_asc"), 50).page_items
        desc = ORGANIZER_ARTICLES.apply(articles, ListState(sort="date_desc"), 50).page_items
        self.assertEqual(desc, list(reversed(asc)))
        self.assertEqual(desc[0].id, "a0")

    def test_unknown_sort_falls_back_to_default(self) -> None:
        articles = [_article(2, "old"), _article(0, "new")]
        page = ORGANIZER_ARTICLES.apply(articles, ListState(sort="bogus"), 8)
        self.assertEqual([a.title for a in page.page_items], ["new", "old"])

    def test_missing_submission_date_sorts_as_oldest(self) -> None:
        articles = [_article(0, "undated", submitted_at=None), _article(5, "dated")]
        page = ORGANIZER_ARTICLES.apply(articles, ListState(sort="date_desc"), 8)
        self.assertEqual([a.title for a in page.page_items], ["dated", "undated"])

    def test_rating_desc_keeps_input_order_for_ties(self) -> None:
        reviews = [_review(1, 3), _review(2, 5), _review(3, 1), _review(4, 5)]
        page = ORGANIZER_REVIEWS.apply(reviews, ListState(sort="rating_desc"), 8)
        self.assertEqual([r.id for r in page.page_items], ["r2", "r4", "r1", "r3"])

    def test_review_date_falls_back_to_created_at(self) -> None:
        draft = _review(1, 4, submitted_at=None, created_at=NOW)
        submitted = _review(2, 4, submitted_at=NOW - timedelta(days=3))
        page = ORGANIZER_REVIEWS.apply([submitted, draft], ListState(sort="date_desc"), 8)
        self.assertEqual([r.id for r in page.page_items], ["r1", "r2"])

    def test_search_neural_over_fifty_articles(self) -> None:
        articles = []
        for idx in range(50):
            if idx % 10 == 0:
                articles.append(_article(idx, f"Neural methods {idx}"))
            elif idx == 7:
                articles.append(_article(idx, "Graph theory", abstract="A NEURAL approach"))
            else:
                articles.append(_article(idx, f"Topic {idx}"))
        state = ListState(sort="date_desc", search="neural")
        page = ORGANIZER_ARTICLES.apply(articles, state, 8)
        self.assertEqual(page.total_items, 6)
        self.assertEqual(page.total_pages, 1)
        self.assertEqual([a.id for a in page.page_items], ["a0", "a7", "a10", "a20", "a30", "a40"])

    def test_search_matches_embedded_author_and_conference(self) -> None:
        articles = [
            _article(1, "One", author_name="Olena Kovalenko"),
            _article(2, "Two", conference_title="Kyiv Systems Forum"),
            _article(3, "Three"),
        ]
        by_author = ORGANIZER_ARTICLES.apply(articles, ListState(sort="date_desc", search="kovalenko"), 8)
        by_conf = ORGANIZER_ARTICLES.apply(articles, ListState(sort="date_desc", search="systems"), 8)
        self.assertEqual([a.id for a in by_author.page_items], ["a1"])
        self.assertEqual([a.id for a in by_conf.page_items], ["a2"])

    def test_status_and_conference_filters_combine(self) -> None:
        articles = [
            _article(1, "A", status="accepted", conference_id="c1"),
            _article(2, "B", status="accepted", conference_id="c2"),
            _article(3, "C", status="rejected", conference_id="c1"),
        ]
        state = ListState(sort="date_desc").with_filter("status", "accepted").with_filter("conference", "c1")
        page = ORGANIZER_ARTICLES.apply(articles, state, 8)
        self.assertEqual([a.id for a in page.page_items], ["a1"])

        everything = state.with_filter("status", "all").with_filter("conference", "all")
        self.assertEqual(ORGANIZER_ARTICLES.apply(articles, everything, 8).total_items, 3)

    def test_deadline_filter_uses_due_dates(self) -> None:
        articles = [_article(1, "late"), _article(2, "soon"), _article(3, "open")]
        context = FilterContext(
            now=NOW,
            due_dates={"a1": NOW - timedelta(hours=1), "a2": NOW + timedelta(days=2), "a3": None},
        )
        overdue = REVIEWER_ARTICLES.apply(
            articles, ListState(sort="date_desc").with_filter("deadline", "overdue"), 8, context
        )
        upcoming = REVIEWER_ARTICLES.apply(
            articles, ListState(sort="date_desc").with_filter("deadline", "upcoming"), 8, context
        )
        self.assertEqual([a.title for a in overdue.page_items], ["late"])
        self.assertEqual([a.title for a in upcoming.page_items], ["soon", "open"])

    def test_conference_visibility_and_start_sort(self) -> None:
        conferences = [
            Conference(id="c1", title="Spring", start_date=date(2025, 3, 1), end_date=None, is_public=True),
            Conference(id="c2", title="Closed door", start_date=date(2025, 6, 1), end_date=None, is_public=False),
            Conference(id="c3", title="Autumn", start_date=date(2025, 10, 1), end_date=None, is_public=True),
        ]
        state = ListState(sort="start_asc").with_filter("visibility", "public")
        page = ORGANIZER_CONFERENCES.apply(conferences, state, 8)
        self.assertEqual([c.id for c in page.page_items], ["c1", "c3"])
        self.assertEqual(ORGANIZER_CONFERENCES.default_sort, "start_desc")

    def test_users_sort_by_name(self) -> None:
        profiles = [
            Profile(id="u1", email="z@example.org", full_name="zoe", role="author"),
            Profile(id="u2", email="a@example.org", full_name="Andrii", role="reviewer"),
        ]
        page = ROLE_MANAGEMENT_USERS.apply(profiles, ListState(sort="name_asc"), 8)
        self.assertEqual([p.id for p in page.page_items], ["u2", "u1"])

    def test_ukrainian_names_sort_alphabetically(self) -> None:
        names = ["Яна", "іван", "Юрій", "Євген", "Ганна", "Ґео"]
        profiles = [
            Profile(id=f"u{i}", email=f"u{i}@example.org", full_name=name, role="author")
            for i, name in enumerate(names)
        ]
        asc = ROLE_MANAGEMENT_USERS.apply(profiles, ListState(sort="name_asc"), 8).page_items
        self.assertEqual(
            [p.full_name for p in asc],
            ["Ганна", "Ґео", "Євген", "іван", "Юрій", "Яна"],
        )
        desc = ROLE_MANAGEMENT_USERS.apply(profiles, ListState(sort="name_desc"), 8).page_items
        self.assertEqual(desc, list(reversed(asc)))

    def test_ukrainian_titles_sort_alphabetically(self) -> None:
        articles = [_article(1, "Ядро"), _article(2, "Їжак"), _article(3, "Ефект"), _article(4, "Єдність")]
        page = ORGANIZER_ARTICLES.apply(articles, ListState(sort="title_asc"), 8)
        self.assertEqual([a.title for a in page.page_items], ["Ефект", "Єдність", "Їжак", "Ядро"])


class TestListState(unittest.TestCase):
    def test_changes_other_than_page_reset_to_first_page(self) -> None:
        state = ListState(sort="date_desc", page=3)
        self.assertEqual(state.with_search("x").page, 1)
        self.assertEqual(state.with_filter("status", "accepted").page, 1)
        self.assertEqual(state.with_sort("title_asc").page, 1)

    def test_page_change_keeps_everything_else(self) -> None:
        state = ListState(sort="title_asc", search="graph").with_filter("status", "accepted")
        moved = state.with_page(4)
        self.assertEqual(moved.page, 4)
        self.assertEqual(moved.search, "graph")
        self.assertEqual(moved.sort, "title_asc")
        self.assertEqual(dict(moved.filters), {"status": "accepted"})


class TestListView(unittest.TestCase):
    def _articles(self, count: int) -> list[Article]:
        return [
            _article(i, f"T{i}", status="accepted" if i % 2 else "submitted")
            for i in range(count)
        ]

    def test_sort_is_read_from_and_written_to_preferences(self) -> None:
        prefs = _prefs({"app.list_sort.organizer.articles": "title_desc"})
        view = ListView(ORGANIZER_ARTICLES, prefs, page_size=8)
        self.assertEqual(view.state.sort, "title_desc")

        view.load(self._articles(3))
        view.set_sort("date_asc")
        reopened = ListView(ORGANIZER_ARTICLES, prefs, page_size=8)
        self.assertEqual(reopened.state.sort, "date_asc")

    def test_invalid_stored_sort_uses_default(self) -> None:
        prefs = _prefs({"app.list_sort.organizer.articles": "sideways"})
        view = ListView(ORGANIZER_ARTICLES, prefs, page_size=8)
        self.assertEqual(view.state.sort, "date_desc")

    def test_filter_change_resets_page(self) -> None:
        view = ListView(ORGANIZER_ARTICLES, _prefs(), page_size=8)
        view.load(self._articles(30))
        self.assertEqual(view.set_page(3).safe_page, 3)
        page = view.set_filter("status", "accepted")
        self.assertEqual(page.safe_page, 1)
        self.assertEqual(page.total_items, 15)

    def test_requested_page_is_clamped_and_synced(self) -> None:
        view = ListView(ORGANIZER_ARTICLES, _prefs(), page_size=8)
        view.load(self._articles(23))
        page = view.set_page(9)
        self.assertEqual(page.safe_page, 3)
        self.assertEqual(view.state.page, 3)

    def test_page_size_defaults_to_preference(self) -> None:
        view = ListView(ORGANIZER_ARTICLES, _prefs({"app.settings.page_size": "20"}))
        self.assertEqual(view.page_size, 20)

    def test_invalid_filter_value_rejected(self) -> None:
        view = ListView(ORGANIZER_ARTICLES, _prefs(), page_size=8)
        view.load(self._articles(2))
        with self.assertRaises(ValueError):
            view.set_filter("status", "lost")
        with self.assertRaises(KeyError):
            view.set_filter("colour", "red")

    def test_unknown_sort_rejected_and_not_stored(self) -> None:
        substrate = MemoryKeyValueStore()
        view = ListView(ORGANIZER_ARTICLES, PreferenceStore(substrate), page_size=8)
        with self.assertRaises(ValueError):
            view.set_sort("sideways")
        self.assertIsNone(substrate.get("app.list_sort.organizer.articles"))

    def test_paging_does_not_resort(self) -> None:
        calls = []

        def counting_key(item: int) -> int:
            calls.append(item)
            return item

        definition = ListDefinition(
            key="test.numbers",
            search_fields=lambda n: (str(n),),
            sort_options=[SortOption("value_asc", counting_key)],
            default_sort="value_asc",
        )
        view = ListView(definition, _prefs(), page_size=5)
        first = view.load(list(range(20, 0, -1)))
        self.assertEqual(first.page_items, [1, 2, 3, 4, 5])
        sorted_calls = len(calls)

        self.assertEqual(view.set_page(2).page_items, [6, 7, 8, 9, 10])
        self.assertEqual(view.set_page(4).page_items, [16, 17, 18, 19, 20])
        self.assertEqual(len(calls), sorted_calls)

        view.set_search("1")
        self.assertGreater(len(calls), sorted_calls)


if __name__ == "__main__":
    unittest.main()
