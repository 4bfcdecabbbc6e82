"""Tests for CLI command helpers and console rendering."""

import sys
import unittest
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ConfDesk.cli.commands import (
    ListOptions,
    list_articles,
    parse_filter_args,
    set_list_sort,
    show_page,
    show_preferences,
)
from ConfDesk.cli.factories import AppSession
from ConfDesk.core.errors import ValidationError
from ConfDesk.core.models import Article, Notification, Profile
from ConfDesk.core.scope import ViewScope
from ConfDesk.listing import ORGANIZER_ARTICLES, ListView, paginate
from ConfDesk.prefs import PreferenceStore, Preferences
from ConfDesk.renderers.console import article_lines, notification_lines, render_page
from ConfDesk.storage.kv import MemoryKeyValueStore

NOW = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def _snapshot(compact: bool = False, locale: str = "en") -> Preferences:
    return Preferences(
        theme="system",
        locale=locale,
        timezone="UTC",
        page_size=8,
        email_notifications=True,
        compact_mode=compact,
    )


def _article(idx: int, status: str = "submitted") -> Article:
    return Article(
        id=f"a{idx}",
        title=f"Article {idx:02d}",
        abstract="",
        author_id="author-1",
        status=status,
        submitted_at=NOW,
    )


class TestFilterArgs(unittest.TestCase):
    def test_pairs(self) -> None:
        self.assertEqual(
            parse_filter_args(["status=accepted", " conference = c1 "]),
            (("status", "accepted"), ("conference", "c1")),
        )

    def test_malformed(self) -> None:
        for value in ("status", "=accepted", "status="):
            with self.subTest(value=value):
                with self.assertRaises(ValidationError):
                    parse_filter_args([value])


class TestShowPage(unittest.TestCase):
    def _view(self) -> ListView:
        return ListView(ORGANIZER_ARTICLES, PreferenceStore(MemoryKeyValueStore()), page_size=8)

    def test_options_applied_in_order(self) -> None:
        articles = [_article(i, "accepted" if i % 3 == 0 else "submitted") for i in range(30)]
        options = ListOptions(filters=(("status", "accepted"),), sort="title_asc", page=2, page_size=5)
        page = show_page(self._view(), articles, options)
        self.assertEqual(page.total_items, 10)
        self.assertEqual(page.safe_page, 2)
        self.assertEqual([a.id for a in page.page_items], ["a15", "a18", "a21", "a24", "a27"])

    def test_unknown_filter_and_value(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            show_page(self._view(), [], ListOptions(filters=(("colour", "red"),)))
        self.assertEqual(ctx.exception.field, "filter")
        with self.assertRaises(ValidationError) as ctx:
            show_page(self._view(), [], ListOptions(sort="sideways"))
        self.assertEqual(ctx.exception.field, "list")


class _AuthorArticles:
    def __init__(self, articles: list[Article]) -> None:
        self.articles = articles

    async def list_for_author(self, author_id: str) -> list[Article]:
        return [a for a in self.articles if a.author_id == author_id]


class TestAuthorArticleList(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.substrate = MemoryKeyValueStore({"app.list_sort.author.articles": "title_desc"})
        self.prefs = PreferenceStore(self.substrate)
        articles = [_article(i, "accepted" if i % 2 else "submitted") for i in range(6)]
        self.services = SimpleNamespace(articles=_AuthorArticles(articles))

    async def _list(self, options: ListOptions) -> str:
        async with ViewScope("articles list") as scope:
            session = AppSession(
                config=None,
                prefs=self.prefs,
                gateway=None,
                services=self.services,
                participations=None,
                profile=Profile(id="author-1", email="ada@example.org", full_name="Ada", role="author"),
                scope=scope,
            )
            return await list_articles(session, options)

    async def test_filters_and_stored_sort_applied(self) -> None:
        text = await self._list(ListOptions(filters=(("status", "accepted"),)))
        self.assertNotIn("Article 02", text)
        self.assertLess(text.index("Article 05"), text.index("Article 03"))
        self.assertLess(text.index("Article 03"), text.index("Article 01"))
        self.assertTrue(text.endswith("Page 1 of 1 (3 items)\n"))

    async def test_sort_option_is_remembered(self) -> None:
        text = await self._list(ListOptions(sort="title_asc"))
        self.assertLess(text.index("Article 00"), text.index("Article 05"))
        self.assertEqual(self.substrate.get("app.list_sort.author.articles"), "title_asc")

    async def test_invalid_controls_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            await self._list(ListOptions(sort="sideways"))
        with self.assertRaises(ValidationError):
            await self._list(ListOptions(filters=(("status", "lost"),)))
        self.assertEqual(self.substrate.get("app.list_sort.author.articles"), "title_desc")


class TestPreferenceCommands(unittest.TestCase):
    def test_show_preferences_lists_scalars_and_sorts(self) -> None:
        prefs = PreferenceStore(MemoryKeyValueStore({"app.theme": "dark"}))
        text = show_preferences(prefs)
        self.assertIn("theme: dark\n", text)
        self.assertIn("compact_mode: false\n", text)
        self.assertIn("app.list_sort.organizer.articles: date_desc\n", text)
        self.assertIn("app.list_sort.organizer.conferences: start_desc\n", text)

    def test_set_list_sort(self) -> None:
        substrate = MemoryKeyValueStore()
        prefs = PreferenceStore(substrate)
        self.assertTrue(set_list_sort(prefs, "organizer.reviews", "rating_desc"))
        self.assertEqual(substrate.get("app.list_sort.organizer.reviews"), "rating_desc")
        self.assertFalse(set_list_sort(prefs, "organizer.reviews", "sideways"))
        with self.assertRaises(ValidationError):
            set_list_sort(prefs, "nowhere.list", "date_desc")


class TestConsoleRendering(unittest.TestCase):
    def test_numbering_continues_across_pages(self) -> None:
        page = paginate([_article(i) for i in range(12)], 2, 8)
        text = render_page(page, _snapshot(), article_lines, offset=8)
        self.assertTrue(text.startswith("9. Article 08\n"))
        self.assertTrue(text.endswith("Page 2 of 2 (12 items)\n"))

    def test_compact_mode_drops_details_and_blank_lines(self) -> None:
        page = paginate([_article(1), _article(2)], 1, 8)
        text = render_page(page, _snapshot(compact=True), article_lines)
        self.assertNotIn("\n\n", text)
        self.assertNotIn("ID: a1", text)

    def test_empty_page_uses_locale_label(self) -> None:
        page = paginate([], 1, 8)
        self.assertEqual(render_page(page, _snapshot(locale="uk"), article_lines), "Немає записів.\n")

    def test_unread_notifications_marked(self) -> None:
        unread = Notification(
            id="n1", user_id="u1", title="Accepted", message="Congrats", type="status", read=False, created_at=NOW
        )
        self.assertEqual(notification_lines(unread, _snapshot())[0], "* Accepted")


if __name__ == "__main__":
    unittest.main()
