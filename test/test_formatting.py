"""Tests for preference-aware date formatting."""

import sys
import unittest
from datetime import date, datetime, timezone
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ConfDesk.prefs import Preferences, format_date, format_datetime, resolve_theme, resolve_timezone


def _prefs(locale: str = "en", zone: str = "UTC") -> Preferences:
    return Preferences(
        theme="system",
        locale=locale,
        timezone=zone,
        page_size=8,
        email_notifications=True,
        compact_mode=False,
    )


class TestFormatDate(unittest.TestCase):
    def test_locale_patterns(self) -> None:
        day = date(2025, 3, 9)
        self.assertEqual(format_date(day, _prefs("en")), "03/09/2025")
        self.assertEqual(format_date(day, _prefs("uk")), "09.03.2025")

    def test_timestamp_converted_to_preferred_zone(self) -> None:
        late_utc = datetime(2025, 3, 9, 23, 30, tzinfo=timezone.utc)
        self.assertEqual(format_date(late_utc, _prefs("uk", "Europe/Kyiv")), "10.03.2025")
        self.assertEqual(format_date(late_utc, _prefs("uk", "UTC")), "09.03.2025")

    def test_iso_strings_and_missing_values(self) -> None:
        self.assertEqual(format_date("2025-01-02T10:00:00Z", _prefs()), "01/02/2025")
        self.assertEqual(format_date(None, _prefs()), "-")
        self.assertEqual(format_date("not a date", _prefs()), "-")


class TestFormatDatetime(unittest.TestCase):
    def test_includes_minutes_in_zone(self) -> None:
        moment = datetime(2025, 6, 1, 9, 5, tzinfo=timezone.utc)
        self.assertEqual(format_datetime(moment, _prefs("en", "America/New_York")), "06/01/2025 05:05")
        self.assertEqual(format_datetime(None, _prefs()), "-")


class TestResolvers(unittest.TestCase):
    def test_unknown_zone_falls_back_to_system(self) -> None:
        zone = resolve_timezone("Not/AZone")
        self.assertIsNotNone(zone)
        self.assertIsNotNone(resolve_timezone("system"))

    def test_theme(self) -> None:
        self.assertEqual(resolve_theme("system"), "light")
        self.assertEqual(resolve_theme("system", system_prefers_dark=True), "dark")
        self.assertEqual(resolve_theme("dark"), "dark")


if __name__ == "__main__":
    unittest.main()
