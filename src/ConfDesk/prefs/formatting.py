"""Render timestamps according to the user's timezone and locale preferences."""

from __future__ import annotations

from datetime import date, datetime, tzinfo

from dateutil import tz

from ConfDesk.core.timeutil import parse_timestamp
from ConfDesk.prefs.store import SYSTEM_TIMEZONE, Preferences

_DATE_PATTERNS = {
    "en": "%m/%d/%Y",
    "uk": "%d.%m.%Y",
}
_TIME_PATTERN = "%H:%M"


def resolve_timezone(name: str) -> tzinfo:
    """Map a preference value to a tzinfo; unknown names fall back to the system zone."""
    if name != SYSTEM_TIMEZONE:
        zone = tz.gettz(name)
        if zone is not None:
            return zone
    return tz.tzlocal()


def resolve_theme(theme: str, *, system_prefers_dark: bool = False) -> str:
    """Collapse ``system`` into the concrete light/dark theme."""
    if theme == "system":
        return "dark" if system_prefers_dark else "light"
    return theme


def format_date(value: datetime | date | str | None, prefs: Preferences) -> str:
    """Format a timestamp or calendar date as a short locale date.

    Calendar dates are shown as-is; timestamps are converted into the
    preferred timezone first. Missing values render as ``-``.
    """
    pattern = _DATE_PATTERNS.get(prefs.locale, _DATE_PATTERNS["en"])
    if isinstance(value, date) and not isinstance(value, datetime):
        return value.strftime(pattern)
    moment = parse_timestamp(value)
    if moment is None:
        return "-"
    return moment.astimezone(resolve_timezone(prefs.timezone)).strftime(pattern)


def format_datetime(value: datetime | str | None, prefs: Preferences) -> str:
    """Format a timestamp with date and minutes in the preferred timezone."""
    moment = parse_timestamp(value)
    if moment is None:
        return "-"
    pattern = _DATE_PATTERNS.get(prefs.locale, _DATE_PATTERNS["en"]) + " " + _TIME_PATTERN
    return moment.astimezone(resolve_timezone(prefs.timezone)).strftime(pattern)
