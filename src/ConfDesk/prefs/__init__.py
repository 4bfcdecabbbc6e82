"""User preference store and preference-aware formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ConfDesk.prefs.formatting import format_date, format_datetime, resolve_theme, resolve_timezone
from ConfDesk.prefs.store import (
    COMPACT_MODE_KEY,
    EMAIL_NOTIFICATIONS_KEY,
    LANGUAGE_KEY,
    LOCALES,
    PAGE_SIZE_KEY,
    THEME_KEY,
    THEMES,
    TIMEZONE_KEY,
    PreferenceStore,
    Preferences,
    is_valid_timezone,
)

if TYPE_CHECKING:
    from ConfDesk.config import AppConfig
    from ConfDesk.storage.kv import KeyValueStore


def create_preference_store(config: AppConfig, substrate: KeyValueStore) -> PreferenceStore:
    """Build the session preference store from configuration."""
    return PreferenceStore(
        substrate,
        page_size_options=config.preferences.page_size_options,
        default_page_size=config.preferences.default_page_size,
        default_locale=config.preferences.default_locale,
    )


__all__ = [
    "COMPACT_MODE_KEY",
    "EMAIL_NOTIFICATIONS_KEY",
    "LANGUAGE_KEY",
    "LOCALES",
    "PAGE_SIZE_KEY",
    "THEME_KEY",
    "THEMES",
    "TIMEZONE_KEY",
    "PreferenceStore",
    "Preferences",
    "create_preference_store",
    "format_date",
    "format_datetime",
    "is_valid_timezone",
    "resolve_theme",
    "resolve_timezone",
]
