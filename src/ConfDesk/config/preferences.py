"""Preference domain configuration (local display settings store)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ConfDesk.config.common import (
    check_choice,
    check_non_empty,
    expect_int,
    expect_int_list,
    expect_str,
    get_optional_value,
    get_section,
)

_SUPPORTED_LOCALES = ("en", "uk")


@dataclass(frozen=True, slots=True)
class PreferencesConfig:
    """Preference store location and the allowed page sizes."""

    db_path: str
    page_size_options: tuple[int, ...]
    default_page_size: int
    default_locale: str


def load_preferences(raw: Mapping[str, Any]) -> PreferencesConfig:
    """Load the ``preferences`` section."""
    section = get_section(raw, "preferences", required=True)
    return PreferencesConfig(
        db_path=expect_str(
            get_optional_value(section, "db_path", "database/preferences.db"),
            "preferences.db_path",
        ),
        page_size_options=tuple(
            expect_int_list(
                get_optional_value(section, "page_size_options", [8, 12, 20, 50]),
                "preferences.page_size_options",
            )
        ),
        default_page_size=expect_int(
            get_optional_value(section, "default_page_size", 8),
            "preferences.default_page_size",
        ),
        default_locale=expect_str(
            get_optional_value(section, "default_locale", "en"),
            "preferences.default_locale",
        ),
    )


def check_preferences(config: PreferencesConfig) -> None:
    """Validate preference domain constraints."""
    check_non_empty(config.db_path, "preferences.db_path")
    if not config.page_size_options:
        raise ValueError("preferences.page_size_options must not be empty")
    if any(size <= 0 for size in config.page_size_options):
        raise ValueError("preferences.page_size_options must contain positive integers")
    if config.default_page_size not in config.page_size_options:
        raise ValueError("preferences.default_page_size must be one of preferences.page_size_options")
    check_choice(config.default_locale, _SUPPORTED_LOCALES, "preferences.default_locale")
