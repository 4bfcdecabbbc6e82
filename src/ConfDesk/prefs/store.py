"""Validated access to user display preferences.

Values live in a string key/value substrate. Reads never fail: a missing,
unparseable or out-of-range stored value is reported as the declared
default. Writes are validated, persisted immediately and broadcast to
subscribers so open views can react without a reload.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence

from dateutil import tz

from ConfDesk.storage.kv import KeyValueStore
from ConfDesk.utils.log import log

THEME_KEY = "app.theme"
LANGUAGE_KEY = "app.language"
TIMEZONE_KEY = "app.settings.timezone"
PAGE_SIZE_KEY = "app.settings.page_size"
EMAIL_NOTIFICATIONS_KEY = "app.settings.email_notifications"
COMPACT_MODE_KEY = "app.settings.compact_mode"
LIST_SORT_PREFIX = "app.list_sort."

THEMES = ("system", "light", "dark")
LOCALES = ("en", "uk")
SYSTEM_TIMEZONE = "system"
DEFAULT_PAGE_SIZE_OPTIONS = (8, 12, 20, 50)

Listener = Callable[[str, Any], None]


@dataclass(frozen=True, slots=True)
class Preferences:
    """Snapshot of every scalar preference, read once when a view opens."""

    theme: str
    locale: str
    timezone: str
    page_size: int
    email_notifications: bool
    compact_mode: bool


@dataclass(frozen=True, slots=True)
class _Spec:
    default: Any
    parse: Callable[[str], Any]
    dump: Callable[[Any], str]


def is_valid_timezone(value: str) -> bool:
    """Return True for ``"system"`` or a zone name the tz database resolves."""
    if value == SYSTEM_TIMEZONE:
        return True
    if not value or not isinstance(value, str):
        return False
    return tz.gettz(value) is not None


def _parse_choice(choices: Sequence[str]) -> Callable[[str], str | None]:
    return lambda raw: raw if raw in choices else None


def _parse_bool(raw: str) -> bool | None:
    if raw == "true":
        return True
    if raw == "false":
        return False
    return None


def _dump_bool(value: Any) -> str:
    if not isinstance(value, bool):
        raise ValueError("expected a boolean")
    return "true" if value else "false"


def _parse_timezone(raw: str) -> str | None:
    return raw if is_valid_timezone(raw) else None


class PreferenceStore:
    """Typed, validated preference access over a key/value substrate.

    One instance lives for the whole session and is handed to every view.
    """

    def __init__(
        self,
        substrate: KeyValueStore,
        *,
        page_size_options: Sequence[int] = DEFAULT_PAGE_SIZE_OPTIONS,
        default_page_size: int = DEFAULT_PAGE_SIZE_OPTIONS[0],
        default_locale: str = "en",
    ) -> None:
        self.substrate = substrate
        self.page_size_options = tuple(page_size_options)
        self._listeners: list[Listener] = []

        def parse_page_size(raw: str) -> int | None:
            try:
                value = int(raw)
            except ValueError:
                return None
            return value if value in self.page_size_options else None

        def dump_page_size(value: Any) -> str:
            if isinstance(value, bool) or value not in self.page_size_options:
                raise ValueError(f"page size must be one of {list(self.page_size_options)}")
            return str(value)

        def dump_choice(choices: Sequence[str]) -> Callable[[Any], str]:
            def dump(value: Any) -> str:
                if value not in choices:
                    raise ValueError(f"must be one of {list(choices)}")
                return value

            return dump

        def dump_timezone(value: Any) -> str:
            if not is_valid_timezone(value):
                raise ValueError(f"unknown timezone: {value!r}")
            return value

        self._specs: dict[str, _Spec] = {
            THEME_KEY: _Spec("system", _parse_choice(THEMES), dump_choice(THEMES)),
            LANGUAGE_KEY: _Spec(default_locale, _parse_choice(LOCALES), dump_choice(LOCALES)),
            TIMEZONE_KEY: _Spec(SYSTEM_TIMEZONE, _parse_timezone, dump_timezone),
            PAGE_SIZE_KEY: _Spec(default_page_size, parse_page_size, dump_page_size),
            EMAIL_NOTIFICATIONS_KEY: _Spec(True, _parse_bool, _dump_bool),
            COMPACT_MODE_KEY: _Spec(False, _parse_bool, _dump_bool),
        }

    def get(self, key: str) -> Any:
        """Return the validated value for a scalar preference key, or its default.

        Raises:
            KeyError: If ``key`` is not a known preference (programming error).
        """
        spec = self._specs[key]
        raw = self._read(key)
        if raw is None:
            return spec.default
        value = spec.parse(raw)
        if value is None:
            log.debug("Ignoring invalid stored preference %s=%r", key, raw)
            return spec.default
        return value

    def set(self, key: str, value: Any) -> bool:
        """Validate, persist and broadcast a scalar preference.

        Returns:
            True when the value was stored, False when it was rejected or the
            substrate failed. Nothing is raised to the caller.
        """
        spec = self._specs[key]
        try:
            raw = spec.dump(value)
        except ValueError as error:
            log.warning("Rejected preference %s=%r: %s", key, value, error)
            return False
        return self._write(key, raw, value)

    def set_text(self, key: str, text: str) -> bool:
        """Like ``set`` but takes the stored string form (``"true"``, ``"20"``)."""
        value = self._specs[key].parse(text)
        if value is None:
            log.warning("Rejected preference %s=%r", key, text)
            return False
        return self.set(key, value)

    def get_list_sort(self, list_key: str, options: Sequence[str], default: str) -> str:
        """Return the stored sort option for ``list_key`` when it is one of ``options``."""
        raw = self._read(LIST_SORT_PREFIX + list_key)
        if raw is None or raw not in options:
            return default
        return raw

    def set_list_sort(self, list_key: str, value: str, options: Sequence[str]) -> bool:
        if value not in options:
            log.warning("Rejected sort option %r for list %s", value, list_key)
            return False
        return self._write(LIST_SORT_PREFIX + list_key, value, value)

    def snapshot(self) -> Preferences:
        return Preferences(
            theme=self.get(THEME_KEY),
            locale=self.get(LANGUAGE_KEY),
            timezone=self.get(TIMEZONE_KEY),
            page_size=self.get(PAGE_SIZE_KEY),
            email_notifications=self.get(EMAIL_NOTIFICATIONS_KEY),
            compact_mode=self.get(COMPACT_MODE_KEY),
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(self._specs)

    def _read(self, key: str) -> str | None:
        try:
            return self.substrate.get(key)
        except Exception as error:  # noqa: BLE001 - reads degrade to defaults
            log.warning("Preference read failed for %s: %s", key, error)
            return None

    def _write(self, key: str, raw: str, value: Any) -> bool:
        try:
            self.substrate.set(key, raw)
        except Exception as error:  # noqa: BLE001 - writes never raise to views
            log.error("Preference write failed for %s: %s", key, error)
            return False
        for listener in list(self._listeners):
            try:
                listener(key, value)
            except Exception as error:  # noqa: BLE001 - one listener must not break others
                log.warning("Preference listener failed for %s: %s", key, error)
        return True
