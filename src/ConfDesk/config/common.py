"""Typed accessors used by every ``load_<domain>`` / ``check_<domain>`` pair.

Error messages always name the dotted config key (``output.base_dir``) so a
broken YAML file can be fixed without reading code.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence


def get_section(raw: Mapping[str, Any], key: str, *, required: bool) -> Mapping[str, Any]:
    """Return the mapping stored under ``key``.

    Optional sections that are absent (or written as ``null``) read as an
    empty mapping, so their fields fall back to defaults.

    Raises:
        ValueError: If a required section is missing.
        TypeError: If the value is not a mapping.
    """
    section = raw.get(key)
    if section is None:
        if required:
            raise ValueError(f"Missing required config: {key}")
        return {}
    if not isinstance(section, Mapping):
        raise TypeError(f"{key} must be an object")
    return section


def get_required_value(section: Mapping[str, Any], field: str, config_key: str) -> Any:
    """Fetch a field that has no default.

    Args:
        section: Mapping returned by ``get_section``.
        field: Field name inside the section.
        config_key: Dotted path used in the error message.

    Returns:
        The raw YAML value, not yet type-checked.

    Raises:
        ValueError: If the field is absent.
    """
    if field not in section:
        raise ValueError(f"Missing required config: {config_key}")
    return section[field]


def get_optional_value(section: Mapping[str, Any], field: str, default: Any) -> Any:
    """Fetch a field, or ``default`` when the YAML omits it."""
    return section.get(field, default)


def expect_str(value: Any, config_key: str) -> str:
    """Type-check a string value; raises ``TypeError`` naming ``config_key``."""
    if not isinstance(value, str):
        raise TypeError(f"{config_key} must be a string")
    return value


def expect_optional_str(value: Any, config_key: str) -> str | None:
    """Like ``expect_str`` but lets ``null`` through as None."""
    return None if value is None else expect_str(value, config_key)


def expect_bool(value: Any, config_key: str) -> bool:
    """Type-check a YAML boolean; strings such as ``"yes"`` are rejected."""
    if not isinstance(value, bool):
        raise TypeError(f"{config_key} must be a boolean")
    return value


def expect_int(value: Any, config_key: str) -> int:
    """Accept ints only; YAML ``true`` is rejected even though bool subclasses int."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{config_key} must be an integer")
    return value


def expect_int_list(value: Any, config_key: str) -> list[int]:
    """Type-check a list of integers.

    Args:
        value: Raw YAML value.
        config_key: Dotted path; item errors append the index, e.g. ``[1]``.

    Returns:
        The items as a new list.

    Raises:
        TypeError: If the value is not a list or an item is not an int.
    """
    if not isinstance(value, list):
        raise TypeError(f"{config_key} must be a list")
    return [expect_int(item, f"{config_key}[{idx}]") for idx, item in enumerate(value)]


def check_non_empty(value: str, config_key: str) -> None:
    """Reject blank strings with ``ValueError``."""
    if not value.strip():
        raise ValueError(f"{config_key} must not be empty")


def check_positive(value: int, config_key: str) -> None:
    """Reject zero and negative numbers with ``ValueError``."""
    if value <= 0:
        raise ValueError(f"{config_key} must be positive")


def check_choice(value: str, choices: Sequence[str], config_key: str) -> None:
    """Reject values outside ``choices``; the message lists the allowed ones.

    Raises:
        ValueError: If ``value`` is not one of ``choices``.
    """
    if value not in choices:
        raise ValueError(f"{config_key} must be one of {list(choices)}")
