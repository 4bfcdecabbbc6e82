"""Timestamp parsing shared by models, list sorting and renderers."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any

from dateutil import parser as dt_parser

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 value from a backend row into an aware datetime.

    Naive values are taken as UTC. Empty or unparseable input yields None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = dt_parser.isoparse(str(value))
        except (ValueError, OverflowError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_date(value: Any) -> date | None:
    """Parse a ``YYYY-MM-DD`` (or full timestamp) value into a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return dt_parser.isoparse(str(value)).date()
    except (ValueError, OverflowError):
        return None


def end_of_day(day: date, tz=timezone.utc) -> datetime:
    """Last representable second of ``day`` in ``tz``."""
    return datetime.combine(day, time(23, 59, 59), tzinfo=tz)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime | None) -> str | None:
    """Serialize an aware datetime for a backend payload."""
    return value.isoformat() if value else None
