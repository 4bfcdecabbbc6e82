"""Cache domain configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ConfDesk.config.common import check_positive, expect_int, get_optional_value, get_section


@dataclass(frozen=True, slots=True)
class CacheConfig:
    """Participation cache settings."""

    participation_ttl: int


def load_cache(raw: Mapping[str, Any]) -> CacheConfig:
    """Load the optional ``cache`` section (TTL in seconds, default five minutes)."""
    section = get_section(raw, "cache", required=False)
    return CacheConfig(
        participation_ttl=expect_int(
            get_optional_value(section, "participation_ttl", 300),
            "cache.participation_ttl",
        ),
    )


def check_cache(config: CacheConfig) -> None:
    check_positive(config.participation_ttl, "cache.participation_ttl")
