"""Session caches."""

from ConfDesk.cache.participation import (
    DEFAULT_TTL,
    CacheEntry,
    ParticipationCache,
    ParticipationSnapshot,
    ParticipationSource,
    ParticipationStore,
)

__all__ = [
    "DEFAULT_TTL",
    "CacheEntry",
    "ParticipationCache",
    "ParticipationSnapshot",
    "ParticipationSource",
    "ParticipationStore",
]
