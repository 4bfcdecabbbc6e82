"""Per-user participation and certificate cache with stale-while-revalidate.

An entry younger than the TTL is served as is. An older entry is served
immediately while a single background refresh replaces it; if that refresh
fails the old entry stays and the failure is only logged. Only the very
first load for a user surfaces errors to the caller.

Entries can be mirrored to a ``ParticipationStore`` so that the next process
starts from the last snapshot instead of an empty cache; ``fetched_at`` is
then wall-clock time.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Protocol

from ConfDesk.core.models import AuthorCertificate, AuthorParticipation
from ConfDesk.utils.log import log

DEFAULT_TTL = 300.0


@dataclass(frozen=True, slots=True)
class ParticipationSnapshot:
    """Participations and certificates fetched together for one user."""

    participations: tuple[AuthorParticipation, ...] = ()
    certificates: dict[str, AuthorCertificate] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Cached snapshot plus the clock reading of the fetch that produced it."""

    user_id: str
    snapshot: ParticipationSnapshot
    fetched_at: float

    @property
    def participations(self) -> tuple[AuthorParticipation, ...]:
        return self.snapshot.participations

    @property
    def certificates(self) -> dict[str, AuthorCertificate]:
        return self.snapshot.certificates


class ParticipationSource(Protocol):
    """Backend side of the cache."""

    async def load(self, user_id: str) -> ParticipationSnapshot:
        raise NotImplementedError

    async def issue(self, conference_id: str) -> AuthorCertificate:
        raise NotImplementedError


class ParticipationStore(Protocol):
    """Persistent copy of cache entries, keyed by user id."""

    def load(self, user_id: str) -> CacheEntry | None:
        raise NotImplementedError

    def save(self, entry: CacheEntry) -> None:
        raise NotImplementedError

    def delete(self, user_id: str) -> None:
        raise NotImplementedError


Listener = Callable[[CacheEntry], None]


class ParticipationCache:
    """Session-wide cache keyed by user id.

    Args:
        source: Loads snapshots and issues certificates.
        ttl: Age in seconds after which an entry is revalidated on access.
        clock: Epoch seconds; injectable for tests.
        store: Optional persistent mirror of the entries.
    """

    def __init__(
        self,
        source: ParticipationSource,
        *,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
        store: ParticipationStore | None = None,
    ) -> None:
        self.source = source
        self.ttl = ttl
        self.clock = clock
        self.store = store
        self._entries: dict[str, CacheEntry] = {}
        # Bumped on every replacement; a refresh compares it to detect newer writes.
        self._generations: dict[str, int] = {}
        self._loading: dict[str, asyncio.Task] = {}
        self._refreshing: dict[str, asyncio.Task] = {}
        self._listeners: list[Listener] = []

    def peek(self, user_id: str) -> CacheEntry | None:
        return self._entries.get(user_id)

    def _restore(self, user_id: str) -> CacheEntry | None:
        if self.store is None:
            return None
        entry = self.store.load(user_id)
        if entry is not None:
            log.debug("Participation cache for %s restored from disk", user_id)
            self._entries[user_id] = entry
        return entry

    def is_stale(self, entry: CacheEntry) -> bool:
        return self.clock() - entry.fetched_at >= self.ttl

    async def get(self, user_id: str) -> CacheEntry:
        """Return the entry for ``user_id``, loading or revalidating as needed.

        Raises:
            Exception: Whatever the source raised, on the first load only.
        """
        entry = self._entries.get(user_id) or self._restore(user_id)
        if entry is None:
            return await self._load(user_id)
        if self.is_stale(entry):
            self._schedule_refresh(user_id)
        return entry

    async def issue_certificate(self, user_id: str, conference_id: str) -> AuthorCertificate:
        """Return the cached certificate or issue one and store it in the entry."""
        entry = await self.get(user_id)
        existing = entry.certificates.get(conference_id)
        if existing is not None:
            return existing
        certificate = await self.source.issue(conference_id)
        current = self._entries.get(user_id, entry)
        snapshot = replace(
            current.snapshot,
            certificates={**current.certificates, conference_id: certificate},
        )
        self._store(CacheEntry(user_id=user_id, snapshot=snapshot, fetched_at=self.clock()))
        return certificate

    def invalidate(self, user_id: str) -> None:
        self._entries.pop(user_id, None)
        self._generations[user_id] = self._generations.get(user_id, 0) + 1
        if self.store is not None:
            self.store.delete(user_id)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` whenever an entry is replaced; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def refreshing(self) -> int:
        return len(self._refreshing)

    async def drain(self) -> None:
        """Wait until every scheduled background refresh has finished."""
        while self._refreshing:
            await asyncio.gather(*list(self._refreshing.values()), return_exceptions=True)

    async def close(self) -> None:
        for task in list(self._refreshing.values()):
            task.cancel()
        await self.drain()

    async def _load(self, user_id: str) -> CacheEntry:
        task = self._loading.get(user_id)
        if task is None:
            task = asyncio.create_task(self.source.load(user_id))
            self._loading[user_id] = task
            task.add_done_callback(lambda _t: self._loading.pop(user_id, None))
        snapshot = await asyncio.shield(task)
        entry = self._entries.get(user_id)
        if entry is None or entry.snapshot is not snapshot:
            entry = CacheEntry(user_id=user_id, snapshot=snapshot, fetched_at=self.clock())
            self._store(entry)
        return entry

    def _schedule_refresh(self, user_id: str) -> None:
        if user_id in self._refreshing:
            return
        log.debug("Participation cache for %s is stale; refreshing in background", user_id)
        task = asyncio.create_task(self._refresh(user_id, self._generations.get(user_id, 0)))
        self._refreshing[user_id] = task
        task.add_done_callback(lambda _t: self._refreshing.pop(user_id, None))

    async def _refresh(self, user_id: str, generation: int) -> None:
        try:
            snapshot = await self.source.load(user_id)
        except Exception as error:  # noqa: BLE001 - stale data stays visible
            log.warning("Background participation refresh failed for %s: %s", user_id, error)
            return
        if self._generations.get(user_id, 0) != generation:
            current = self._entries.get(user_id)
            if current is None:
                log.debug("Participation cache for %s invalidated during refresh", user_id)
                return
            # Certificates issued while the refresh ran are newer than its result.
            snapshot = replace(snapshot, certificates={**snapshot.certificates, **current.certificates})
        self._store(CacheEntry(user_id=user_id, snapshot=snapshot, fetched_at=self.clock()))

    def _store(self, entry: CacheEntry) -> None:
        self._entries[entry.user_id] = entry
        self._generations[entry.user_id] = self._generations.get(entry.user_id, 0) + 1
        if self.store is not None:
            self.store.save(entry)
        for listener in list(self._listeners):
            try:
                listener(entry)
            except Exception as error:  # noqa: BLE001 - one listener must not break others
                log.warning("Participation cache listener failed: %s", error)
