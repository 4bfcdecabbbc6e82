"""Factory functions for CLI component creation.

Centralizes how a command session is assembled: local stores, backend
gateway, services and the participation cache.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Iterator

from ConfDesk.backend.gateway import Gateway
from ConfDesk.backend.supabase_gateway import create_gateway
from ConfDesk.cache import ParticipationCache, ParticipationStore
from ConfDesk.config import AppConfig
from ConfDesk.core.errors import ConfDeskError
from ConfDesk.core.models import Profile
from ConfDesk.core.scope import ViewScope
from ConfDesk.listing.pipeline import ListDefinition, ListView
from ConfDesk.prefs import PreferenceStore, Preferences, create_preference_store, resolve_timezone
from ConfDesk.services import CertificateSource, Services, create_services
from ConfDesk.storage import DatabaseManager, SqliteKeyValueStore, SqliteParticipationStore
from ConfDesk.utils.log import log


@dataclass(slots=True)
class AppSession:
    """Everything a signed-in command needs.

    Attributes:
        config: Application configuration.
        prefs: Preference store of this installation.
        gateway: Backend gateway, signed in as ``profile``.
        services: Services bound to ``gateway``.
        participations: Participation/certificate cache for this session.
        profile: The signed-in user's profile.
        scope: Scope owning tasks spawned by the running command.
    """

    config: AppConfig
    prefs: PreferenceStore
    gateway: Gateway
    services: Services
    participations: ParticipationCache
    profile: Profile
    scope: ViewScope

    def snapshot(self) -> Preferences:
        return self.prefs.snapshot()

    def require_role(self, *roles: str) -> None:
        """Raise ``ConfDeskError`` unless the signed-in user has one of ``roles``."""
        if self.profile.role not in roles:
            raise ConfDeskError(
                f"This command requires role {' or '.join(roles)}; you are {self.profile.role}"
            )

    def list_view(self, definition: ListDefinition, *, page_size: int | None = None) -> ListView:
        return ListView(definition, self.prefs, page_size=page_size)


@dataclass(frozen=True, slots=True)
class LocalStores:
    """Stores kept in the local database between invocations.

    Attributes:
        prefs: Display preferences.
        participations: Last participation snapshot per user.
    """

    prefs: PreferenceStore
    participations: ParticipationStore


@contextmanager
def open_local_stores(config: AppConfig) -> Iterator[LocalStores]:
    """Open the local database and yield the stores over it."""
    db_path = Path(config.preferences.db_path)
    with DatabaseManager(db_path) as db_manager:
        log.debug("Local database: %s", db_path)
        yield LocalStores(
            prefs=create_preference_store(config, SqliteKeyValueStore(db_manager)),
            participations=SqliteParticipationStore(db_manager),
        )


def read_credentials(config: AppConfig) -> tuple[str, str]:
    """Read the sign-in email and password from the configured environment variables.

    Raises:
        ConfDeskError: If either variable is unset.
    """
    email = os.getenv(config.backend.email_env, "").strip()
    password = os.getenv(config.backend.password_env, "")
    if not email or not password:
        raise ConfDeskError(
            f"Sign-in credentials missing: set {config.backend.email_env} "
            f"and {config.backend.password_env}"
        )
    return email, password


@asynccontextmanager
async def open_session(
    config: AppConfig,
    stores: LocalStores,
    *,
    name: str,
) -> AsyncIterator[AppSession]:
    """Connect, sign in and yield a session; tear everything down on exit.

    After a successful command, pending cache refreshes are awaited so their
    result reaches the local database for the next invocation.

    Args:
        config: Application configuration.
        stores: Local stores opened by the caller.
        name: Command name, used for the task scope.
    """
    prefs = stores.prefs
    email, password = read_credentials(config)
    gateway = await create_gateway(config.backend)
    try:
        services = create_services(config, gateway)
        profile = await services.users.sign_in(email, password)

        zone = resolve_timezone(prefs.snapshot().timezone)
        participations = ParticipationCache(
            CertificateSource(gateway, zone=zone),
            ttl=config.cache.participation_ttl,
            store=stores.participations,
        )
        async with ViewScope(name) as scope:
            session = AppSession(
                config=config,
                prefs=prefs,
                gateway=gateway,
                services=services,
                participations=participations,
                profile=profile,
                scope=scope,
            )
            try:
                yield session
                await participations.drain()
            finally:
                await participations.close()
    finally:
        await gateway.close()
