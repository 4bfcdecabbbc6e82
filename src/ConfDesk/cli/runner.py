"""Command runner for coordinating CLI execution.

Manages logging configuration, the local database, the backend
session lifecycle and error handling for command execution.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import click

from ConfDesk.cli.factories import AppSession, LocalStores, open_local_stores, open_session
from ConfDesk.config import AppConfig
from ConfDesk.core.errors import ConfDeskError
from ConfDesk.prefs import PreferenceStore
from ConfDesk.renderers import ConsoleOutputWriter
from ConfDesk.utils.log import configure_logging, log

SessionCommand = Callable[[AppSession], Awaitable[Any]]
LocalCommand = Callable[[PreferenceStore], Any]


class CommandRunner:
    """Orchestrates command execution with proper resource management.

    Text results are written to the console; path results are reported as
    saved files. Any failure is logged and turned into ``click.Abort``.
    """

    def __init__(self, config: AppConfig, output: ConsoleOutputWriter | None = None) -> None:
        self.config = config
        self.output = output or ConsoleOutputWriter()

    def _configure_logging(self, action: str) -> None:
        path = configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
            libraries_level=self.config.runtime.libraries_level,
        )
        if path is not None:
            log.debug("Logging %s to %s", action, path)

    def run(self, action: str, command: SessionCommand) -> None:
        """Sign in, run ``command`` against the session and report its result.

        Args:
            action: The CLI command path (e.g., 'articles list').
            command: Coroutine function taking the open session.

        Raises:
            click.Abort: When the command fails.
        """
        self._configure_logging(action)
        try:
            with open_local_stores(self.config) as stores:
                result = asyncio.run(self._run_session(action, stores, command))
        except ConfDeskError as e:
            log.error("%s failed: %s", action, e)
            raise click.Abort from e
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed unexpectedly: %s", action, e)
            log.debug("Traceback", exc_info=True)
            raise click.Abort from e
        self._report(result)

    def run_local(self, action: str, command: LocalCommand) -> None:
        """Run a command that only needs the local preference store."""
        self._configure_logging(action)
        try:
            with open_local_stores(self.config) as stores:
                result = command(stores.prefs)
        except ConfDeskError as e:
            log.error("%s failed: %s", action, e)
            raise click.Abort from e
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed unexpectedly: %s", action, e)
            raise click.Abort from e
        self._report(result)

    async def _run_session(self, action: str, stores: LocalStores, command: SessionCommand) -> Any:
        async with open_session(self.config, stores, name=action) as session:
            return await command(session)

    def _report(self, result: Any) -> None:
        if result is None:
            return
        if isinstance(result, str):
            self.output.write(result)
        elif isinstance(result, bool):
            if not result:
                raise click.Abort
        else:
            log.info("Saved %s", result)
