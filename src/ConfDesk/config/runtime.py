"""Runtime domain configuration: the ``log`` section."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ConfDesk.config.common import (
    check_choice,
    check_non_empty,
    expect_bool,
    expect_str,
    get_optional_value,
    get_required_value,
    get_section,
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """Diagnostic channel settings.

    Attributes:
        level: Console level of the ``ConfDesk`` logger.
        to_file: Mirror every command's log into ``<dir>/<action>/``.
        dir: Base directory of log files.
        libraries_level: Level applied to the HTTP and backend client loggers.
    """

    level: str
    to_file: bool
    dir: str
    libraries_level: str = "WARNING"


def load_runtime(raw: Mapping[str, Any]) -> RuntimeConfig:
    section = get_section(raw, "log", required=True)
    return RuntimeConfig(
        level=expect_str(get_required_value(section, "level", "log.level"), "log.level").upper(),
        to_file=expect_bool(get_optional_value(section, "to_file", False), "log.to_file"),
        dir=expect_str(get_optional_value(section, "dir", "log"), "log.dir"),
        libraries_level=expect_str(
            get_optional_value(section, "libraries_level", "WARNING"),
            "log.libraries_level",
        ).upper(),
    )


def check_runtime(config: RuntimeConfig) -> None:
    check_choice(config.level, LOG_LEVELS, "log.level")
    check_choice(config.libraries_level, LOG_LEVELS, "log.libraries_level")
    check_non_empty(config.dir, "log.dir")
