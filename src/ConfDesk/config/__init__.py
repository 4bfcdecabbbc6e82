"""Public configuration API for ConfDesk."""

from __future__ import annotations

from ConfDesk.config.app import (
    AppConfig,
    load_config,
    load_config_with_defaults,
    merge_config_dicts,
    parse_config_dict,
)
from ConfDesk.config.backend import BackendConfig
from ConfDesk.config.cache import CacheConfig
from ConfDesk.config.output import OutputConfig
from ConfDesk.config.preferences import PreferencesConfig
from ConfDesk.config.runtime import RuntimeConfig

__all__ = [
    "RuntimeConfig",
    "BackendConfig",
    "PreferencesConfig",
    "CacheConfig",
    "OutputConfig",
    "AppConfig",
    "load_config",
    "load_config_with_defaults",
    "merge_config_dicts",
    "parse_config_dict",
]
