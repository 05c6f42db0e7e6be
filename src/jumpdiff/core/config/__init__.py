"""Configuration defaults, environment set-up and YAML schemas."""

from __future__ import annotations

from .defaults import ConfigDict, get_config, get_default_config, init_environment
from .schemas import (
    AppConfig,
    ConfigValidationError,
    EngineSettings,
    MertonSettings,
    collect_and_validate,
    discover_config_files,
    load_config,
)

__all__ = [
    "AppConfig",
    "ConfigDict",
    "ConfigValidationError",
    "EngineSettings",
    "MertonSettings",
    "collect_and_validate",
    "discover_config_files",
    "get_config",
    "get_default_config",
    "init_environment",
    "load_config",
]
