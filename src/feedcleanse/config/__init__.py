"""Application configuration helpers."""

from __future__ import annotations

from .cleanse import CleanseConfig, get_cleanse_config
from .env import load_environment, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)

__all__ = [
    "CleanseConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "StorageConfig",
    "configure_logging",
    "get_cleanse_config",
    "get_database_config",
    "get_database_uri",
    "get_storage_config",
    "load_environment",
    "require_env_vars",
]
