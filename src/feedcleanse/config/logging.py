"""Root logger setup for batch runs."""

from __future__ import annotations

import logging
from typing import Final

from .env import optional_env_var
from .errors import ConfigurationError

LOG_LEVEL_ENV: Final[str] = "FEEDCLEANSE_LOG_LEVEL"
LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(threadName)s %(name)s] %(message)s"


def resolve_log_level(level: int | str | None = None) -> int:
    """Return a numeric level from ``level``, ``FEEDCLEANSE_LOG_LEVEL`` or INFO."""

    if level is None:
        level = optional_env_var(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    resolved = logging.getLevelNamesMapping().get(level.strip().upper())
    if resolved is None:
        raise ConfigurationError(f"{LOG_LEVEL_ENV} names an unknown level: {level!r}")
    return resolved


def configure_logging(*, level: int | str | None = None, force: bool = False) -> None:
    """Initialise the root logger once.

    Records carry the thread name because reference data is loaded on worker
    threads. Without ``force`` an already configured root logger is left alone.
    """

    logging.basicConfig(
        level=resolve_log_level(level),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        force=force,
    )
