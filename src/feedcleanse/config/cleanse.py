"""Runtime knobs for the cleansing engine."""

from __future__ import annotations

from dataclasses import dataclass

from feedcleanse.domain.cleansing.orchestrator import DEFAULT_SCOPE_PHASE, DEFAULT_WORKER_ID
from feedcleanse.domain.cleansing.reference_data import DEFAULT_LOADER_WORKERS

from .env import int_env_var, optional_env_var


@dataclass(frozen=True, slots=True)
class CleanseConfig:
    """Settings shared by every attribute processed in one batch run.

    ``scope_phase_threshold`` is the last cleanse phase that runs without brand or
    category context; attributes in later phases see whatever scope has been
    established for their product so far.
    """

    date_pattern: str | None = None
    worker_id: str = DEFAULT_WORKER_ID
    scope_phase_threshold: int = DEFAULT_SCOPE_PHASE
    loader_workers: int = DEFAULT_LOADER_WORKERS


def get_cleanse_config() -> CleanseConfig:
    return CleanseConfig(
        date_pattern=optional_env_var("FEEDCLEANSE_DATE_PATTERN"),
        worker_id=optional_env_var("FEEDCLEANSE_WORKER_ID") or DEFAULT_WORKER_ID,
        scope_phase_threshold=int_env_var("FEEDCLEANSE_SCOPE_PHASE", DEFAULT_SCOPE_PHASE),
        loader_workers=int_env_var(
            "FEEDCLEANSE_LOADER_WORKERS",
            DEFAULT_LOADER_WORKERS,
            minimum=1,
        ),
    )
