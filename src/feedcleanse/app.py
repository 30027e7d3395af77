"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from feedcleanse.adapters.sqlalchemy import SqlAlchemyReferenceDataSource
from feedcleanse.adapters.sqlalchemy.unit_of_work import (
    StartupError,
    SqlAlchemyCleanseUnitOfWork,
    configured_engine,
    is_started,
    startup,
)
from feedcleanse.config import configure_logging, get_cleanse_config, load_environment
from feedcleanse.domain.cleansing import CleansingEngine, load_reference_data
from feedcleanse.domain.ports.unit_of_work import CleanseUnitOfWork

if TYPE_CHECKING:
    from datetime import datetime

    from feedcleanse.config import CleanseConfig
    from feedcleanse.domain.cleansing import CleanseResult, ReferenceData
    from feedcleanse.domain.ports.persistence import ReferenceDataSource

UnitOfWorkFactory = Callable[[], CleanseUnitOfWork]


log = getLogger(__name__)


def cleanse_batch(
    batch_id: str,
    *,
    config: CleanseConfig | None = None,
    reference_source: ReferenceDataSource | None = None,
    reference: ReferenceData | None = None,
    group_company_cd: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    clock: Callable[[], datetime] | None = None,
) -> CleanseResult:
    """Cleanse every attribute candidate of ``batch_id`` using the configured adapters.

    ``group_company_cd`` narrows the loaded policies to that group company.
    """

    load_environment()
    configure_logging()
    effective_config = config or get_cleanse_config()
    needs_database = unit_of_work_factory is None or (
        reference is None and reference_source is None
    )
    if needs_database and not is_started():
        startup()
    effective_uow = unit_of_work_factory or SqlAlchemyCleanseUnitOfWork
    log.info(
        "Starting cleanse: batch=%s, worker=%s, date_pattern=%s",
        batch_id,
        effective_config.worker_id,
        effective_config.date_pattern,
    )

    if reference is None:
        source = reference_source or _default_reference_source()
        reference = load_reference_data(
            source,
            group_company_cd,
            max_workers=effective_config.loader_workers,
        )

    engine = CleansingEngine(
        reference,
        date_pattern=effective_config.date_pattern,
        worker_id=effective_config.worker_id,
        scope_phase_threshold=effective_config.scope_phase_threshold,
        clock=clock,
    )
    with effective_uow() as uow:
        result = engine.run(batch_id, uow=uow)

    log.info(
        f"Finished cleanse: batch={result.batch_id}, status={result.status}, "
        f"read={result.read}, ok={result.ok}, warn={result.warn}, ng={result.ng}"
    )
    return result


def _default_reference_source() -> ReferenceDataSource:
    engine = configured_engine()
    if engine is None:
        raise StartupError("No database engine configured for loading reference data")
    return SqlAlchemyReferenceDataSource(engine)
