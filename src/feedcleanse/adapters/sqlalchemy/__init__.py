"""SQLAlchemy adapter package for feedcleanse."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .reference_data import SqlAlchemyReferenceDataSource
from .reference_tables import SqlAlchemyReferenceTableReader
from .repositories import (
    SqlAlchemyAttributeCandidateRepository,
    SqlAlchemyAttrSourceMapRepository,
    SqlAlchemyBatchRunRepository,
    SqlAlchemyRecordErrorRepository,
    SqlAlchemyTokenRouteRepository,
)
from .unit_of_work import SqlAlchemyCleanseUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyAttrSourceMapRepository",
    "SqlAlchemyAttributeCandidateRepository",
    "SqlAlchemyBatchRunRepository",
    "SqlAlchemyCleanseUnitOfWork",
    "SqlAlchemyRecordErrorRepository",
    "SqlAlchemyReferenceDataSource",
    "SqlAlchemyReferenceTableReader",
    "SqlAlchemyTokenRouteRepository",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "startup",
    "start_mappers",
]
