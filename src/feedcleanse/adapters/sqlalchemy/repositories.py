"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import or_, select

from feedcleanse.adapters.sqlalchemy.mappings import (
    attr_source_map_table,
    product_attr_table,
    token_route_table,
)
from feedcleanse.adapters.sqlalchemy.rows import source_mapping_from_row, token_route_from_row
from feedcleanse.domain.model import AttributeCandidate, BatchRun, RecordError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import ColumnElement
    from sqlalchemy.orm import Session

    from feedcleanse.domain.model import AttrSourceMapping, TokenRoute

log = logging.getLogger(__name__)


class SqlAlchemyAttributeCandidateRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: AttributeCandidate) -> None:
        self.session.add(entity)

    def list_for_batch(self, batch_id: str) -> list[AttributeCandidate]:
        stmt = (
            select(AttributeCandidate)
            .where(product_attr_table.c.batch_id == batch_id)
            .order_by(
                product_attr_table.c.temp_row_id,
                product_attr_table.c.attr_cd,
                product_attr_table.c.attr_seq,
            )
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyRecordErrorRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: RecordError) -> None:
        self.session.add(entity)


class SqlAlchemyBatchRunRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: BatchRun) -> None:
        self.session.add(entity)

    def get(self, batch_id: str) -> BatchRun | None:
        return self.session.get(BatchRun, batch_id)


class SqlAlchemyAttrSourceMapRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_candidates(
        self,
        group_company_cd: str,
        *,
        source_id: str | None,
        source_label: str | None,
    ) -> Sequence[AttrSourceMapping]:
        table = attr_source_map_table
        conditions: list[ColumnElement[bool]] = []
        if source_id:
            conditions.append(table.c.source_attr_id == source_id.strip())
        if source_label:
            conditions.append(table.c.source_attr_nm == source_label.strip())
        if not conditions:
            return ()
        stmt = (
            select(table)
            .where(table.c.group_company_cd == group_company_cd)
            .where(table.c.is_active.is_(True))
            .where(or_(*conditions))
            .order_by(table.c.map_id)
        )
        return [source_mapping_from_row(row) for row in self.session.execute(stmt).mappings()]


class SqlAlchemyTokenRouteRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def routes_for(self, group_company_cd: str, attr_cd: str) -> Sequence[TokenRoute]:
        table = token_route_table
        stmt = (
            select(table)
            .where(table.c.applicable_attr_cd == attr_cd.upper())
            .where(
                or_(
                    table.c.group_company_cd.is_(None),
                    table.c.group_company_cd == group_company_cd,
                )
            )
            .where(table.c.is_active.is_(True))
            .order_by(table.c.priority, table.c.token_id)
        )
        routes = [token_route_from_row(row) for row in self.session.execute(stmt).mappings()]
        log.debug("Loaded %d token routes for %s/%s", len(routes), group_company_cd, attr_cd)
        return routes
