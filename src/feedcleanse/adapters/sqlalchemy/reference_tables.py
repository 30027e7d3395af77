"""Generic lookups against reference tables named by ``m_ref_table_map``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import MetaData, Table, inspect, select, true
from sqlalchemy.exc import NoSuchTableError

from feedcleanse.adapters.sqlalchemy.mappings import mapper_registry
from feedcleanse.domain.cleansing.errors import ReferenceLookupError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy import Column
    from sqlalchemy.orm import Session

    from feedcleanse.domain.ports.persistence import Row

log = logging.getLogger(__name__)


class SqlAlchemyReferenceTableReader:
    """Builds Core selects for table/column names taken from configuration.

    Names are checked against the live schema before use; values are always
    bound parameters.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        self._reflected = MetaData()
        self._tables: dict[str, Table] = {}

    def find_first(self, table: str, criteria: Mapping[str, object]) -> Row | None:
        reference_table = self._table(table)
        stmt = select(reference_table)
        for column_name, value in criteria.items():
            if column_name not in reference_table.c:
                raise ReferenceLookupError(f"Unknown column {column_name!r} on {table!r}")
            column = reference_table.c[column_name]
            coerced = _coerce(column, value)
            if coerced is None:
                return None
            stmt = stmt.where(column == coerced)
        if "is_active" in reference_table.c:
            stmt = stmt.where(reference_table.c.is_active == true())
        stmt = stmt.order_by(*reference_table.primary_key.columns).limit(1)

        row = self.session.execute(stmt).mappings().first()
        log.debug("Lookup %s %s -> %s", table, dict(criteria), "hit" if row else "miss")
        return dict(row) if row is not None else None

    def _table(self, name: str) -> Table:
        cached = self._tables.get(name)
        if cached is not None:
            return cached

        known = mapper_registry.metadata.tables.get(name)
        if known is not None:
            self._tables[name] = known
            return known

        bind = self.session.connection()
        if not inspect(bind).has_table(name):
            raise ReferenceLookupError(f"Unknown reference table {name!r}")
        try:
            reflected = Table(name, self._reflected, autoload_with=bind)
        except NoSuchTableError as exc:
            raise ReferenceLookupError(f"Unknown reference table {name!r}") from exc
        self._tables[name] = reflected
        return reflected


def _coerce(column: Column[object], value: object) -> object | None:
    """Cast string input to the column's Python type; ``None`` means no row can match."""

    if not isinstance(value, str):
        return value
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value
    if python_type is int:
        text = value.strip()
        if not text.lstrip("-").isdigit():
            return None
        return int(text)
    return value
