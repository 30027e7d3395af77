"""Reference data source reading rule and master tables through Core selects."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select, true

from feedcleanse.adapters.sqlalchemy.mappings import (
    attr_definition_table,
    batch_run_table,
    cleanse_policy_table,
    cleanse_rule_set_table,
    list_group_table,
    list_item_table,
    ref_table_map_table,
)
from feedcleanse.adapters.sqlalchemy.rows import (
    batch_from_row,
    definition_from_row,
    list_item_from_row,
    policy_from_row,
    reference_map_from_row,
    rule_set_from_row,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from sqlalchemy import Select
    from sqlalchemy.engine import Engine, RowMapping

    from feedcleanse.domain.model import (
        AttributeDefinition,
        BatchMetadata,
        CleansePolicy,
        CleanseRuleSet,
        ListItem,
        ReferenceTableMap,
    )

log = logging.getLogger(__name__)


class SqlAlchemyReferenceDataSource:
    """Each fetch checks out its own connection so fetches can run in parallel."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def fetch_definitions(self) -> Sequence[AttributeDefinition]:
        stmt = (
            select(attr_definition_table)
            .where(attr_definition_table.c.is_active == true())
            .order_by(attr_definition_table.c.attr_id)
        )
        definitions = self._fetch(stmt, definition_from_row)
        return [definition for definition in definitions if definition is not None]

    def fetch_policies(self) -> Sequence[CleansePolicy]:
        stmt = (
            select(cleanse_policy_table)
            .where(cleanse_policy_table.c.is_active == true())
            .order_by(cleanse_policy_table.c.policy_id)
        )
        return self._fetch(stmt, policy_from_row)

    def fetch_reference_maps(self) -> Sequence[ReferenceTableMap]:
        stmt = (
            select(ref_table_map_table)
            .where(ref_table_map_table.c.is_active == true())
            .order_by(ref_table_map_table.c.ref_map_id)
        )
        return self._fetch(stmt, reference_map_from_row)

    def fetch_rule_sets(self) -> Sequence[CleanseRuleSet]:
        stmt = select(cleanse_rule_set_table).order_by(cleanse_rule_set_table.c.rule_set_id)
        return self._fetch(stmt, rule_set_from_row)

    def fetch_list_items(self) -> Sequence[ListItem]:
        stmt = (
            select(list_item_table, list_group_table.c.g_list_group_cd)
            .select_from(
                list_item_table.outerjoin(
                    list_group_table,
                    list_item_table.c.g_list_group_id == list_group_table.c.g_list_group_id,
                )
            )
            .where(list_item_table.c.is_active == true())
            .order_by(list_item_table.c.g_list_item_id)
        )
        return self._fetch(stmt, list_item_from_row)

    def fetch_batches(self) -> Sequence[BatchMetadata]:
        stmt = select(batch_run_table).order_by(batch_run_table.c.batch_id)
        return self._fetch(stmt, batch_from_row)

    def _fetch[T](
        self,
        stmt: Select[tuple[object, ...]],
        convert: Callable[[RowMapping], T],
    ) -> list[T]:
        with self.engine.connect() as connection:
            rows = connection.execute(stmt).mappings().all()
        return [convert(row) for row in rows]
