"""Seed data for SQLAlchemy-backed cleansing tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import insert

from feedcleanse.adapters.sqlalchemy.mappings import (
    attr_definition_table,
    attr_source_map_table,
    brand_source_map_table,
    brand_table,
    cleanse_policy_table,
    cleanse_rule_set_table,
    list_group_table,
    list_item_table,
    ref_table_map_table,
    token_route_table,
)
from feedcleanse.domain.model import AttributeCandidate, BatchRun
from tests.helpers.cleansing import BATCH_ID, GROUP_COMPANY

if TYPE_CHECKING:
    from sqlalchemy import Table
    from sqlalchemy.engine import Connection
    from sqlalchemy.orm import Session


def seed_reference_tables(connection: Connection) -> None:
    """Rules and masters for a BRAND/MATERIAL/SIZE/PRICE catalogue."""

    _insert_rows(
        connection,
        cleanse_rule_set_table,
        [{"rule_set_id": 1, "rule_version": "2025.10", "description": "October rules"}],
    )
    _insert_rows(
        connection,
        attr_definition_table,
        [
            {
                "attr_id": 1,
                "attr_cd": "BRAND",
                "data_type": "REF",
                "select_type": "SINGLE",
                "cleanse_phase": 5,
            },
            {
                "attr_id": 2,
                "attr_cd": "MATERIAL",
                "data_type": "LIST",
                "select_type": "MULTI",
                "cleanse_phase": 20,
            },
            {
                "attr_id": 3,
                "attr_cd": "SIZE",
                "data_type": "LIST",
                "select_type": "SINGLE",
                "cleanse_phase": 20,
                "g_list_group_cd": "SIZE",
            },
            {
                "attr_id": 4,
                "attr_cd": "PRICE",
                "data_type": "num",
                "select_type": None,
                "cleanse_phase": 30,
            },
            {
                "attr_id": 5,
                "attr_cd": "LEGACY",
                "data_type": "BLOB",
                "select_type": "SINGLE",
                "cleanse_phase": 30,
            },
            {
                "attr_id": 6,
                "attr_cd": "RETIRED",
                "data_type": "TEXT",
                "select_type": "SINGLE",
                "cleanse_phase": 30,
                "is_active": False,
            },
        ],
    )
    _insert_rows(
        connection,
        ref_table_map_table,
        [
            {
                "ref_map_id": 1,
                "attr_cd": "BRAND",
                "hop1_table": "brand_source_map",
                "hop1_match_by": "auto",
                "hop1_id_col": "source_brand_id",
                "hop1_label_col": "source_brand_nm",
                "hop1_return_cols": None,
                "hop2_table": "m_brand_g",
                "hop2_join_on_json": {"g_brand_id": "g_brand_id"},
                "hop2_return_cd_col": "g_brand_cd",
                "hop2_return_label_col": "g_brand_nm",
            }
        ],
    )
    _insert_rows(
        connection,
        cleanse_policy_table,
        [
            {
                "policy_id": 1,
                "rule_set_id": 1,
                "attr_cd": "BRAND",
                "ref_map_id": 1,
                "step_no": 1,
                "matcher_kind": "ID_EXACT",
            },
            {
                "policy_id": 2,
                "rule_set_id": 1,
                "attr_cd": "MATERIAL",
                "brand_scope": "ROLEX",
                "category_scope": "",
                "step_no": 1,
                "matcher_kind": "TOKEN_DICT",
            },
            {
                "policy_id": 3,
                "rule_set_id": 1,
                "attr_cd": "SIZE",
                "step_no": 1,
                "matcher_kind": "ID_EXACT",
            },
            {"policy_id": 4, "rule_set_id": 1, "attr_cd": "PRICE", "step_no": 1},
            {
                "policy_id": 5,
                "rule_set_id": 1,
                "attr_cd": "PRICE",
                "step_no": 2,
                "gp_scope": "OTHER",
                "matcher_kind": "LABEL_EXACT",
            },
        ],
    )
    _insert_rows(
        connection,
        list_group_table,
        [{"g_list_group_id": 1, "g_list_group_cd": "SIZE", "g_list_group_nm": "Sizes"}],
    )
    _insert_rows(
        connection,
        list_item_table,
        [
            {
                "g_list_item_id": 50,
                "g_list_group_id": 1,
                "g_item_cd": "M",
                "g_item_label": "Medium",
            },
            {"g_list_item_id": 51, "g_list_group_id": None, "g_item_cd": "LOOSE"},
        ],
    )
    _insert_rows(
        connection,
        attr_source_map_table,
        [
            {
                "map_id": 1,
                "group_company_cd": GROUP_COMPANY,
                "source_attr_id": "SZ-M",
                "source_attr_nm": "Mサイズ",
                "g_list_item_id": 50,
            },
            {
                "map_id": 2,
                "group_company_cd": "OTHER",
                "source_attr_id": "SZ-M",
                "g_list_item_id": 51,
            },
            {
                "map_id": 3,
                "group_company_cd": GROUP_COMPANY,
                "source_attr_id": "SZ-M",
                "g_list_item_id": 51,
                "is_active": False,
            },
        ],
    )
    _insert_rows(
        connection,
        token_route_table,
        [
            {
                "token_id": 1,
                "group_company_cd": None,
                "brand_scope": "ROLEX",
                "token_label": "WG",
                "applicable_attr_cd": "MATERIAL",
                "normalize_to": "WG",
            },
            {
                "token_id": 2,
                "group_company_cd": GROUP_COMPANY,
                "token_label": "SS",
                "applicable_attr_cd": "MATERIAL",
                "normalize_to": "SS",
                "priority": 1,
            },
            {
                "token_id": 3,
                "group_company_cd": "OTHER",
                "token_label": "PT",
                "applicable_attr_cd": "MATERIAL",
                "normalize_to": "PLATINUM",
            },
        ],
    )
    _insert_rows(
        connection,
        brand_table,
        [{"g_brand_id": 7, "g_brand_cd": "ROLEX", "g_brand_nm": "Rolex"}],
    )
    _insert_rows(
        connection,
        brand_source_map_table,
        [
            {
                "brand_source_map_id": 1,
                "group_company_cd": GROUP_COMPANY,
                "source_brand_id": "R01",
                "source_brand_nm": "Rolex",
                "g_brand_id": 7,
            }
        ],
    )


def seed_batch(session: Session) -> None:
    """One batch with two products: a full watch and a price-only row."""

    session.add(BatchRun(batch_id=BATCH_ID, group_company_cd=GROUP_COMPANY, data_kind="PRODUCT"))
    session.add_all(
        [
            AttributeCandidate(
                batch_id=BATCH_ID,
                temp_row_id="row-1",
                attr_cd="MATERIAL",
                source_raw="18K WG/SS",
            ),
            AttributeCandidate(
                batch_id=BATCH_ID,
                temp_row_id="row-1",
                attr_cd="BRAND",
                source_id="R01",
                source_label="Rolex",
                source_raw="Rolex",
            ),
            AttributeCandidate(
                batch_id=BATCH_ID,
                temp_row_id="row-1",
                attr_cd="SIZE",
                source_id="SZ-M",
            ),
            AttributeCandidate(
                batch_id=BATCH_ID,
                temp_row_id="row-1",
                attr_cd="PRICE",
                source_raw="¥1,980",
            ),
            AttributeCandidate(
                batch_id=BATCH_ID,
                temp_row_id="row-2",
                attr_cd="PRICE",
                source_raw="",
            ),
        ]
    )


def _insert_rows(connection: Connection, table: Table, rows: list[dict[str, object]]) -> None:
    for row in rows:
        connection.execute(insert(table).values(**row))
