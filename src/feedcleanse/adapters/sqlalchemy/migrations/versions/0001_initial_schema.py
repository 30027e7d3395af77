"""Initial cleansing schema.

Revision ID: 0001
Revises:
Create Date: 2025-10-22 09:00:00

"""

from __future__ import annotations

from typing import TYPE_CHECKING

import sqlalchemy as sa
from alembic import op

if TYPE_CHECKING:
    from collections.abc import Sequence

revision: str = "0001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _is_active() -> sa.Column[bool]:
    return sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true())


def upgrade() -> None:
    op.create_table(
        "cl_product_attr",
        sa.Column("batch_id", sa.String(64), nullable=False),
        sa.Column("temp_row_id", sa.String(64), nullable=False),
        sa.Column("attr_cd", sa.String(64), nullable=False),
        sa.Column("attr_seq", sa.Integer(), nullable=False),
        sa.Column("source_id", sa.String(), nullable=True),
        sa.Column("source_label", sa.String(), nullable=True),
        sa.Column("source_raw", sa.Text(), nullable=True),
        sa.Column("data_type", sa.String(16), nullable=True),
        sa.Column("value_cd", sa.String(), nullable=True),
        sa.Column("value_text", sa.Text(), nullable=True),
        sa.Column("value_num", sa.Numeric(18, 4), nullable=True),
        sa.Column("value_date", sa.String(32), nullable=True),
        sa.Column("g_list_item_id", sa.Integer(), nullable=True),
        sa.Column("quality_status", sa.String(8), nullable=True),
        sa.Column("quality_detail_json", sa.Text(), nullable=True),
        sa.Column("provenance_json", sa.Text(), nullable=True),
        sa.Column("rule_version", sa.String(64), nullable=True),
        sa.Column("cre_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("upd_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint(
            "batch_id",
            "temp_row_id",
            "attr_cd",
            "attr_seq",
            name="pk_cl_product_attr",
        ),
    )

    op.create_table(
        "batch_run",
        sa.Column("batch_id", sa.String(64), nullable=False),
        sa.Column("group_company_cd", sa.String(32), nullable=False),
        sa.Column("data_kind", sa.String(32), nullable=True),
        sa.Column("batch_status", sa.String(16), nullable=True),
        sa.Column("counts_json", sa.JSON(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("upd_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("batch_id", name="pk_batch_run"),
    )

    op.create_table(
        "record_error",
        sa.Column("error_id", sa.Uuid(), nullable=False),
        sa.Column("batch_id", sa.String(64), nullable=False),
        sa.Column("step", sa.String(32), nullable=False),
        sa.Column("record_ref", sa.String(), nullable=False),
        sa.Column("error_cd", sa.String(64), nullable=False),
        sa.Column("error_detail", sa.Text(), nullable=True),
        sa.Column("raw_fragment", sa.Text(), nullable=True),
        sa.Column("cre_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("error_id", name="pk_record_error"),
    )
    op.create_index("ix_record_error_batch_id", "record_error", ["batch_id"])

    op.create_table(
        "m_attr_definition",
        sa.Column("attr_id", sa.Integer(), nullable=False),
        sa.Column("attr_cd", sa.String(64), nullable=False),
        sa.Column("attr_nm", sa.String(), nullable=True),
        sa.Column("data_type", sa.String(16), nullable=False),
        sa.Column("g_list_group_cd", sa.String(64), nullable=True),
        sa.Column("select_type", sa.String(16), nullable=True),
        sa.Column("cleanse_phase", sa.Integer(), nullable=True),
        _is_active(),
        sa.PrimaryKeyConstraint("attr_id", name="pk_m_attr_definition"),
    )
    op.create_index("ix_m_attr_definition_attr_cd", "m_attr_definition", ["attr_cd"])

    op.create_table(
        "m_cleanse_rule_set",
        sa.Column("rule_set_id", sa.Integer(), nullable=False),
        sa.Column("rule_version", sa.String(64), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("released_at", sa.DateTime(timezone=True), nullable=True),
        _is_active(),
        sa.PrimaryKeyConstraint("rule_set_id", name="pk_m_cleanse_rule_set"),
    )

    op.create_table(
        "m_ref_table_map",
        sa.Column("ref_map_id", sa.Integer(), nullable=False),
        sa.Column("attr_cd", sa.String(64), nullable=False),
        sa.Column("hop1_table", sa.String(128), nullable=False),
        sa.Column("hop1_match_by", sa.String(8), nullable=True),
        sa.Column("hop1_id_col", sa.String(128), nullable=True),
        sa.Column("hop1_label_col", sa.String(128), nullable=True),
        sa.Column("hop1_return_cols", sa.JSON(), nullable=True),
        sa.Column("hop2_table", sa.String(128), nullable=True),
        sa.Column("hop2_join_on_json", sa.JSON(), nullable=True),
        sa.Column("hop2_return_cd_col", sa.String(128), nullable=True),
        sa.Column("hop2_return_label_col", sa.String(128), nullable=True),
        _is_active(),
        sa.PrimaryKeyConstraint("ref_map_id", name="pk_m_ref_table_map"),
    )
    op.create_index("ix_m_ref_table_map_attr_cd", "m_ref_table_map", ["attr_cd"])

    op.create_table(
        "m_attr_cleanse_policy",
        sa.Column("policy_id", sa.Integer(), nullable=False),
        sa.Column("rule_set_id", sa.Integer(), nullable=True),
        sa.Column("attr_cd", sa.String(64), nullable=False),
        sa.Column("data_type", sa.String(16), nullable=True),
        sa.Column("ref_map_id", sa.Integer(), nullable=True),
        sa.Column("g_list_group_cd", sa.String(64), nullable=True),
        sa.Column("gp_scope", sa.String(32), nullable=True),
        sa.Column("brand_scope", sa.String(64), nullable=True),
        sa.Column("category_scope", sa.String(64), nullable=True),
        sa.Column("step_no", sa.Integer(), nullable=True),
        sa.Column("matcher_kind", sa.String(32), nullable=True),
        _is_active(),
        sa.ForeignKeyConstraint(
            ["rule_set_id"],
            ["m_cleanse_rule_set.rule_set_id"],
            name="fk_m_attr_cleanse_policy_rule_set_id_m_cleanse_rule_set",
        ),
        sa.ForeignKeyConstraint(
            ["ref_map_id"],
            ["m_ref_table_map.ref_map_id"],
            name="fk_m_attr_cleanse_policy_ref_map_id_m_ref_table_map",
        ),
        sa.PrimaryKeyConstraint("policy_id", name="pk_m_attr_cleanse_policy"),
    )
    op.create_index("ix_m_attr_cleanse_policy_attr_cd", "m_attr_cleanse_policy", ["attr_cd"])

    op.create_table(
        "m_list_group_g",
        sa.Column("g_list_group_id", sa.Integer(), nullable=False),
        sa.Column("g_list_group_cd", sa.String(64), nullable=False),
        sa.Column("g_list_group_nm", sa.String(), nullable=True),
        _is_active(),
        sa.PrimaryKeyConstraint("g_list_group_id", name="pk_m_list_group_g"),
        sa.UniqueConstraint("g_list_group_cd", name="uq_m_list_group_g_g_list_group_cd"),
    )

    op.create_table(
        "m_list_item_g",
        sa.Column("g_list_item_id", sa.Integer(), nullable=False),
        sa.Column("g_list_group_id", sa.Integer(), nullable=True),
        sa.Column("g_item_cd", sa.String(64), nullable=False),
        sa.Column("g_item_label", sa.String(), nullable=True),
        _is_active(),
        sa.ForeignKeyConstraint(
            ["g_list_group_id"],
            ["m_list_group_g.g_list_group_id"],
            name="fk_m_list_item_g_g_list_group_id_m_list_group_g",
        ),
        sa.PrimaryKeyConstraint("g_list_item_id", name="pk_m_list_item_g"),
    )

    op.create_table(
        "attr_source_map",
        sa.Column("map_id", sa.Integer(), nullable=False),
        sa.Column("group_company_cd", sa.String(32), nullable=False),
        sa.Column("g_list_group_id", sa.Integer(), nullable=True),
        sa.Column("g_brand_cd", sa.String(64), nullable=True),
        sa.Column("g_category_cd", sa.String(64), nullable=True),
        sa.Column("source_attr_id", sa.String(), nullable=True),
        sa.Column("source_attr_nm", sa.String(), nullable=True),
        sa.Column("match_mode", sa.String(8), nullable=True),
        sa.Column("g_list_item_id", sa.Integer(), nullable=True),
        _is_active(),
        sa.ForeignKeyConstraint(
            ["g_list_item_id"],
            ["m_list_item_g.g_list_item_id"],
            name="fk_attr_source_map_g_list_item_id_m_list_item_g",
        ),
        sa.PrimaryKeyConstraint("map_id", name="pk_attr_source_map"),
    )
    op.create_index(
        "ix_attr_source_map_lookup",
        "attr_source_map",
        ["group_company_cd", "source_attr_id"],
    )

    op.create_table(
        "m_token_route",
        sa.Column("token_id", sa.Integer(), nullable=False),
        sa.Column("group_company_cd", sa.String(32), nullable=True),
        sa.Column("brand_scope", sa.String(64), nullable=True),
        sa.Column("category_scope", sa.String(64), nullable=True),
        sa.Column("token_label", sa.String(), nullable=False),
        sa.Column("token_label_norm", sa.String(), nullable=True),
        sa.Column("applicable_attr_cd", sa.String(64), nullable=False),
        sa.Column("target_attr_cd", sa.String(64), nullable=True),
        sa.Column("normalize_to", sa.String(), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="10"),
        _is_active(),
        sa.PrimaryKeyConstraint("token_id", name="pk_m_token_route"),
    )
    op.create_index(
        "ix_m_token_route_applicable_attr_cd",
        "m_token_route",
        ["applicable_attr_cd"],
    )

    op.create_table(
        "m_brand_g",
        sa.Column("g_brand_id", sa.Integer(), nullable=False),
        sa.Column("g_brand_cd", sa.String(64), nullable=False),
        sa.Column("g_brand_nm", sa.String(), nullable=True),
        _is_active(),
        sa.PrimaryKeyConstraint("g_brand_id", name="pk_m_brand_g"),
        sa.UniqueConstraint("g_brand_cd", name="uq_m_brand_g_g_brand_cd"),
    )

    op.create_table(
        "brand_source_map",
        sa.Column("brand_source_map_id", sa.Integer(), nullable=False),
        sa.Column("group_company_cd", sa.String(32), nullable=True),
        sa.Column("source_brand_id", sa.String(), nullable=True),
        sa.Column("source_brand_nm", sa.String(), nullable=True),
        sa.Column("g_brand_id", sa.Integer(), nullable=True),
        _is_active(),
        sa.ForeignKeyConstraint(
            ["g_brand_id"],
            ["m_brand_g.g_brand_id"],
            name="fk_brand_source_map_g_brand_id_m_brand_g",
        ),
        sa.PrimaryKeyConstraint("brand_source_map_id", name="pk_brand_source_map"),
    )

    op.create_table(
        "m_category_g",
        sa.Column("g_category_id", sa.Integer(), nullable=False),
        sa.Column("g_category_cd", sa.String(64), nullable=False),
        sa.Column("g_category_nm", sa.String(), nullable=True),
        _is_active(),
        sa.PrimaryKeyConstraint("g_category_id", name="pk_m_category_g"),
        sa.UniqueConstraint("g_category_cd", name="uq_m_category_g_g_category_cd"),
    )

    op.create_table(
        "category_source_map",
        sa.Column("category_source_map_id", sa.Integer(), nullable=False),
        sa.Column("group_company_cd", sa.String(32), nullable=True),
        sa.Column("source_category_id", sa.String(), nullable=True),
        sa.Column("source_category_nm", sa.String(), nullable=True),
        sa.Column("g_category_id", sa.Integer(), nullable=True),
        _is_active(),
        sa.ForeignKeyConstraint(
            ["g_category_id"],
            ["m_category_g.g_category_id"],
            name="fk_category_source_map_g_category_id_m_category_g",
        ),
        sa.PrimaryKeyConstraint("category_source_map_id", name="pk_category_source_map"),
    )


def downgrade() -> None:
    op.drop_table("category_source_map")
    op.drop_table("m_category_g")
    op.drop_table("brand_source_map")
    op.drop_table("m_brand_g")
    op.drop_index("ix_m_token_route_applicable_attr_cd", table_name="m_token_route")
    op.drop_table("m_token_route")
    op.drop_index("ix_attr_source_map_lookup", table_name="attr_source_map")
    op.drop_table("attr_source_map")
    op.drop_table("m_list_item_g")
    op.drop_table("m_list_group_g")
    op.drop_index("ix_m_attr_cleanse_policy_attr_cd", table_name="m_attr_cleanse_policy")
    op.drop_table("m_attr_cleanse_policy")
    op.drop_index("ix_m_ref_table_map_attr_cd", table_name="m_ref_table_map")
    op.drop_table("m_ref_table_map")
    op.drop_table("m_cleanse_rule_set")
    op.drop_index("ix_m_attr_definition_attr_cd", table_name="m_attr_definition")
    op.drop_table("m_attr_definition")
    op.drop_index("ix_record_error_batch_id", table_name="record_error")
    op.drop_table("record_error")
    op.drop_table("batch_run")
    op.drop_table("cl_product_attr")
