"""SQLAlchemy mapping metadata for the cleansing schema."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
    orm,
    true,
)

from feedcleanse.adapters.sqlalchemy.documents import (
    dump_provenance,
    dump_quality_detail,
    load_provenance,
    load_quality_detail,
)
from feedcleanse.domain.model import (
    AttributeCandidate,
    BatchRun,
    BatchStatus,
    ProvenanceEntry,
    QualityDetail,
    QualityStatus,
    RecordError,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class QualityDetailType(TypeDecorator[QualityDetail]):
    """``quality_detail_json``: one document, ``None`` members omitted."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: QualityDetail | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return dump_quality_detail(value)

    def process_result_value(self, value: str | None, dialect: Dialect) -> QualityDetail | None:
        _ = dialect
        if value is None:
            return None
        return load_quality_detail(value)


class ProvenanceListType(TypeDecorator[list[ProvenanceEntry]]):
    """``provenance_json``: ordered entries packed into one JSON array."""

    impl = Text
    cache_ok = True

    def process_bind_param(
        self,
        value: list[ProvenanceEntry] | None,
        dialect: Dialect,
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        return dump_provenance(value)

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[ProvenanceEntry]:
        _ = dialect
        if not value:
            return []
        return load_provenance(value)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Cleansing state -------------------------------------------------------------

product_attr_table = Table(
    "cl_product_attr",
    mapper_registry.metadata,
    Column("batch_id", String(64), primary_key=True),
    Column("temp_row_id", String(64), primary_key=True),
    Column("attr_cd", String(64), primary_key=True),
    Column("attr_seq", Integer, primary_key=True, default=1),
    Column("source_id", String, nullable=True),
    Column("source_label", String, nullable=True),
    Column("source_raw", Text, nullable=True),
    Column("data_type", String(16), nullable=True),
    Column("value_cd", String, nullable=True),
    Column("value_text", Text, nullable=True),
    Column("value_num", Numeric(18, 4, asdecimal=True), nullable=True),
    Column("value_date", String(32), nullable=True),
    Column("g_list_item_id", Integer, key="list_item_id", nullable=True),
    Column(
        "quality_status",
        Enum(QualityStatus, native_enum=False, length=8),
        nullable=True,
    ),
    Column("quality_detail_json", QualityDetailType, key="quality_detail", nullable=True),
    Column("provenance_json", ProvenanceListType, key="provenance", nullable=True),
    Column("rule_version", String(64), nullable=True),
    Column("cre_at", UTCDateTime, key="created_at", nullable=True),
    Column("upd_at", UTCDateTime, key="updated_at", nullable=True),
)

batch_run_table = Table(
    "batch_run",
    mapper_registry.metadata,
    Column("batch_id", String(64), primary_key=True),
    Column("group_company_cd", String(32), nullable=False),
    Column("data_kind", String(32), nullable=True),
    Column(
        "batch_status",
        Enum(BatchStatus, native_enum=False, length=16),
        nullable=True,
    ),
    Column("counts_json", JSON, key="counts", nullable=False, default=dict),
    Column("started_at", UTCDateTime, nullable=True),
    Column("ended_at", UTCDateTime, nullable=True),
    Column("upd_at", UTCDateTime, key="updated_at", nullable=True),
)

record_error_table = Table(
    "record_error",
    mapper_registry.metadata,
    Column("error_id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("batch_id", String(64), nullable=False, index=True),
    Column("step", String(32), nullable=False),
    Column("record_ref", String, nullable=False),
    Column("error_cd", String(64), nullable=False),
    Column("error_detail", Text, nullable=True),
    Column("raw_fragment", Text, nullable=True),
    Column("cre_at", UTCDateTime, key="created_at", nullable=False),
)

# Rule and master data --------------------------------------------------------

attr_definition_table = Table(
    "m_attr_definition",
    mapper_registry.metadata,
    Column("attr_id", Integer, primary_key=True),
    Column("attr_cd", String(64), nullable=False, index=True),
    Column("attr_nm", String, nullable=True),
    Column("data_type", String(16), nullable=False),
    Column("g_list_group_cd", String(64), nullable=True),
    Column("select_type", String(16), nullable=True),
    Column("cleanse_phase", Integer, nullable=True),
    Column("is_active", Boolean, nullable=False, server_default=true()),
)

cleanse_rule_set_table = Table(
    "m_cleanse_rule_set",
    mapper_registry.metadata,
    Column("rule_set_id", Integer, primary_key=True),
    Column("rule_version", String(64), nullable=True),
    Column("description", Text, nullable=True),
    Column("released_at", UTCDateTime, nullable=True),
    Column("is_active", Boolean, nullable=False, server_default=true()),
)

ref_table_map_table = Table(
    "m_ref_table_map",
    mapper_registry.metadata,
    Column("ref_map_id", Integer, primary_key=True),
    Column("attr_cd", String(64), nullable=False, index=True),
    Column("hop1_table", String(128), nullable=False),
    Column("hop1_match_by", String(8), nullable=True),
    Column("hop1_id_col", String(128), nullable=True),
    Column("hop1_label_col", String(128), nullable=True),
    Column("hop1_return_cols", JSON, nullable=True),
    Column("hop2_table", String(128), nullable=True),
    Column("hop2_join_on_json", JSON, nullable=True),
    Column("hop2_return_cd_col", String(128), nullable=True),
    Column("hop2_return_label_col", String(128), nullable=True),
    Column("is_active", Boolean, nullable=False, server_default=true()),
)

cleanse_policy_table = Table(
    "m_attr_cleanse_policy",
    mapper_registry.metadata,
    Column("policy_id", Integer, primary_key=True),
    Column(
        "rule_set_id",
        Integer,
        ForeignKey("m_cleanse_rule_set.rule_set_id"),
        nullable=True,
    ),
    Column("attr_cd", String(64), nullable=False, index=True),
    Column("data_type", String(16), nullable=True),
    Column(
        "ref_map_id",
        Integer,
        ForeignKey("m_ref_table_map.ref_map_id"),
        nullable=True,
    ),
    Column("g_list_group_cd", String(64), nullable=True),
    Column("gp_scope", String(32), nullable=True),
    Column("brand_scope", String(64), nullable=True),
    Column("category_scope", String(64), nullable=True),
    Column("step_no", Integer, nullable=True),
    Column("matcher_kind", String(32), nullable=True),
    Column("is_active", Boolean, nullable=False, server_default=true()),
)

list_group_table = Table(
    "m_list_group_g",
    mapper_registry.metadata,
    Column("g_list_group_id", Integer, primary_key=True),
    Column("g_list_group_cd", String(64), nullable=False, unique=True),
    Column("g_list_group_nm", String, nullable=True),
    Column("is_active", Boolean, nullable=False, server_default=true()),
)

list_item_table = Table(
    "m_list_item_g",
    mapper_registry.metadata,
    Column("g_list_item_id", Integer, primary_key=True),
    Column(
        "g_list_group_id",
        Integer,
        ForeignKey("m_list_group_g.g_list_group_id"),
        nullable=True,
    ),
    Column("g_item_cd", String(64), nullable=False),
    Column("g_item_label", String, nullable=True),
    Column("is_active", Boolean, nullable=False, server_default=true()),
)

attr_source_map_table = Table(
    "attr_source_map",
    mapper_registry.metadata,
    Column("map_id", Integer, primary_key=True),
    Column("group_company_cd", String(32), nullable=False),
    Column("g_list_group_id", Integer, nullable=True),
    Column("g_brand_cd", String(64), nullable=True),
    Column("g_category_cd", String(64), nullable=True),
    Column("source_attr_id", String, nullable=True),
    Column("source_attr_nm", String, nullable=True),
    Column("match_mode", String(8), nullable=True),
    Column(
        "g_list_item_id",
        Integer,
        ForeignKey("m_list_item_g.g_list_item_id"),
        nullable=True,
    ),
    Column("is_active", Boolean, nullable=False, server_default=true()),
    Index("ix_attr_source_map_lookup", "group_company_cd", "source_attr_id"),
)

token_route_table = Table(
    "m_token_route",
    mapper_registry.metadata,
    Column("token_id", Integer, primary_key=True),
    Column("group_company_cd", String(32), nullable=True),
    Column("brand_scope", String(64), nullable=True),
    Column("category_scope", String(64), nullable=True),
    Column("token_label", String, nullable=False),
    Column("token_label_norm", String, nullable=True),
    Column("applicable_attr_cd", String(64), nullable=False, index=True),
    Column("target_attr_cd", String(64), nullable=True),
    Column("normalize_to", String, nullable=False),
    Column("priority", Integer, nullable=False, server_default="10"),
    Column("is_active", Boolean, nullable=False, server_default=true()),
)

# Reference tables reachable through m_ref_table_map ---------------------------

brand_table = Table(
    "m_brand_g",
    mapper_registry.metadata,
    Column("g_brand_id", Integer, primary_key=True),
    Column("g_brand_cd", String(64), nullable=False, unique=True),
    Column("g_brand_nm", String, nullable=True),
    Column("is_active", Boolean, nullable=False, server_default=true()),
)

brand_source_map_table = Table(
    "brand_source_map",
    mapper_registry.metadata,
    Column("brand_source_map_id", Integer, primary_key=True),
    Column("group_company_cd", String(32), nullable=True),
    Column("source_brand_id", String, nullable=True),
    Column("source_brand_nm", String, nullable=True),
    Column("g_brand_id", Integer, ForeignKey("m_brand_g.g_brand_id"), nullable=True),
    Column("is_active", Boolean, nullable=False, server_default=true()),
)

category_table = Table(
    "m_category_g",
    mapper_registry.metadata,
    Column("g_category_id", Integer, primary_key=True),
    Column("g_category_cd", String(64), nullable=False, unique=True),
    Column("g_category_nm", String, nullable=True),
    Column("is_active", Boolean, nullable=False, server_default=true()),
)

category_source_map_table = Table(
    "category_source_map",
    mapper_registry.metadata,
    Column("category_source_map_id", Integer, primary_key=True),
    Column("group_company_cd", String(32), nullable=True),
    Column("source_category_id", String, nullable=True),
    Column("source_category_nm", String, nullable=True),
    Column(
        "g_category_id",
        Integer,
        ForeignKey("m_category_g.g_category_id"),
        nullable=True,
    ),
    Column("is_active", Boolean, nullable=False, server_default=true()),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the mutable cleansing entities."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(AttributeCandidate, product_attr_table)
    mapper_registry.map_imperatively(BatchRun, batch_run_table)
    mapper_registry.map_imperatively(RecordError, record_error_table)

    orm.configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create every table without migrations (scratch databases only)."""

    start_mappers()
    mapper_registry.metadata.create_all(engine)
