"""Translate rule and master-data rows into domain definitions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from feedcleanse.domain.model import (
    AttributeDefinition,
    AttrSourceMapping,
    BatchMetadata,
    CleansePolicy,
    CleanseRuleSet,
    DataType,
    HopMatchBy,
    ListItem,
    MatcherKind,
    ReferenceTableMap,
    SelectType,
    SourceMatchMode,
    TokenRoute,
    parse_enum,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy.engine import RowMapping

log = logging.getLogger(__name__)


def definition_from_row(row: RowMapping) -> AttributeDefinition | None:
    data_type = parse_enum(DataType, row["data_type"])
    if data_type is None:
        log.warning(
            "Ignoring attribute definition %s (%s): unknown data_type %r",
            row["attr_id"],
            row["attr_cd"],
            row["data_type"],
        )
        return None
    return AttributeDefinition(
        attr_id=row["attr_id"],
        attr_cd=row["attr_cd"],
        attr_nm=row["attr_nm"],
        data_type=data_type,
        select_type=parse_enum(SelectType, row["select_type"]) or SelectType.SINGLE,
        cleanse_phase=row["cleanse_phase"],
        list_group_cd=row["g_list_group_cd"],
        is_active=bool(row["is_active"]),
    )


def policy_from_row(row: RowMapping) -> CleansePolicy:
    matcher_kind = parse_enum(MatcherKind, row["matcher_kind"])
    if matcher_kind is None and row["matcher_kind"]:
        log.warning(
            "Policy %s has unknown matcher_kind %r",
            row["policy_id"],
            row["matcher_kind"],
        )
    return CleansePolicy(
        policy_id=row["policy_id"],
        rule_set_id=row["rule_set_id"],
        attr_cd=row["attr_cd"],
        step_no=row["step_no"],
        matcher_kind=matcher_kind,
        data_type=parse_enum(DataType, row["data_type"]),
        ref_map_id=row["ref_map_id"],
        list_group_cd=row["g_list_group_cd"],
        gp_scope=_blank_to_none(row["gp_scope"]),
        brand_scope=_blank_to_none(row["brand_scope"]),
        category_scope=_blank_to_none(row["category_scope"]),
        is_active=bool(row["is_active"]),
    )


def reference_map_from_row(row: RowMapping) -> ReferenceTableMap:
    return_cols = row["hop1_return_cols"]
    if isinstance(return_cols, str):
        return_cols = [column for column in return_cols.split(",") if column.strip()]
    join_on = cast("Mapping[str, Any] | None", row["hop2_join_on_json"]) or {}
    return ReferenceTableMap(
        ref_map_id=row["ref_map_id"],
        attr_cd=row["attr_cd"],
        hop1_table=row["hop1_table"],
        hop1_match_by=parse_enum(HopMatchBy, row["hop1_match_by"]) or HopMatchBy.ID,
        hop1_id_col=row["hop1_id_col"],
        hop1_label_col=row["hop1_label_col"],
        hop1_return_cols=tuple(str(column).strip() for column in return_cols or ()),
        hop2_table=_blank_to_none(row["hop2_table"]),
        hop2_join_on=tuple((str(left), str(right)) for left, right in join_on.items()),
        hop2_return_cd_col=row["hop2_return_cd_col"],
        hop2_return_label_col=row["hop2_return_label_col"],
        is_active=bool(row["is_active"]),
    )


def rule_set_from_row(row: RowMapping) -> CleanseRuleSet:
    return CleanseRuleSet(
        rule_set_id=row["rule_set_id"],
        rule_version=row["rule_version"],
        description=row["description"],
        released_at=row["released_at"],
        is_active=bool(row["is_active"]),
    )


def list_item_from_row(row: RowMapping) -> ListItem:
    return ListItem(
        list_item_id=row["g_list_item_id"],
        list_group_id=row["g_list_group_id"],
        list_group_cd=row["g_list_group_cd"],
        item_cd=row["g_item_cd"],
        item_label=row["g_item_label"],
    )


def batch_from_row(row: RowMapping) -> BatchMetadata:
    return BatchMetadata(
        batch_id=row["batch_id"],
        group_company_cd=row["group_company_cd"],
        data_kind=row["data_kind"],
    )


def source_mapping_from_row(row: RowMapping) -> AttrSourceMapping:
    return AttrSourceMapping(
        map_id=row["map_id"],
        group_company_cd=row["group_company_cd"],
        list_group_id=row["g_list_group_id"],
        brand_cd=_blank_to_none(row["g_brand_cd"]),
        category_cd=_blank_to_none(row["g_category_cd"]),
        source_attr_id=row["source_attr_id"],
        source_attr_nm=row["source_attr_nm"],
        match_mode=parse_enum(SourceMatchMode, row["match_mode"]),
        list_item_id=row["g_list_item_id"],
    )


def token_route_from_row(row: RowMapping) -> TokenRoute:
    return TokenRoute(
        token_id=row["token_id"],
        group_company_cd=row["group_company_cd"],
        brand_scope=_blank_to_none(row["brand_scope"]),
        category_scope=_blank_to_none(row["category_scope"]),
        token_label=row["token_label"],
        token_label_norm=row["token_label_norm"],
        applicable_attr_cd=row["applicable_attr_cd"],
        target_attr_cd=_blank_to_none(row["target_attr_cd"]),
        normalize_to=row["normalize_to"],
        priority=row["priority"],
    )


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None
