"""Read-only rule and master data consumed by the cleansing engine.

Every type here is loaded once per batch run and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from feedcleanse.domain.model.enums import (
        DataType,
        HopMatchBy,
        MatcherKind,
        SelectType,
        SourceMatchMode,
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class AttributeDefinition:
    attr_id: int
    attr_cd: str
    attr_nm: str | None = None
    data_type: DataType
    select_type: SelectType
    cleanse_phase: int | None = None
    list_group_cd: str | None = None
    is_active: bool = True


@dataclass(frozen=True, slots=True, kw_only=True)
class CleansePolicy:
    """One prioritized cleansing rule for an attribute.

    A policy with neither ``brand_scope`` nor ``category_scope`` is *common*; any
    scoped policy is *specific* and only applies when the product's scope is known
    and equal. ``gp_scope`` restricts the policy to one group company.
    """

    policy_id: int
    rule_set_id: int | None = None
    attr_cd: str
    step_no: int | None = None
    matcher_kind: MatcherKind | None = None
    data_type: DataType | None = None
    ref_map_id: int | None = None
    list_group_cd: str | None = None
    gp_scope: str | None = None
    brand_scope: str | None = None
    category_scope: str | None = None
    is_active: bool = True

    @property
    def is_common(self) -> bool:
        return not self.brand_scope and not self.category_scope


@dataclass(frozen=True, slots=True, kw_only=True)
class ReferenceTableMap:
    ref_map_id: int
    attr_cd: str
    hop1_table: str
    hop1_match_by: HopMatchBy
    hop1_id_col: str | None = None
    hop1_label_col: str | None = None
    hop1_return_cols: tuple[str, ...] = ()
    hop2_table: str | None = None
    hop2_join_on: tuple[tuple[str, str], ...] = ()
    hop2_return_cd_col: str | None = None
    hop2_return_label_col: str | None = None
    is_active: bool = True

    @property
    def has_second_hop(self) -> bool:
        return bool(self.hop2_table)


@dataclass(frozen=True, slots=True, kw_only=True)
class CleanseRuleSet:
    rule_set_id: int
    rule_version: str | None = None
    description: str | None = None
    released_at: datetime | None = None
    is_active: bool = True

    @property
    def version_label(self) -> str:
        if self.rule_version and self.rule_version.strip():
            return self.rule_version
        return str(self.rule_set_id)


@dataclass(frozen=True, slots=True, kw_only=True)
class ListItem:
    list_item_id: int
    list_group_id: int | None = None
    list_group_cd: str | None = None
    item_cd: str
    item_label: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class AttrSourceMapping:
    map_id: int
    group_company_cd: str
    list_group_id: int | None = None
    brand_cd: str | None = None
    category_cd: str | None = None
    source_attr_id: str | None = None
    source_attr_nm: str | None = None
    match_mode: SourceMatchMode | None = None
    list_item_id: int | None = None

    @property
    def is_scoped(self) -> bool:
        return bool(self.brand_cd or self.category_cd)


@dataclass(frozen=True, slots=True, kw_only=True)
class TokenRoute:
    token_id: int
    group_company_cd: str | None = None
    brand_scope: str | None = None
    category_scope: str | None = None
    token_label: str
    token_label_norm: str | None = None
    applicable_attr_cd: str
    target_attr_cd: str | None = None
    normalize_to: str
    priority: int = 10

    @property
    def is_scoped(self) -> bool:
        return bool(self.brand_scope or self.category_scope)


@dataclass(frozen=True, slots=True, kw_only=True)
class BatchMetadata:
    batch_id: str
    group_company_cd: str
    data_kind: str | None = None
