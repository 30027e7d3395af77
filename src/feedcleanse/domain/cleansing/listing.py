"""Controlled-vocabulary matching through attribute-source mappings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from feedcleanse.domain.model import MatcherKind, SourceMatchMode

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from feedcleanse.domain.cleansing.context import MatchScope
    from feedcleanse.domain.model import AttrSourceMapping, ListItem

log = logging.getLogger(__name__)

LIST_MATCHER_KINDS = frozenset(
    {MatcherKind.ID_EXACT, MatcherKind.LABEL_EXACT, MatcherKind.DERIVE_FROM_GP}
)


def select_mapping(
    mappings: Iterable[AttrSourceMapping],
    *,
    matcher_kind: MatcherKind,
    source_id: str | None,
    source_label: str | None,
    scope: MatchScope,
    list_group_cd: str | None = None,
    list_items: Callable[[int], ListItem | None] | None = None,
) -> AttrSourceMapping | None:
    """Pick the mapping that translates a raw id/label pair for this product.

    Mappings scoped to a brand or category are only eligible once that scope is
    known and equal, and win over unscoped ones. Remaining ties go to the lowest
    ``map_id``.
    """

    source_id = _clean(source_id)
    source_label = _clean(source_label)
    eligible = [
        mapping
        for mapping in mappings
        if mapping_matches(
            mapping,
            matcher_kind=matcher_kind,
            source_id=source_id,
            source_label=source_label,
        )
        and _in_scope(mapping, scope)
        and _in_group(mapping, list_group_cd, list_items)
    ]
    if not eligible:
        return None
    eligible.sort(key=lambda mapping: (not mapping.is_scoped, mapping.map_id))
    chosen = eligible[0]
    log.debug(
        "Selected source mapping %s (%d eligible) for id=%s label=%s",
        chosen.map_id,
        len(eligible),
        source_id,
        source_label,
    )
    return chosen


def mapping_matches(
    mapping: AttrSourceMapping,
    *,
    matcher_kind: MatcherKind,
    source_id: str | None,
    source_label: str | None,
) -> bool:
    id_hit = source_id is not None and _clean(mapping.source_attr_id) == source_id
    name_hit = source_label is not None and _clean(mapping.source_attr_nm) == source_label

    if matcher_kind is MatcherKind.ID_EXACT:
        return id_hit
    if matcher_kind is MatcherKind.LABEL_EXACT:
        return name_hit
    if matcher_kind is not MatcherKind.DERIVE_FROM_GP:
        return False

    mode = mapping.match_mode or SourceMatchMode.AUTO
    if mode is SourceMatchMode.ID:
        return id_hit
    if mode is SourceMatchMode.NAME:
        return name_hit
    if mode is SourceMatchMode.BOTH:
        return id_hit and name_hit
    return id_hit if _clean(mapping.source_attr_id) else name_hit


def _in_scope(mapping: AttrSourceMapping, scope: MatchScope) -> bool:
    return _scope_ok(mapping.brand_cd, scope.brand) and _scope_ok(
        mapping.category_cd, scope.category
    )


def _scope_ok(required: str | None, known: str | None) -> bool:
    if not required:
        return True
    return known is not None and required.casefold() == known.casefold()


def _in_group(
    mapping: AttrSourceMapping,
    list_group_cd: str | None,
    list_items: Callable[[int], ListItem | None] | None,
) -> bool:
    if not list_group_cd or list_items is None or mapping.list_item_id is None:
        return True
    item = list_items(mapping.list_item_id)
    if item is None or item.list_group_cd is None:
        return True
    return item.list_group_cd.casefold() == list_group_cd.casefold()


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None
