from __future__ import annotations

import pytest

from feedcleanse.domain.cleansing import MatchScope
from feedcleanse.domain.cleansing.listing import mapping_matches, select_mapping
from feedcleanse.domain.model import AttrSourceMapping, ListItem, MatcherKind, SourceMatchMode
from tests.helpers.cleansing import GROUP_COMPANY


def _mapping(map_id: int, **overrides: object) -> AttrSourceMapping:
    values: dict[str, object] = {
        "map_id": map_id,
        "group_company_cd": GROUP_COMPANY,
        "source_attr_id": "M01",
        "source_attr_nm": "ステンレス",
        "list_item_id": 100,
    }
    values.update(overrides)
    return AttrSourceMapping(**values)  # pyright: ignore[reportArgumentType]


def test_id_exact_matches_on_source_id() -> None:
    mapping = _mapping(1)

    assert mapping_matches(
        mapping, matcher_kind=MatcherKind.ID_EXACT, source_id="M01", source_label=None
    )
    assert not mapping_matches(
        mapping, matcher_kind=MatcherKind.ID_EXACT, source_id=None, source_label="ステンレス"
    )


def test_label_exact_matches_on_source_name() -> None:
    mapping = _mapping(1)

    assert mapping_matches(
        mapping, matcher_kind=MatcherKind.LABEL_EXACT, source_id=None, source_label="ステンレス"
    )
    assert not mapping_matches(
        mapping, matcher_kind=MatcherKind.LABEL_EXACT, source_id="M01", source_label="other"
    )


@pytest.mark.parametrize(
    ("mode", "source_id", "source_label", "expected"),
    [
        (SourceMatchMode.ID, "M01", None, True),
        (SourceMatchMode.ID, None, "ステンレス", False),
        (SourceMatchMode.NAME, None, "ステンレス", True),
        (SourceMatchMode.BOTH, "M01", "ステンレス", True),
        (SourceMatchMode.BOTH, "M01", "other", False),
        (SourceMatchMode.AUTO, "M01", None, True),
        (None, "M01", None, True),
    ],
)
def test_derive_from_gp_honours_match_mode(
    mode: SourceMatchMode | None,
    source_id: str | None,
    source_label: str | None,
    expected: bool,  # noqa: FBT001
) -> None:
    mapping = _mapping(1, match_mode=mode)

    assert (
        mapping_matches(
            mapping,
            matcher_kind=MatcherKind.DERIVE_FROM_GP,
            source_id=source_id,
            source_label=source_label,
        )
        is expected
    )


def test_auto_mode_falls_back_to_name_without_mapped_id() -> None:
    mapping = _mapping(1, source_attr_id=None, match_mode=SourceMatchMode.AUTO)

    assert mapping_matches(
        mapping,
        matcher_kind=MatcherKind.DERIVE_FROM_GP,
        source_id="M01",
        source_label="ステンレス",
    )


def test_scoped_mapping_wins_when_scope_matches() -> None:
    common = _mapping(1)
    scoped = _mapping(2, brand_cd="ROLEX", list_item_id=200)

    chosen = select_mapping(
        [common, scoped],
        matcher_kind=MatcherKind.ID_EXACT,
        source_id="M01",
        source_label=None,
        scope=MatchScope(brand="ROLEX"),
    )

    assert chosen is scoped


def test_scoped_mapping_ignored_without_scope() -> None:
    common = _mapping(3)
    scoped = _mapping(2, brand_cd="ROLEX")

    chosen = select_mapping(
        [scoped, common],
        matcher_kind=MatcherKind.ID_EXACT,
        source_id="M01",
        source_label=None,
        scope=MatchScope(),
    )

    assert chosen is common


def test_lowest_map_id_breaks_ties() -> None:
    chosen = select_mapping(
        [_mapping(9), _mapping(4), _mapping(6)],
        matcher_kind=MatcherKind.ID_EXACT,
        source_id="M01",
        source_label=None,
        scope=MatchScope(),
    )

    assert chosen is not None
    assert chosen.map_id == 4


def test_list_group_filter_skips_items_of_other_groups() -> None:
    items = {
        100: ListItem(list_item_id=100, list_group_cd="COLOR", item_cd="SILVER"),
        200: ListItem(list_item_id=200, list_group_cd="MATERIAL", item_cd="SS"),
    }

    chosen = select_mapping(
        [_mapping(1, list_item_id=100), _mapping(2, list_item_id=200)],
        matcher_kind=MatcherKind.ID_EXACT,
        source_id="M01",
        source_label=None,
        scope=MatchScope(),
        list_group_cd="material",
        list_items=items.get,
    )

    assert chosen is not None
    assert chosen.map_id == 2


def test_no_match_returns_none() -> None:
    assert (
        select_mapping(
            [_mapping(1)],
            matcher_kind=MatcherKind.ID_EXACT,
            source_id="OTHER",
            source_label=None,
            scope=MatchScope(),
        )
        is None
    )
