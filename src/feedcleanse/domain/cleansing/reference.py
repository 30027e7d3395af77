"""One- and two-hop lookups against external reference tables."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from feedcleanse.domain.cleansing.errors import ReferenceLookupError
from feedcleanse.domain.model import HopMatchBy

if TYPE_CHECKING:
    from feedcleanse.domain.model import ReferenceTableMap
    from feedcleanse.domain.ports.persistence import ReferenceTableReader, Row

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReferenceMatch:
    value_cd: str | None
    value_text: str | None


def resolve_reference(
    ref_map: ReferenceTableMap,
    *,
    source_id: str | None,
    source_label: str | None,
    tables: ReferenceTableReader,
) -> ReferenceMatch | None:
    """Turn a raw id/label pair into a canonical code/label pair.

    Returns ``None`` when either hop finds nothing or the result carries neither
    a code nor a label.
    """

    criteria = hop1_criteria(
        ref_map,
        source_id=_clean(source_id),
        source_label=_clean(source_label),
    )
    if criteria is None:
        log.debug("Reference map %s: no usable hop1 input", ref_map.ref_map_id)
        return None

    hop1_row = tables.find_first(ref_map.hop1_table, criteria)
    if hop1_row is None:
        return None

    if ref_map.has_second_hop:
        match = _second_hop(ref_map, hop1_row, tables)
    else:
        columns = [
            column.strip("{} ") for column in ref_map.hop1_return_cols if column.strip("{} ")
        ]
        if not columns:
            raise ReferenceLookupError(
                f"Reference map {ref_map.ref_map_id} defines no hop1 return columns"
            )
        value_cd = _read(hop1_row, columns[0], ref_map.hop1_table)
        value_text = _read(hop1_row, columns[1], ref_map.hop1_table) if len(columns) > 1 else None
        match = ReferenceMatch(value_cd=value_cd, value_text=value_text)

    if match is None or (match.value_cd is None and match.value_text is None):
        return None
    return match


def hop1_criteria(
    ref_map: ReferenceTableMap,
    *,
    source_id: str | None,
    source_label: str | None,
) -> dict[str, object] | None:
    by_id = {ref_map.hop1_id_col: source_id} if ref_map.hop1_id_col and source_id else None
    by_label = (
        {ref_map.hop1_label_col: source_label}
        if ref_map.hop1_label_col and source_label
        else None
    )

    match_by = ref_map.hop1_match_by
    if match_by is HopMatchBy.ID:
        return by_id
    if match_by is HopMatchBy.LABEL:
        return by_label
    if match_by is HopMatchBy.AUTO:
        return by_id if source_id else by_label
    if by_id is None or by_label is None:
        return None
    return {**by_id, **by_label}


def _second_hop(
    ref_map: ReferenceTableMap,
    hop1_row: Row,
    tables: ReferenceTableReader,
) -> ReferenceMatch | None:
    if not ref_map.hop2_join_on or ref_map.hop2_table is None:
        log.warning("Reference map %s has hop2 but no join definition", ref_map.ref_map_id)
        return None

    criteria: dict[str, object] = {}
    for hop1_column, hop2_column in ref_map.hop2_join_on:
        if hop1_column not in hop1_row:
            raise ReferenceLookupError(
                f"Column {hop1_column!r} missing from {ref_map.hop1_table!r} row"
            )
        value = hop1_row[hop1_column]
        if value is None:
            return None
        criteria[hop2_column] = value

    hop2_row = tables.find_first(ref_map.hop2_table, criteria)
    if hop2_row is None:
        return None
    return ReferenceMatch(
        value_cd=_read(hop2_row, ref_map.hop2_return_cd_col, ref_map.hop2_table),
        value_text=_read(hop2_row, ref_map.hop2_return_label_col, ref_map.hop2_table),
    )


def _read(row: Row, column: str | None, table: str) -> str | None:
    if not column:
        return None
    if column not in row:
        raise ReferenceLookupError(f"Column {column!r} missing from {table!r} row")
    value = row[column]
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None
