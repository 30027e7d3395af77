"""Enforce one authoritative value per single-valued attribute."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from feedcleanse.domain.model import (
    Evidence,
    QualityDetail,
    QualityStatus,
    ReasonCode,
    SelectType,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime

    from feedcleanse.domain.model import AttributeCandidate, AttributeDefinition

log = logging.getLogger(__name__)

_STATUS_RANK: Final[dict[QualityStatus, int]] = {
    QualityStatus.OK: 3,
    QualityStatus.WARN: 2,
    QualityStatus.NG: 1,
}
_NO_STEP: Final[int] = 2**31


@dataclass(frozen=True, slots=True)
class Demotion:
    candidate: AttributeCandidate
    previous_status: QualityStatus | None
    kept: AttributeCandidate | None


def reconcile_single_values(
    candidates: Iterable[AttributeCandidate],
    definitions: Callable[[str], AttributeDefinition | None],
    *,
    now: datetime,
    step_no_for: Callable[[str], int | None] | None = None,
) -> list[Demotion]:
    """Demote all but the best row of every multi-row SINGLE attribute.

    Rows rank by status (OK > WARN > NG), then by the ``step_no`` recorded in
    their latest provenance entry, then by most recent update, then ``attr_seq``.
    Rows without a recorded step fall back to ``step_no_for(attr_cd)``.
    When no row of a group has a status at all, every row is demoted.
    """

    groups: defaultdict[tuple[str, str], list[AttributeCandidate]] = defaultdict(list)
    for candidate in candidates:
        groups[(candidate.temp_row_id, candidate.attr_cd.upper())].append(candidate)

    demotions: list[Demotion] = []
    for (temp_row_id, attr_cd), rows in groups.items():
        if len(rows) < 2:  # noqa: PLR2004
            continue
        definition = definitions(attr_cd)
        if definition is None or definition.select_type is not SelectType.SINGLE:
            continue

        fallback_step = step_no_for(attr_cd) if step_no_for is not None else None
        rankable = [row for row in rows if row.quality_status is not None]
        kept = (
            min(rankable, key=lambda row: _rank_key(row, fallback_step)) if rankable else None
        )
        for row in rows:
            if row is kept:
                continue
            demotions.append(Demotion(candidate=row, previous_status=row.quality_status, kept=kept))
            _demote(row, kept=kept, now=now)

        log.info(
            "Reconciled %s on row %s: kept attr_seq=%s, demoted %d",
            attr_cd,
            temp_row_id,
            kept.attr_seq if kept is not None else None,
            len(rows) - (1 if kept is not None else 0),
        )
    return demotions


def _rank_key(
    row: AttributeCandidate,
    fallback_step: int | None,
) -> tuple[int, int, float, int]:
    status_rank = _STATUS_RANK.get(row.quality_status, 0) if row.quality_status else 0
    latest = row.latest_provenance
    step = latest.rule.step_no if latest is not None else None
    if step is None or step <= 0:
        step = fallback_step
    step_key = step if step is not None and step > 0 else _NO_STEP
    updated = row.updated_at.timestamp() if row.updated_at is not None else float("-inf")
    return (-status_rank, step_key, -updated, row.attr_seq)


def _demote(row: AttributeCandidate, *, kept: AttributeCandidate | None, now: datetime) -> None:
    row.quality_status = QualityStatus.WARN
    row.value_cd = None
    row.value_text = None
    row.updated_at = now
    message = (
        f"superseded by attr_seq={kept.attr_seq}"
        if kept is not None
        else "no rankable candidate for single-valued attribute"
    )
    row.quality_detail = QualityDetail(
        result=QualityStatus.WARN,
        reason_cds=(ReasonCode.SINGLE_VALUE_DEMOTED.value,),
        messages=(message,),
        evidence=Evidence(
            source_raw=row.source_raw,
            value_num=row.value_num,
            value_date=row.value_date,
        ),
        summary=row.quality_detail.summary if row.quality_detail is not None else None,
    )
