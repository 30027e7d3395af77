from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal

from feedcleanse.domain.cleansing.reconcile import reconcile_single_values
from feedcleanse.domain.model import (
    AttributeCandidate,
    AttributeDefinition,
    AuditTrace,
    DataType,
    InputTrace,
    ProvenanceEntry,
    QualityStatus,
    RuleTrace,
    SelectType,
)
from tests.helpers.cleansing import BATCH_ID, make_candidate, make_definition

NOW = datetime(2025, 10, 22, 12, 0, tzinfo=UTC)

DEFINITIONS = {
    "MATERIAL": make_definition("MATERIAL", DataType.LIST),
    "COLOR": make_definition("COLOR", DataType.LIST, select_type=SelectType.MULTI),
}


def _definition(attr_cd: str) -> AttributeDefinition | None:
    return DEFINITIONS.get(attr_cd)


def _resolved(
    attr_seq: int,
    status: QualityStatus | None,
    *,
    attr_cd: str = "MATERIAL",
    step_no: int | None = None,
    updated_at: datetime | None = None,
) -> AttributeCandidate:
    candidate = make_candidate(attr_cd, attr_seq=attr_seq)
    candidate.quality_status = status
    candidate.value_cd = f"V{attr_seq}"
    candidate.value_text = f"value {attr_seq}"
    candidate.updated_at = updated_at
    if step_no is not None:
        candidate.append_provenance(
            ProvenanceEntry(
                rule=RuleTrace(rule_version="1", attr_cd=attr_cd, step_no=step_no),
                input=InputTrace(),
                audit=AuditTrace(
                    batch_id=BATCH_ID,
                    temp_row_id=candidate.temp_row_id,
                    run_at=NOW,
                    worker_id="w",
                ),
            )
        )
    return candidate


def test_best_status_is_kept() -> None:
    warn = _resolved(1, QualityStatus.WARN)
    ok = _resolved(2, QualityStatus.OK)
    ng = _resolved(3, QualityStatus.NG)

    demotions = reconcile_single_values([warn, ok, ng], _definition, now=NOW)

    assert {demotion.candidate.attr_seq for demotion in demotions} == {1, 3}
    assert ok.quality_status is QualityStatus.OK
    assert ok.value_cd == "V2"
    for row in (warn, ng):
        assert row.quality_status is QualityStatus.WARN
        assert row.value_cd is None
        assert row.value_text is None
        assert row.updated_at == NOW
        assert row.quality_detail is not None
        assert row.quality_detail.reason_cds == ("SINGLE_VALUE_DEMOTED",)
    assert all(demotion.kept is ok for demotion in demotions)
    assert [demotion.previous_status for demotion in demotions] == [
        QualityStatus.WARN,
        QualityStatus.NG,
    ]


def test_lower_step_breaks_status_ties() -> None:
    later = _resolved(1, QualityStatus.OK, step_no=3)
    earlier = _resolved(2, QualityStatus.OK, step_no=1)

    reconcile_single_values([later, earlier], _definition, now=NOW)

    assert earlier.value_cd == "V2"
    assert later.value_cd is None


def test_attribute_step_ranks_rows_without_recorded_step() -> None:
    unrecorded = _resolved(1, QualityStatus.OK)
    recorded = _resolved(2, QualityStatus.OK, step_no=3)

    reconcile_single_values(
        [recorded, unrecorded],
        _definition,
        now=NOW,
        step_no_for=lambda attr_cd: 1 if attr_cd == "MATERIAL" else None,
    )

    assert unrecorded.value_cd == "V1"
    assert recorded.quality_status is QualityStatus.WARN


def test_rows_without_recorded_step_rank_last_by_default() -> None:
    unrecorded = _resolved(1, QualityStatus.OK)
    recorded = _resolved(2, QualityStatus.OK, step_no=3)

    reconcile_single_values([unrecorded, recorded], _definition, now=NOW)

    assert recorded.value_cd == "V2"
    assert unrecorded.quality_status is QualityStatus.WARN


def test_most_recent_update_breaks_step_ties() -> None:
    older = _resolved(1, QualityStatus.OK, step_no=1, updated_at=NOW - timedelta(minutes=5))
    newer = _resolved(2, QualityStatus.OK, step_no=1, updated_at=NOW - timedelta(minutes=1))

    reconcile_single_values([older, newer], _definition, now=NOW)

    assert newer.quality_status is QualityStatus.OK
    assert older.quality_status is QualityStatus.WARN


def test_attr_seq_is_final_tie_break() -> None:
    first = _resolved(1, QualityStatus.OK)
    second = _resolved(2, QualityStatus.OK)

    reconcile_single_values([second, first], _definition, now=NOW)

    assert first.value_cd == "V1"
    assert second.value_cd is None


def test_demotion_clears_code_and_text_but_keeps_evidence() -> None:
    kept = _resolved(1, QualityStatus.OK)
    loser = _resolved(2, QualityStatus.WARN)
    loser.value_num = Decimal("1980")
    loser.value_date = "2025-10-22"

    reconcile_single_values([kept, loser], _definition, now=NOW)

    assert (loser.value_cd, loser.value_text) == (None, None)
    assert loser.value_num == Decimal("1980")
    assert loser.value_date == "2025-10-22"
    assert loser.updated_at == NOW
    assert loser.quality_detail is not None
    assert loser.quality_detail.evidence.value_num == Decimal("1980")
    assert loser.quality_detail.reason_cds == ("SINGLE_VALUE_DEMOTED",)


def test_unrankable_group_demotes_every_row() -> None:
    rows = [_resolved(1, None), _resolved(2, None)]

    demotions = reconcile_single_values(rows, _definition, now=NOW)

    assert len(demotions) == 2
    assert all(row.quality_status is QualityStatus.WARN for row in rows)
    assert all(demotion.kept is None for demotion in demotions)


def test_multi_valued_and_single_rows_are_untouched() -> None:
    colors = [
        _resolved(1, QualityStatus.OK, attr_cd="COLOR"),
        _resolved(2, QualityStatus.OK, attr_cd="COLOR"),
    ]
    single = _resolved(1, QualityStatus.OK)

    demotions = reconcile_single_values([*colors, single], _definition, now=NOW)

    assert demotions == []
    assert [row.value_cd for row in colors] == ["V1", "V2"]


def test_groups_are_per_product() -> None:
    first = _resolved(1, QualityStatus.OK)
    other_product = make_candidate("MATERIAL", temp_row_id="row-2", attr_seq=2)
    other_product.quality_status = QualityStatus.OK

    assert reconcile_single_values([first, other_product], _definition, now=NOW) == []


def test_unknown_definitions_are_skipped() -> None:
    rows = [
        _resolved(1, QualityStatus.OK, attr_cd="MYSTERY"),
        _resolved(2, QualityStatus.OK, attr_cd="MYSTERY"),
    ]

    assert reconcile_single_values(rows, _definition, now=NOW) == []
