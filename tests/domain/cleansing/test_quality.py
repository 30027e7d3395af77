from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

from feedcleanse.domain.cleansing import AuditContext
from feedcleanse.domain.cleansing.outcome import Resolution
from feedcleanse.domain.cleansing.quality import record_outcome, rule_trace
from feedcleanse.domain.model import MatcherKind, QualityStatus, ReasonCode
from tests.helpers.cleansing import BATCH_ID, GROUP_COMPANY, FixedClock, make_candidate, make_policy


def _audit() -> AuditContext:
    return AuditContext(
        batch_id=BATCH_ID,
        group_company_cd=GROUP_COMPANY,
        worker_id="worker-test",
        clock=FixedClock(),
    )


def test_ok_outcome_sets_values_and_provenance() -> None:
    candidate = make_candidate("PRICE", source_raw="¥1,980")
    policy = make_policy(11, "PRICE", matcher_kind=MatcherKind.LABEL_EXACT, step_no=2)
    rule = rule_trace("PRICE", policy, "v1")

    error = record_outcome(
        candidate,
        Resolution.ok(value_num=Decimal(1980)),
        rule=rule,
        audit=_audit(),
    )

    assert error is None
    assert candidate.quality_status is QualityStatus.OK
    assert candidate.value_num == Decimal(1980)
    assert candidate.rule_version == "v1"
    assert candidate.updated_at == datetime(2025, 10, 22, 9, 0, tzinfo=UTC)

    detail = candidate.quality_detail
    assert detail is not None
    assert detail.reason_cds == ("LABEL_EXACT",)
    assert detail.evidence.source_raw == "¥1,980"
    assert detail.evidence.value_num == Decimal(1980)

    [entry] = candidate.provenance
    assert entry.stage == "CLEANSE"
    assert entry.rule.policy_id == 11
    assert entry.rule.step_no == 2
    assert entry.input.group_company_cd == GROUP_COMPANY
    assert entry.audit.worker_id == "worker-test"
    assert entry.audit.temp_row_id == candidate.temp_row_id


def test_failed_outcome_returns_error_record() -> None:
    candidate = make_candidate("DATE", source_raw="someday")

    error = record_outcome(
        candidate,
        Resolution.ng(ReasonCode.INVALID_TYPE_CAST, "bad date"),
        rule=rule_trace("DATE", None, "UNKNOWN"),
        audit=_audit(),
    )

    assert error is not None
    assert error.error_cd == "INVALID_TYPE_CAST"
    assert error.error_detail == "bad date"
    assert error.record_ref == "temp_row_id=row-1"
    assert error.raw_fragment == "someday"
    assert error.batch_id == BATCH_ID
    assert candidate.quality_detail is not None
    assert candidate.quality_detail.reason_cds == ("INVALID_TYPE_CAST",)
    assert candidate.quality_detail.messages == ("bad date",)


def test_quality_reason_overrides_reported_reason() -> None:
    candidate = make_candidate("MATERIAL", source_label="SS")

    error = record_outcome(
        candidate,
        Resolution.warn(
            ReasonCode.MISSING_CLEANSE_POLICY,
            "none",
            quality_reason=ReasonCode.NO_MATCHING_POLICY,
        ),
        rule=rule_trace("MATERIAL", None, "UNKNOWN"),
        audit=_audit(),
    )

    assert error is not None
    assert error.error_cd == "MISSING_CLEANSE_POLICY"
    assert candidate.quality_detail is not None
    assert candidate.quality_detail.reason_cds == ("NO_MATCHING_POLICY",)


def test_provenance_accumulates() -> None:
    candidate = make_candidate("BRAND", source_id="R01")
    audit = _audit()
    first = candidate.provenance

    record_outcome(
        candidate,
        Resolution.ok(value_cd="ROLEX"),
        rule=rule_trace("BRAND", None, "1"),
        audit=audit,
    )
    record_outcome(
        candidate,
        Resolution.ok(value_cd="ROLEX"),
        rule=rule_trace("BRAND", None, "2"),
        audit=audit,
    )

    assert [entry.rule.rule_version for entry in candidate.provenance] == ["1", "2"]
    assert first == []
    assert candidate.provenance[0].audit.run_at < candidate.provenance[1].audit.run_at
