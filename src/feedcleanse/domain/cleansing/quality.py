"""Apply a resolution to a candidate row and record its audit trail."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from feedcleanse.domain.model import (
    AuditTrace,
    Evidence,
    InputTrace,
    ProvenanceEntry,
    QualityDetail,
    QualityStatus,
    RecordError,
    RuleTrace,
)

if TYPE_CHECKING:
    from feedcleanse.domain.cleansing.context import AuditContext
    from feedcleanse.domain.cleansing.outcome import Resolution
    from feedcleanse.domain.model import AttributeCandidate, CleansePolicy

log = logging.getLogger(__name__)


def rule_trace(attr_cd: str, policy: CleansePolicy | None, rule_version: str) -> RuleTrace:
    if policy is None:
        return RuleTrace(rule_version=rule_version, attr_cd=attr_cd)
    return RuleTrace(
        rule_set_id=policy.rule_set_id,
        rule_version=rule_version,
        policy_id=policy.policy_id,
        attr_cd=attr_cd,
        matcher_kind=policy.matcher_kind,
        step_no=policy.step_no,
    )


def record_outcome(
    candidate: AttributeCandidate,
    resolution: Resolution,
    *,
    rule: RuleTrace,
    audit: AuditContext,
) -> RecordError | None:
    """Copy the resolution onto ``candidate`` and append one provenance entry.

    Returns the error record to persist when the outcome is WARN or NG.
    """

    now = audit.now()
    candidate.value_cd = resolution.value_cd
    candidate.value_text = resolution.value_text
    candidate.value_num = resolution.value_num
    candidate.value_date = resolution.value_date
    candidate.list_item_id = resolution.list_item_id
    candidate.quality_status = resolution.status
    candidate.rule_version = rule.rule_version
    candidate.updated_at = now
    candidate.quality_detail = build_quality_detail(candidate, resolution, rule=rule)
    candidate.append_provenance(
        ProvenanceEntry(
            rule=rule,
            input=InputTrace(
                source_raw=candidate.source_raw,
                group_company_cd=audit.group_company_cd,
            ),
            audit=AuditTrace(
                batch_id=audit.batch_id,
                temp_row_id=candidate.temp_row_id,
                run_at=now,
                worker_id=audit.worker_id,
            ),
        )
    )

    log.debug(
        "%s[%s] row %s -> %s %s",
        candidate.attr_cd,
        candidate.attr_seq,
        candidate.temp_row_id,
        resolution.status,
        resolution.reported_reason or "",
    )

    if resolution.status is QualityStatus.OK or resolution.reason is None:
        return None
    return RecordError(
        batch_id=audit.batch_id,
        record_ref=RecordError.record_ref_for(candidate.temp_row_id),
        error_cd=resolution.reason,
        error_detail=resolution.message,
        raw_fragment=candidate.source_raw or candidate.source_label,
        created_at=now,
    )


def build_quality_detail(
    candidate: AttributeCandidate,
    resolution: Resolution,
    *,
    rule: RuleTrace,
) -> QualityDetail:
    if resolution.status is QualityStatus.OK:
        reasons = (rule.matcher_kind,) if rule.matcher_kind is not None else ()
    else:
        reported = resolution.reported_reason
        reasons = (reported,) if reported is not None else ()
    return QualityDetail(
        result=resolution.status,
        reason_cds=tuple(str(reason) for reason in reasons),
        messages=(resolution.message,) if resolution.message else (),
        evidence=Evidence(
            source_raw=candidate.source_raw,
            value_text=candidate.value_text,
            value_num=candidate.value_num,
            value_date=candidate.value_date,
            value_cd=candidate.value_cd,
        ),
        summary=resolution.summary,
    )
