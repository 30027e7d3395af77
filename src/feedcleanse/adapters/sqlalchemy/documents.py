"""JSON document schemas for the quality and provenance columns."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from decimal import Decimal
from typing import Annotated, Final

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    TypeAdapter,
    field_serializer,
)

from feedcleanse.domain.model import (
    AuditTrace,
    Evidence,
    InputTrace,
    MatcherKind,
    ProvenanceEntry,
    QualityDetail,
    QualityStatus,
    RuleTrace,
    TokenSummary,
    parse_enum,
)

log = logging.getLogger(__name__)

RUN_AT_FORMAT: Final[str] = "%Y-%m-%dT%H:%M:%SZ"


def _decimal_to_json(value: Decimal) -> int | float:
    return int(value) if value == value.to_integral_value() else float(value)


type JsonDecimal = Annotated[Decimal, PlainSerializer(_decimal_to_json, when_used="json")]


class CleanseDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")


class EvidenceDocument(CleanseDocument):
    source_raw: str | None = None
    value_text: str | None = None
    value_num: JsonDecimal | None = None
    value_date: str | None = None
    value_cd: str | None = None


class TokenSummaryDocument(CleanseDocument):
    token_count: int
    matched_tokens: list[str] = []
    unmatched_tokens: list[str] = []


class QualityDetailDocument(CleanseDocument):
    result: QualityStatus
    reason_cds: list[str] = []
    messages: list[str] | None = None
    evidence: EvidenceDocument = Field(default_factory=EvidenceDocument)
    summary: TokenSummaryDocument | None = None

    @classmethod
    def from_domain(cls, detail: QualityDetail) -> QualityDetailDocument:
        evidence = detail.evidence
        summary = detail.summary
        return cls(
            result=detail.result,
            reason_cds=list(detail.reason_cds),
            messages=list(detail.messages) or None,
            evidence=EvidenceDocument(
                source_raw=evidence.source_raw,
                value_text=evidence.value_text,
                value_num=evidence.value_num,
                value_date=evidence.value_date,
                value_cd=evidence.value_cd,
            ),
            summary=(
                TokenSummaryDocument(
                    token_count=summary.token_count,
                    matched_tokens=list(summary.matched_tokens),
                    unmatched_tokens=list(summary.unmatched_tokens),
                )
                if summary is not None
                else None
            ),
        )

    def to_domain(self) -> QualityDetail:
        evidence = self.evidence
        summary = self.summary
        return QualityDetail(
            result=self.result,
            reason_cds=tuple(self.reason_cds),
            messages=tuple(self.messages or ()),
            evidence=Evidence(
                source_raw=evidence.source_raw,
                value_text=evidence.value_text,
                value_num=evidence.value_num,
                value_date=evidence.value_date,
                value_cd=evidence.value_cd,
            ),
            summary=(
                TokenSummary(
                    token_count=summary.token_count,
                    matched_tokens=tuple(summary.matched_tokens),
                    unmatched_tokens=tuple(summary.unmatched_tokens),
                )
                if summary is not None
                else None
            ),
        )

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)


class RuleDocument(CleanseDocument):
    rule_set_id: int | None = None
    rule_version: str
    policy_id: int | None = None
    attr_cd: str
    matcher_kind: str | None = None
    step_no: int | None = None


class ContextDocument(CleanseDocument):
    group_company_cd: str | None = None


class InputDocument(CleanseDocument):
    source_raw: str | None = None
    context: ContextDocument = Field(default_factory=ContextDocument)


class AuditDocument(CleanseDocument):
    batch_id: str
    temp_row_id: str
    run_at: datetime
    worker_id: str

    @field_serializer("run_at")
    def _format_run_at(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC).strftime(RUN_AT_FORMAT)


class ProvenanceEntryDocument(CleanseDocument):
    stage: str
    rule: RuleDocument
    input: InputDocument
    audit: AuditDocument

    @classmethod
    def from_domain(cls, entry: ProvenanceEntry) -> ProvenanceEntryDocument:
        rule = entry.rule
        return cls(
            stage=entry.stage,
            rule=RuleDocument(
                rule_set_id=rule.rule_set_id,
                rule_version=rule.rule_version,
                policy_id=rule.policy_id,
                attr_cd=rule.attr_cd,
                matcher_kind=str(rule.matcher_kind) if rule.matcher_kind is not None else None,
                step_no=rule.step_no,
            ),
            input=InputDocument(
                source_raw=entry.input.source_raw,
                context=ContextDocument(group_company_cd=entry.input.group_company_cd),
            ),
            audit=AuditDocument(
                batch_id=entry.audit.batch_id,
                temp_row_id=entry.audit.temp_row_id,
                run_at=entry.audit.run_at,
                worker_id=entry.audit.worker_id,
            ),
        )

    def to_domain(self) -> ProvenanceEntry:
        rule = self.rule
        return ProvenanceEntry(
            stage=self.stage,
            rule=RuleTrace(
                rule_set_id=rule.rule_set_id,
                rule_version=rule.rule_version,
                policy_id=rule.policy_id,
                attr_cd=rule.attr_cd,
                matcher_kind=parse_enum(MatcherKind, rule.matcher_kind),
                step_no=rule.step_no,
            ),
            input=InputTrace(
                source_raw=self.input.source_raw,
                group_company_cd=self.input.context.group_company_cd,
            ),
            audit=AuditTrace(
                batch_id=self.audit.batch_id,
                temp_row_id=self.audit.temp_row_id,
                run_at=self.audit.run_at,
                worker_id=self.audit.worker_id,
            ),
        )


provenance_adapter: Final[TypeAdapter[list[ProvenanceEntryDocument]]] = TypeAdapter(
    list[ProvenanceEntryDocument]
)


def dump_provenance(entries: list[ProvenanceEntry]) -> str:
    documents = [ProvenanceEntryDocument.from_domain(entry) for entry in entries]
    return provenance_adapter.dump_json(documents).decode()


def load_provenance(payload: str) -> list[ProvenanceEntry]:
    return [document.to_domain() for document in provenance_adapter.validate_json(payload)]


def dump_quality_detail(detail: QualityDetail) -> str:
    return QualityDetailDocument.from_domain(detail).to_json()


def load_quality_detail(payload: str) -> QualityDetail:
    return QualityDetailDocument.model_validate_json(payload).to_domain()
