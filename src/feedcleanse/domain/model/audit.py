"""Quality, provenance and error records produced while cleansing."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Mapping
    from decimal import Decimal

    from feedcleanse.domain.model.enums import BatchStatus, MatcherKind, QualityStatus

CLEANSE_STAGE: Final[str] = "CLEANSE"


@dataclass(frozen=True, slots=True, kw_only=True)
class Evidence:
    source_raw: str | None = None
    value_text: str | None = None
    value_num: Decimal | None = None
    value_date: str | None = None
    value_cd: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class TokenSummary:
    token_count: int
    matched_tokens: tuple[str, ...] = ()
    unmatched_tokens: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class QualityDetail:
    """Why a candidate row ended up with its quality status."""

    result: QualityStatus
    reason_cds: tuple[str, ...] = ()
    messages: tuple[str, ...] = ()
    evidence: Evidence = field(default_factory=Evidence)
    summary: TokenSummary | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class RuleTrace:
    rule_set_id: int | None = None
    rule_version: str
    policy_id: int | None = None
    attr_cd: str
    matcher_kind: MatcherKind | None = None
    step_no: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class InputTrace:
    source_raw: str | None = None
    group_company_cd: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class AuditTrace:
    batch_id: str
    temp_row_id: str
    run_at: datetime
    worker_id: str


@dataclass(frozen=True, slots=True, kw_only=True)
class ProvenanceEntry:
    """One cleansing decision; rows accumulate these in order."""

    stage: str = CLEANSE_STAGE
    rule: RuleTrace
    input: InputTrace
    audit: AuditTrace


@dataclass(eq=False, kw_only=True)
class RecordError:
    error_id: uuid.UUID = field(default_factory=uuid.uuid4)
    batch_id: str
    step: str = CLEANSE_STAGE
    record_ref: str
    error_cd: str
    error_detail: str | None = None
    raw_fragment: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    @staticmethod
    def record_ref_for(temp_row_id: str) -> str:
        return f"temp_row_id={temp_row_id}"


@dataclass(eq=False, kw_only=True)
class BatchRun:
    """Batch bookkeeping row; the engine only touches the cleanse step's slice."""

    batch_id: str
    group_company_cd: str
    data_kind: str | None = None
    batch_status: BatchStatus | None = None
    counts: dict[str, dict[str, int]] = field(default_factory=dict[str, dict[str, int]])
    started_at: datetime | None = None
    ended_at: datetime | None = None
    updated_at: datetime | None = None

    def record_step(
        self,
        step: str,
        counts: Mapping[str, int],
        *,
        status: BatchStatus,
        now: datetime,
    ) -> None:
        # reassign so the JSON column is flagged dirty
        self.counts = {**self.counts, step: dict(counts)}
        self.batch_status = status
        self.ended_at = now
        self.updated_at = now
