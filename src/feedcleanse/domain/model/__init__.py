"""Public domain model surface."""

from __future__ import annotations

from feedcleanse.domain.model.attribute import AttributeCandidate, CandidateKey
from feedcleanse.domain.model.audit import (
    CLEANSE_STAGE,
    AuditTrace,
    BatchRun,
    Evidence,
    InputTrace,
    ProvenanceEntry,
    QualityDetail,
    RecordError,
    RuleTrace,
    TokenSummary,
)
from feedcleanse.domain.model.definitions import (
    AttributeDefinition,
    AttrSourceMapping,
    BatchMetadata,
    CleansePolicy,
    CleanseRuleSet,
    ListItem,
    ReferenceTableMap,
    TokenRoute,
)
from feedcleanse.domain.model.enums import (
    BatchStatus,
    DataType,
    HopMatchBy,
    MatcherKind,
    QualityStatus,
    ReasonCode,
    SelectType,
    SourceMatchMode,
    parse_enum,
)

__all__ = [
    "CLEANSE_STAGE",
    "AttrSourceMapping",
    "AttributeCandidate",
    "AttributeDefinition",
    "AuditTrace",
    "BatchMetadata",
    "BatchRun",
    "BatchStatus",
    "CandidateKey",
    "CleansePolicy",
    "CleanseRuleSet",
    "DataType",
    "Evidence",
    "HopMatchBy",
    "InputTrace",
    "ListItem",
    "MatcherKind",
    "ProvenanceEntry",
    "QualityDetail",
    "QualityStatus",
    "ReasonCode",
    "RecordError",
    "ReferenceTableMap",
    "RuleTrace",
    "SelectType",
    "SourceMatchMode",
    "TokenRoute",
    "parse_enum",
]
