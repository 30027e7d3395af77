"""Cleansing core: policy selection, resolution strategies and reconciliation."""

from __future__ import annotations

from feedcleanse.domain.cleansing.context import (
    AuditContext,
    CleanseCounters,
    MatchScope,
    ScopedContext,
)
from feedcleanse.domain.cleansing.errors import (
    BatchNotFoundError,
    CleansingError,
    DateFormatError,
    ReferenceLookupError,
)
from feedcleanse.domain.cleansing.orchestrator import (
    CleanseResult,
    CleansingEngine,
    Strategy,
    select_strategy,
)
from feedcleanse.domain.cleansing.policy import resolve_policy
from feedcleanse.domain.cleansing.reference_data import ReferenceData, load_reference_data

__all__ = [
    "AuditContext",
    "BatchNotFoundError",
    "CleanseCounters",
    "CleanseResult",
    "CleansingEngine",
    "CleansingError",
    "DateFormatError",
    "MatchScope",
    "ReferenceData",
    "ReferenceLookupError",
    "ScopedContext",
    "Strategy",
    "load_reference_data",
    "resolve_policy",
    "select_strategy",
]
