"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class DataType(StrEnum):
    TEXT = "TEXT"
    NUM = "NUM"
    TIMESTAMPTZ = "TIMESTAMPTZ"
    LIST = "LIST"
    REF = "REF"
    BOOL = "BOOL"


class SelectType(StrEnum):
    SINGLE = "SINGLE"
    MULTI = "MULTI"


class MatcherKind(StrEnum):
    ID_EXACT = "ID_EXACT"
    LABEL_EXACT = "LABEL_EXACT"
    DERIVE_COALESCE = "DERIVE_COALESCE"
    DERIVE_FROM_GP = "DERIVE_FROM_GP"
    TOKEN_DICT = "TOKEN_DICT"


class HopMatchBy(StrEnum):
    """How the first hop of a reference lookup locates its row."""

    ID = "ID"
    LABEL = "LABEL"
    AUTO = "AUTO"  # id when the candidate carries one, label otherwise
    BOTH = "BOTH"


class SourceMatchMode(StrEnum):
    """How an attribute-source mapping row matches a raw id/label pair."""

    ID = "ID"
    NAME = "NAME"
    BOTH = "BOTH"
    AUTO = "AUTO"


class QualityStatus(StrEnum):
    OK = "OK"
    WARN = "WARN"
    NG = "NG"


class ReasonCode(StrEnum):
    MISSING_ATTR_DEFINITION = "MISSING_ATTR_DEFINITION"
    MISSING_CLEANSE_POLICY = "MISSING_CLEANSE_POLICY"
    NO_MATCHING_POLICY = "NO_MATCHING_POLICY"
    REF_TABLE_MAP_NOT_FOUND = "REF_TABLE_MAP_NOT_FOUND"
    REF_NOT_FOUND = "REF_NOT_FOUND"
    LIST_GROUP_NOT_FOUND = "LIST_GROUP_NOT_FOUND"
    SOURCE_RAW_NOT_FOUND = "SOURCE_RAW_NOT_FOUND"
    INVALID_TYPE_CAST = "INVALID_TYPE_CAST"
    MISSING_MATCH_KIND = "MISSING_MATCH_KIND"
    COLOR_OUTPUT_EMPTY = "COLOR_OUTPUT_EMPTY"
    COLOR_PROCESS_EXCEPTION = "COLOR_PROCESS_EXCEPTION"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"

    # Quality-only reason, never written as an error record:
    SINGLE_VALUE_DEMOTED = "SINGLE_VALUE_DEMOTED"


class BatchStatus(StrEnum):
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"


def parse_enum[TEnum: StrEnum](enum_cls: type[TEnum], value: str | None) -> TEnum | None:
    """Return the member matching ``value`` case-insensitively, or ``None``."""

    if value is None:
        return None
    normalized = value.strip().upper()
    if not normalized:
        return None
    try:
        return enum_cls(normalized)
    except ValueError:
        return None
