"""Canonicalize scalar values without any external lookups."""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Final

from feedcleanse.domain.cleansing.errors import DateFormatError
from feedcleanse.domain.model import DataType

NORMALIZED_TYPES: Final[frozenset[DataType]] = frozenset(
    {DataType.TEXT, DataType.NUM, DataType.TIMESTAMPTZ, DataType.BOOL}
)

# NFKC already folds full-width variants (￥ -> ¥, ％ -> %, ， -> ,, ． -> .).
_NUMBER_NOISE: Final[re.Pattern[str]] = re.compile(r"[¥$€£%,\s]")

DEFAULT_DATE_FORMATS: Final[tuple[str, ...]] = (
    "%Y/%m/%d",
    "%Y-%m-%d",
    "%Y%m%d",
    "%m/%d/%Y",
    "%Y/%m/%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y-%m-%d %H:%M",
)

# Longest tokens first so HH24 wins over HH and MON over MM.
_PATTERN_TOKENS: Final[tuple[tuple[str, str], ...]] = (
    ("YYYY", "%Y"),
    ("HH24", "%H"),
    ("HH12", "%I"),
    ("MON", "%b"),
    ("YY", "%y"),
    ("MM", "%m"),
    ("DD", "%d"),
    ("HH", "%I"),
    ("MI", "%M"),
    ("SS", "%S"),
    ("AM", "%p"),
    ("PM", "%p"),
)
_TIME_DIRECTIVES: Final[frozenset[str]] = frozenset({"%H", "%I", "%M", "%S"})

_TRUE_WORDS: Final[frozenset[str]] = frozenset({"TRUE", "T", "1", "YES", "Y", "ON"})
_FALSE_WORDS: Final[frozenset[str]] = frozenset({"FALSE", "F", "0", "NO", "N", "OFF"})


@dataclass(frozen=True, slots=True, kw_only=True)
class NormalizedValue:
    value_text: str | None = None
    value_num: Decimal | None = None
    value_date: str | None = None
    value_cd: str | None = None


@dataclass(frozen=True, slots=True)
class DatePattern:
    """A PostgreSQL-style pattern translated to ``strptime`` syntax."""

    source: str
    strptime_format: str
    has_time: bool


def normalize_value(
    data_type: DataType,
    raw: str,
    *,
    date_pattern: str | None = None,
) -> NormalizedValue:
    """Normalize ``raw`` for a scalar ``data_type``.

    Raises ``ValueError`` (or ``DateFormatError``) when the value cannot be cast.
    """

    if data_type is DataType.TEXT:
        return NormalizedValue(value_text=raw.strip())
    if data_type is DataType.NUM:
        return NormalizedValue(value_num=parse_number(raw))
    if data_type is DataType.TIMESTAMPTZ:
        return NormalizedValue(value_date=parse_timestamp(raw, date_pattern))
    if data_type is DataType.BOOL:
        flag = parse_bool(raw)
        label = "TRUE" if flag else "FALSE"
        return NormalizedValue(value_cd=label, value_text=label)
    raise ValueError(f"{data_type} is not a scalar data type")


def parse_number(raw: str) -> Decimal:
    """Parse a price/percentage-like string such as ``"¥1,980"`` or ``"12.5%"``."""

    text = _NUMBER_NOISE.sub("", unicodedata.normalize("NFKC", raw))
    if not text:
        raise ValueError(f"{raw!r} contains no digits")
    try:
        value = Decimal(text)
    except InvalidOperation as exc:
        raise ValueError(f"Cannot parse {raw!r} as a number") from exc
    if not value.is_finite():
        raise ValueError(f"Cannot parse {raw!r} as a finite number")
    return value


def translate_date_pattern(pattern: str) -> DatePattern:
    upper = pattern.upper()
    parts: list[str] = []
    index = 0
    while index < len(pattern):
        if pattern[index] == '"':
            end = pattern.find('"', index + 1)
            if end == -1:
                raise DateFormatError(f"Unterminated literal in date pattern {pattern!r}")
            parts.append(pattern[index + 1 : end].replace("%", "%%"))
            index = end + 1
            continue
        for token, directive in _PATTERN_TOKENS:
            if upper.startswith(token, index):
                parts.append(directive)
                index += len(token)
                break
        else:
            char = pattern[index]
            parts.append("%%" if char == "%" else char)
            index += 1
    if not any(part.startswith("%") and part != "%%" for part in parts):
        raise DateFormatError(f"Date pattern {pattern!r} contains no date tokens")
    return DatePattern(
        source=pattern,
        strptime_format="".join(parts),
        has_time=any(part in _TIME_DIRECTIVES for part in parts),
    )


def parse_timestamp(raw: str, pattern: str | None = None) -> str:
    """Return ``YYYY-MM-DD`` for dates, ``YYYY-MM-DDTHH:MM:SS`` for date-times.

    Values carrying a UTC offset are converted to UTC and suffixed with ``Z``.
    """

    text = unicodedata.normalize("NFKC", raw).strip()
    if pattern:
        translated = translate_date_pattern(pattern)
        try:
            parsed = datetime.strptime(text, translated.strptime_format)  # noqa: DTZ007
        except ValueError as exc:
            raise DateFormatError(f"{raw!r} does not match pattern {pattern!r}: {exc}") from exc
        return _iso(parsed, has_time=translated.has_time)

    for fmt in DEFAULT_DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)  # noqa: DTZ007
        except ValueError:
            continue
        return _iso(parsed, has_time="%H" in fmt)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise DateFormatError(f"{raw!r} is not a recognised date") from exc
    return _iso(parsed, has_time="T" in text or " " in text)


def parse_bool(raw: str) -> bool:
    word = unicodedata.normalize("NFKC", raw).strip().upper()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"Cannot parse {raw!r} as a boolean")


def _iso(value: datetime, *, has_time: bool) -> str:
    if value.tzinfo is not None:
        return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
    if not has_time:
        return value.date().isoformat()
    return value.isoformat(timespec="seconds")
