from __future__ import annotations

from decimal import Decimal

import pytest

from feedcleanse.domain.cleansing import DateFormatError
from feedcleanse.domain.cleansing.normalize import (
    normalize_value,
    parse_bool,
    parse_number,
    parse_timestamp,
    translate_date_pattern,
)
from feedcleanse.domain.model import DataType


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("¥1,980", Decimal(1980)),
        ("12.5%", Decimal("12.5")),
        ("￥２，９８０", Decimal(2980)),
        (" $ 1,000.50 ", Decimal("1000.50")),
        ("-3", Decimal(-3)),
    ],
)
def test_parse_number(raw: str, expected: Decimal) -> None:
    assert parse_number(raw) == expected


@pytest.mark.parametrize("raw", ["", "¥", "abc", "1.2.3", "NaN"])
def test_parse_number_rejects_garbage(raw: str) -> None:
    with pytest.raises(ValueError, match="number|digits"):
        parse_number(raw)


def test_text_is_trimmed() -> None:
    assert normalize_value(DataType.TEXT, "  Oyster  ").value_text == "Oyster"


def test_date_with_pattern() -> None:
    value = normalize_value(DataType.TIMESTAMPTZ, "2025/10/22", date_pattern="YYYY/MM/DD")

    assert value.value_date == "2025-10-22"


def test_date_time_with_pattern() -> None:
    result = parse_timestamp("2025-10-22 13:05:09", "YYYY-MM-DD HH24:MI:SS")

    assert result == "2025-10-22T13:05:09"


def test_date_without_pattern_uses_known_formats() -> None:
    assert parse_timestamp("20251022") == "2025-10-22"
    assert parse_timestamp("2025-10-22T08:30:00") == "2025-10-22T08:30:00"


def test_offset_timestamps_are_converted_to_utc() -> None:
    tokyo = parse_timestamp("2025-10-22T10:00:00+09:00")
    utc = parse_timestamp("2025-10-22T10:00:00+00:00")

    assert tokyo == "2025-10-22T01:00:00Z"
    assert utc == "2025-10-22T10:00:00Z"
    assert tokyo != utc


def test_offset_crossing_midnight_moves_the_date() -> None:
    value = normalize_value(DataType.TIMESTAMPTZ, "2025-10-22 05:00:00+09:00")

    assert value.value_date == "2025-10-21T20:00:00Z"


def test_malformed_date_raises() -> None:
    with pytest.raises(DateFormatError):
        parse_timestamp("22 October", "YYYY/MM/DD")


def test_date_format_error_is_a_value_error() -> None:
    with pytest.raises(ValueError, match="not a recognised date"):
        parse_timestamp("someday")


def test_translate_date_pattern_handles_literals() -> None:
    pattern = translate_date_pattern('YYYY"年"MM"月"DD"日"')

    assert pattern.strptime_format == "%Y年%m月%d日"
    assert not pattern.has_time
    assert parse_timestamp("2025年10月22日", 'YYYY"年"MM"月"DD"日"') == "2025-10-22"


def test_translate_date_pattern_rejects_patterns_without_tokens() -> None:
    with pytest.raises(DateFormatError):
        translate_date_pattern("--")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), ("Ｙ", True), ("1", True), ("off", False), ("N", False)],
)
def test_parse_bool(raw: str, expected: bool) -> None:  # noqa: FBT001
    assert parse_bool(raw) is expected


def test_bool_normalizes_to_code() -> None:
    value = normalize_value(DataType.BOOL, "yes")

    assert (value.value_cd, value.value_text) == ("TRUE", "TRUE")


def test_invalid_bool_raises() -> None:
    with pytest.raises(ValueError, match="boolean"):
        parse_bool("maybe")


def test_non_scalar_type_is_rejected() -> None:
    with pytest.raises(ValueError, match="scalar"):
        normalize_value(DataType.REF, "x")
