from __future__ import annotations

import datetime as dt
import io

import pytest
from construct import Int32sl

from legacyio.cursor import (
    DOTNET_MAX_TICKS,
    LegacyByteArray,
    LegacyDateTime,
    LegacyString,
    build_field,
    datetime_to_ticks,
    read_field,
)
from legacyio.errors import CorruptPayload, UnexpectedEndOfInput


def test_legacy_string_null_and_present() -> None:
    assert build_field(LegacyString, None) == b"\x00"
    assert build_field(LegacyString, "abc") == b"\x0b\x03abc"
    assert build_field(LegacyString, "") == b"\x0b\x00"

    assert read_field(io.BytesIO(b"\x00"), LegacyString) is None
    assert read_field(io.BytesIO(b"\x0b\x03abc"), LegacyString) == "abc"


def test_legacy_string_uses_uleb128_byte_length() -> None:
    text = "x" * 200
    raw = build_field(LegacyString, text)
    assert raw[:3] == b"\x0b\xc8\x01"
    assert read_field(io.BytesIO(raw), LegacyString) == text


def test_legacy_string_length_counts_utf8_bytes() -> None:
    raw = build_field(LegacyString, "é")
    assert raw == b"\x0b\x02\xc3\xa9"


def test_legacy_string_rejects_unknown_marker() -> None:
    with pytest.raises(CorruptPayload, match="invalid username"):
        read_field(io.BytesIO(b"\x07abc"), LegacyString, name="username")


def test_legacy_string_truncated() -> None:
    with pytest.raises(UnexpectedEndOfInput):
        read_field(io.BytesIO(b"\x0b\x05ab"), LegacyString)


def test_legacy_datetime_ticks() -> None:
    epoch = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)
    assert datetime_to_ticks(epoch) == 621355968000000000
    raw = build_field(LegacyDateTime, epoch)
    assert read_field(io.BytesIO(raw), LegacyDateTime) == epoch


def test_legacy_datetime_naive_is_utc() -> None:
    naive = dt.datetime(2020, 5, 17, 12, 30, 15, 123456)
    parsed = read_field(io.BytesIO(build_field(LegacyDateTime, naive)), LegacyDateTime)
    assert parsed == naive.replace(tzinfo=dt.timezone.utc)
    assert parsed.tzinfo is not None


def test_legacy_datetime_rejects_negative_ticks() -> None:
    raw = (-1).to_bytes(8, "little", signed=True)
    with pytest.raises(CorruptPayload):
        read_field(io.BytesIO(raw), LegacyDateTime)


@pytest.mark.parametrize("ticks", [DOTNET_MAX_TICKS + 1, 2**63 - 1])
def test_legacy_datetime_rejects_ticks_past_year_9999(ticks: int) -> None:
    raw = ticks.to_bytes(8, "little", signed=True)
    with pytest.raises(CorruptPayload, match="invalid date"):
        read_field(io.BytesIO(raw), LegacyDateTime, name="date")


def test_legacy_datetime_max_ticks() -> None:
    raw = DOTNET_MAX_TICKS.to_bytes(8, "little", signed=True)
    parsed = read_field(io.BytesIO(raw), LegacyDateTime)
    assert parsed == dt.datetime(9999, 12, 31, 23, 59, 59, 999999, tzinfo=dt.timezone.utc)


def test_legacy_byte_array_null_empty_and_data() -> None:
    assert build_field(LegacyByteArray, None) == b"\xff\xff\xff\xff"
    assert build_field(LegacyByteArray, b"") == b"\x00\x00\x00\x00"
    assert build_field(LegacyByteArray, b"\x01\x02") == b"\x02\x00\x00\x00\x01\x02"

    assert read_field(io.BytesIO(b"\xff\xff\xff\xff"), LegacyByteArray) is None
    assert read_field(io.BytesIO(b"\x00\x00\x00\x00"), LegacyByteArray) == b""
    assert read_field(io.BytesIO(b"\x02\x00\x00\x00\x01\x02"), LegacyByteArray) == b"\x01\x02"


def test_legacy_byte_array_truncated_body() -> None:
    with pytest.raises(UnexpectedEndOfInput, match="replay data"):
        read_field(io.BytesIO(b"\x04\x00\x00\x00\x01"), LegacyByteArray, name="replay data")


def test_read_field_short_integer() -> None:
    with pytest.raises(UnexpectedEndOfInput):
        read_field(io.BytesIO(b"\x01\x02"), Int32sl)
