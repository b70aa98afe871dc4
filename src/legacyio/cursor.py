from __future__ import annotations

"""Field constructs for the legacy (.NET `SerializationReader`) primitives.

All integers are little-endian. Strings carry a presence byte (`0x00` for null,
`0x0b` followed by a ULEB128 byte length and UTF-8 text). Byte arrays are
prefixed with a signed 32-bit length where `-1` encodes null. Dates are signed
64-bit .NET ticks (100 ns units since 0001-01-01 UTC).
"""

import datetime as dt
from typing import Any, BinaryIO, Final

from construct import (
    Adapter,
    Byte,
    Bytes,
    Construct,
    ConstructError,
    If,
    Int32sl,
    Int64sl,
    PascalString,
    StreamError,
    Struct,
    ValidationError,
    VarInt,
    this,
)

from .errors import CorruptPayload, UnexpectedEndOfInput

STRING_NULL: Final[int] = 0x00
STRING_PRESENT: Final[int] = 0x0B

TICKS_PER_MICROSECOND: Final[int] = 10
DOTNET_EPOCH: Final[dt.datetime] = dt.datetime(1, 1, 1, tzinfo=dt.timezone.utc)
# 9999-12-31 23:59:59.9999999
DOTNET_MAX_TICKS: Final[int] = 3155378975999999999


class _LegacyStringAdapter(Adapter):
    def _decode(self, obj: Any, context: Any, path: str) -> str | None:
        marker = int(obj.marker)
        if marker == STRING_NULL:
            return None
        if marker != STRING_PRESENT:
            raise ValidationError(f"invalid string marker: 0x{marker:02x}", path=path)
        return str(obj.value)

    def _encode(self, obj: str | None, context: Any, path: str) -> dict[str, Any]:
        if obj is None:
            return {"marker": STRING_NULL, "value": None}
        return {"marker": STRING_PRESENT, "value": str(obj)}


class _LegacyDateTimeAdapter(Adapter):
    def _decode(self, obj: int, context: Any, path: str) -> dt.datetime:
        ticks = int(obj)
        if ticks < 0:
            raise ValidationError(f"negative date ticks: {ticks}", path=path)
        if ticks > DOTNET_MAX_TICKS:
            raise ValidationError(f"date ticks past year 9999: {ticks}", path=path)
        return DOTNET_EPOCH + dt.timedelta(microseconds=ticks // TICKS_PER_MICROSECOND)

    def _encode(self, obj: dt.datetime, context: Any, path: str) -> int:
        return datetime_to_ticks(obj)


class _LegacyByteArrayAdapter(Adapter):
    def _decode(self, obj: Any, context: Any, path: str) -> bytes | None:
        if int(obj.length) < 0:
            return None
        return bytes(obj.data)

    def _encode(self, obj: bytes | None, context: Any, path: str) -> dict[str, Any]:
        if obj is None:
            return {"length": -1, "data": None}
        return {"length": len(obj), "data": bytes(obj)}


LegacyString = _LegacyStringAdapter(
    Struct(
        "marker" / Byte,
        "value" / If(this.marker == STRING_PRESENT, PascalString(VarInt, "utf8")),
    )
)

LegacyDateTime = _LegacyDateTimeAdapter(Int64sl)

LegacyByteArray = _LegacyByteArrayAdapter(
    Struct(
        "length" / Int32sl,
        "data" / If(this.length >= 0, Bytes(this.length)),
    )
)


def datetime_to_ticks(value: dt.datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    delta = value.astimezone(dt.timezone.utc) - DOTNET_EPOCH
    return (delta // dt.timedelta(microseconds=1)) * TICKS_PER_MICROSECOND


def read_field(stream: BinaryIO, field: Construct, *, name: str = "field") -> Any:
    try:
        return field.parse_stream(stream)
    except StreamError as exc:
        raise UnexpectedEndOfInput(f"unexpected end of input while reading {name}") from exc
    except (ConstructError, UnicodeDecodeError) as exc:
        raise CorruptPayload(f"invalid {name}: {exc}") from exc


def build_field(field: Construct, value: Any, *, name: str = "field") -> bytes:
    try:
        return field.build(value)
    except (ConstructError, UnicodeEncodeError) as exc:
        raise CorruptPayload(f"failed to build {name}: {exc}") from exc
