from __future__ import annotations

import lzma
from typing import Any, Final

from construct import Bytes, ConstructError, Int64ul, Struct

from .errors import CorruptPayload

PROPERTIES_SIZE: Final[int] = 5
HEADER_SIZE: Final[int] = PROPERTIES_SIZE + 8
UNKNOWN_SIZE: Final[int] = 0xFFFF_FFFF_FFFF_FFFF

DICTIONARY_SIZE: Final[int] = 1 << 21
LITERAL_CONTEXT_BITS: Final[int] = 3
LITERAL_POSITION_BITS: Final[int] = 0
POSITION_BITS: Final[int] = 2
FAST_BYTES: Final[int] = 255

_MIN_DICTIONARY_SIZE = 4096

ENVELOPE_HEADER = Struct(
    "properties" / Bytes(PROPERTIES_SIZE),
    "uncompressed_size" / Int64ul,
)

_COMPRESS_FILTERS: Final[list[dict[str, Any]]] = [
    {
        "id": lzma.FILTER_LZMA1,
        "dict_size": DICTIONARY_SIZE,
        "lc": LITERAL_CONTEXT_BITS,
        "lp": LITERAL_POSITION_BITS,
        "pb": POSITION_BITS,
        "nice_len": FAST_BYTES,
    }
]


def encode_properties(*, lc: int, lp: int, pb: int, dict_size: int) -> bytes:
    return bytes([(pb * 5 + lp) * 9 + lc]) + int(dict_size).to_bytes(4, "little")


def decode_properties(properties: bytes) -> dict[str, Any]:
    """Turn the 5-byte LZMA properties header into an `lzma` filter spec."""
    if len(properties) < PROPERTIES_SIZE:
        raise CorruptPayload("input .lzma is too short")
    packed = int(properties[0])
    if packed >= 9 * 5 * 5:
        raise CorruptPayload(f"invalid lzma properties byte: 0x{packed:02x}")
    lc = packed % 9
    packed //= 9
    lp = packed % 5
    pb = packed // 5
    dict_size = int.from_bytes(properties[1:PROPERTIES_SIZE], "little")
    return {
        "id": lzma.FILTER_LZMA1,
        "lc": lc,
        "lp": lp,
        "pb": pb,
        "dict_size": max(dict_size, _MIN_DICTIONARY_SIZE),
    }


def decompress(data: bytes) -> bytes:
    """Unwrap `props[5] | uncompressed_size:u64le | body`."""
    data = bytes(data)
    if len(data) < PROPERTIES_SIZE:
        raise CorruptPayload("input .lzma is too short")
    try:
        header = ENVELOPE_HEADER.parse(data)
    except ConstructError as exc:
        raise CorruptPayload("input .lzma is missing its uncompressed size") from exc

    size = int(header.uncompressed_size)
    if size == 0:
        return b""

    filters = [decode_properties(header.properties)]
    body = data[HEADER_SIZE:]
    try:
        decompressor = lzma.LZMADecompressor(format=lzma.FORMAT_RAW, filters=filters)
        if size == UNKNOWN_SIZE:
            return decompressor.decompress(body)
        out = decompressor.decompress(body, max_length=size)
    except (lzma.LZMAError, ValueError) as exc:
        raise CorruptPayload(f"failed to decompress lzma payload: {exc}") from exc

    if len(out) != size:
        raise CorruptPayload(f"lzma payload ended early: expected {size} bytes, got {len(out)}")
    return out


def compress(data: bytes) -> bytes:
    data = bytes(data)
    header = ENVELOPE_HEADER.build(
        {
            "properties": encode_properties(
                lc=LITERAL_CONTEXT_BITS,
                lp=LITERAL_POSITION_BITS,
                pb=POSITION_BITS,
                dict_size=DICTIONARY_SIZE,
            ),
            "uncompressed_size": len(data),
        }
    )
    body = lzma.compress(data, format=lzma.FORMAT_RAW, filters=_COMPRESS_FILTERS)
    return header + body


def decompress_text(data: bytes, *, encoding: str = "utf-8") -> str:
    raw = decompress(data)
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as exc:
        raise CorruptPayload(f"lzma payload is not valid {encoding}") from exc


def compress_text(text: str, *, encoding: str = "utf-8") -> bytes:
    return compress(text.encode(encoding))
