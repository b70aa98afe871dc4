from __future__ import annotations

from .errors import CorruptPayload, LegacyIOError, UnexpectedEndOfInput

__all__ = [
    "CorruptPayload",
    "LegacyIOError",
    "UnexpectedEndOfInput",
    "cursor",
    "lzma_payload",
]
