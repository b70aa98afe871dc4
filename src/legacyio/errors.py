from __future__ import annotations


class LegacyIOError(ValueError):
    pass


class UnexpectedEndOfInput(LegacyIOError):
    pass


class CorruptPayload(LegacyIOError):
    pass
