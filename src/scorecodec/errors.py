from __future__ import annotations

from legacyio.errors import CorruptPayload, LegacyIOError, UnexpectedEndOfInput


class ScoreCodecError(ValueError):
    pass


class UnknownRuleset(ScoreCodecError):
    def __init__(self, ruleset_id: int) -> None:
        super().__init__(f"unknown ruleset id: {ruleset_id}")
        self.ruleset_id = int(ruleset_id)


class BeatmapRequiredForConversion(ScoreCodecError):
    pass


class BeatmapLookupFailed(ScoreCodecError):
    """Beatmap lookup raised; decoding continues without a beatmap."""

    def __init__(self, beatmap_hash: str) -> None:
        super().__init__(f"beatmap lookup failed for {beatmap_hash!r}")
        self.beatmap_hash = beatmap_hash


class ReplayTextError(ScoreCodecError):
    pass


class ScoreEncodeError(ScoreCodecError):
    pass


__all__ = [
    "BeatmapLookupFailed",
    "BeatmapRequiredForConversion",
    "CorruptPayload",
    "LegacyIOError",
    "ReplayTextError",
    "ScoreCodecError",
    "ScoreEncodeError",
    "UnexpectedEndOfInput",
    "UnknownRuleset",
]
