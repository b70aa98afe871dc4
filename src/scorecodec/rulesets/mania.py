from __future__ import annotations

from typing import Mapping, Sequence

from ..beatmap import PlayableBeatmap
from ..errors import BeatmapRequiredForConversion, ScoreEncodeError
from ..hit_results import HitResult
from ..mods import CLASSIC_ACRONYM, COMMON_MOD_TABLE, LegacyMods, Mod, has_mod
from ..replay.frames import LegacyReplayFrame, ManiaReplayFrame, ReplayFrame
from .base import Ruleset

_KEY_MOD_TABLE = (
    (LegacyMods.KEY1, "1K"),
    (LegacyMods.KEY2, "2K"),
    (LegacyMods.KEY3, "3K"),
    (LegacyMods.KEY4, "4K"),
    (LegacyMods.KEY5, "5K"),
    (LegacyMods.KEY6, "6K"),
    (LegacyMods.KEY7, "7K"),
    (LegacyMods.KEY8, "8K"),
    (LegacyMods.KEY9, "9K"),
)

_JUDGEMENT_WEIGHTS: tuple[tuple[HitResult, int], ...] = (
    (HitResult.GREAT, 300),
    (HitResult.GOOD, 200),
    (HitResult.OK, 100),
    (HitResult.MEH, 50),
)


class ManiaRuleset(Ruleset):
    ruleset_id = 3
    short_name = "mania"
    description = "osu!mania"
    mod_table = (
        *COMMON_MOD_TABLE,
        (LegacyMods.FADE_IN, "FI"),
        (LegacyMods.RANDOM, "RD"),
        (LegacyMods.MIRROR, "MR"),
        (LegacyMods.KEY_COOP, "DS"),
        *_KEY_MOD_TABLE,
    )
    score_multipliers = {
        "NF": 0.5,
        "EZ": 0.5,
        "HT": 0.5,
        "CL": 0.96,
        **{acronym: 0.9 for _flag, acronym in _KEY_MOD_TABLE},
    }
    legacy_counts = {
        "count_300": HitResult.GREAT,
        "count_100": HitResult.OK,
        "count_50": HitResult.MEH,
        "count_geki": HitResult.PERFECT,
        "count_katu": HitResult.GOOD,
        "count_miss": HitResult.MISS,
    }
    valid_hit_results = (
        HitResult.PERFECT,
        HitResult.GREAT,
        HitResult.GOOD,
        HitResult.OK,
        HitResult.MEH,
        HitResult.MISS,
    )
    base_score_overrides = {HitResult.PERFECT: 305}
    requires_beatmap_for_frames = True

    def frame_from_legacy(
        self,
        frame: LegacyReplayFrame,
        beatmap: PlayableBeatmap | None,
        previous: ReplayFrame | None,
    ) -> ManiaReplayFrame:
        if beatmap is None:
            raise BeatmapRequiredForConversion("osu!mania frames need the beatmap's column count")
        # Legacy mania frames store the held columns as a bitmask in the x coordinate.
        active = int(frame.mouse_x or 0)
        columns: list[int] = []
        column = 0
        while active > 0:
            if active & 1 and (beatmap.total_columns <= 0 or column < beatmap.total_columns):
                columns.append(column)
            column += 1
            active >>= 1
        return ManiaReplayFrame(time=frame.time, columns=tuple(columns))

    def frame_to_legacy(self, frame: ReplayFrame, beatmap: PlayableBeatmap | None) -> LegacyReplayFrame:
        if not isinstance(frame, ManiaReplayFrame):
            raise ScoreEncodeError(f"frame could not be converted to a legacy frame: {type(frame).__name__}")
        if beatmap is None:
            raise BeatmapRequiredForConversion("osu!mania frames need the beatmap's column count")
        mask = 0
        for column in frame.columns:
            mask |= 1 << int(column)
        return LegacyReplayFrame(time=frame.time, mouse_x=float(mask))

    def accuracy(
        self,
        statistics: Mapping[HitResult, int],
        maximum_statistics: Mapping[HitResult, int],
        mods: Sequence[Mod],
    ) -> float:
        perfect_weight = 300 if has_mod(mods, CLASSIC_ACRONYM) else 305
        perfect = statistics.get(HitResult.PERFECT, 0)
        total = float(perfect_weight * perfect)
        judged = perfect + statistics.get(HitResult.MISS, 0)
        for result, weight in _JUDGEMENT_WEIGHTS:
            count = statistics.get(result, 0)
            total += weight * count
            judged += count
        if judged <= 0:
            return 0.0
        return total / float(perfect_weight * judged)
