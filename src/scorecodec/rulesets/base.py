from __future__ import annotations

from typing import Final, Iterable, Mapping, Sequence

from ..beatmap import PlayableBeatmap
from ..hit_results import DEFAULT_BASE_SCORES, HitResult, is_basic
from ..mods import Mod, ModTable, mods_from_legacy, mods_to_legacy, score_multiplier
from ..replay.frames import LegacyReplayFrame, ReplayFrame

LEGACY_COUNT_FIELDS: Final[tuple[str, ...]] = (
    "count_300",
    "count_100",
    "count_50",
    "count_geki",
    "count_katu",
    "count_miss",
)


class Ruleset:
    """Capabilities a legacy ruleset provides to the score codec.

    Subclasses fill in the class attributes and override the frame conversions.
    Everything here is stateless so a single instance is shared per ruleset id.
    """

    ruleset_id: int = -1
    short_name: str = ""
    description: str = ""
    mod_table: ModTable = ()
    score_multipliers: Mapping[str, float] = {}
    # `count_*` wire slot -> judgement; slots missing here are not stored by the ruleset.
    legacy_counts: Mapping[str, HitResult] = {}
    valid_hit_results: tuple[HitResult, ...] = ()
    base_score_overrides: Mapping[HitResult, int] = {}
    requires_beatmap_for_frames: bool = False

    def hit_results(self) -> tuple[HitResult, ...]:
        return self.valid_hit_results

    def base_score(self, result: HitResult) -> int:
        if result in self.base_score_overrides:
            return int(self.base_score_overrides[result])
        return int(DEFAULT_BASE_SCORES.get(result, 0))

    def max_basic_result(self) -> HitResult:
        basic = [result for result in self.hit_results() if is_basic(result)]
        return max(basic, key=self.base_score)

    def mods_from_legacy(self, value: int) -> list[Mod]:
        return mods_from_legacy(value, self.mod_table)

    def mods_to_legacy(self, mods: Iterable[Mod]) -> int:
        return mods_to_legacy(mods, self.mod_table)

    def score_multiplier(self, mods: Iterable[Mod]) -> float:
        return score_multiplier(mods, self.score_multipliers)

    def frame_from_legacy(
        self,
        frame: LegacyReplayFrame,
        beatmap: PlayableBeatmap | None,
        previous: ReplayFrame | None,
    ) -> ReplayFrame:
        raise NotImplementedError

    def frame_to_legacy(self, frame: ReplayFrame, beatmap: PlayableBeatmap | None) -> LegacyReplayFrame:
        raise NotImplementedError

    def accuracy(
        self,
        statistics: Mapping[HitResult, int],
        maximum_statistics: Mapping[HitResult, int],
        mods: Sequence[Mod],
    ) -> float:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(ruleset_id={self.ruleset_id}, short_name={self.short_name!r})"
