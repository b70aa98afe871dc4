from __future__ import annotations

from typing import Mapping, Sequence

from ..beatmap import PlayableBeatmap
from ..errors import ScoreEncodeError
from ..hit_results import HitResult
from ..mods import COMMON_MOD_TABLE, LegacyMods, Mod
from ..replay.frames import CatchAction, CatchReplayFrame, LegacyReplayFrame, ReplayButtonState, ReplayFrame
from .base import Ruleset


class CatchRuleset(Ruleset):
    ruleset_id = 2
    short_name = "fruits"
    description = "osu!catch"
    mod_table = (*COMMON_MOD_TABLE, (LegacyMods.RELAX, "RX"))
    score_multipliers = {
        "NF": 0.5,
        "EZ": 0.5,
        "HT": 0.3,
        "HD": 1.06,
        "HR": 1.12,
        "DT": 1.12,
        "NC": 1.12,
        "FL": 1.12,
        "RX": 0.1,
        "CL": 0.96,
    }
    legacy_counts = {
        "count_300": HitResult.GREAT,
        "count_100": HitResult.LARGE_TICK_HIT,
        "count_50": HitResult.SMALL_TICK_HIT,
        "count_katu": HitResult.SMALL_TICK_MISS,
        "count_miss": HitResult.MISS,
    }
    valid_hit_results = (
        HitResult.GREAT,
        HitResult.MISS,
        HitResult.LARGE_TICK_HIT,
        HitResult.SMALL_TICK_HIT,
        HitResult.LARGE_BONUS,
    )

    def frame_from_legacy(
        self,
        frame: LegacyReplayFrame,
        beatmap: PlayableBeatmap | None,
        previous: ReplayFrame | None,
    ) -> CatchReplayFrame:
        position = float(frame.mouse_x or 0.0)
        dashing = frame.button_state == ReplayButtonState.LEFT1

        actions: list[CatchAction] = []
        if isinstance(previous, CatchReplayFrame):
            if position > previous.position:
                actions.append(CatchAction.MOVE_RIGHT)
            elif position < previous.position:
                actions.append(CatchAction.MOVE_LEFT)
        if dashing:
            actions.append(CatchAction.DASH)

        return CatchReplayFrame(time=frame.time, position=position, dashing=dashing, actions=tuple(actions))

    def frame_to_legacy(self, frame: ReplayFrame, beatmap: PlayableBeatmap | None) -> LegacyReplayFrame:
        if not isinstance(frame, CatchReplayFrame):
            raise ScoreEncodeError(f"frame could not be converted to a legacy frame: {type(frame).__name__}")
        state = ReplayButtonState.LEFT1 if frame.dashing else ReplayButtonState.NONE
        return LegacyReplayFrame(time=frame.time, mouse_x=frame.position, button_state=state)

    def accuracy(
        self,
        statistics: Mapping[HitResult, int],
        maximum_statistics: Mapping[HitResult, int],
        mods: Sequence[Mod],
    ) -> float:
        hits = (
            statistics.get(HitResult.GREAT, 0)
            + statistics.get(HitResult.LARGE_TICK_HIT, 0)
            + statistics.get(HitResult.SMALL_TICK_HIT, 0)
        )
        total = hits + statistics.get(HitResult.MISS, 0) + statistics.get(HitResult.SMALL_TICK_MISS, 0)
        if total <= 0:
            return 0.0
        return float(hits) / float(total)
