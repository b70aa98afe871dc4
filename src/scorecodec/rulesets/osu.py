from __future__ import annotations

from typing import Mapping, Sequence

from ..beatmap import PlayableBeatmap
from ..errors import ScoreEncodeError
from ..hit_results import HitResult
from ..mods import COMMON_MOD_TABLE, LegacyMods, Mod
from ..replay.frames import LegacyReplayFrame, OsuAction, OsuReplayFrame, ReplayButtonState, ReplayFrame
from .base import Ruleset


class OsuRuleset(Ruleset):
    ruleset_id = 0
    short_name = "osu"
    description = "osu!"
    mod_table = (
        *COMMON_MOD_TABLE,
        (LegacyMods.RELAX, "RX"),
        (LegacyMods.AUTOPILOT, "AP"),
        (LegacyMods.SPUN_OUT, "SO"),
        (LegacyMods.TOUCH_DEVICE, "TD"),
        (LegacyMods.TARGET, "TP"),
    )
    score_multipliers = {
        "NF": 0.5,
        "EZ": 0.5,
        "HT": 0.3,
        "HD": 1.06,
        "HR": 1.06,
        "DT": 1.2,
        "NC": 1.2,
        "FL": 1.12,
        "SO": 0.9,
        "RX": 0.1,
        "AP": 0.1,
        "CL": 0.96,
    }
    legacy_counts = {
        "count_300": HitResult.GREAT,
        "count_100": HitResult.OK,
        "count_50": HitResult.MEH,
        "count_miss": HitResult.MISS,
    }
    valid_hit_results = (
        HitResult.GREAT,
        HitResult.OK,
        HitResult.MEH,
        HitResult.MISS,
        HitResult.LARGE_TICK_HIT,
        HitResult.SMALL_TICK_HIT,
        HitResult.SLIDER_TAIL_HIT,
        HitResult.SMALL_BONUS,
        HitResult.LARGE_BONUS,
    )

    def frame_from_legacy(
        self,
        frame: LegacyReplayFrame,
        beatmap: PlayableBeatmap | None,
        previous: ReplayFrame | None,
    ) -> OsuReplayFrame:
        actions: list[OsuAction] = []
        if frame.mouse_left:
            actions.append(OsuAction.LEFT_BUTTON)
        if frame.mouse_right:
            actions.append(OsuAction.RIGHT_BUTTON)
        if frame.button_state & ReplayButtonState.SMOKE:
            actions.append(OsuAction.SMOKE)
        return OsuReplayFrame(
            time=frame.time,
            x=float(frame.mouse_x or 0.0),
            y=float(frame.mouse_y or 0.0),
            actions=tuple(actions),
        )

    def frame_to_legacy(self, frame: ReplayFrame, beatmap: PlayableBeatmap | None) -> LegacyReplayFrame:
        if not isinstance(frame, OsuReplayFrame):
            raise ScoreEncodeError(f"frame could not be converted to a legacy frame: {type(frame).__name__}")
        state = ReplayButtonState.NONE
        if OsuAction.LEFT_BUTTON in frame.actions:
            state |= ReplayButtonState.LEFT1
        if OsuAction.RIGHT_BUTTON in frame.actions:
            state |= ReplayButtonState.RIGHT1
        if OsuAction.SMOKE in frame.actions:
            state |= ReplayButtonState.SMOKE
        return LegacyReplayFrame(time=frame.time, mouse_x=frame.x, mouse_y=frame.y, button_state=state)

    def accuracy(
        self,
        statistics: Mapping[HitResult, int],
        maximum_statistics: Mapping[HitResult, int],
        mods: Sequence[Mod],
    ) -> float:
        great = statistics.get(HitResult.GREAT, 0)
        ok = statistics.get(HitResult.OK, 0)
        meh = statistics.get(HitResult.MEH, 0)
        miss = statistics.get(HitResult.MISS, 0)

        total = 6.0 * great + 2.0 * ok + meh
        maximum = 6.0 * (great + ok + meh + miss)

        if HitResult.SLIDER_TAIL_HIT in statistics:
            sliders = maximum_statistics.get(HitResult.SLIDER_TAIL_HIT, statistics[HitResult.SLIDER_TAIL_HIT])
            total += 3.0 * statistics[HitResult.SLIDER_TAIL_HIT]
            maximum += 3.0 * sliders

        if HitResult.LARGE_TICK_MISS in statistics:
            large_ticks = maximum_statistics.get(HitResult.LARGE_TICK_HIT, 0)
            large_tick_hits = large_ticks - statistics[HitResult.LARGE_TICK_MISS]
            total += 0.6 * large_tick_hits
            maximum += 0.6 * large_ticks

        return total / max(maximum, 1.0)
