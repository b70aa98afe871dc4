from __future__ import annotations

from typing import Mapping, Sequence

from ..beatmap import PlayableBeatmap
from ..errors import ScoreEncodeError
from ..hit_results import HitResult
from ..mods import COMMON_MOD_TABLE, LegacyMods, Mod
from ..replay.frames import LegacyReplayFrame, ReplayButtonState, ReplayFrame, TaikoAction, TaikoReplayFrame
from .base import Ruleset

# Legacy button -> drum action. Rims sit on the right buttons, centres on the left.
_BUTTON_ACTIONS: tuple[tuple[ReplayButtonState, TaikoAction], ...] = (
    (ReplayButtonState.RIGHT1, TaikoAction.LEFT_RIM),
    (ReplayButtonState.RIGHT2, TaikoAction.RIGHT_RIM),
    (ReplayButtonState.LEFT1, TaikoAction.LEFT_CENTRE),
    (ReplayButtonState.LEFT2, TaikoAction.RIGHT_CENTRE),
)


class TaikoRuleset(Ruleset):
    ruleset_id = 1
    short_name = "taiko"
    description = "osu!taiko"
    mod_table = (*COMMON_MOD_TABLE, (LegacyMods.RELAX, "RX"))
    score_multipliers = {
        "NF": 0.5,
        "EZ": 0.5,
        "HT": 0.3,
        "HD": 1.06,
        "HR": 1.06,
        "DT": 1.12,
        "NC": 1.12,
        "FL": 1.12,
        "RX": 0.1,
        "CL": 0.96,
    }
    legacy_counts = {
        "count_300": HitResult.GREAT,
        "count_100": HitResult.OK,
        "count_miss": HitResult.MISS,
    }
    valid_hit_results = (
        HitResult.GREAT,
        HitResult.OK,
        HitResult.MISS,
        HitResult.SMALL_BONUS,
        HitResult.LARGE_BONUS,
    )

    def frame_from_legacy(
        self,
        frame: LegacyReplayFrame,
        beatmap: PlayableBeatmap | None,
        previous: ReplayFrame | None,
    ) -> TaikoReplayFrame:
        actions = tuple(action for button, action in _BUTTON_ACTIONS if frame.button_state & button)
        return TaikoReplayFrame(time=frame.time, actions=actions)

    def frame_to_legacy(self, frame: ReplayFrame, beatmap: PlayableBeatmap | None) -> LegacyReplayFrame:
        if not isinstance(frame, TaikoReplayFrame):
            raise ScoreEncodeError(f"frame could not be converted to a legacy frame: {type(frame).__name__}")
        state = ReplayButtonState.NONE
        for button, action in _BUTTON_ACTIONS:
            if action in frame.actions:
                state |= button
        return LegacyReplayFrame(time=frame.time, button_state=state)

    def accuracy(
        self,
        statistics: Mapping[HitResult, int],
        maximum_statistics: Mapping[HitResult, int],
        mods: Sequence[Mod],
    ) -> float:
        great = statistics.get(HitResult.GREAT, 0)
        ok = statistics.get(HitResult.OK, 0)
        miss = statistics.get(HitResult.MISS, 0)
        total = great + ok + miss
        if total <= 0:
            return 0.0
        return (2.0 * great + ok) / (2.0 * total)
