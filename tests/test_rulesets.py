from __future__ import annotations

import pytest

from scorecodec.beatmap import PlayableBeatmap
from scorecodec.errors import BeatmapRequiredForConversion, ScoreEncodeError, UnknownRuleset
from scorecodec.hit_results import HitResult
from scorecodec.mods import Mod
from scorecodec.replay import (
    CatchReplayFrame,
    LegacyReplayFrame,
    OsuReplayFrame,
    ReplayButtonState,
    TaikoReplayFrame,
)
from scorecodec.replay.frames import CatchAction, ManiaReplayFrame, TaikoAction
from scorecodec.rulesets import RULESETS, get_ruleset


def test_registry_ids_and_names() -> None:
    assert sorted(RULESETS) == [0, 1, 2, 3]
    assert [get_ruleset(i).short_name for i in range(4)] == ["osu", "taiko", "fruits", "mania"]


def test_unknown_ruleset() -> None:
    with pytest.raises(UnknownRuleset) as excinfo:
        get_ruleset(4)
    assert excinfo.value.ruleset_id == 4


@pytest.mark.parametrize(
    ("ruleset_id", "expected"),
    [
        (0, HitResult.GREAT),
        (1, HitResult.GREAT),
        (2, HitResult.GREAT),
        (3, HitResult.PERFECT),
    ],
)
def test_max_basic_result(ruleset_id: int, expected: HitResult) -> None:
    assert get_ruleset(ruleset_id).max_basic_result() == expected


def test_mania_perfect_base_score_override() -> None:
    assert get_ruleset(3).base_score(HitResult.PERFECT) == 305
    assert get_ruleset(0).base_score(HitResult.GREAT) == 300


def test_taiko_frame_conversion() -> None:
    taiko = get_ruleset(1)
    legacy = LegacyReplayFrame(time=5.0, button_state=ReplayButtonState.LEFT1 | ReplayButtonState.RIGHT2)
    frame = taiko.frame_from_legacy(legacy, None, None)
    assert frame == TaikoReplayFrame(time=5.0, actions=(TaikoAction.RIGHT_RIM, TaikoAction.LEFT_CENTRE))
    assert taiko.frame_to_legacy(frame, None).button_state == legacy.button_state


def test_catch_frames_track_movement_and_dash() -> None:
    catch = get_ruleset(2)
    first = catch.frame_from_legacy(LegacyReplayFrame(time=0.0, mouse_x=100.0), None, None)
    second = catch.frame_from_legacy(
        LegacyReplayFrame(time=16.0, mouse_x=120.0, button_state=ReplayButtonState.LEFT1),
        None,
        first,
    )
    third = catch.frame_from_legacy(LegacyReplayFrame(time=32.0, mouse_x=90.0), None, second)

    assert first.actions == ()
    assert second.dashing is True
    assert second.actions == (CatchAction.MOVE_RIGHT, CatchAction.DASH)
    assert third.actions == (CatchAction.MOVE_LEFT,)

    legacy = catch.frame_to_legacy(CatchReplayFrame(time=1.0, position=50.0, dashing=True), None)
    assert legacy.mouse_x == 50.0
    assert legacy.button_state == ReplayButtonState.LEFT1


def test_mania_frame_to_legacy_requires_beatmap() -> None:
    mania = get_ruleset(3)
    frame = ManiaReplayFrame(time=1.0, columns=(0, 3))
    with pytest.raises(BeatmapRequiredForConversion):
        mania.frame_to_legacy(frame, None)
    beatmap = PlayableBeatmap(md5_hash="m", hit_object_count=1, total_columns=4)
    assert mania.frame_to_legacy(frame, beatmap).mouse_x == 9.0


def test_frame_to_legacy_rejects_foreign_frame() -> None:
    with pytest.raises(ScoreEncodeError):
        get_ruleset(1).frame_to_legacy(OsuReplayFrame(time=0.0), None)


def test_osu_accuracy() -> None:
    osu = get_ruleset(0)
    stats = {HitResult.GREAT: 2, HitResult.OK: 1, HitResult.MEH: 1, HitResult.MISS: 0}
    assert osu.accuracy(stats, {}, []) == pytest.approx((12 + 2 + 1) / 24)


def test_mania_accuracy_classic_weights_perfect_as_great() -> None:
    mania = get_ruleset(3)
    stats = {HitResult.PERFECT: 1, HitResult.GREAT: 1}
    assert mania.accuracy(stats, {}, [Mod("CL")]) == pytest.approx(1.0)
    assert mania.accuracy(stats, {}, []) == pytest.approx(605 / 610)


def test_catch_accuracy_counts_tick_misses() -> None:
    catch = get_ruleset(2)
    stats = {HitResult.GREAT: 3, HitResult.SMALL_TICK_MISS: 1}
    assert catch.accuracy(stats, {}, []) == pytest.approx(0.75)


def test_taiko_accuracy_empty() -> None:
    assert get_ruleset(1).accuracy({}, {}, []) == 0.0
