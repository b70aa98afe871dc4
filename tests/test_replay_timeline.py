from __future__ import annotations

import pytest

from scorecodec.beatmap import PlayableBeatmap
from scorecodec.errors import BeatmapRequiredForConversion, ReplayTextError
from scorecodec.replay import (
    END_RECORD,
    LegacyReplayFrame,
    OsuAction,
    OsuReplayFrame,
    ReplayButtonState,
    decode_replay_text,
    encode_replay_text,
    parse_legacy_frames,
)
from scorecodec.rulesets import get_ruleset


def test_delta_accumulation() -> None:
    frames = parse_legacy_frames("100|0|0|0,50|10|10|5")
    assert [frame.time for frame in frames] == [100.0, 150.0]
    assert frames[1].mouse_x == 10.0
    assert frames[1].button_state == ReplayButtonState.LEFT1 | ReplayButtonState.LEFT2


def test_offset_seeds_running_time() -> None:
    frames = parse_legacy_frames("100|0|0|0,50|10|10|0", offset=24.0)
    assert [frame.time for frame in frames] == [124.0, 174.0]


def test_placeholder_frames_dropped_regardless_of_delta() -> None:
    text = "0|256|-500|0,-1|256|-500|0,10|5|5|1,5|6|6|0"
    frames = parse_legacy_frames(text)
    assert [(frame.time, frame.mouse_x) for frame in frames] == [(9.0, 5.0), (14.0, 6.0)]


def test_placeholder_position_kept_after_first_two_records() -> None:
    frames = parse_legacy_frames("10|1|1|0,10|1|1|0,10|256|-500|0")
    assert len(frames) == 3
    assert frames[2].time == 30.0


def test_sentinel_never_produces_frame() -> None:
    frames = parse_legacy_frames("10|1|1|0,-12345|0|0|42")
    assert len(frames) == 1


def test_negative_delta_dropped_but_time_advances() -> None:
    frames = parse_legacy_frames("100|1|1|0,-30|2|2|0,10|3|3|0")
    assert [(frame.time, frame.mouse_x) for frame in frames] == [(100.0, 1.0), (80.0, 3.0)]


def test_short_records_skipped() -> None:
    frames = parse_legacy_frames("10|1|1,,20|2|2|0,")
    assert [frame.time for frame in frames] == [20.0]


@pytest.mark.parametrize(
    "text",
    [
        "ten|1|1|0",
        "10|1|1|x",
        "10|nan|1|0",
        "10|200000|1|0",
    ],
)
def test_invalid_numbers_raise(text: str) -> None:
    with pytest.raises(ReplayTextError):
        parse_legacy_frames(text)


def test_encode_appends_end_record_and_rounds_half_to_even() -> None:
    frames = [
        LegacyReplayFrame(time=10.5, mouse_x=1.0, mouse_y=2.0),
        LegacyReplayFrame(time=11.5, mouse_x=1.5, mouse_y=-2.0, button_state=ReplayButtonState.RIGHT1),
    ]
    text = encode_replay_text(frames, get_ruleset(0))
    assert text == "10|1|2|0,2|1.5|-2|2," + END_RECORD


def test_encode_subtracts_offset() -> None:
    frames = [LegacyReplayFrame(time=124.0, mouse_x=0.0, mouse_y=0.0)]
    text = encode_replay_text(frames, get_ruleset(0), offset=24.0)
    assert text.startswith("100|0|0|0,")


def test_osu_frames_roundtrip_through_text() -> None:
    ruleset = get_ruleset(0)
    frames = [
        OsuReplayFrame(time=16.0, x=100.0, y=200.0, actions=(OsuAction.LEFT_BUTTON,)),
        OsuReplayFrame(time=33.0, x=101.25, y=199.5, actions=(OsuAction.LEFT_BUTTON, OsuAction.SMOKE)),
        OsuReplayFrame(time=50.0, x=102.0, y=198.0),
    ]
    text = encode_replay_text(frames, ruleset)
    assert decode_replay_text(text, ruleset) == frames


def test_mania_decode_requires_beatmap() -> None:
    with pytest.raises(BeatmapRequiredForConversion):
        decode_replay_text("10|5|0|0", get_ruleset(3))


def test_mania_decode_with_beatmap() -> None:
    beatmap = PlayableBeatmap(md5_hash="m", hit_object_count=10, total_columns=4)
    frames = decode_replay_text("10|5|0|0,10|0|0|0", get_ruleset(3), beatmap)
    assert [frame.columns for frame in frames] == [(0, 2), ()]
