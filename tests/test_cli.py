from __future__ import annotations

import datetime as dt
import json
from pathlib import Path

from typer.testing import CliRunner

from scorecodec.beatmap import PlayableBeatmap
from scorecodec.cli import app
from scorecodec.decoder import ScoreDecoder
from scorecodec.encoder import NAME_MARK, ScoreEncoder, encode_score
from scorecodec.hit_results import HitResult
from scorecodec.mods import Mod
from scorecodec.replay import OsuAction, OsuReplayFrame, Replay
from scorecodec.replay.frames import ManiaReplayFrame
from scorecodec.score import Score, ScoreInfo

DATE = dt.datetime(2022, 11, 5, 8, 0, tzinfo=dt.timezone.utc)


def _write_score(path: Path) -> Path:
    info = ScoreInfo(
        ruleset_id=0,
        beatmap_hash="beatmap",
        username="whitecat",
        statistics={HitResult.GREAT: 9, HitResult.MISS: 1},
        total_score=4321,
        max_combo=9,
        mods=[Mod("HR")],
        date=DATE,
        rank="A",
    )
    frames = [
        OsuReplayFrame(time=5.0, x=1.0, y=2.0),
        OsuReplayFrame(time=15.0, x=3.0, y=4.0, actions=(OsuAction.LEFT_BUTTON,)),
        OsuReplayFrame(time=25.0, x=5.0, y=6.0),
    ]
    path.write_bytes(encode_score(Score(info=info, replay=Replay(frames=frames))))
    return path


def test_info_prints_json_summary(tmp_path: Path) -> None:
    score_file = _write_score(tmp_path / "in.osr")
    result = CliRunner().invoke(app, ["info", str(score_file)])

    assert result.exit_code == 0, result.output
    summary = json.loads(result.output)
    assert summary["ruleset"] == "osu"
    assert summary["username"] == "whitecat" + NAME_MARK
    assert summary["mods"] == [{"acronym": "HR"}]
    assert summary["statistics"] == {"great": 9, "miss": 1}
    assert summary["maximum_statistics"] == {"great": 10}
    assert summary["is_legacy"] is False
    assert summary["frames"] == 3
    assert summary["accuracy"] == 0.9


def test_frames_limit(tmp_path: Path) -> None:
    score_file = _write_score(tmp_path / "in.osr")
    result = CliRunner().invoke(app, ["frames", str(score_file), "--limit", "2"])

    assert result.exit_code == 0, result.output
    lines = [json.loads(line) for line in result.output.splitlines()]
    assert lines == [
        {"type": "OsuReplayFrame", "time": 5.0, "x": 1.0, "y": 2.0, "actions": []},
        {"type": "OsuReplayFrame", "time": 15.0, "x": 3.0, "y": 4.0, "actions": [0]},
    ]


def test_export_does_not_stack_name_marks(tmp_path: Path) -> None:
    score_file = _write_score(tmp_path / "in.osr")
    out_file = tmp_path / "out.osr"
    result = CliRunner().invoke(app, ["export", str(score_file), str(out_file)])

    assert result.exit_code == 0, result.output
    assert ScoreDecoder().decode_file(out_file).info.username == "whitecat" + NAME_MARK


def test_export_without_name_mark(tmp_path: Path) -> None:
    score_file = _write_score(tmp_path / "in.osr")
    out_file = tmp_path / "out.osr"
    result = CliRunner().invoke(app, ["export", str(score_file), str(out_file), "--no-edited-mark"])

    assert result.exit_code == 0, result.output
    assert ScoreDecoder().decode_file(out_file).info.username == "whitecat"


def test_mania_frames_without_columns_stay_raw(tmp_path: Path) -> None:
    beatmap = PlayableBeatmap(md5_hash="mania", hit_object_count=4, total_columns=4)
    score = Score(
        info=ScoreInfo(ruleset_id=3, beatmap_hash="mania", date=DATE),
        replay=Replay(frames=[ManiaReplayFrame(time=10.0, columns=(1, 2))]),
    )
    score_file = tmp_path / "mania.osr"
    ScoreEncoder(score, beatmap).export(score_file)

    raw = CliRunner().invoke(app, ["frames", str(score_file)])
    assert raw.exit_code == 0, raw.output
    # The unconverted-frames warning may share the captured output.
    raw_lines = [json.loads(line) for line in raw.stdout.splitlines() if line.startswith("{")]
    assert raw_lines == [
        {"type": "LegacyReplayFrame", "time": 10.0, "mouse_x": 6.0, "mouse_y": 0.0, "button_state": 0}
    ]

    result = CliRunner().invoke(app, ["frames", str(score_file), "--columns", "4"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"type": "ManiaReplayFrame", "time": 10.0, "columns": [1, 2]}


def test_missing_file(tmp_path: Path) -> None:
    result = CliRunner().invoke(app, ["info", str(tmp_path / "nope.osr")])
    assert result.exit_code == 1


def test_corrupt_file(tmp_path: Path) -> None:
    bad = tmp_path / "bad.osr"
    bad.write_bytes(b"\x00\x01")
    result = CliRunner().invoke(app, ["info", str(bad)])
    assert result.exit_code == 1
