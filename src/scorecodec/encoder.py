from __future__ import annotations

import copy
import datetime as dt
import hashlib
from pathlib import Path
from typing import Final

from construct import Byte, Int32sl

from legacyio import lzma_payload
from legacyio.cursor import LegacyByteArray, LegacyDateTime, LegacyString, build_field
from legacyio.errors import LegacyIOError

from .beatmap import PlayableBeatmap
from .errors import BeatmapRequiredForConversion, ScoreEncodeError, UnknownRuleset
from .decoder import _SCORE_COUNTS
from .overlay import encode_overlay, overlay_from_score
from .replay.frames import LegacyReplayFrame
from .replay.timeline import encode_replay_text
from .rulesets import get_ruleset
from .score import Score, ScoreInfo
from .versioning import LATEST_VERSION, build_gated_fields

NAME_MARK: Final[str] = " (edited)"


def strip_name_mark(username: str) -> str:
    if username.endswith(NAME_MARK):
        return username[: -len(NAME_MARK)]
    return username


def identity_hash(info: ScoreInfo) -> str:
    """Placeholder identity hash written in place of the legacy score hash.

    Derived from username and date rather than score content; consumers only
    compare it for equality.
    """

    return hashlib.md5(f"lazer-{info.username}-{_format_date(info)}".encode("utf-8")).hexdigest()


def _format_date(info: ScoreInfo) -> str:
    # Invariant-culture offset date text, e.g. "01/02/2024 03:04:05 +00:00".
    date = info.date if info.date.tzinfo is not None else info.date.replace(tzinfo=dt.timezone.utc)
    offset = date.utcoffset() or dt.timedelta(0)
    sign = "-" if offset < dt.timedelta(0) else "+"
    minutes = abs(offset) // dt.timedelta(minutes=1)
    return f"{date:%m/%d/%Y %H:%M:%S} {sign}{minutes // 60:02d}:{minutes % 60:02d}"


class ScoreEncoder:
    def __init__(self, score: Score, beatmap: PlayableBeatmap | None = None) -> None:
        try:
            ruleset = get_ruleset(score.info.ruleset_id)
        except UnknownRuleset as exc:
            raise ScoreEncodeError(
                "only scores in the osu, taiko, catch, or mania rulesets can be encoded to the legacy score format"
            ) from exc

        if (
            beatmap is None
            and ruleset.requires_beatmap_for_frames
            and not all(isinstance(frame, LegacyReplayFrame) for frame in score.replay.frames)
        ):
            raise BeatmapRequiredForConversion(
                f"a beatmap must be provided to encode {ruleset.description} frames that are not legacy frames"
            )

        # Never mutate the caller's score.
        self._score = copy.deepcopy(score)
        self._ruleset = ruleset
        self._beatmap = beatmap

    @property
    def score(self) -> Score:
        return self._score

    def _replay_text(self) -> str:
        offset = self._beatmap.legacy_frame_time_offset if self._beatmap is not None else 0.0
        return encode_replay_text(self._score.replay.frames, self._ruleset, self._beatmap, offset=offset)

    def encode(self, *, use_default_version: bool = True, add_name_mark: bool = True) -> bytes:
        info = self._score.info
        ruleset = self._ruleset
        version = LATEST_VERSION if use_default_version else int(info.total_score_version)
        username = info.username + NAME_MARK if add_name_mark else info.username
        counts = info.legacy_counts()

        try:
            out = bytearray()
            out += build_field(Byte, ruleset.ruleset_id, name="ruleset id")
            out += build_field(Int32sl, version, name="format version")
            out += build_field(LegacyString, info.beatmap_hash, name="beatmap hash")
            out += build_field(LegacyString, username, name="username")
            out += build_field(LegacyString, identity_hash(info), name="score hash")
            out += build_field(
                _SCORE_COUNTS,
                {
                    **{slot: count & 0xFFFF for slot, count in counts.items()},
                    "total_score": _wrap_int32(info.total_score),
                    "max_combo": int(info.max_combo) & 0xFFFF,
                    "perfect": info.is_perfect,
                    "mods": _wrap_int32(ruleset.mods_to_legacy(info.mods)),
                },
                name="score counts",
            )
            out += build_field(LegacyString, "", name="hp graph")
            out += build_field(LegacyDateTime, info.date, name="date")
            out += build_field(
                LegacyByteArray,
                lzma_payload.compress_text(self._replay_text(), encoding="ascii"),
                name="replay data",
            )
            out += build_gated_fields(
                version,
                {
                    "legacy_online_id": int(info.legacy_online_id),
                    "score_info": lzma_payload.compress(encode_overlay(overlay_from_score(info))),
                },
            )
        except LegacyIOError as exc:
            raise ScoreEncodeError(str(exc)) from exc
        except UnicodeEncodeError as exc:
            raise ScoreEncodeError(f"replay text is not ascii: {exc}") from exc

        return bytes(out)

    def export(self, path: Path, *, use_default_version: bool = True, add_name_mark: bool = True) -> None:
        data = self.encode(use_default_version=use_default_version, add_name_mark=add_name_mark)
        Path(path).write_bytes(data)


def _wrap_int32(value: int) -> int:
    value = int(value) & 0xFFFF_FFFF
    return value - (1 << 32) if value & 0x8000_0000 else value


def encode_score(
    score: Score,
    beatmap: PlayableBeatmap | None = None,
    *,
    use_default_version: bool = True,
    add_name_mark: bool = True,
) -> bytes:
    return ScoreEncoder(score, beatmap).encode(use_default_version=use_default_version, add_name_mark=add_name_mark)
