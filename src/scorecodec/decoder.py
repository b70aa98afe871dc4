from __future__ import annotations

from dataclasses import dataclass
import io
from pathlib import Path
from typing import BinaryIO

from construct import Byte, Flag, Int16ul, Int32sl, Struct
import structlog

from legacyio import lzma_payload
from legacyio.cursor import LegacyByteArray, LegacyDateTime, LegacyString, read_field

from .beatmap import BeatmapLookup, DifficultyCalculator, PlayableBeatmap
from .errors import BeatmapLookupFailed, BeatmapRequiredForConversion
from .mods import classic_mod
from .overlay import decode_overlay, merge_overlay
from .replay.frames import Replay
from .replay.timeline import decode_replay_text, parse_legacy_frames
from .rulesets import LEGACY_COUNT_FIELDS, Ruleset, get_ruleset
from .score import Score, ScoreInfo
from .statistics import populate_maximum_statistics, populate_total_score_without_mods
from .versioning import is_legacy_version, read_gated_fields, total_score_version_for, warn_on_newer_version

log = structlog.stdlib.get_logger()

# Fixed-width block between the legacy hash and the HP graph string.
_SCORE_COUNTS = Struct(
    "count_300" / Int16ul,
    "count_100" / Int16ul,
    "count_50" / Int16ul,
    "count_geki" / Int16ul,
    "count_katu" / Int16ul,
    "count_miss" / Int16ul,
    "total_score" / Int32sl,
    "max_combo" / Int16ul,
    "perfect" / Flag,
    "mods" / Int32sl,
)


@dataclass(frozen=True, slots=True)
class DecodeContext:
    """Per-decode state shared by the beatmap, frame and statistics steps."""

    ruleset: Ruleset
    beatmap: PlayableBeatmap | None = None

    @property
    def have_beatmap(self) -> bool:
        return self.beatmap is not None

    @property
    def legacy_frame_time_offset(self) -> float:
        # Baked into hit object timing for old beatmaps, so frame timing needs it too.
        if self.beatmap is None:
            return 0.0
        return self.beatmap.legacy_frame_time_offset


class ScoreDecoder:
    def __init__(
        self,
        beatmaps: BeatmapLookup | None = None,
        difficulty: DifficultyCalculator | None = None,
    ) -> None:
        self._beatmaps = beatmaps
        self._difficulty = difficulty

    def _lookup_beatmap(self, md5_hash: str) -> PlayableBeatmap | None:
        if self._beatmaps is None or not md5_hash:
            return None
        try:
            beatmap = self._beatmaps.find(md5_hash)
        except Exception as exc:  # noqa: BLE001
            # A score must stay decodable without its beatmap.
            failure = BeatmapLookupFailed(md5_hash)
            log.warning("beatmap_lookup_failed", beatmap_hash=failure.beatmap_hash, error=str(exc))
            return None
        if beatmap is None or int(beatmap.hit_object_count) <= 0:
            return None
        return beatmap

    def decode(self, data: bytes | BinaryIO) -> Score:
        stream = io.BytesIO(data) if isinstance(data, (bytes, bytearray, memoryview)) else data

        ruleset = get_ruleset(read_field(stream, Byte, name="ruleset id"))
        version = int(read_field(stream, Int32sl, name="format version"))
        warn_on_newer_version(version)

        info = ScoreInfo(
            ruleset_id=ruleset.ruleset_id,
            format_version=version,
            total_score_version=total_score_version_for(version),
        )
        info.beatmap_hash = read_field(stream, LegacyString, name="beatmap hash") or ""

        ctx = DecodeContext(ruleset=ruleset, beatmap=self._lookup_beatmap(info.beatmap_hash))

        info.username = read_field(stream, LegacyString, name="username") or ""
        info.hash = read_field(stream, LegacyString, name="score hash") or ""

        counts = read_field(stream, _SCORE_COUNTS, name="score counts")
        for slot in LEGACY_COUNT_FIELDS:
            info.set_legacy_count(slot, int(counts[slot]))
        info.total_score = int(counts.total_score)
        info.max_combo = int(counts.max_combo)
        # counts.perfect is recomputed from combo, never trusted.

        info.mods = ruleset.mods_from_legacy(int(counts.mods))
        if is_legacy_version(version):
            info.mods.append(classic_mod())

        read_field(stream, LegacyString, name="hp graph")
        info.date = read_field(stream, LegacyDateTime, name="date")
        compressed_replay = read_field(stream, LegacyByteArray, name="replay data")

        tail = read_gated_fields(stream, version)
        if "legacy_online_id" in tail:
            info.legacy_online_id = int(tail["legacy_online_id"])  # type: ignore[arg-type]
        compressed_score_info = tail.get("score_info")

        replay = Replay()
        if compressed_replay:
            text = lzma_payload.decompress_text(compressed_replay, encoding="ascii")
            try:
                replay.frames = decode_replay_text(
                    text,
                    ruleset,
                    ctx.beatmap,
                    offset=ctx.legacy_frame_time_offset,
                )
            except BeatmapRequiredForConversion:
                # Keep the raw frames; the rest of the score does not depend on them.
                replay.frames = list(parse_legacy_frames(text, offset=ctx.legacy_frame_time_offset))
                log.warning(
                    "replay_frames_unconverted",
                    ruleset=ruleset.short_name,
                    beatmap_hash=info.beatmap_hash,
                    frames=len(replay.frames),
                )

        if compressed_score_info:
            overlay = decode_overlay(lzma_payload.decompress(bytes(compressed_score_info)))
            merge_overlay(info, overlay)
            if overlay.total_score_without_mods is None:
                populate_total_score_without_mods(info)

        populate_maximum_statistics(info, beatmap=ctx.beatmap, difficulty=self._difficulty)

        if info.is_legacy:
            info.legacy_total_score = info.total_score

        log.debug(
            "score_decoded",
            ruleset=ruleset.short_name,
            version=version,
            frames=len(replay.frames),
            have_beatmap=ctx.have_beatmap,
        )
        return Score(info=info, replay=replay)

    def decode_file(self, path: Path) -> Score:
        with open(Path(path), "rb") as f:
            return self.decode(f)


def decode_score(
    data: bytes | BinaryIO,
    *,
    beatmaps: BeatmapLookup | None = None,
    difficulty: DifficultyCalculator | None = None,
) -> Score:
    return ScoreDecoder(beatmaps=beatmaps, difficulty=difficulty).decode(data)
