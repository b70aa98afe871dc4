from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterable, Protocol, Sequence

from .mods import Mod

# Beatmaps older than format v5 had this baked into hit object timing.
EARLY_VERSION_TIMING_OFFSET: Final[int] = 24


@dataclass(frozen=True, slots=True)
class PlayableBeatmap:
    md5_hash: str
    format_version: int = 14
    hit_object_count: int = 0
    total_columns: int = 0

    @property
    def legacy_frame_time_offset(self) -> float:
        return float(EARLY_VERSION_TIMING_OFFSET) if int(self.format_version) < 5 else 0.0


class BeatmapLookup(Protocol):
    def find(self, md5_hash: str) -> PlayableBeatmap | None: ...


class DifficultyCalculator(Protocol):
    def max_combo(self, beatmap: PlayableBeatmap, mods: Sequence[Mod]) -> int: ...


class InMemoryBeatmapLookup:
    def __init__(self, beatmaps: Iterable[PlayableBeatmap] = ()) -> None:
        self._by_hash = {beatmap.md5_hash: beatmap for beatmap in beatmaps}

    def add(self, beatmap: PlayableBeatmap) -> None:
        self._by_hash[beatmap.md5_hash] = beatmap

    def find(self, md5_hash: str) -> PlayableBeatmap | None:
        return self._by_hash.get(md5_hash)
