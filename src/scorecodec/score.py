from __future__ import annotations

from dataclasses import dataclass, field
import datetime as dt

from .hit_results import HitResult
from .mods import Mod
from .replay.frames import Replay
from .rulesets import LEGACY_COUNT_FIELDS, Ruleset, get_ruleset
from .versioning import LATEST_VERSION, is_legacy_version


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


@dataclass(slots=True)
class ScoreInfo:
    ruleset_id: int
    format_version: int = LATEST_VERSION
    total_score_version: int = LATEST_VERSION
    beatmap_hash: str = ""
    # Legacy identity hash stored next to the username; not a content hash.
    hash: str = ""
    online_id: int = -1
    legacy_online_id: int = -1
    username: str = ""
    user_online_id: int | None = None
    statistics: dict[HitResult, int] = field(default_factory=dict)
    maximum_statistics: dict[HitResult, int] = field(default_factory=dict)
    total_score: int = 0
    max_combo: int = 0
    # Never on the wire: decoding leaves it 0, so `is_perfect` only holds there when max_combo is 0.
    # The stored perfect flag is written from `is_perfect` and ignored on read.
    combo: int = 0
    mods: list[Mod] = field(default_factory=list)
    date: dt.datetime = field(default_factory=_utc_now)
    client_version: str | None = None
    rank: str | None = None
    total_score_without_mods: int | None = None
    legacy_total_score: int | None = None

    @property
    def ruleset(self) -> Ruleset:
        return get_ruleset(self.ruleset_id)

    @property
    def is_legacy(self) -> bool:
        return is_legacy_version(self.format_version)

    @property
    def is_perfect(self) -> bool:
        return self.combo == self.max_combo

    @property
    def accuracy(self) -> float:
        return self.ruleset.accuracy(self.statistics, self.maximum_statistics, self.mods)

    def get_legacy_count(self, slot: str) -> int | None:
        """Read one of the six legacy `count_*` slots through the ruleset mapping."""
        if slot not in LEGACY_COUNT_FIELDS:
            raise KeyError(slot)
        result = self.ruleset.legacy_counts.get(slot)
        if result is None:
            return None
        return self.statistics.get(result)

    def set_legacy_count(self, slot: str, value: int) -> None:
        if slot not in LEGACY_COUNT_FIELDS:
            raise KeyError(slot)
        result = self.ruleset.legacy_counts.get(slot)
        if result is None:
            return
        self.statistics[result] = int(value)

    def legacy_counts(self) -> dict[str, int]:
        return {slot: int(self.get_legacy_count(slot) or 0) for slot in LEGACY_COUNT_FIELDS}


@dataclass(slots=True)
class Score:
    info: ScoreInfo
    replay: Replay = field(default_factory=Replay)
