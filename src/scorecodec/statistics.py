from __future__ import annotations

from typing import Callable, Iterable, Sequence, TypeVar

import structlog

from .beatmap import DifficultyCalculator, PlayableBeatmap
from .hit_results import HitResult, affects_combo
from .mods import Mod
from .rulesets import Ruleset
from .score import ScoreInfo

log = structlog.stdlib.get_logger()

T = TypeVar("T")

_LARGE_TICK_RESULTS = frozenset({HitResult.LARGE_TICK_HIT, HitResult.LARGE_TICK_MISS})
_SMALL_TICK_RESULTS = frozenset({HitResult.SMALL_TICK_HIT, HitResult.SMALL_TICK_MISS})
_NO_MAXIMUM_RESULTS = frozenset(
    {
        HitResult.IGNORE_HIT,
        HitResult.IGNORE_MISS,
        HitResult.SMALL_BONUS,
        HitResult.LARGE_BONUS,
    }
)


def maximum_result_for(result: HitResult, ruleset: Ruleset) -> HitResult | None:
    """Judgement a flawless play would have produced in place of `result`.

    Returns None for judgements that never count towards the maximum.
    """

    if result in _LARGE_TICK_RESULTS:
        return HitResult.LARGE_TICK_HIT
    if result in _SMALL_TICK_RESULTS:
        return HitResult.SMALL_TICK_HIT
    if result in _NO_MAXIMUM_RESULTS:
        return None
    return ruleset.max_basic_result()


def combo_from_statistics(statistics: dict[HitResult, int]) -> int:
    return sum(count for result, count in statistics.items() if affects_combo(result))


def populate_maximum_statistics(
    info: ScoreInfo,
    *,
    beatmap: PlayableBeatmap | None = None,
    difficulty: DifficultyCalculator | None = None,
) -> None:
    if sum(info.maximum_statistics.values()) > 0:
        return

    ruleset = info.ruleset
    maximum: dict[HitResult, int] = {}
    for result, count in info.statistics.items():
        if count <= 0:
            continue
        target = maximum_result_for(result, ruleset)
        if target is None:
            continue
        maximum[target] = maximum.get(target, 0) + int(count)
    info.maximum_statistics = maximum

    if not info.is_legacy:
        return
    if beatmap is None or difficulty is None:
        return

    # Legacy scores never stored some combo-affecting judgements (slider ends, hold note ticks).
    # Pad with a synthetic judgement so the maximum combo matches the beatmap.
    beatmap_max_combo = int(difficulty.max_combo(beatmap, info.mods))
    statistics_max_combo = combo_from_statistics(info.maximum_statistics)
    if beatmap_max_combo > statistics_max_combo:
        info.maximum_statistics[HitResult.LEGACY_COMBO_INCREASE] = beatmap_max_combo - statistics_max_combo
        log.debug(
            "legacy_combo_padded",
            beatmap_hash=info.beatmap_hash,
            padding=beatmap_max_combo - statistics_max_combo,
        )


def accuracy_for(info: ScoreInfo) -> float:
    return info.ruleset.accuracy(info.statistics, info.maximum_statistics, info.mods)


def populate_total_score_without_mods(info: ScoreInfo) -> None:
    multiplier = info.ruleset.score_multiplier(info.mods)
    if multiplier <= 0:
        info.total_score_without_mods = int(info.total_score)
        return
    info.total_score_without_mods = int(round(info.total_score / multiplier))


def is_duplicate(a: ScoreInfo, b: ScoreInfo) -> bool:
    return (
        a.date == b.date
        and a.total_score == b.total_score
        and a.username == b.username
        and _mods_key(a.mods) == _mods_key(b.mods)
    )


def _mods_key(mods: Sequence[Mod]) -> tuple[tuple[str, tuple[tuple[str, str], ...]], ...]:
    return tuple((mod.acronym, tuple(sorted((k, repr(v)) for k, v in mod.settings.items()))) for mod in mods)


def _carries_missing_online_id(info: ScoreInfo, previous: ScoreInfo) -> bool:
    return (info.legacy_online_id > 0 and previous.legacy_online_id <= 0) or (
        info.online_id > 0 and previous.online_id <= 0
    )


def filter_duplicate_scores(
    scores: Iterable[T],
    key: Callable[[T], ScoreInfo] = lambda item: item,  # type: ignore[assignment,return-value]
) -> list[T]:
    """Collapse consecutive duplicates, keeping the copy that carries an online id."""

    out: list[T] = []
    previous: ScoreInfo | None = None
    for item in scores:
        info = key(item)
        if previous is not None and is_duplicate(info, previous):
            if _carries_missing_online_id(info, previous):
                out[-1] = item
                previous = info
            continue
        out.append(item)
        previous = info
    return out
